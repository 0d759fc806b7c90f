"""Evaluate expression trees with IEEE double semantics.

Python floats raise ZeroDivisionError; here the arithmetic runs on numpy
float64 scalars instead, so `1/0` is `inf` and `0/0` is `nan`, the same as
the hardware gives.
"""
import numpy as np

from expr_ast import Const, Var, free_vars


class UndefinedVariable(LookupError):
    def __init__(self, name):
        super().__init__(f"cannot evaluate, variable {name!r} is undefined")
        self.name = name


def env_lookup(env, convert=np.float64):
    def lookup(name):
        if name not in env:
            raise UndefinedVariable(name)
        return convert(env[name])

    return lookup


def eval_expr(expr, lookup):
    "Walk `expr`; `lookup` maps a variable name to its (numpy) value."
    if type(expr) is Const:
        return np.float64(expr.value)
    if type(expr) is Var:
        return lookup(expr.name)
    op, *args = expr
    return op(*[eval_expr(arg, lookup) for arg in args])


def evaluate(expr, env):
    """Value of `expr` with the variables bound by `env`.

    >>> from expr_parser import parse
    >>> evaluate(parse("1 + 2 * x"), {"x": 3})
    7.0
    >>> evaluate(parse("-1 / 0"), {}), evaluate(parse("0 / 0"), {})
    (-inf, nan)
    """
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        return float(eval_expr(expr, env_lookup(env)))


def evaluator(expr, name="f_eval"):
    """Return a function (named `name`) that evaluates `expr`.

    The returned function takes the free variables in `expr` in alphabetical order.

    >>> from expr_parser import parse
    >>> f = evaluator(parse("(b - a) / 2"))
    >>> f(1, 5)
    2.0
    """
    arg_names = sorted(free_vars(expr))

    def f(*args):
        if len(args) != len(arg_names):
            raise TypeError(f"{name}() takes {len(arg_names)} arguments {arg_names}, got {len(args)}")
        return evaluate(expr, dict(zip(arg_names, args)))

    f.__name__ = name
    return f
