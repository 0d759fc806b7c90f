# Evaluating expressions over numpy arrays: elementwise, and as reductions.
import functools
import os

import numpy as np

from expr_ast import free_vars
from expr_eval import env_lookup, eval_expr, evaluate
from expr_parser import parse

DEBUG = bool(os.getenv("DEBUG", False))


def as_doubles(a):
    return np.asarray(a, dtype=np.float64)


def array_evaluator(expr, name="f_array"):
    """Return a function (named `name`) evaluating `expr` elementwise.

    Arguments are the free variables of `expr` in alphabetical order, as
    arrays (or anything numpy broadcasts).

    >>> f = array_evaluator(parse("x * x - y"))
    >>> f(np.array([1.0, 2.0, 3.0]), 1).tolist()
    [0.0, 3.0, 8.0]
    >>> array_evaluator(parse("1 / x"))(np.array([0.0, -0.0, 4.0])).tolist()
    [inf, -inf, 0.25]
    """
    arg_names = sorted(free_vars(expr))

    def f(*arrays):
        if len(arrays) != len(arg_names):
            raise TypeError(f"{name}() takes {len(arg_names)} arrays {arg_names}, got {len(arrays)}")
        lookup = env_lookup(dict(zip(arg_names, arrays)), as_doubles)
        with np.errstate(all="ignore"):
            return as_doubles(eval_expr(expr, lookup))

    f.__name__ = name
    return f


# Fold an array through a two variable expression, e.g. "t+x" with t the
# running value and x the current element.
def array_reducer(name, vars, expr):
    assert len(vars) == 2
    acc_name, item_name = vars
    assert free_vars(expr) <= set(vars), f"{name}: free variables outside {vars}"

    def step(acc, item):
        ans = evaluate(expr, {acc_name: acc, item_name: item})
        if DEBUG:
            print(f"{name}: {acc_name}={acc} {item_name}={item} -> {ans}")
        return ans

    def reduce(init, a):
        return functools.reduce(step, as_doubles(a).ravel().tolist(), float(init))

    reduce.__name__ = name
    return reduce


def make_array_aggregator(name, args, expr, initial):
    """Return `f(a, initial=initial)` folding array `a` through `expr`.

    >>> aprod = make_array_aggregator("Aprod", ["t", "x"], "t*x", 1.0)
    >>> aprod(np.array([1.0, 2.0, 3.0])), aprod(np.array([]))
    (6.0, 1.0)
    """
    raw_aggregator = array_reducer(name, args, parse(expr))

    def f(a, initial=initial):
        return raw_aggregator(initial, a)

    f.__name__ = name
    return f


asum = make_array_aggregator("Asum", ["t", "x"], "t+x", 0.0)
aprod = make_array_aggregator("Aprod", ["t", "x"], "t*x", 1.0)
