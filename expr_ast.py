"""Expression trees for arithmetic over floats and named variables.

A tree is one of `Const`, `Var`, `Unary` (negation) or `Binary` (the four
arithmetic operators), all plain named tuples, so trees compare structurally.
"""
import math
import operator
import re
from typing import Callable, Literal, NamedTuple

PAREN_PREC = -1


def canonicalize_num(num):
    """Render a float the short way.

    >>> canonicalize_num(3.0), canonicalize_num(0.5), canonicalize_num(1e20), canonicalize_num(-0.0)
    ('3', '0.5', '1e+20', '-0.0')
    """
    # int() would drop the sign of -0.0.
    if num.is_integer() and abs(num) < 1e16 and math.copysign(1, num) * (num or 1) > 0:
        return repr(int(num))
    return repr(num)


def literal(num):
    """Constant as source text that lexes back to the same value.

    >>> literal(2.0), literal(math.inf)
    ('2', '1e999')
    """
    if math.isinf(num):
        return "1e999" if num > 0 else "-1e999"
    return canonicalize_num(num)


class Op(NamedTuple):
    op: str
    prec: int
    assoc: Literal["c", "l", "u"]  # associative/commutative, left-only, unary
    fun: Callable

    def __call__(self, *args):
        return self.fun(*args)

    def __repr__(self):
        return f"op({self.op!r:})"

    def arity(self):
        return 1 if self.assoc == "u" else 2

    def wraps_right(self, prec):
        "Does a right operand of rank `prec` need parens under this operator?"
        return prec > self.prec or prec == self.prec and self.assoc == "l"


OP_GROUPS = """
neg-u
mul*c div/l
add+c sub-l
""".strip()
OPS = {
    name: Op(o, prec, assoc, getattr(operator, {"div": "truediv"}.get(name, name)))
    for prec, op_groups in enumerate(OP_GROUPS.split("\n"), start=2)
    for [(name, o, assoc)] in map(
        re.compile(r"^(\w+)(\W+)(\w+)$").findall, op_groups.split()
    )
}


class Const(NamedTuple):
    value: float


class Var(NamedTuple):
    name: str


class Unary(NamedTuple):
    op: Op
    arg: tuple


class Binary(NamedTuple):
    op: Op
    left: tuple
    right: tuple


def prec(expr):
    """Precedence rank of `expr`; leaves are always atomic.

    >>> prec(Var("x")), prec(Binary(OPS["sub"], Var("a"), Var("b")))
    (0, 4)
    """
    return 0 if type(expr) in (Const, Var) else expr.op.prec


def render_canonical(expr):
    """Fully parenthesized infix text.

    >>> render_canonical(Binary(OPS["add"], Const(1.0), Unary(OPS["neg"], Var("x"))))
    '(1 + (-x))'
    """
    if type(expr) is Const:
        return literal(expr.value)
    if type(expr) is Var:
        return expr.name
    if type(expr) is Unary:
        return f"({expr.op.op}{render_canonical(expr.arg)})"
    left, right = render_canonical(expr.left), render_canonical(expr.right)
    return f"({left} {expr.op.op} {right})"


def render_minimal(expr):
    """Infix text with only the parentheses precedence and associativity need.

    >>> sub = OPS["sub"]
    >>> render_minimal(Binary(sub, Const(10.0), Binary(sub, Const(2.0), Const(3.0))))
    '10 - (2 - 3)'
    >>> render_minimal(Binary(sub, Binary(sub, Const(10.0), Const(2.0)), Const(3.0)))
    '10 - 2 - 3'
    """
    if type(expr) in (Const, Var):
        return render_canonical(expr)
    if type(expr) is Unary:
        arg = render_minimal(expr.arg)
        if prec(expr.arg) > expr.op.prec:
            arg = f"({arg})"
        return f"{expr.op.op}{arg}"
    (op, left, right) = expr
    x, y = render_minimal(left), render_minimal(right)
    if prec(left) > op.prec:
        x = f"({x})"
    if op.wraps_right(prec(right)):
        y = f"({y})"
    return f"{x} {op.op} {y}"


def free_vars(expr):
    """Return the free variables in `expr`.

    >>> sorted(free_vars(Binary(OPS["mul"], Var("b"), Unary(OPS["neg"], Var("a")))))
    ['a', 'b']
    """
    if type(expr) is Var:
        return frozenset([expr.name])
    if type(expr) is Const:
        return frozenset()
    return frozenset(e for x in expr[1:] for e in free_vars(x))
