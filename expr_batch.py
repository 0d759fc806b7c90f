"""Batch driver: bind variables, then parse, render and evaluate expressions.

Input format::

    <number of variables n>
        <name 1> <value 1>
        ..
        <name n> <value n>
    <number of expressions m>
        <expression 1>
        ..
        <expression m>

For every expression three lines are written: the canonical rendering, the
minimal rendering and the value.

Usage: python -m expr_batch [FILE]   (stdin when FILE is omitted)
"""
import os
import sys

from expr_ast import canonicalize_num, render_canonical, render_minimal
from expr_eval import UndefinedVariable, evaluate
from expr_parser import MalformedExpression, MalformedInput, parse

DEBUG = bool(os.getenv("DEBUG", False))


class BatchFormatError(ValueError):
    pass


def read_batch(lines):
    """Split batch input into a variable table and the expression lines.

    >>> read_batch(["2", "x 1.5 y", "-2", "2 expressions follow", "x + y", "x*y"])
    ({'x': 1.5, 'y': -2.0}, ['x + y', 'x*y'])
    """
    lines = iter(lines)
    words = []

    def word(what):
        while not words:
            try:
                words.extend(next(lines).split())
            except StopIteration:
                raise BatchFormatError(f"input ended while reading {what}") from None
        return words.pop(0)

    def number(what, convert):
        text = word(what)
        try:
            return convert(text)
        except ValueError:
            raise BatchFormatError(f"bad {what}: {text!r}") from None

    env = {}
    for _ in range(number("variable count", int)):
        name = word("variable name")
        env[name] = number(f"value of {name}", float)
    count = number("expression count", int)
    # The rest of the count line is not an expression.
    exprs = []
    for i in range(count):
        try:
            exprs.append(next(lines).rstrip("\r\n"))
        except StopIteration:
            raise BatchFormatError(f"expected {count} expressions, got {i}") from None
    return env, exprs


def run_batch(lines, out=None, err=None):
    """Process batch input, return the number of expressions that failed.

    >>> run_batch(["1", "x 4", "2", "-x + 3 * 2", "(x - 1) / (2 - x) / 3"])
    ((-x) + (3 * 2))
    -x + 3 * 2
    2
    (((x - 1) / (2 - x)) / 3)
    (x - 1) / (2 - x) / 3
    -0.5
    0
    """
    out = out or sys.stdout
    err = err or sys.stderr
    env, exprs = read_batch(lines)
    if DEBUG:
        print(f"run_batch: {len(env)} variables, {len(exprs)} expressions", file=err)
    failures = 0
    for line in exprs:
        try:
            expr = parse(line)
            if expr is None:
                continue
            print(render_canonical(expr), file=out)
            print(render_minimal(expr), file=out)
            print(canonicalize_num(evaluate(expr, env)), file=out)
        except (MalformedInput, MalformedExpression, UndefinedVariable) as e:
            failures += 1
            print(f"error: {e}", file=err)
    return failures


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) > 1:
        print(__doc__, file=sys.stderr)
        return 2
    if argv:
        with open(argv[0], encoding="utf-8") as f:
            failures = run_batch(f.read().splitlines())
    else:
        failures = run_batch(sys.stdin.read().splitlines())
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
