"""Tokenizer and priority-sorted tree builder.

Rather than descending a grammar, `build_tree` sorts the tokens of a range by
operator rank and resolves them tightest first. Each resolved operator
absorbs its neighbours; a union-find style `parent` list records which index
currently stands for a merged subexpression, so that a later, looser operator
next to index `i` finds the whole subtree `i` has become part of.

>>> from expr_ast import render_canonical, render_minimal
>>> render_minimal(parse("(1 + 2) * -x / (y - (3 - z))"))
'(1 + 2) * -x / (y - (3 - z))'
>>> render_canonical(parse("a - b - c"))
'((a - b) - c)'
"""
import enum
import os
import re
import sys
from typing import NamedTuple

from expr_ast import OPS, PAREN_PREC, Binary, Const, Unary, Var

DEBUG = bool(os.getenv("DEBUG", False))


class MalformedInput(ValueError):
    """A character the tokenizer does not know."""

    def __init__(self, char, pos):
        super().__init__(f"unexpected character {char!r} at position {pos}")
        self.char = char
        self.pos = pos


class MalformedExpression(ValueError):
    """Tokens that do not form a single expression."""


class TokenKind(enum.Enum):
    NUMBER = "number"
    NAME = "name"
    NEG = "neg"
    MUL = "mul"
    DIV = "div"
    ADD = "add"
    SUB = "sub"
    LP = "("
    RP = ")"

    @property
    def op(self):
        return OPS.get(self.value)

    @property
    def prec(self):
        if self in (TokenKind.LP, TokenKind.RP):
            return PAREN_PREC
        return self.op.prec if self.op else 0

    def is_operator(self):
        return self.value in OPS


class Token(NamedTuple):
    kind: TokenKind
    text: str


SYMBOLS = {
    "+": TokenKind.ADD,
    "*": TokenKind.MUL,
    "/": TokenKind.DIV,
    "(": TokenKind.LP,
    ")": TokenKind.RP,
}
TERMINATORS = "\n;"
number_rex = re.compile(r"(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
name_rex = re.compile(r"[^\W\d_][^\W_]*")


def tokenize(text, pos=0):
    """Tokens of the statement starting at `pos`, and where the next one starts.

    >>> [t.kind.name for t in tokenize("-x - -2 ; y")[0]]
    ['NEG', 'NAME', 'SUB', 'NEG', 'NUMBER']
    >>> tokenize("-x - -2 ; y")[1]
    9
    """
    tokens = []
    while pos < len(text):
        c = text[pos]
        if c in TERMINATORS:
            return tokens, pos + 1
        if c.isspace() or c == "=":
            pos += 1
            continue
        if m := number_rex.match(text, pos):
            tokens.append(Token(TokenKind.NUMBER, m.group()))
        elif m := name_rex.match(text, pos):
            tokens.append(Token(TokenKind.NAME, m.group()))
        elif c == "-":
            unary = not tokens or tokens[-1].kind.is_operator() or tokens[-1].kind is TokenKind.LP
            tokens.append(Token(TokenKind.NEG if unary else TokenKind.SUB, c))
        elif kind := SYMBOLS.get(c):
            tokens.append(Token(kind, c))
        else:
            raise MalformedInput(c, pos)
        pos += len(tokens[-1].text)
    return tokens, pos


def lex(text):
    return tokenize(text)[0]


def _matching_paren(tokens, i, hi):
    depth = 0
    for j in range(i, hi):
        kind = tokens[j].kind
        depth += (kind is TokenKind.LP) - (kind is TokenKind.RP)
        if depth == 0:
            return j
    raise MalformedExpression(f"unmatched '(' at token {i}")


def _sort_key(item):
    # Prefix negation binds right to left, so `--x` resolves the inner one first.
    i, tok = item
    return (tok.kind.prec, -i if tok.kind is TokenKind.NEG else i)


def build_tree(tokens, lo=0, hi=None, nodes=None, parent=None):
    """Build the expression for `tokens[lo:hi]`.

    `nodes[i]` is the subexpression resolved at index `i`, `parent[i]` the
    index that absorbed it (itself while unabsorbed). Both are shared by the
    recursive calls for parenthesized ranges.
    """
    if hi is None:
        hi = len(tokens)
    if nodes is None:
        nodes, parent = [None] * len(tokens), list(range(len(tokens)))
    if lo >= hi:
        raise MalformedExpression("empty expression")

    def root(i):
        while parent[i] != i:
            i = parent[i]
        return i

    def operand(i, at):
        if not lo <= i < hi or nodes[root(i)] is None:
            raise MalformedExpression(f"missing operand for {tokens[at].text!r} at token {at}")
        r = root(i)
        parent[r] = at
        return nodes[r]

    for i, tok in sorted(enumerate(tokens[lo:hi], start=lo), key=_sort_key):
        if nodes[i] is not None:
            continue
        kind = tok.kind
        if kind is TokenKind.LP:
            j = _matching_paren(tokens, i, hi)
            nodes[i] = nodes[j] = build_tree(tokens, i + 1, j, nodes, parent)
            parent[root(i + 1)] = parent[j] = i
        elif kind is TokenKind.RP:
            raise MalformedExpression(f"unmatched ')' at token {i}")
        elif kind is TokenKind.NUMBER:
            nodes[i] = Const(float(tok.text))
        elif kind is TokenKind.NAME:
            nodes[i] = Var(tok.text)
        elif kind is TokenKind.NEG:
            nodes[i] = Unary(kind.op, operand(i + 1, i))
        else:
            nodes[i] = Binary(kind.op, operand(i - 1, i), operand(i + 1, i))
        if DEBUG:
            print(f"build_tree: token {i} {tok.text!r} -> {nodes[i]}", file=sys.stderr)

    top = root(lo)
    if any(root(i) != top for i in range(lo, hi)):
        raise MalformedExpression(f"operands not joined by an operator in tokens {lo}..{hi}")
    return nodes[top]


def parse(line):
    """Parse the first statement of `line`; None if it holds no tokens."""
    tokens = lex(line)
    return build_tree(tokens) if tokens else None


def parse_all(text):
    """Yield an expression for each non-empty statement in `text`.

    >>> from expr_ast import render_canonical
    >>> [render_canonical(e) for e in parse_all("1 + 2; x\\n\\n-y")]
    ['(1 + 2)', 'x', '(-y)']
    """
    pos = 0
    while pos < len(text):
        tokens, pos = tokenize(text, pos)
        if tokens:
            yield build_tree(tokens)
