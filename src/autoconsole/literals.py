from __future__ import annotations

import json
import re
from typing import Any, List, Tuple

from lark import Lark, Transformer, UnexpectedInput
from lark.exceptions import VisitError

from .members import find_property, read_property
from .types import (
    INT_KINDS,
    INT_WIDTHS,
    LiteralKind,
    NOT_PARSED,
    Parsed,
    ResolutionError,
)

_INT_RE = re.compile(r"[+-]?[0-9]+\Z")
_FLOAT_RE = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?\Z")

# Marks "no lookup target" so None stays usable as a target value.
NO_TARGET: Any = object()

QUOTE_ORDER = ('"', "'")

STRUCTURED_GRAMMAR = r"""
?start: value

?value: object
      | array
      | string
      | SIGNED_NUMBER      -> number
      | "true"             -> true
      | "false"            -> false
      | "null"             -> null

array  : "[" [value ("," value)*] "]"
object : "{" [pair ("," pair)*] "}"
pair   : string ":" value

string : ESCAPED_STRING

%import common.ESCAPED_STRING
%import common.SIGNED_NUMBER
%import common.WS
%ignore WS
"""


class StructuredTransformer(Transformer):
    def string(self, c):
        return json.loads(c[0])

    def number(self, c):
        raw = str(c[0])
        if _INT_RE.match(raw):
            return int(raw)
        return float(raw)

    def array(self, c):
        return list(c)

    def pair(self, c):
        return c[0], c[1]

    def object(self, c):
        return dict(c)

    def true(self, _):
        return True

    def false(self, _):
        return False

    def null(self, _):
        return None


_structured_parser: Lark | None = None


def structured_parser() -> Lark:
    global _structured_parser

    if _structured_parser is None:
        _structured_parser = Lark(
            STRUCTURED_GRAMMAR,
            parser="lalr",
            maybe_placeholders=False,
        )

    return _structured_parser


def parse_structured(token: str) -> Parsed:
    try:
        tree = structured_parser().parse(token)
        value = StructuredTransformer().transform(tree)
    except (UnexpectedInput, VisitError):
        return NOT_PARSED

    return Parsed(True, value, LiteralKind.STRUCTURED)


def _unquote(token: str, quote: str) -> Tuple[bool, str]:
    if len(token) < 2 or token[0] != quote or token[-1] != quote:
        return False, ""

    body = token[1:-1]
    out: List[str] = []
    pos = 0

    while pos < len(body):
        ch = body[pos]

        if ch == '\\' and pos + 1 < len(body) and body[pos + 1] in (quote, '\\'):
            out.append(body[pos + 1])
            pos += 2
            continue

        if ch == quote:
            return False, ""

        out.append(ch)
        pos += 1

    return True, "".join(out)


def parse_integer(token: str) -> Parsed:
    if not _INT_RE.match(token):
        return NOT_PARSED

    num = int(token)

    for width in INT_WIDTHS:
        if width.fits(num):
            return Parsed(True, width(num), INT_KINDS[width])

    return NOT_PARSED


def parse_scalar(token: str) -> Parsed:
    """Null, bool, integers (narrowest width first), float and quoted strings."""
    token = token.strip()

    if token == "null":
        return Parsed(True, None, LiteralKind.NULL)

    lowered = token.lower()
    if lowered in ("true", "false"):
        return Parsed(True, lowered == "true", LiteralKind.BOOL)

    parsed = parse_integer(token)
    if parsed.ok:
        return parsed

    if _FLOAT_RE.match(token):
        return Parsed(True, float(token), LiteralKind.FLOAT)

    for quote in QUOTE_ORDER:
        ok, text = _unquote(token, quote)
        if ok:
            return Parsed(True, text, LiteralKind.STRING)

    return NOT_PARSED


def parse_literal(token: str, target: Any = NO_TARGET) -> Parsed:
    """Turn a bare token into a typed value.

    With a *target*, a readable property whose display name equals the token
    is the last resort. Without one, the token may instead be structured
    data (JSON syntax).
    """
    token = token.strip()

    parsed = parse_scalar(token)
    if parsed.ok:
        return parsed

    if target is not NO_TARGET:
        prop = find_property(target, token)
        if prop is None or not prop.readable:
            return NOT_PARSED
        try:
            return Parsed(True, read_property(target, token), LiteralKind.PROPERTY)
        except ResolutionError:
            return NOT_PARSED

    return parse_structured(token)
