"""
Scanning helpers for console expressions.

- scan_delimiter: first trigger character (. ( [ =) in a line
- match_delimiter: balanced bracket pair for ( or [
- split_args: top-level comma split of a call's argument text

Quoted regions ('...' or "...", backslash escapes honored) are skipped by the
matcher and the splitter so brackets and commas inside string arguments do
not count. The delimiter scanner does not track nesting.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .types import ParseError

TRIGGERS = ('.', '(', '[', '=')

BRACKETS = {
    '(': ')',
    '[': ']',
}

QUOTES = ('"', "'")


@dataclass(frozen=True)
class Scan:
    """Text before the trigger, the trigger itself, and the rest from the trigger on."""

    name: str
    trigger: Optional[str]
    remainder: str

    @property
    def found(self) -> bool:
        return self.trigger is not None


def scan_delimiter(text: str) -> Scan:
    for pos, ch in enumerate(text):
        if ch in TRIGGERS:
            return Scan(text[:pos], ch, text[pos:])

    return Scan(text, None, "")


def _skip_quoted(text: str, pos: int) -> int:
    """Return the index just past the quote that closes the one at *pos*, or -1."""
    quote = text[pos]
    pos += 1

    while pos < len(text):
        ch = text[pos]
        if ch == '\\':
            pos += 2
            continue
        if ch == quote:
            return pos + 1
        pos += 1

    return -1


def match_delimiter(text: str, opener: str = '(') -> Tuple[int, int]:
    """Locate the first *opener* in *text* and the bracket that closes it.

    Only brackets of the same kind move the depth counter. Raises ParseError
    when the text ends first or a closer shows up with nothing open.
    """
    closer = BRACKETS.get(opener)
    if closer is None:
        raise ValueError(f"Unsupported bracket {opener!r}")

    depth = 0
    start = -1
    pos = 0

    while pos < len(text):
        ch = text[pos]

        if ch in QUOTES:
            end = _skip_quoted(text, pos)
            if end < 0:
                raise ParseError("Unterminated string literal", text)
            pos = end
            continue

        if ch == opener:
            if depth == 0 and start < 0:
                start = pos
            depth += 1
        elif ch == closer:
            if depth == 0:
                raise ParseError(f"Unexpected '{closer}'", text)
            depth -= 1
            if depth == 0:
                return start, pos

        pos += 1

    if start < 0:
        raise ParseError(f"Missing '{opener}'", text)

    raise ParseError(f"Unbalanced '{opener}'", text)


def split_args(inner: str) -> List[str]:
    """Split call arguments on commas that sit outside nested brackets and quotes."""
    if not inner.strip():
        return []

    parts: List[str] = []
    depth = 0
    last = 0
    pos = 0

    while pos < len(inner):
        ch = inner[pos]

        if ch in QUOTES:
            end = _skip_quoted(inner, pos)
            if end < 0:
                # unterminated quote: the rest is one argument
                break
            pos = end
            continue

        if ch in BRACKETS:
            depth += 1
        elif ch in (')', ']'):
            depth = max(depth - 1, 0)
        elif ch == ',' and depth == 0:
            parts.append(inner[last:pos])
            last = pos + 1

        pos += 1

    parts.append(inner[last:])
    return parts
