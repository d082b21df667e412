"""prompt_toolkit lexer for live highlighting of console expressions."""

from __future__ import annotations

import re
from typing import Callable, List, Tuple

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "command": "bold ansicyan",
    "navigation": "bold ansiblue",
    "constant": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "method": "bold ansiyellow",
    "member": "",
    "trigger": "ansiblue",
    "punctuation": "",
    "error": "bold ansired",
}

_CONSTANTS = {"true", "false", "null"}

_TOKEN_RE = re.compile(
    r"""
    (?P<navigation>->)
  | (?P<string>"(?:\\.|[^"\\])*"?|'(?:\\.|[^'\\])*'?)
  | (?P<number>[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)
  | (?P<name>[^\s.()\[\]=,"']+)
  | (?P<trigger>[.(\[=])
  | (?P<punctuation>[)\],])
  | (?P<space>\s+)
    """,
    re.VERBOSE,
)


def classify(line: str) -> List[Tuple[str, str]]:
    """Split *line* into (group, text) pairs."""
    if line.lstrip().startswith("/"):
        return [("command", line)]

    out: List[Tuple[str, str]] = []
    pos = 0

    while pos < len(line):
        match = _TOKEN_RE.match(line, pos)
        if match is None:
            out.append(("error", line[pos:]))
            break

        group = match.lastgroup or "error"
        text = match.group()

        if group == "string" and (len(text) < 2 or text[-1] != text[0]):
            group = "error"
        elif group == "name":
            if text.lower() in _CONSTANTS:
                group = "constant"
            elif line[match.end():].lstrip().startswith("("):
                group = "method"
            else:
                group = "member"
        elif group == "space":
            group = "punctuation"

        out.append((group, text))
        pos = match.end()

    return out


class ConsoleLexer(Lexer):
    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno >= len(lines):
                return []
            return [(GROUP_STYLE.get(group, ""), text) for group, text in classify(lines[lineno])]

        return get_line
