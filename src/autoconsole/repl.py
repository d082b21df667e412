"""Interactive prompt for exploring an object, powered by prompt_toolkit."""

from __future__ import annotations

import re
import sys
import traceback
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Tuple

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.shortcuts import clear

from .evaluator import NAV_MARKER
from .members import member_names, read_property
from .render import format_members, format_value
from .repl_highlight import ConsoleLexer
from .runner import RETURN_COMMAND, Session, shows_result
from .types import ConsoleError, InvocationError
from .utils import debug_py_trace_enabled, parse_toggle, set_debug_py_trace, show_all_from_env

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

_WORD_BREAK_RE = re.compile(r"[(,=\[\s]")

EXIT_COMMANDS = ("exit", "quit")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/clear": ("Clear the terminal screen", ""),
    "/help": ("Show this help", ""),
    "/members": ("List members of the current context", ""),
    "/stack": ("Show the navigation path", ""),
    "/reset": ("Return to the base context", ""),
    "/show-all": ("Toggle listing of unmarked members", "[on|off]"),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
}

_HELP_LINES = [
    "Type an expression against the current context:",
    "  Name                 read a property",
    "  Name=\"Carl\"          assign a property",
    "  Say(\"hi\")            call a method",
    "  Friends[0].Name      index a sequence and keep going",
    f"  {NAV_MARKER}Pet                 navigate into the result",
    f"  {RETURN_COMMAND}               go back to the previous context",
    f"  {' / '.join(EXIT_COMMANDS)}          leave",
]


@dataclass
class ReplState:
    session: Session
    show_all: bool = field(default_factory=show_all_from_env)
    running: bool = True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def prompt_text(session: Session) -> str:
    return f"{session.stack.path()}> "


def _completion_target(session: Session, text: str) -> Tuple[Optional[Any], str]:
    """Object whose members complete the word under the cursor, and that word.

    Only plain property chains are followed so completing never calls a method.
    """
    if text.startswith(NAV_MARKER):
        text = text[len(NAV_MARKER):]
    # complete the innermost expression: method arguments, assigned values
    text = _WORD_BREAK_RE.split(text)[-1].lstrip(".")

    head, _, word = text.rpartition(".")
    target = session.current

    if not head:
        return target, word

    if any(ch in head for ch in "()[]=\"' "):
        return None, word

    for part in head.split("."):
        try:
            target = read_property(target, part)
        except ConsoleError:
            return None, word

    return target, word


class ConsoleCompleter(Completer):
    """Slash commands on an empty line, member display names everywhere else."""

    def __init__(self, session: Session):
        self.session = session

    def get_completions(self, document, complete_event) -> Iterable[Completion]:
        text = document.text_before_cursor

        if text.startswith("/"):
            for cmd, (desc, hint) in _SLASH_CMDS.items():
                if cmd.startswith(text):
                    yield Completion(cmd, start_position=-len(text), display_meta=desc)
            return

        target, word = _completion_target(self.session, text.lstrip())
        if target is None:
            return

        for name in member_names(target):
            if name.startswith(word):
                yield Completion(name, start_position=-len(word))


def _print_lines(lines: List[str]) -> None:
    for line in lines:
        print(line)


def _handle_slash(line: str, state: ReplState) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1] if len(parts) > 1 else ""
    session = state.session

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/help":
        _print_lines(_HELP_LINES)
        print()
        for name, (desc, hint) in _SLASH_CMDS.items():
            print(f"  {name} {hint}".ljust(24) + desc)
        return True

    if cmd == "/members":
        lines = format_members(session.current, state.show_all)
        _print_lines(lines or ["(no members)"])
        return True

    if cmd == "/stack":
        print(session.stack.path())
        return True

    if cmd == "/reset":
        session.stack.reset()
        return True

    if cmd == "/show-all":
        value = parse_toggle(arg, state.show_all)
        if value is None:
            print("Usage: /show-all [on|off]", file=sys.stderr)
            return True

        state.show_all = value
        print(f"Show all members: {'on' if value else 'off'}")
        return True

    if cmd == "/py-traceback":
        value = parse_toggle(arg, debug_py_trace_enabled())
        if value is None:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        set_debug_py_trace(value)
        print(f"Python traceback: {'on' if value else 'off'}")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def handle_input(text: str, state: ReplState) -> None:
    """Run one line from the prompt: system commands first, then the evaluator."""
    text = _normalize(text)
    if not text.strip():
        return

    if text.strip() in EXIT_COMMANDS:
        state.running = False
        return

    if _handle_slash(text, state):
        return

    outcome = state.session.run_line(text)

    if outcome.error is not None:
        err = outcome.error
        if debug_py_trace_enabled() and isinstance(err, InvocationError):
            print("\nPython traceback:", file=sys.stderr)
            print("".join(traceback.format_exception(err.original)), file=sys.stderr, end="")
        return

    if shows_result(text, outcome):
        print(format_value(outcome.value))


def repl(base: Any) -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    state = ReplState(Session(base))

    prompt: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        lexer=ConsoleLexer(),
        completer=ConsoleCompleter(state.session),
        complete_while_typing=True,
    )

    print("autoconsole: Ctrl-D or 'exit' to leave, /help for commands")

    while state.running:
        try:
            text = prompt.prompt(prompt_text(state.session))
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        handle_input(text, state)
