from __future__ import annotations

import argparse
import importlib
import sys
from typing import Any, List, Optional

from .context import ContextStack
from .evaluator import evaluate_line
from .literals import parse_literal
from .render import format_value
from .types import ConsoleError, ContextStackError, Emit, InvocationError, Outcome

RETURN_COMMAND = "return"
COMMAND_UNKNOWN = "Command unknown"


def describe_error(err: ConsoleError) -> str:
    """One user-facing line for a failed evaluation."""
    if isinstance(err, (InvocationError, ContextStackError)):
        return str(err)

    return f"{COMMAND_UNKNOWN}: {err}"


def _stderr(line: str) -> None:
    print(line, file=sys.stderr)


class Session:
    """A navigation history plus the line handling that sits on top of the evaluator."""

    def __init__(self, base: Any, emit: Optional[Emit] = None):
        self.stack = ContextStack(base)
        self.emit: Emit = emit if emit is not None else _stderr

    @property
    def current(self) -> Any:
        return self.stack.current

    def run_line(self, line: str) -> Outcome:
        text = line.strip()

        if text == RETURN_COMMAND:
            return self._pop()

        outcome = evaluate_line(text, self.stack)

        if outcome.error is not None:
            self.emit(describe_error(outcome.error))

        return outcome

    def _pop(self) -> Outcome:
        try:
            self.stack.pop()
        except ContextStackError as exc:
            self.emit(describe_error(exc))
            return Outcome(error=exc)

        return Outcome(value=self.stack.current, ok=True)


def shows_result(line: str, outcome: Outcome) -> bool:
    """Navigation and ``return`` change the context silently; other values are echoed."""
    if not outcome.ok or outcome.value is None or outcome.push:
        return False

    return line.strip() != RETURN_COMMAND


def load_target(ref: str) -> Any:
    """Import ``module:attr`` (dotted attr allowed); callables are called with no arguments."""
    module_name, sep, attr_path = ref.partition(":")

    if not sep or not module_name or not attr_path:
        raise SystemExit(f"--target expects MODULE:ATTR, got {ref!r}")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise SystemExit(f"Cannot import {module_name!r}: {exc}") from None

    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            raise SystemExit(f"{module_name!r} has no attribute {attr_path!r}") from None

    return obj() if callable(obj) else obj


def build_context(args: argparse.Namespace) -> Any:
    if args.json is not None:
        parsed = parse_literal(args.json)
        if not parsed.ok or parsed.value is None:
            raise SystemExit("--json: not a valid literal or structured value")
        return parsed.value

    if args.target is not None:
        return load_target(args.target)

    from .demo import make_demo_person

    return make_demo_person()


def _attach_command_values(argv: List[str]) -> List[str]:
    """Rewrite ``-c LINE`` as ``--command=LINE`` so lines like ``->Pet`` are not read as options."""
    out: List[str] = []
    args = iter(argv)

    for arg in args:
        if arg not in ("-c", "--command"):
            out.append(arg)
            continue

        line = next(args, None)
        if line is None:
            # let argparse report the missing value
            out.append(arg)
            break

        out.append(f"--command={line}")

    return out


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(
        prog="autoconsole",
        description="Explore and manipulate a live object from a prompt.",
    )
    source = ap.add_mutually_exclusive_group()
    source.add_argument("--demo", action="store_true", help="Explore the demo Person (default)")
    source.add_argument("--json", metavar="TEXT", help="Explore a value given as a literal or JSON text")
    source.add_argument("--target", metavar="MODULE:ATTR", help="Explore an imported object")
    ap.add_argument(
        "-c", "--command",
        action="append",
        metavar="LINE",
        help="Evaluate LINE and exit instead of starting the prompt (repeatable)",
    )

    args = ap.parse_args(_attach_command_values(sys.argv[1:] if argv is None else argv))
    base = build_context(args)

    if not args.command:
        from .repl import repl

        repl(base)
        return

    session = Session(base)
    failed = False

    for line in args.command:
        outcome = session.run_line(line)

        if outcome.error is not None:
            failed = True
        elif shows_result(line, outcome):
            print(format_value(outcome.value))

    if failed:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
