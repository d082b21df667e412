from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Callable, Dict

from .context import ContextStack
from .literals import parse_literal, parse_scalar
from .members import find_property, invoke_method, read_property, write_property
from .scanner import Scan, match_delimiter, scan_delimiter, split_args
from .types import (
    ConsoleError,
    EvalState,
    IndexOutOfRange,
    MemberNotFound,
    Outcome,
    ParseError,
    ResolutionError,
)

NAV_MARKER = "->"

Branch = Callable[[Scan, Any, EvalState], Any]


def evaluate(text: str, context: Any) -> Outcome:
    """Evaluate one input line against *context*.

    Blank input yields an empty outcome with no error. Any parse or
    resolution failure, or an error raised by an invoked method, aborts the
    line and comes back as ``Outcome.error``; nothing is raised.
    """
    if not text.strip():
        return Outcome()

    state = EvalState(source=text)

    try:
        value = eval_expr(text, context, state)
    except ConsoleError as exc:
        return Outcome(error=exc)
    except RecursionError:
        return Outcome(error=ParseError("Expression is nested too deeply", text))

    return Outcome(value=value, ok=True, push=state.push)


def evaluate_line(text: str, stack: ContextStack) -> Outcome:
    """Evaluate against the current context and apply a ``->`` push on success."""
    outcome = evaluate(text, stack.current)

    if outcome.ok and outcome.push:
        stack.push(outcome.value)

    return outcome


def eval_expr(text: str, context: Any, state: EvalState) -> Any:
    expr = text.strip()

    if not expr:
        raise ParseError("Empty expression", state.source)

    if context is None:
        raise ResolutionError("Nothing to resolve against (context is null)")

    if state.depth == 0 and expr.startswith(NAV_MARKER):
        state.push = True
        expr = expr[len(NAV_MARKER):].lstrip()

    if expr.startswith("."):
        expr = expr[1:]

    scan = scan_delimiter(expr)

    if not scan.found:
        return eval_literal(expr, context)

    # quoted strings and numbers may contain trigger characters themselves
    literal = parse_scalar(expr)
    if literal.ok:
        return literal.value

    branch = _BRANCHES[scan.trigger]
    return branch(scan, context, state)


def _recurse(text: str, context: Any, state: EvalState) -> Any:
    state.depth += 1

    try:
        return eval_expr(text, context, state)
    finally:
        state.depth -= 1


def _continue_chain(rest: str, value: Any, state: EvalState) -> Any:
    rest = rest.strip()

    if rest.startswith("."):
        rest = rest[1:]

    if not rest.strip():
        return value

    return _recurse(rest, value, state)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def eval_literal(expr: str, context: Any) -> Any:
    parsed = parse_literal(expr, context)

    if not parsed.ok:
        raise MemberNotFound(context, expr)

    return parsed.value


def eval_member(scan: Scan, context: Any, state: EvalState) -> Any:
    value = read_property(context, scan.name.strip())
    return _recurse(scan.remainder[1:], value, state)


def eval_call(scan: Scan, context: Any, state: EvalState) -> Any:
    name = scan.name.strip()
    if not name:
        raise ParseError("Missing method name", state.source)

    start, end = match_delimiter(scan.remainder, "(")
    inner = scan.remainder[start + 1:end]

    # arguments resolve against the caller's context, not the callee
    args = [_recurse(arg, context, state) for arg in split_args(inner)]
    result = invoke_method(context, name, args)

    return _continue_chain(scan.remainder[end + 1:], result, state)


def eval_index(scan: Scan, context: Any, state: EvalState) -> Any:
    name = scan.name.strip()

    if not name and _is_sequence(context):
        seq = context
    else:
        seq = read_property(context, name)
        if not _is_sequence(seq):
            raise ResolutionError(f"'{name}' is not an ordered sequence")

    start, end = match_delimiter(scan.remainder, "[")
    index = _recurse(scan.remainder[start + 1:end], context, state)

    if isinstance(index, bool) or not isinstance(index, int):
        raise ResolutionError(f"Index must be an integer, got {type(index).__name__}")

    if index < 0 or index >= len(seq):
        raise IndexOutOfRange(index, len(seq))

    return _continue_chain(scan.remainder[end + 1:], seq[index], state)


def eval_assign(scan: Scan, context: Any, state: EvalState) -> Any:
    name = scan.name.strip()
    if not name:
        raise ParseError("Missing assignment target", state.source)

    prop = find_property(context, name)
    if prop is None or not prop.writable:
        raise MemberNotFound(context, name, "writable property")

    value = _recurse(scan.remainder[1:], context, state)
    return write_property(context, name, value)


_BRANCHES: Dict[str, Branch] = {
    ".": eval_member,
    "(": eval_call,
    "[": eval_index,
    "=": eval_assign,
}
