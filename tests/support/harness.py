from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Tuple

BASE_DIR = Path(__file__).resolve().parent.parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))

from autoconsole.demo import Person, Pet, Species, make_demo_person
from autoconsole.members import display_name
from autoconsole.runner import Session
from autoconsole.types import (
    ConsoleError,
    Int8,
    Int16,
    Int32,
    Int64,
    InvocationError,
    Outcome,
)

LineExpectation = Optional[Tuple[str, object]]


@dataclass
class Counter:
    """Plain target with a list, a nullable slot and a failing method."""

    values: List[int] = field(default_factory=lambda: [10, 20, 30])
    label: Optional[str] = None
    hits: int = 0

    def bump(self, by: int = 1) -> int:
        self.hits += by
        return self.hits

    def boom(self) -> None:
        raise RuntimeError("kaboom")

    @display_name("Describe")
    def describe_float(self, value: float) -> str:
        return f"float {value}"

    @display_name("Describe")
    def describe_text(self, value: str) -> str:
        return f"text {value}"

    def accept(self, value: Optional[str]) -> str:
        return "none" if value is None else value

    def strict(self, value: str) -> str:
        return value


class Recorder:
    def __init__(self) -> None:
        self.lines: List[str] = []

    def __call__(self, line: str) -> None:
        self.lines.append(line)


def make_session(base: Any = None) -> Tuple[Session, Recorder]:
    recorder = Recorder()
    session = Session(base if base is not None else make_demo_person(), emit=recorder)
    return session, recorder


def verify_value(value: object, kind: str, expected: object) -> None:
    """Assert an evaluated value has the expected kind and payload."""
    match kind:
        case "string":
            assert isinstance(value, str), f"expected str, got {type(value).__name__}"
            assert value == expected, f"expected {expected!r}, got {value!r}"
        case "int8" | "int16" | "int32" | "int64":
            width = {"int8": Int8, "int16": Int16, "int32": Int32, "int64": Int64}[kind]
            assert type(value) is width, f"expected {width.__name__}, got {type(value).__name__}"
            assert value == expected, f"expected {expected}, got {value}"
        case "int":
            assert isinstance(value, int) and not isinstance(value, bool)
            assert value == expected, f"expected {expected}, got {value}"
        case "float":
            assert isinstance(value, float), f"expected float, got {type(value).__name__}"
            assert abs(value - float(expected)) <= 1e-9, f"expected {expected}, got {value}"
        case "bool":
            assert isinstance(value, bool), f"expected bool, got {type(value).__name__}"
            assert value is expected, f"expected {expected}, got {value}"
        case "null":
            assert value is None, f"expected None, got {value!r}"
        case "same":
            assert value is expected, f"expected the very object {expected!r}"
        case _:
            raise AssertionError(f"unknown expectation kind {kind}")


def run_console_case(
    lines: List[str],
    expectation: LineExpectation,
    expected_exc: Optional[type],
    base: Any = None,
) -> Outcome:
    """Feed lines through a fresh session and check the last outcome."""
    session, recorder = make_session(base)
    outcome = Outcome()

    for line in lines:
        outcome = session.run_line(line)

    if expected_exc is not None:
        assert isinstance(outcome.error, expected_exc), f"expected {expected_exc.__name__}, got {outcome.error!r}"
        assert len(recorder.lines) == 1, recorder.lines
        return outcome

    assert outcome.error is None, f"unexpected error {outcome.error}"
    if expectation is not None:
        verify_value(outcome.value, expectation[0], expectation[1])

    return outcome


__all__ = [
    "ConsoleError",
    "Counter",
    "InvocationError",
    "Person",
    "Pet",
    "Recorder",
    "Species",
    "make_demo_person",
    "make_session",
    "run_console_case",
    "verify_value",
]
