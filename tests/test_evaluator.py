from __future__ import annotations

from typing import List, Optional

import pytest

from autoconsole.context import ContextStack
from autoconsole.evaluator import evaluate, evaluate_line
from autoconsole.types import (
    IndexOutOfRange,
    InvocationError,
    MemberNotFound,
    NoMatchingOverload,
    ParseError,
    ResolutionError,
)
from tests.support.harness import (
    Counter,
    Person,
    Pet,
    make_demo_person,
    run_console_case,
    verify_value,
)

SCENARIOS = [
    pytest.param(["Name"], ("string", "Bart"), None, id="property"),
    pytest.param([".Name"], ("string", "Bart"), None, id="leading-dot"),
    pytest.param(["  Name  "], ("string", "Bart"), None, id="padded"),
    pytest.param(["Pet.Name"], ("string", "Rex"), None, id="chain"),
    pytest.param(["Pet.Age"], ("int", 4), None, id="chain-int"),
    pytest.param(["Length"], ("float", 1.80), None, id="float-property"),
    pytest.param(['Say("hi")'], ("string", "hi"), None, id="call"),
    pytest.param(["Say(3)"], ("string", "Bart Bart Bart"), None, id="call-int-overload"),
    pytest.param(['SayTwoThings("a", "b")'], ("string", "a and b"), None, id="two-args"),
    pytest.param(['SayTwoThings(Say("x"), Pet.Name)'], ("string", "x and Rex"), None, id="nested-args"),
    pytest.param(["SayTwoThings(Name, Pet.Name)"], ("string", "Bart and Rex"), None, id="args-use-caller-context"),
    pytest.param(['Say("a,b")'], ("string", "a,b"), None, id="comma-in-string-arg"),
    pytest.param(['Say("(x)")'], ("string", "(x)"), None, id="paren-in-string-arg"),
    pytest.param(["Pet.Speak()"], ("string", "Rex says woof"), None, id="chain-then-call"),
    pytest.param(['Adopt("Tom", "CAT").Speak()'], ("string", "Tom says meow"), None, id="call-then-chain"),
    pytest.param(['Adopt("Tom").Name'], ("string", "Tom"), None, id="call-then-property"),
    pytest.param(["Friends[0].Name"], ("string", "Lisa"), None, id="index-then-chain"),
    pytest.param(["Friends[1].Pet"], ("null", None), None, id="index-then-null-property"),
    pytest.param(["Friends[Pet.Age].Name"], None, IndexOutOfRange, id="index-expression-out-of-range"),
    pytest.param(["Friends[Friends[0].Pet.Age].Name"], None, IndexOutOfRange, id="nested-index-expression"),
    pytest.param(['Name="Carl"', "Name"], ("string", "Carl"), None, id="assign-then-read"),
    pytest.param(['Name = "Carl.Jr"'], ("string", "Carl.Jr"), None, id="assign-string-with-dot"),
    pytest.param(["Weight=90.5"], ("float", 90.5), None, id="assign-float-literal"),
    pytest.param(["Weight=90"], ("float", 90.0), None, id="assign-coerces-int"),
    pytest.param(["Pet.Age=5", "Pet.Age"], ("int", 5), None, id="assign-through-chain"),
    pytest.param(["Pet=null", "Pet"], ("null", None), None, id="assign-null"),
    pytest.param(["Name=Pet.Name"], ("string", "Rex"), None, id="assign-from-expression"),
    pytest.param(['Name=Say("yo")'], ("string", "yo"), None, id="assign-from-call"),
    pytest.param(["Jump()"], ("null", None), None, id="void-call"),
    pytest.param(["Pet.Species.name"], ("string", "DOG"), None, id="enum-member-name"),
    pytest.param(["Friends[0].Pet.Species.value"], ("string", "cat"), None, id="enum-member-value"),
    pytest.param(["Pet.Species.name=\"CAT\""], None, MemberNotFound, id="enum-name-read-only"),
    pytest.param(["3.14"], ("float", 3.14), None, id="bare-float"),
    pytest.param(["true"], ("bool", True), None, id="bare-bool"),
    pytest.param(['"x.y"'], ("string", "x.y"), None, id="bare-string-with-dot"),
    pytest.param(["Nonexistent"], None, MemberNotFound, id="unknown-name"),
    pytest.param(["Nonexistent.Name"], None, MemberNotFound, id="unknown-chain-head"),
    pytest.param(["Pet.Nope"], None, MemberNotFound, id="unknown-chain-tail"),
    pytest.param(['Say("a", "b")'], None, NoMatchingOverload, id="wrong-arity"),
    pytest.param(["Fly()"], None, MemberNotFound, id="unknown-method"),
    pytest.param(["Friends[5]"], None, IndexOutOfRange, id="index-out-of-range"),
    pytest.param(["Friends[-1]"], None, IndexOutOfRange, id="negative-index"),
    pytest.param(['Friends["0"]'], None, ResolutionError, id="non-integer-index"),
    pytest.param(["Name[0]"], None, ResolutionError, id="index-into-string"),
    pytest.param(["Friends[0"], None, ParseError, id="unbalanced-square"),
    pytest.param(["Say(1"], None, ParseError, id="unbalanced-paren"),
    pytest.param(["(1)"], None, ParseError, id="missing-method-name"),
    pytest.param(["=1"], None, ParseError, id="missing-assign-target"),
    pytest.param(["Name="], None, ParseError, id="missing-assign-value"),
    pytest.param(["Pet."], None, ParseError, id="dangling-dot"),
    pytest.param(["Friends=[]"], None, MemberNotFound, id="assign-read-only"),
    pytest.param(["Name == 1"], None, ParseError, id="no-comparison-operator"),
    pytest.param(["Friends[1].Pet.Name"], None, ResolutionError, id="null-context-midway"),
    pytest.param(["Weight=-3"], None, InvocationError, id="setter-raises"),
]


@pytest.mark.parametrize("lines, expectation, expected_exc", SCENARIOS)
def test_console_scenarios(
    lines: List[str],
    expectation: Optional[tuple],
    expected_exc: Optional[type],
) -> None:
    run_console_case(lines, expectation, expected_exc)


def test_blank_input_is_not_an_error() -> None:
    outcome = evaluate("   ", make_demo_person())

    assert not outcome.ok
    assert outcome.error is None
    assert outcome.blank


def test_null_context_fails() -> None:
    outcome = evaluate("Name", None)

    assert isinstance(outcome.error, ResolutionError)


def test_member_chain_does_not_touch_stack() -> None:
    stack = ContextStack(make_demo_person())
    outcome = evaluate_line("Pet.Name", stack)

    assert outcome.value == "Rex"
    assert len(stack) == 1


def test_navigation_pushes_result() -> None:
    person = make_demo_person()
    stack = ContextStack(person)

    outcome = evaluate_line("->Pet", stack)
    assert outcome.ok and outcome.push
    assert isinstance(stack.current, Pet)

    assert evaluate_line("Name", stack).value == "Rex"
    assert stack.base is person


def test_navigation_into_call_result() -> None:
    stack = ContextStack(make_demo_person())
    evaluate_line('-> Adopt("Tom")', stack)

    assert isinstance(stack.current, Pet)
    assert stack.current.name == "Tom"


def test_failed_navigation_pushes_nothing() -> None:
    stack = ContextStack(make_demo_person())
    outcome = evaluate_line("->Nope", stack)

    assert outcome.error is not None
    assert not outcome.push
    assert len(stack) == 1


def test_navigation_marker_only_counts_at_line_start() -> None:
    outcome = evaluate('Say(->Name)', make_demo_person())

    assert outcome.error is not None


def test_direct_indexing_into_sequence_context() -> None:
    outcome = evaluate("[1]", [10, 20, 30])
    verify_value(outcome.value, "int", 20)

    outcome = evaluate("[5]", [10, 20, 30])
    assert isinstance(outcome.error, IndexOutOfRange)


def test_indexing_property_of_dataclass() -> None:
    outcome = evaluate("values[2]", Counter())
    verify_value(outcome.value, "int", 30)


def test_index_expression_evaluates_against_context() -> None:
    counter = Counter()
    counter.hits = 1
    outcome = evaluate("values[hits]", counter)

    verify_value(outcome.value, "int", 20)


def test_assignment_returns_stored_value() -> None:
    person = make_demo_person()
    outcome = evaluate('Name="Carl"', person)

    assert outcome.value == "Carl"
    assert person.name == "Carl"


def test_arguments_evaluated_before_invocation() -> None:
    counter = Counter()
    outcome = evaluate("bump(bump(2))", counter)

    # inner call leaves hits at 2, outer call adds 2 more
    verify_value(outcome.value, "int", 4)


def test_invocation_error_leaves_target_untouched() -> None:
    person = make_demo_person()
    outcome = evaluate("Weight=-3", person)

    assert isinstance(outcome.error, InvocationError)
    assert person.weight == 83.2


def test_evaluate_is_reentrant_across_contexts() -> None:
    bart = make_demo_person()
    lisa = bart.friends[0]

    assert evaluate("Name", bart).value == "Bart"
    assert evaluate("Name", lisa).value == "Lisa"


def test_method_on_structured_context() -> None:
    outcome = evaluate('get("a")', {"a": 1})
    verify_value(outcome.value, "int", 1)


def test_mapping_property_chain() -> None:
    outcome = evaluate("inner.items[0]", {"inner": {"items": [7, 8]}})
    verify_value(outcome.value, "int", 7)


def test_friend_can_be_added_from_expression() -> None:
    bart = make_demo_person()
    outcome = evaluate("AddFriend(Friends[0])", bart)

    verify_value(outcome.value, "int", 3)
    assert isinstance(bart.friends[2], Person)
