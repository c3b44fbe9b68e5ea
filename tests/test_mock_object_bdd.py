"""Behavioural tests for mock objects using pytest-bdd."""

from __future__ import annotations

import typing as t
from pathlib import Path

import pytest
from pytest_bdd import given, parsers, scenario, then, when

from obj_mox import (
    Any,
    Behavior,
    Mock,
    MockRegistry,
    Times,
    UnexpectedCallError,
    VerificationError,
)
from obj_mox.unittests._capabilities import IAnimal, IFoo

FEATURES_DIR = Path(__file__).resolve().parent.parent / "features"

_CAPABILITIES: dict[str, type] = {"IFoo": IFoo, "IAnimal": IAnimal}


@given(
    parsers.re(r"a (?P<behavior>loose|strict) mock of (?P<name>\w+)"),
    target_fixture="mock",
)
def create_mock(behavior: str, name: str) -> Mock[t.Any]:
    """Create a mock with the requested behavior."""
    return Mock(_CAPABILITIES[name], behavior=Behavior(behavior))


@given(parsers.cfparse('do_something is set up with "{arg}" to return true'))
def setup_do_something(mock: Mock[IFoo], arg: str) -> None:
    """Answer ``do_something(arg)`` with ``True``."""
    mock.setup("do_something", arg).returns(True)


@given(
    parsers.cfparse('process_string is set up with any argument to return "{value}"')
)
def setup_process_any(mock: Mock[IFoo], value: str) -> None:
    """Answer every ``process_string`` call with *value*."""
    mock.setup("process_string", Any()).returns(value)


@given(parsers.cfparse('process_string is set up with "{arg}" to return "{value}"'))
def setup_process_exact(mock: Mock[IFoo], arg: str, value: str) -> None:
    """Answer ``process_string(arg)`` with *value*."""
    mock.setup("process_string", arg).returns(value)


@given(parsers.cfparse('process_string is set up with "{arg}" to return nothing'))
def setup_process_none(mock: Mock[IFoo], arg: str) -> None:
    """Answer ``process_string(arg)`` with ``None``."""
    mock.setup("process_string", arg).returns(None)


@given(parsers.cfparse('the name property is set up to return "{value}"'))
def setup_name(mock: Mock[IFoo], value: str) -> None:
    """Stub reads of ``name``."""
    mock.setup_get("name").returns(value)


@given(parsers.cfparse('the name property is backed with "{value}"'))
def back_name(mock: Mock[IFoo], value: str) -> None:
    """Give ``name`` a backing value."""
    mock.setup_property("name", value)


@given(
    parsers.cfparse("{count:d} handlers subscribed to abducted_by_aliens"),
    target_fixture="fired",
)
def subscribe_handlers(mock: Mock[IAnimal], count: int) -> list[int]:
    """Subscribe *count* handlers that record their position when called."""
    fired: list[int] = []
    for index in range(count):
        mock.object.abducted_by_aliens.subscribe(
            lambda *args, index=index: fired.append(index)
        )
    return fired


@given("a mock registry", target_fixture="registry")
def create_registry() -> MockRegistry:
    """Create a registry that leaves verification to the test."""
    return MockRegistry(verify_on_exit=False)


@given(
    parsers.cfparse(
        'a verifiable do_something "{arg}" expectation on a registry mock of IFoo'
    )
)
def registry_foo(registry: MockRegistry, arg: str) -> None:
    """Add a verifiable expectation to a fresh IFoo mock."""
    registry.create(IFoo).setup("do_something", arg).returns(True).verifiable()


@given("a verifiable stumble expectation on a registry mock of IAnimal")
def registry_animal(registry: MockRegistry) -> None:
    """Add a verifiable expectation to a fresh IAnimal mock."""
    registry.create(IAnimal).setup("stumble").verifiable()


@when(parsers.cfparse('{member} is called with "{arg}"'), target_fixture="result")
def call_member(mock: Mock[t.Any], member: str, arg: str) -> object:
    """Call *member* through the proxy."""
    return getattr(mock.object, member)(arg)


@when(
    parsers.cfparse('{member} is called with "{arg}" expecting a failure'),
    target_fixture="error",
)
def call_member_failing(mock: Mock[t.Any], member: str, arg: str) -> Exception:
    """Call *member* and capture the error it raises."""
    with pytest.raises(UnexpectedCallError) as excinfo:
        getattr(mock.object, member)(arg)
    return excinfo.value


@when(parsers.cfparse('the name property is assigned "{value}"'))
def assign_name(mock: Mock[IFoo], value: str) -> None:
    """Write ``name`` through the proxy."""
    mock.object.name = value


@when("abducted_by_aliens is raised")
def raise_abduction(mock: Mock[IAnimal]) -> None:
    """Raise the event with representative arguments."""
    mock.raise_event("abducted_by_aliens", 42, True)


@then("the result is true")
def result_true(result: object) -> None:
    """The call returned ``True``."""
    assert result is True


@then("the result is false")
def result_false(result: object) -> None:
    """The call returned ``False``."""
    assert result is False


@then("the result is nothing")
def result_none(result: object) -> None:
    """The call returned ``None``."""
    assert result is None


@then(parsers.cfparse('the result is "{value}"'))
def result_text(result: object, value: str) -> None:
    """The call returned *value*."""
    assert result == value


@then(parsers.cfparse('an UnexpectedCallError mentioning "{text}" is raised'))
def error_mentions(error: Exception, text: str) -> None:
    """The captured error names the offending call."""
    assert isinstance(error, UnexpectedCallError)
    assert text in str(error)


@then("no calls are recorded")
def no_calls(mock: Mock[t.Any]) -> None:
    """Strict rejections leave the journal empty."""
    assert len(mock.journal) == 0


@then(parsers.cfparse('reading the name property gives "{value}"'))
def read_name(mock: Mock[IFoo], value: str) -> None:
    """Read ``name`` through the proxy."""
    assert mock.object.name == value


@then(parsers.cfparse('do_something was called with "{arg}" at least once'))
def verify_at_least_once(mock: Mock[IFoo], arg: str) -> None:
    """Verify with the default count constraint."""
    mock.verify("do_something", arg)


@then(parsers.cfparse('do_something was called with "{arg}" exactly {count:d} times'))
def verify_exactly(mock: Mock[IFoo], arg: str, count: int) -> None:
    """Verify an exact call count."""
    mock.verify("do_something", arg, times=Times.exactly(count))


@then(parsers.cfparse('verifying do_something with "{arg}" fails'))
def verify_fails(mock: Mock[IFoo], arg: str) -> None:
    """Verification of an absent call raises."""
    with pytest.raises(VerificationError, match="Expected invocation count not met"):
        mock.verify("do_something", arg)


@then("the handlers ran in subscription order")
def handlers_in_order(fired: list[int]) -> None:
    """Handlers recorded their positions in order."""
    assert fired == sorted(fired)
    assert fired


@then(parsers.cfparse("verifying the registry reports {count:d} offenders"))
def registry_offenders(registry: MockRegistry, count: int) -> None:
    """Bulk verification lists one numbered entry per offender."""
    with pytest.raises(VerificationError) as excinfo:
        registry.verify_all()
    message = str(excinfo.value)
    assert f"{count}. " in message
    assert f"{count + 1}. " not in message


@scenario(
    str(FEATURES_DIR / "mock_object.feature"), "configured call returns its value"
)
def test_configured_call_returns_value() -> None:
    """Matched calls answer; unmatched loose calls get the default."""
    pass


@scenario(str(FEATURES_DIR / "mock_object.feature"), "most recent setup wins")
def test_most_recent_setup_wins() -> None:
    """Later expectations shadow earlier ones."""
    pass


@scenario(str(FEATURES_DIR / "mock_object.feature"), "returning nothing")
def test_returning_nothing() -> None:
    """returns(None) round-trips."""
    pass


@scenario(str(FEATURES_DIR / "mock_object.feature"), "strict mock without setup")
def test_strict_mock_without_setup() -> None:
    """Strict mocks reject everything when unconfigured."""
    pass


@scenario(
    str(FEATURES_DIR / "mock_object.feature"), "stubbed property ignores assignments"
)
def test_stubbed_property_ignores_assignments() -> None:
    """A stubbed getter is frozen against writes."""
    pass


@scenario(
    str(FEATURES_DIR / "mock_object.feature"),
    "backed property remembers assignments",
)
def test_backed_property_remembers_assignments() -> None:
    """A backing store tracks writes."""
    pass


@scenario(str(FEATURES_DIR / "mock_object.feature"), "verify at least once")
def test_verify_at_least_once() -> None:
    """Verification counts matching calls."""
    pass


@scenario(
    str(FEATURES_DIR / "mock_object.feature"),
    "event handlers run in subscription order",
)
def test_event_handlers_in_order() -> None:
    """Raised events fan out in subscription order."""
    pass


@scenario(
    str(FEATURES_DIR / "mock_object.feature"),
    "registry verifies every mock at once",
)
def test_registry_verifies_every_mock() -> None:
    """Registry verification aggregates offenders."""
    pass
