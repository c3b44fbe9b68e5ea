"""Pytest plugin providing the ``mock_registry`` fixture."""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as t

import pytest

from .defaults import DefaultValue
from .mock import Behavior
from .registry import MockRegistry

logger = logging.getLogger(__name__)


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line and ini options for the plugin."""
    group = parser.getgroup("obj_mox")
    group.addoption(
        "--obj-mox-behavior",
        action="store",
        dest="obj_mox_behavior",
        default=None,
        choices=[b.value for b in Behavior],
        help="Default behavior of mocks created by the mock_registry fixture.",
    )
    group.addoption(
        "--obj-mox-verify-on-teardown",
        action="store_true",
        dest="obj_mox_verify",
        default=None,
        help=(
            "Call verify_all() on the mock_registry fixture during teardown. "
            "Overrides the pytest.ini setting."
        ),
    )
    group.addoption(
        "--no-obj-mox-verify-on-teardown",
        action="store_false",
        dest="obj_mox_verify",
        default=None,
        help="Skip teardown verification. Overrides the pytest.ini setting.",
    )
    parser.addini(
        "obj_mox_behavior",
        "Default behavior of mocks created by mock_registry (loose or strict).",
        default=Behavior.LOOSE.value,
    )
    parser.addini(
        "obj_mox_default_value",
        "Default-value policy for loose mocks (empty or mock).",
        default=DefaultValue.EMPTY.value,
    )
    parser.addini(
        "obj_mox_verify_on_teardown",
        "Call verify_all() on the mock_registry fixture during teardown.",
        type="bool",
        default=True,
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register plugin-specific markers."""
    config.addinivalue_line(
        "markers",
        (
            "obj_mox(behavior=None, default_value=None, verify=None): override "
            "mock_registry settings for a single test."
        ),
    )


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[t.Any]
) -> t.Generator[None, None, None]:
    """Attach each phase's report to the item so teardown can inspect it."""
    del call
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)


@dc.dataclass(frozen=True, slots=True)
class RegistrySettings:
    """Resolved configuration for one ``mock_registry`` fixture."""

    behavior: Behavior
    default_value: DefaultValue
    verify: bool


def _marker_kwargs(request: pytest.FixtureRequest) -> dict[str, t.Any]:
    marker = request.node.get_closest_marker("obj_mox")
    if marker is None:
        return {}
    unknown = set(marker.kwargs) - {"behavior", "default_value", "verify"}
    if unknown:
        msg = f"obj_mox marker got unexpected arguments: {sorted(unknown)}"
        raise pytest.UsageError(msg)
    return dict(marker.kwargs)


def _parse(
    enum_type: type[Behavior | DefaultValue], value: object, source: str
) -> t.Any:
    try:
        return enum_type(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(member.value for member in enum_type)
        msg = f"invalid {source} value {value!r}; expected one of: {choices}"
        raise pytest.UsageError(msg) from None


_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


def _parse_bool(value: object, source: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    msg = f"invalid {source} value {value!r}; expected a boolean"
    raise pytest.UsageError(msg)


def resolve_settings(request: pytest.FixtureRequest) -> RegistrySettings:
    """Resolve fixture settings; priority is marker > CLI option > ini."""
    config = request.config
    marker = _marker_kwargs(request)

    behavior = marker.get("behavior")
    if behavior is None:
        behavior = config.getoption("obj_mox_behavior")
    if behavior is None:
        behavior = config.getini("obj_mox_behavior")

    default_value = marker.get("default_value")
    if default_value is None:
        default_value = config.getini("obj_mox_default_value")

    verify = marker.get("verify")
    if verify is None:
        verify = config.getoption("obj_mox_verify")
    if verify is None:
        verify = config.getini("obj_mox_verify_on_teardown")

    return RegistrySettings(
        behavior=_parse(Behavior, behavior, "obj_mox_behavior"),
        default_value=_parse(DefaultValue, default_value, "obj_mox_default_value"),
        verify=_parse_bool(verify, "obj_mox_verify_on_teardown"),
    )


@pytest.fixture
def mock_registry(
    request: pytest.FixtureRequest,
) -> t.Generator[MockRegistry, None, None]:
    """Provide a :class:`MockRegistry` verified at teardown."""
    settings = resolve_settings(request)
    registry = MockRegistry(
        settings.behavior,
        default_value=settings.default_value,
        verify_on_exit=False,
    )
    yield registry
    if settings.verify:
        _teardown_verify(request.node, registry)


def _teardown_verify(item: pytest.Item, registry: MockRegistry) -> None:
    """Run bulk verification, failing the test only if its body passed."""
    try:
        registry.verify_all()
    except AssertionError as err:
        if _call_stage_failed(item):
            logger.warning("obj_mox verification also failed: %s", err)
            return
        logger.exception("Error during obj_mox verification")
        pytest.fail(f"{type(err).__name__}: {err}")


def _call_stage_failed(item: pytest.Item) -> bool:
    """Return ``True`` when the test body has already failed."""
    rep_call = getattr(item, "rep_call", None)
    return bool(rep_call and rep_call.failed)
