"""Behavioural test of the obj_mox pytest plug-in, expressed with pytest-bdd."""

from __future__ import annotations

import textwrap
import typing as t
from pathlib import Path

from pytest_bdd import given, scenario, then, when

if t.TYPE_CHECKING:  # pragma: no cover - used for type checking only
    from _pytest.pytester import Pytester, RunResult

FEATURES_DIR = Path(__file__).resolve().parent.parent / "features"


@scenario(str(FEATURES_DIR / "pytest_plugin.feature"), "mock_registry fixture basic usage")
def test_mock_registry_plugin() -> None:
    """Bind scenario steps for the pytest plugin."""
    pass


@scenario(
    str(FEATURES_DIR / "pytest_plugin.feature"),
    "unmet expectations fail at teardown",
)
def test_mock_registry_teardown_failure() -> None:
    """Bind the teardown failure scenario."""
    pass


TEST_CODE = textwrap.dedent(
    """
    from obj_mox.unittests._capabilities import Consumer, IFoo

    pytest_plugins = ("obj_mox.pytest_plugin",)

    def test_example(mock_registry):
        foo = mock_registry.create(IFoo)
        foo.setup("do_something", "ping").returns(True).verifiable()
        foo.setup_get("name").returns("Name")
        Consumer(foo.object).hello()
        foo.verify_set("some_other_property", 123)
    """
)

UNMET_CODE = textwrap.dedent(
    """
    from obj_mox.unittests._capabilities import IFoo

    pytest_plugins = ("obj_mox.pytest_plugin",)

    def test_unmet(mock_registry):
        mock_registry.create(IFoo).setup("get_count").returns(1).verifiable()
    """
)


@given("a temporary test file using the mock_registry fixture", target_fixture="test_file")
def create_test_file(pytester: Pytester) -> Path:
    """Write the example test file."""
    return pytester.makepyfile(TEST_CODE)


@given("a temporary test file leaving an expectation unmet", target_fixture="test_file")
def create_unmet_test_file(pytester: Pytester) -> Path:
    """Write a test that never makes its verifiable call."""
    return pytester.makepyfile(UNMET_CODE)


@when("I run pytest on the file", target_fixture="result")
def run_pytest(pytester: Pytester, test_file: Path) -> RunResult:
    """Run the inner pytest instance."""
    return pytester.runpytest(str(test_file))


@then("the run should pass")
def assert_success(result: RunResult) -> None:
    """Assert that the test passed."""
    result.assert_outcomes(passed=1)


@then("the run should report a teardown error")
def assert_teardown_error(result: RunResult) -> None:
    """Assert that verification failed after the test body passed."""
    result.assert_outcomes(passed=1, errors=1)
    result.stdout.fnmatch_lines(["*Unfulfilled expectations*"])
