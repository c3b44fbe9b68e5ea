"""Unit tests for the call journal."""

from __future__ import annotations

import gc

from obj_mox.comparators import Any, Exact
from obj_mox.expectations import Expectation
from obj_mox.journal import CallJournal


def test_records_are_ordered_with_monotonic_indexes() -> None:
    """Each record receives the next sequence number."""
    journal = CallJournal()
    first = journal.record("do_something", ["ping"])
    second = journal.record("add", (2,))

    assert [entry.index for entry in journal] == [0, 1]
    assert first.args == ("ping",)
    assert second.member == "add"
    assert len(journal) == 2


def test_calls_to_filters_by_member() -> None:
    """calls_to() returns only the named member's calls, in order."""
    journal = CallJournal()
    journal.record("a", (1,))
    journal.record("b", (2,))
    journal.record("a", (3,))

    assert [entry.args for entry in journal.calls_to("a")] == [(1,), (3,)]
    assert journal.calls_to("missing") == []


def test_count_matching_applies_matchers() -> None:
    """Only calls whose arguments satisfy every matcher are counted."""
    journal = CallJournal()
    journal.record("do_something", ("ping",))
    journal.record("do_something", ("pong",))
    journal.record("do_something", ("ping",))

    assert journal.count_matching("do_something", (Exact("ping"),)) == 2
    assert journal.count_matching("do_something", (Any(),)) == 3
    assert journal.count_matching("do_something", ()) == 0


def test_records_reference_matched_expectation() -> None:
    """Matched calls point at their expectation; unmatched ones do not."""
    journal = CallJournal()
    expectation = Expectation("get_count")
    matched = journal.record("get_count", (), expectation)
    unmatched = journal.record("get_count", ())

    assert matched.expectation is expectation
    assert matched.matched
    assert unmatched.expectation is None
    assert not unmatched.matched
    assert journal.count_for(expectation) == 1


def test_expectation_reference_is_weak() -> None:
    """The journal does not keep discarded expectations alive."""
    journal = CallJournal()
    expectation = Expectation("get_count")
    entry = journal.record("get_count", (), expectation)
    del expectation
    gc.collect()

    assert entry.expectation is None
    assert entry.matched


def test_clear_keeps_sequence_monotonic() -> None:
    """Clearing forgets calls without reusing sequence numbers."""
    journal = CallJournal()
    journal.record("a", ())
    journal.clear()
    entry = journal.record("a", ())

    assert len(journal) == 1
    assert entry.index == 1


def test_record_renders_as_call() -> None:
    """str() of a record reads like the intercepted call."""
    journal = CallJournal()
    entry = journal.record("greet", ("bob", "hi"))
    assert str(entry) == "greet('bob', 'hi')"
