"""Verification helpers for :class:`~obj_mox.mock.Mock`."""

from __future__ import annotations

import typing as t
from textwrap import indent

from .errors import VerificationError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .comparators import Matcher
    from .journal import CallJournal, CallRecord
    from .mock import Mock
    from .times import Times


def _format_matchers(matchers: t.Sequence[Matcher]) -> str:
    return ", ".join(repr(matcher) for matcher in matchers)


def _format_call(name: str, args_repr: str) -> str:
    return f"{name}({args_repr})"


def _numbered(entries: t.Sequence[str], *, start: int = 1) -> str:
    if not entries:
        return "(none)"
    lines: list[str] = []
    for index, entry in enumerate(entries, start=start):
        entry_lines = entry.splitlines() or [""]
        lines.append(f"{index}. {entry_lines[0]}")
        lines.extend(f"   {extra}" for extra in entry_lines[1:])
    return "\n".join(lines)


def _format_sections(title: str, sections: list[tuple[str, str]]) -> str:
    parts = [title]
    for label, body in sections:
        if not body:
            continue
        parts.append("")
        parts.append(f"{label}:")
        parts.append(indent(body, "  "))
    return "\n".join(parts)


def _describe_records(records: t.Sequence[CallRecord]) -> str:
    return _numbered([str(record) for record in records])


def describe_unexpected_call(
    mock_name: str, member: str, args: t.Sequence[object], configured: t.Sequence[str]
) -> str:
    """Return the message for a strict mock's unmatched call."""
    actual = _format_call(member, ", ".join(repr(arg) for arg in args))
    return _format_sections(
        f"Unexpected call on strict mock {mock_name}.",
        [
            ("Actual call", actual),
            ("Configured expectations", _numbered(list(configured))),
        ],
    )


class CallVerifier:
    """Check how often a member was called with matching arguments."""

    def verify(
        self,
        journal: CallJournal,
        member: str,
        matchers: t.Sequence[Matcher],
        times: Times,
    ) -> None:
        """Raise :class:`VerificationError` when *times* is not satisfied.

        The journal is only read, so verification can be repeated freely.
        """
        actual = journal.count_matching(member, matchers)
        if times.validate(actual):
            return
        msg = _format_sections(
            "Expected invocation count not met.",
            [
                ("Expected", f"{_format_call(member, _format_matchers(matchers))}"),
                ("Expected calls", str(times)),
                ("Observed calls", str(actual)),
                ("Recorded calls", _describe_records(journal.calls_to(member))),
            ],
        )
        raise VerificationError(msg)


class ExpectationVerifier:
    """Check the call-count constraints attached to expectations."""

    def failures(self, mock: Mock) -> list[str]:
        """Return a description of every unmet constraint on *mock*."""
        offenders: list[str] = []
        for expectation in mock.expectations:
            if expectation.count is None:
                continue
            actual = mock.journal.count_for(expectation)
            if expectation.count.validate(actual):
                continue
            offenders.append(
                f"{mock.name}.{expectation}\n"
                f"expected {expectation.count}, observed {actual}"
            )
        return offenders

    def verify(self, mocks: t.Iterable[Mock]) -> None:
        """Raise a single :class:`VerificationError` listing every offender."""
        offenders: list[str] = []
        for mock in mocks:
            offenders.extend(self.failures(mock))
        if not offenders:
            return
        msg = _format_sections(
            "Unfulfilled expectations.",
            [("Offenders", _numbered(offenders))],
        )
        raise VerificationError(msg)
