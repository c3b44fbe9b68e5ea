"""Append-only journal of calls intercepted by a mock."""

from __future__ import annotations

import dataclasses as dc
import itertools
import typing as t
import weakref

from .comparators import matches_all

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .comparators import Matcher
    from .expectations import Expectation


@dc.dataclass(frozen=True, slots=True)
class CallRecord:
    """A single intercepted invocation."""

    member: str
    args: tuple[object, ...]
    index: int
    expectation_ref: weakref.ref[Expectation] | None = dc.field(
        default=None, repr=False, compare=False
    )

    @property
    def expectation(self) -> Expectation | None:
        """Return the expectation that handled this call, if any."""
        if self.expectation_ref is None:
            return None
        return self.expectation_ref()

    @property
    def matched(self) -> bool:
        """Return ``True`` when an expectation handled the call."""
        return self.expectation_ref is not None

    def __str__(self) -> str:
        """Render the call as ``member(arg, ...)``."""
        return f"{self.member}({', '.join(repr(arg) for arg in self.args)})"


class CallJournal:
    """Ordered log of :class:`CallRecord` entries."""

    def __init__(self) -> None:
        self._records: list[CallRecord] = []
        self._sequence = itertools.count()

    def record(
        self,
        member: str,
        args: t.Sequence[object],
        expectation: Expectation | None = None,
    ) -> CallRecord:
        """Append and return a record for a call to *member*."""
        ref = weakref.ref(expectation) if expectation is not None else None
        entry = CallRecord(member, tuple(args), next(self._sequence), ref)
        self._records.append(entry)
        return entry

    def calls_to(self, member: str) -> list[CallRecord]:
        """Return all records for *member* in call order."""
        return [entry for entry in self._records if entry.member == member]

    def count_matching(self, member: str, matchers: t.Sequence[Matcher]) -> int:
        """Count calls to *member* whose arguments satisfy *matchers*."""
        return sum(
            1 for entry in self.calls_to(member) if matches_all(matchers, entry.args)
        )

    def count_for(self, expectation: Expectation) -> int:
        """Count calls handled by *expectation*."""
        return sum(1 for entry in self._records if entry.expectation is expectation)

    def clear(self) -> None:
        """Forget all recorded calls."""
        self._records.clear()

    def __iter__(self) -> t.Iterator[CallRecord]:
        """Iterate over records in call order."""
        return iter(tuple(self._records))

    def __len__(self) -> int:
        """Return the number of recorded calls."""
        return len(self._records)
