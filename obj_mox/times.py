"""Call-count constraints used by verification."""

from __future__ import annotations

import dataclasses as dc


@dc.dataclass(frozen=True, slots=True)
class Times:
    """Inclusive bounds on how often a member may be called.

    ``maximum`` of ``None`` means unbounded. Use the named constructors rather
    than building instances directly.
    """

    minimum: int
    maximum: int | None
    description: str

    def __post_init__(self) -> None:
        """Validate the bounds."""
        if self.minimum < 0:
            msg = "minimum call count must not be negative"
            raise ValueError(msg)
        if self.maximum is not None and self.maximum < self.minimum:
            msg = (
                f"maximum call count {self.maximum} is below "
                f"minimum {self.minimum}"
            )
            raise ValueError(msg)

    @classmethod
    def never(cls) -> Times:
        """Require zero calls."""
        return cls(0, 0, "never")

    @classmethod
    def once(cls) -> Times:
        """Require exactly one call."""
        return cls(1, 1, "exactly once")

    @classmethod
    def at_least_once(cls) -> Times:
        """Require one or more calls."""
        return cls(1, None, "at least once")

    @classmethod
    def at_least(cls, count: int) -> Times:
        """Require ``count`` or more calls."""
        return cls(count, None, f"at least {count} times")

    @classmethod
    def at_most_once(cls) -> Times:
        """Allow zero or one call."""
        return cls(0, 1, "at most once")

    @classmethod
    def at_most(cls, count: int) -> Times:
        """Allow up to ``count`` calls."""
        return cls(0, count, f"at most {count} times")

    @classmethod
    def exactly(cls, count: int) -> Times:
        """Require exactly ``count`` calls."""
        return cls(count, count, f"exactly {count} times")

    @classmethod
    def between(cls, low: int, high: int, *, inclusive: bool = True) -> Times:
        """Require a call count between ``low`` and ``high``."""
        if inclusive:
            return cls(low, high, f"between {low} and {high} times (inclusive)")
        return cls(low + 1, high - 1, f"between {low} and {high} times (exclusive)")

    def validate(self, count: int) -> bool:
        """Return ``True`` when *count* satisfies the constraint."""
        if count < self.minimum:
            return False
        return self.maximum is None or count <= self.maximum

    def __str__(self) -> str:
        """Return the human readable description."""
        return self.description
