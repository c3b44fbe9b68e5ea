"""Matcher classes used for argument matching."""

from __future__ import annotations

import dataclasses as dc
import re
import typing as t

from .errors import ConfigurationError

T = t.TypeVar("T")


class Matcher:
    """Predicate over a single argument value.

    Subclasses implement :meth:`matches`. Matching must not have side effects;
    :meth:`capture` runs only once the owning expectation has been selected.
    """

    __slots__ = ()

    def matches(self, value: object) -> bool:
        """Return ``True`` if *value* satisfies this matcher."""
        raise NotImplementedError

    def capture(self, value: object) -> None:
        """Write any output produced by a successful match."""
        del value

    def __call__(self, value: object) -> bool:
        """Alias for :meth:`matches`."""
        return self.matches(value)


@dc.dataclass(frozen=True, slots=True)
class Exact(Matcher):
    """Match values equal to ``value``."""

    value: object

    def matches(self, value: object) -> bool:
        """Return ``True`` when *value* equals the expected value."""
        return bool(value == self.value)

    def __repr__(self) -> str:
        """Return the expected value's representation."""
        return repr(self.value)


class Any(Matcher):
    """Match any value."""

    __slots__ = ()

    def matches(self, value: object) -> bool:
        """Return ``True`` for any input."""
        return True

    def __eq__(self, other: object) -> bool:
        """Compare equal to other :class:`Any` instances."""
        return isinstance(other, Any)

    def __hash__(self) -> int:
        """Hash consistently with :meth:`__eq__`."""
        return hash(Any)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return "Any()"


@dc.dataclass(frozen=True, slots=True)
class IsA(Matcher):
    """Match instances of ``typ``."""

    typ: type

    def matches(self, value: object) -> bool:
        """Return ``True`` when *value* is an instance of ``typ``."""
        return isinstance(value, self.typ)


@dc.dataclass(frozen=True, slots=True)
class Predicate(Matcher):
    """Use a custom ``func`` to determine a match.

    An exception raised by ``func`` is a broken setup rather than a mismatch,
    so it is re-raised as :class:`~obj_mox.errors.ConfigurationError`.
    """

    func: t.Callable[[t.Any], object]

    def matches(self, value: object) -> bool:
        """Return ``True`` if ``func(value)`` is truthy."""
        try:
            return bool(self.func(value))
        except Exception as exc:
            msg = f"predicate {self.func!r} failed for argument {value!r}: {exc}"
            raise ConfigurationError(msg) from exc

    def __repr__(self) -> str:
        """Return a debug representation."""
        name = getattr(self.func, "__qualname__", repr(self.func))
        return f"Predicate({name})"


@dc.dataclass(frozen=True, slots=True)
class Range(Matcher):
    """Match values between ``low`` and ``high``."""

    low: t.Any
    high: t.Any
    inclusive: bool = True

    def matches(self, value: object) -> bool:
        """Return ``True`` when *value* lies within the range."""
        try:
            if self.inclusive:
                return bool(self.low <= value <= self.high)
            return bool(self.low < value < self.high)
        except TypeError:
            return False


class Regex(Matcher):
    """Match if the string form of *value* fully matches ``pattern``."""

    __slots__ = ("_pattern",)

    def __init__(self, pattern: str | re.Pattern[str]) -> None:
        self._pattern = re.compile(pattern)

    @property
    def pattern(self) -> str:
        """Return the source pattern."""
        return self._pattern.pattern

    def matches(self, value: object) -> bool:
        """Return ``True`` if the regex matches all of ``str(value)``."""
        return self._pattern.fullmatch(str(value)) is not None

    def __eq__(self, other: object) -> bool:
        """Compare by pattern and flags."""
        return isinstance(other, Regex) and self._pattern == other._pattern

    def __hash__(self) -> int:
        """Hash consistently with :meth:`__eq__`."""
        return hash(self._pattern)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Regex(pattern={self.pattern!r})"


class IsIn(Matcher):
    """Match values contained in ``values``."""

    __slots__ = ("values",)

    def __init__(self, *values: object) -> None:
        self.values = values

    def matches(self, value: object) -> bool:
        """Return ``True`` when *value* equals one of ``values``."""
        return value in self.values

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"IsIn({', '.join(repr(v) for v in self.values)})"


class IsNotIn(IsIn):
    """Match values absent from ``values``."""

    __slots__ = ()

    def matches(self, value: object) -> bool:
        """Return ``True`` when *value* equals none of ``values``."""
        return value not in self.values

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"IsNotIn({', '.join(repr(v) for v in self.values)})"


@dc.dataclass(slots=True)
class Ref(t.Generic[T]):
    """Mutable slot standing in for an output or by-reference parameter."""

    value: T | None = None


@dc.dataclass(frozen=True, slots=True)
class Out(Matcher):
    """Match any argument and store ``value`` into a :class:`Ref` argument."""

    value: object

    def matches(self, value: object) -> bool:
        """Return ``True`` for any input."""
        return True

    def capture(self, value: object) -> None:
        """Bind the declared output into *value* when it is a :class:`Ref`."""
        if isinstance(value, Ref):
            value.value = self.value


def as_matcher(value: object) -> Matcher:
    """Return *value* unchanged if it is a matcher, else wrap it in :class:`Exact`."""
    if isinstance(value, Matcher):
        return value
    return Exact(value)


def matches_all(matchers: t.Sequence[Matcher], args: t.Sequence[object]) -> bool:
    """Return ``True`` when every matcher accepts the argument at its position."""
    if len(matchers) != len(args):
        return False
    return all(matcher.matches(arg) for matcher, arg in zip(matchers, args, strict=True))


__all__ = [
    "Any",
    "Exact",
    "IsA",
    "IsIn",
    "IsNotIn",
    "Matcher",
    "Out",
    "Predicate",
    "Range",
    "Ref",
    "Regex",
    "as_matcher",
    "matches_all",
]
