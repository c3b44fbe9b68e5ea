"""Expectations and the fluent builder used to configure them."""

from __future__ import annotations

import dataclasses as dc
import inspect
import typing as t

from .comparators import Matcher, matches_all
from .errors import ConfigurationError
from .times import Times

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from typing_extensions import Self

Callback = t.Callable[..., object]


def call_flexibly(func: t.Callable[..., object], args: t.Sequence[object]) -> object:
    """Call *func* with *args* when it accepts them, otherwise with none.

    This lets callbacks ignore the intercepted arguments entirely, e.g.
    ``lambda: counter.append(1)`` alongside ``lambda value: seen.append(value)``.
    """
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):  # builtins without introspectable signatures
        return func(*args)
    try:
        signature.bind(*args)
    except TypeError:
        try:
            signature.bind()
        except TypeError:
            msg = (
                f"{func!r} accepts neither the {len(args)} call argument(s) "
                "nor zero arguments"
            )
            raise ConfigurationError(msg) from None
        return func()
    return func(*args)


class Effect(t.Protocol):
    """Outcome of a matched call."""

    def apply(self, args: t.Sequence[object]) -> object:
        """Return the call's result or raise."""
        ...


class NoOp:
    """Effect placeholder: the mock's default value is returned."""

    __slots__ = ()

    def apply(self, args: t.Sequence[object]) -> object:
        """Return ``None``."""
        del args

    def __repr__(self) -> str:
        """Return a debug representation."""
        return "NoOp()"


NO_OP: t.Final[NoOp] = NoOp()


@dc.dataclass(frozen=True, slots=True)
class ReturnValue:
    """Return a fixed value."""

    value: object

    def apply(self, args: t.Sequence[object]) -> object:
        """Return the configured value."""
        del args
        return self.value


@dc.dataclass(frozen=True, slots=True)
class ReturnComputed:
    """Return the result of calling ``func`` with the call arguments."""

    func: t.Callable[..., object]

    def apply(self, args: t.Sequence[object]) -> object:
        """Invoke ``func`` and return its result."""
        return call_flexibly(self.func, args)


@dc.dataclass(frozen=True, slots=True)
class Throw:
    """Raise ``error``; exception classes are instantiated without arguments."""

    error: BaseException | type[BaseException]

    def exception(self) -> BaseException:
        """Return the exception instance to raise."""
        if isinstance(self.error, BaseException):
            return self.error
        return self.error()

    def apply(self, args: t.Sequence[object]) -> object:
        """Raise the configured exception."""
        del args
        raise self.exception()


@dc.dataclass(eq=False, slots=True, weakref_slot=True)
class Expectation:
    """A configured response to calls of one member with matching arguments."""

    member: str
    matchers: tuple[Matcher, ...] = ()
    effect: Effect = NO_OP
    before: list[Callback] = dc.field(default_factory=list)
    after: list[Callback] = dc.field(default_factory=list)
    raised_events: list[tuple[str, tuple[object, ...]]] = dc.field(
        default_factory=list
    )
    count: Times | None = None

    @property
    def has_effect(self) -> bool:
        """Return ``True`` once an effect other than :data:`NO_OP` is set."""
        return self.effect is not NO_OP

    def matches(self, args: t.Sequence[object]) -> bool:
        """Return ``True`` if every matcher accepts its positional argument."""
        return matches_all(self.matchers, args)

    def capture(self, args: t.Sequence[object]) -> None:
        """Let matchers write their outputs after this expectation is selected."""
        for matcher, arg in zip(self.matchers, args, strict=True):
            matcher.capture(arg)

    def execute(
        self,
        args: t.Sequence[object],
        *,
        default: t.Callable[[], object],
        raise_event: t.Callable[..., None],
    ) -> object:
        """Run callbacks, the effect and any configured events.

        A :class:`Throw` effect raises only after the post-effect callbacks.
        """
        for func in self.before:
            call_flexibly(func, args)
        error: BaseException | None = None
        result: object = None
        if isinstance(self.effect, Throw):
            error = self.effect.exception()
        elif self.has_effect:
            result = self.effect.apply(args)
        else:
            result = default()
        for event, event_args in self.raised_events:
            raise_event(event, *event_args)
        for func in self.after:
            call_flexibly(func, args)
        if error is not None:
            raise error
        return result

    def __str__(self) -> str:
        """Render as ``member(matcher, ...)``."""
        return f"{self.member}({', '.join(repr(m) for m in self.matchers)})"


class ExpectationBuilder:
    """Fluent interface returned by ``Mock.setup`` and friends."""

    def __init__(
        self,
        expectation: Expectation,
        *,
        events: t.Collection[str] | None = None,
    ) -> None:
        self.expectation = expectation
        self._events = events

    def returns(self, value: object) -> Self:
        """Return *value* from matching calls, replacing any earlier effect."""
        self.expectation.effect = ReturnValue(value)
        return self

    def runs(self, func: t.Callable[..., object]) -> Self:
        """Return ``func(*args)`` (or ``func()``) from matching calls."""
        _require_callable(func, "runs")
        self.expectation.effect = ReturnComputed(func)
        return self

    def throws(self, error: BaseException | type[BaseException]) -> Self:
        """Raise *error* from matching calls."""
        is_class = isinstance(error, type) and issubclass(error, BaseException)
        if not (is_class or isinstance(error, BaseException)):
            msg = f"throws() needs an exception class or instance, got {error!r}"
            raise ConfigurationError(msg)
        self.expectation.effect = Throw(error)
        return self

    def callback(self, func: Callback) -> Self:
        """Run *func* on every match.

        Callbacks added before ``returns``/``runs``/``throws`` run before the
        effect; those added afterwards run after it.
        """
        _require_callable(func, "callback")
        if self.expectation.has_effect:
            self.expectation.after.append(func)
        else:
            self.expectation.before.append(func)
        return self

    def raises_event(self, event: str, *args: object) -> Self:
        """Raise *event* with *args* whenever a call matches."""
        if self._events is not None and event not in self._events:
            msg = f"cannot raise unknown event {event!r}"
            raise ConfigurationError(msg)
        self.expectation.raised_events.append((event, args))
        return self

    def times(self, count: Times | int) -> Self:
        """Require the expectation to be matched *count* times in bulk checks."""
        if isinstance(count, bool) or not isinstance(count, (Times, int)):
            msg = f"times() needs a Times or int, got {count!r}"
            raise ConfigurationError(msg)
        self.expectation.count = (
            count if isinstance(count, Times) else Times.exactly(count)
        )
        return self

    def verifiable(self, count: Times | None = None) -> Self:
        """Include this expectation in bulk verification (default: at least once)."""
        return self.times(count if count is not None else Times.at_least_once())

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"ExpectationBuilder({self.expectation})"


def _require_callable(func: object, method: str) -> None:
    if not callable(func):
        msg = f"{method}() needs a callable, got {func!r}"
        raise ConfigurationError(msg)
