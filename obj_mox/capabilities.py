"""Dispatch tables describing the members a mock can intercept.

A *capability* is any class, :class:`typing.Protocol` or abstract base class
declaring the members a test double has to provide. :func:`describe` turns it
into a :class:`Capability`: a closed table of methods, properties and events
keyed by member name. Mocks consult this table instead of intercepting
arbitrary attribute access, so undeclared names fail the way they would on a
real implementation.
"""

from __future__ import annotations

import abc
import dataclasses as dc
import enum
import functools
import inspect
import typing as t
from types import MappingProxyType

from .comparators import Matcher, as_matcher
from .errors import ConfigurationError

GETTER_PREFIX: t.Final[str] = "get_"
SETTER_PREFIX: t.Final[str] = "set_"

_IGNORED_BASES: tuple[type, ...] = (object, t.Protocol, t.Generic, abc.ABC)  # type: ignore[arg-type]


def getter_name(prop: str) -> str:
    """Return the pseudo-member name used for reads of *prop*."""
    return f"{GETTER_PREFIX}{prop}"


def setter_name(prop: str) -> str:
    """Return the pseudo-member name used for writes of *prop*."""
    return f"{SETTER_PREFIX}{prop}"


class MemberKind(enum.StrEnum):
    """Kinds of members a capability may declare."""

    METHOD = "method"
    PROPERTY = "property"
    EVENT = "event"


class EventSlot:
    """Ordered list of handlers subscribed to one event."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._handlers: list[t.Callable[..., object]] = []

    @property
    def handlers(self) -> tuple[t.Callable[..., object], ...]:
        """Return the subscribed handlers in subscription order."""
        return tuple(self._handlers)

    def subscribe(self, handler: t.Callable[..., object]) -> None:
        """Append *handler* to the subscriber list."""
        if not callable(handler):
            msg = f"event handler for {self.name!r} must be callable"
            raise TypeError(msg)
        self._handlers.append(handler)

    def unsubscribe(self, handler: t.Callable[..., object]) -> None:
        """Remove the most recent subscription of *handler*, if any."""
        for index in range(len(self._handlers) - 1, -1, -1):
            if self._handlers[index] == handler:
                del self._handlers[index]
                return

    def fire(self, *args: object) -> None:
        """Call every handler with *args*, in subscription order."""
        # Handlers may (un)subscribe while firing; iterate over a snapshot.
        for handler in tuple(self._handlers):
            handler(*args)

    def __len__(self) -> int:
        """Return the number of subscriptions."""
        return len(self._handlers)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"EventSlot({self.name!r}, handlers={len(self._handlers)})"


class Event:
    """Declare an event on a capability class.

    Instances of concrete classes get their own :class:`EventSlot` on first
    access. ``sender=True`` marks the two-argument ``(sender, args)`` handler
    shape: mocks pass their proxy object as the first argument when raising
    such an event.
    """

    def __init__(self, *, sender: bool = False) -> None:
        self.sender = sender
        self.name = ""

    def __set_name__(self, owner: type, name: str) -> None:
        """Remember the attribute name the event was declared under."""
        self.name = name

    @t.overload
    def __get__(self, instance: None, owner: type | None = None) -> Event: ...

    @t.overload
    def __get__(self, instance: object, owner: type | None = None) -> EventSlot: ...

    def __get__(
        self, instance: object | None, owner: type | None = None
    ) -> Event | EventSlot:
        """Return the per-instance slot, creating it on first use."""
        if instance is None:
            return self
        return instance.__dict__.setdefault(self.name, EventSlot(self.name))

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Event(name={self.name!r}, sender={self.sender})"


@dc.dataclass(frozen=True, slots=True)
class Member:
    """One entry of a capability's dispatch table."""

    name: str
    kind: MemberKind
    signature: inspect.Signature | None = None
    return_type: object = None
    settable: bool = False
    sender: bool = False

    @property
    def arity(self) -> int | None:
        """Return the fixed argument count of a method.

        Variadic methods report ``None``. Properties and events are not
        called with arguments and report ``0``.
        """
        if self.kind is not MemberKind.METHOD or self.signature is None:
            return 0
        params = self.signature.parameters.values()
        if any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params):
            return None
        return sum(1 for p in params if p.kind is not inspect.Parameter.VAR_KEYWORD)

    def bind_call(
        self, args: t.Sequence[object], kwargs: t.Mapping[str, object]
    ) -> tuple[object, ...]:
        """Normalise a call to positional order, filling in defaults.

        Raises :class:`TypeError` for calls the declared signature rejects.
        """
        if self.signature is None:
            return tuple(args)
        bound = self.signature.bind(*args, **kwargs)
        bound.apply_defaults()
        return _flatten(self.signature, bound)

    def bind_matchers(
        self, matchers: t.Sequence[object], kw_matchers: t.Mapping[str, object]
    ) -> tuple[Matcher, ...]:
        """Bind setup matchers against the signature, one per parameter."""
        try:
            values = self.bind_call(matchers, kw_matchers)
        except TypeError as exc:
            msg = (
                f"matchers {_describe_args(matchers, kw_matchers)} do not fit "
                f"{self.name}{self.signature}: {exc}"
            )
            raise ConfigurationError(msg) from exc
        return tuple(as_matcher(value) for value in values)


def _flatten(signature: inspect.Signature, bound: inspect.BoundArguments) -> tuple:
    values: list[object] = []
    for param in signature.parameters.values():
        value = bound.arguments[param.name]
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            values.extend(value)
        else:
            values.append(value)
    return tuple(values)


def _describe_args(args: t.Sequence[object], kwargs: t.Mapping[str, object]) -> str:
    parts = [repr(arg) for arg in args]
    parts.extend(f"{key}={value!r}" for key, value in kwargs.items())
    return f"({', '.join(parts)})"


@dc.dataclass(frozen=True, slots=True)
class Capability:
    """Closed set of members declared by a mockable type."""

    cls: type
    members: t.Mapping[str, Member]

    @property
    def name(self) -> str:
        """Return the capability's class name."""
        return self.cls.__name__

    def member(self, name: str, kind: MemberKind | None = None) -> Member:
        """Return the member called *name*, optionally checking its kind."""
        try:
            member = self.members[name]
        except KeyError:
            msg = f"{self.name} declares no member named {name!r}"
            raise ConfigurationError(msg) from None
        if kind is not None and member.kind is not kind:
            msg = f"{self.name}.{name} is a {member.kind}, not a {kind}"
            raise ConfigurationError(msg)
        return member

    def of_kind(self, kind: MemberKind) -> list[Member]:
        """Return members of *kind* in declaration order."""
        return [m for m in self.members.values() if m.kind is kind]


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def _hints(obj: object) -> dict[str, t.Any]:
    """Return resolved type hints, or an empty mapping when they cannot resolve."""
    try:
        return t.get_type_hints(obj)
    except Exception:  # noqa: BLE001 - unresolvable forward references
        return {}


def _is_class_var(annotation: object) -> bool:
    if annotation is t.ClassVar or t.get_origin(annotation) is t.ClassVar:
        return True
    return isinstance(annotation, str) and annotation.startswith(
        ("ClassVar", "t.ClassVar", "typing.ClassVar")
    )


def _method(name: str, func: t.Callable[..., object], *, bound: bool) -> Member:
    signature = inspect.signature(func)
    if bound:
        params = list(signature.parameters.values())[1:]
        signature = signature.replace(parameters=params)
    return_type = _hints(func).get("return")
    return Member(
        name,
        MemberKind.METHOD,
        signature=signature.replace(return_annotation=inspect.Signature.empty),
        return_type=return_type,
    )


def _describe_attribute(name: str, attr: object) -> Member | None:
    if isinstance(attr, Event):
        return Member(name, MemberKind.EVENT, sender=attr.sender)
    if isinstance(attr, property):
        return_type = _hints(attr.fget).get("return") if attr.fget else None
        return Member(
            name,
            MemberKind.PROPERTY,
            return_type=return_type,
            settable=attr.fset is not None,
        )
    if isinstance(attr, staticmethod):
        return _method(name, attr.__func__, bound=False)
    if inspect.isfunction(attr):
        return _method(name, attr, bound=True)
    return None


@functools.cache
def describe(capability: type) -> Capability:
    """Build the dispatch table for *capability*.

    Methods, properties, :class:`Event` declarations and annotated attributes
    are collected along the MRO, with subclasses overriding their bases.
    Annotated attributes become read/write properties; class variables,
    class methods and dunder names are ignored.
    """
    if not isinstance(capability, type):
        msg = f"capability must be a class, got {type(capability).__name__}"
        raise TypeError(msg)
    hints = _hints(capability)
    members: dict[str, Member] = {}
    for klass in reversed(capability.__mro__):
        if klass in _IGNORED_BASES:
            continue
        namespace = vars(klass)
        for name, annotation in inspect.get_annotations(klass).items():
            if _is_dunder(name) or _is_class_var(hints.get(name, annotation)):
                continue
            if isinstance(namespace.get(name), (Event, property)):
                continue
            members[name] = Member(
                name,
                MemberKind.PROPERTY,
                return_type=hints.get(name),
                settable=True,
            )
        for name, attr in namespace.items():
            if _is_dunder(name):
                continue
            member = _describe_attribute(name, attr)
            if member is not None:
                members[name] = member
    _check_pseudo_member_collisions(capability, members)
    return Capability(capability, MappingProxyType(members))


def _check_pseudo_member_collisions(
    capability: type, members: t.Mapping[str, Member]
) -> None:
    for member in members.values():
        if member.kind is not MemberKind.PROPERTY:
            continue
        for pseudo in (getter_name(member.name), setter_name(member.name)):
            if pseudo in members:
                msg = (
                    f"{capability.__name__}.{pseudo} clashes with the accessor "
                    f"of property {member.name!r}"
                )
                raise ConfigurationError(msg)


__all__ = [
    "Capability",
    "Event",
    "EventSlot",
    "Member",
    "MemberKind",
    "describe",
    "getter_name",
    "setter_name",
]
