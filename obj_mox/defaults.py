"""Default values returned by loose mocks for unmatched calls."""

from __future__ import annotations

import collections.abc as cabc
import enum
import types
import typing as t

from .capabilities import describe

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .capabilities import Member
    from .mock import Mock


class DefaultValue(enum.StrEnum):
    """Built-in default-value policies.

    Any :class:`DefaultValueProvider` may be passed where a policy is
    accepted; :class:`CustomDefaultValueProvider` covers the common case.
    """

    EMPTY = "empty"
    MOCK = "mock"


class DefaultValueProvider(t.Protocol):
    """Produce the value a loose mock returns for an unmatched call."""

    def provide(self, member: Member, mock: Mock) -> object:
        """Return the default for *member* of *mock*."""
        ...


_EMPTY_FACTORIES: dict[object, t.Callable[[], object]] = {
    bool: bool,
    int: int,
    float: float,
    complex: complex,
    str: str,
    bytes: bytes,
    bytearray: bytearray,
    list: list,
    dict: dict,
    set: set,
    frozenset: frozenset,
    tuple: tuple,
    cabc.Iterable: tuple,
    cabc.Iterator: lambda: iter(()),
    cabc.Collection: tuple,
    cabc.Sequence: tuple,
    cabc.MutableSequence: list,
    cabc.Set: frozenset,
    cabc.MutableSet: set,
    cabc.Mapping: dict,
    cabc.MutableMapping: dict,
}


def empty_value(annotation: object) -> object:
    """Return the zero value or empty collection for *annotation*.

    Optional and union types, ``None`` and anything without a known empty
    value resolve to ``None``.
    """
    if annotation is None or annotation is type(None):
        return None
    origin = t.get_origin(annotation) or annotation
    if origin is t.Union or origin is types.UnionType:
        return None
    factory = _EMPTY_FACTORIES.get(origin)
    return factory() if factory is not None else None


def is_mockable(annotation: object) -> bool:
    """Return ``True`` when *annotation* is a class a mock can stand in for."""
    if not isinstance(annotation, type) or annotation in _EMPTY_FACTORIES:
        return False
    if annotation.__module__ == "builtins" or issubclass(annotation, enum.Enum):
        return False
    return bool(describe(annotation).members)


class EmptyDefaultValueProvider:
    """Return zero values, empty collections or ``None``."""

    def provide(self, member: Member, mock: Mock) -> object:
        """Return the empty value for the member's declared return type."""
        del mock
        return empty_value(member.return_type)


class MockDefaultValueProvider(EmptyDefaultValueProvider):
    """Return nested mocks for mockable return types, empty values otherwise."""

    def provide(self, member: Member, mock: Mock) -> object:
        """Return a nested mock's object when the return type is mockable."""
        if is_mockable(member.return_type):
            nested = mock.nested_mock(member.name, t.cast("type", member.return_type))
            return nested.object
        return super().provide(member, mock)


class CustomDefaultValueProvider(EmptyDefaultValueProvider):
    """Return values from per-type factories, falling back to empty values."""

    def __init__(
        self,
        factories: t.Mapping[object, t.Callable[[], object]],
        *,
        fallback: DefaultValueProvider | None = None,
    ) -> None:
        self._factories = dict(factories)
        self._fallback = fallback

    def provide(self, member: Member, mock: Mock) -> object:
        """Return the registered factory's value for the return type."""
        factory = self._factories.get(member.return_type)
        if factory is not None:
            return factory()
        if self._fallback is not None:
            return self._fallback.provide(member, mock)
        return super().provide(member, mock)


def resolve_provider(
    policy: DefaultValue | DefaultValueProvider | str,
) -> DefaultValueProvider:
    """Return the provider implementing *policy*."""
    if not isinstance(policy, str):
        return policy
    try:
        value = DefaultValue(policy)
    except ValueError:
        choices = ", ".join(repr(v.value) for v in DefaultValue)
        msg = f"unknown default value policy {policy!r}; expected one of {choices}"
        raise ValueError(msg) from None
    if value is DefaultValue.MOCK:
        return MockDefaultValueProvider()
    return EmptyDefaultValueProvider()


__all__ = [
    "CustomDefaultValueProvider",
    "DefaultValue",
    "DefaultValueProvider",
    "EmptyDefaultValueProvider",
    "MockDefaultValueProvider",
    "empty_value",
    "is_mockable",
    "resolve_provider",
]
