"""Mock objects: configuration, call interception and verification."""

from __future__ import annotations

import enum
import functools
import logging
import typing as t
from collections import defaultdict

from .capabilities import (
    SETTER_PREFIX,
    Capability,
    EventSlot,
    Member,
    MemberKind,
    describe,
    getter_name,
    setter_name,
)
from .comparators import Any, Ref, as_matcher
from .defaults import (
    DefaultValue,
    DefaultValueProvider,
    is_mockable,
    resolve_provider,
)
from .errors import ConfigurationError, UnexpectedCallError
from .expectations import Expectation, ExpectationBuilder
from .journal import CallJournal
from .times import Times
from .verifiers import CallVerifier, ExpectationVerifier, describe_unexpected_call

logger = logging.getLogger(__name__)

T = t.TypeVar("T")

_MOCK_ATTR: t.Final[str] = "_obj_mox_mock"


class Behavior(enum.StrEnum):
    """How a mock treats calls that no expectation matches."""

    STRICT = "strict"
    LOOSE = "loose"


NestedFactory = t.Callable[[type, Behavior], "Mock[t.Any]"]


class Mock(t.Generic[T]):
    """Stand-in for *capability* that records and answers calls.

    Hand :attr:`object` to the code under test; configure responses with
    :meth:`setup`, :meth:`setup_get` and :meth:`setup_set`; check calls
    afterwards with :meth:`verify` and friends.

    Parameters
    ----------
    capability:
        Class, protocol or ABC whose declared members the mock provides.
    behavior:
        :attr:`Behavior.LOOSE` (the default) answers unmatched calls with a
        default value; :attr:`Behavior.STRICT` raises
        :class:`~obj_mox.errors.UnexpectedCallError`.
    default_value:
        Policy or provider for loose-mode defaults.
    name:
        Label used in error messages. Defaults to the capability name.
    nested_factory:
        Creates mocks for nested return values. It receives the nested
        capability and this mock's behavior. Registries pass their own factory
        so nested mocks are tracked with the rest.
    """

    def __init__(
        self,
        capability: type[T],
        *,
        behavior: Behavior | str = Behavior.LOOSE,
        default_value: DefaultValue | DefaultValueProvider | str = DefaultValue.EMPTY,
        name: str | None = None,
        nested_factory: NestedFactory | None = None,
    ) -> None:
        self.capability: Capability = describe(capability)
        self.behavior = Behavior(behavior)
        self.default_value = default_value
        self.name = name or self.capability.name
        self.journal = CallJournal()
        self._nested_factory = nested_factory
        self._expectations: dict[str, list[Expectation]] = defaultdict(list)
        self._configured: list[Expectation] = []
        self._nested: dict[str, Mock[t.Any]] = {}
        self._wired: set[str] = set()
        self._events: dict[str, EventSlot] = {
            member.name: EventSlot(member.name)
            for member in self.capability.of_kind(MemberKind.EVENT)
        }
        self._object: T = _proxy_type(capability)(self)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def object(self) -> T:
        """Return the proxy to hand to code under test."""
        return self._object

    @property
    def default_value(self) -> DefaultValueProvider:
        """Return the provider used for loose-mode defaults."""
        return self._default_value

    @default_value.setter
    def default_value(
        self, policy: DefaultValue | DefaultValueProvider | str
    ) -> None:
        self._default_value_policy = policy
        self._default_value = resolve_provider(policy)

    @property
    def expectations(self) -> list[Expectation]:
        """Return every expectation in configuration order."""
        return list(self._configured)

    def event_slot(self, name: str) -> EventSlot:
        """Return the subscriber list for event *name*."""
        self.capability.member(name, MemberKind.EVENT)
        return self._events[name]

    def __repr__(self) -> str:
        """Return a debug representation."""
        return (
            f"Mock({self.name}, behavior={self.behavior.value}, "
            f"expectations={len(self._configured)}, calls={len(self.journal)})"
        )

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def setup(
        self, member: str, *matchers: object, **kw_matchers: object
    ) -> ExpectationBuilder:
        """Configure calls to method *member* whose arguments match *matchers*.

        Plain values match by equality. A property name (or dotted property
        path) with no matchers is treated as :meth:`setup_get`.
        """
        owner, leaf = self._walk(member)
        target = owner.capability.member(leaf)
        if target.kind is MemberKind.PROPERTY and not (matchers or kw_matchers):
            return owner.setup_get(leaf)
        if target.kind is not MemberKind.METHOD:
            msg = (
                f"{owner.name}.{leaf} is a {target.kind}; "
                "it cannot be set up as a call"
            )
            raise ConfigurationError(msg)
        bound = target.bind_matchers(matchers, kw_matchers)
        return owner._add(target.name, bound)

    def setup_get(self, prop: str) -> ExpectationBuilder:
        """Configure reads of property *prop* (dotted paths allowed)."""
        owner, leaf = self._walk(prop)
        owner.capability.member(leaf, MemberKind.PROPERTY)
        return owner._add(getter_name(leaf), ())

    def setup_set(self, prop: str, matcher: object = None) -> ExpectationBuilder:
        """Configure writes to property *prop* whose value matches *matcher*.

        Without a matcher any value matches. The intercepted write never
        reaches a backing value unless :meth:`setup_property` installed one.
        """
        owner, leaf = self._walk(prop)
        member = owner.capability.member(leaf, MemberKind.PROPERTY)
        if not member.settable:
            msg = f"{owner.name}.{leaf} is read-only"
            raise ConfigurationError(msg)
        value_matcher = Any() if matcher is None else as_matcher(matcher)
        return owner._add(setter_name(leaf), (value_matcher,))

    def setup_property(self, prop: str, initial: object = None) -> Mock[T]:
        """Give *prop* a backing value that writes update and reads return.

        The store is made of ordinary expectations, so a later
        :meth:`setup_get` or :meth:`setup_set` takes precedence over it.
        """
        member = self.capability.member(prop, MemberKind.PROPERTY)
        store: Ref[object] = Ref(initial)
        self._add(getter_name(prop), ()).runs(lambda: store.value)
        if member.settable:
            self._add(setter_name(prop), (Any(),)).callback(
                lambda value: setattr(store, "value", value)
            )
        return self

    def setup_all_properties(self) -> Mock[T]:
        """Install backing values for every property, seeded with defaults."""
        for member in self.capability.of_kind(MemberKind.PROPERTY):
            self.setup_property(member.name, self._default_for(member))
        return self

    def protected(self) -> ProtectedMock[T]:
        """Return a facade for configuring underscore-prefixed members."""
        return ProtectedMock(self)

    def reset(self) -> None:
        """Forget all expectations, recorded calls and nested mocks.

        Nested mocks are reset before they are dropped, so a registry still
        tracking them has nothing left to verify.
        """
        for nested in self._nested.values():
            nested.reset()
        self._expectations.clear()
        self._configured.clear()
        self._nested.clear()
        self._wired.clear()
        self.journal.clear()

    def _add(
        self, pseudo: str, matchers: tuple[t.Any, ...]
    ) -> ExpectationBuilder:
        expectation = Expectation(pseudo, tuple(matchers))
        self._expectations[pseudo].append(expectation)
        self._configured.append(expectation)
        return ExpectationBuilder(expectation, events=self._events.keys())

    def _walk(self, path: str) -> tuple[Mock[t.Any], str]:
        """Resolve ``a.b.c`` to the nested mock owning ``c``."""
        head, _, rest = path.partition(".")
        if not rest:
            return self, head
        member = self.capability.member(head, MemberKind.PROPERTY)
        if not is_mockable(member.return_type):
            msg = (
                f"{self.name}.{head} has no mockable type "
                f"({member.return_type!r}); cannot configure {path!r}"
            )
            raise ConfigurationError(msg)
        nested = self.nested_mock(head, t.cast("type", member.return_type))
        if head not in self._wired:
            self._add(getter_name(head), ()).returns(nested.object)
            self._wired.add(head)
        return nested._walk(rest)

    def nested_mock(self, member: str, capability: type) -> Mock[t.Any]:
        """Return the mock standing behind *member*'s value, creating it once."""
        nested = self._nested.get(member)
        if nested is None:
            factory = self._nested_factory or self._create_nested
            nested = factory(capability, self.behavior)
            self._nested[member] = nested
            logger.debug(
                "Created nested mock %s for %s.%s", nested.name, self.name, member
            )
        return nested

    def _create_nested(self, capability: type, behavior: Behavior) -> Mock[t.Any]:
        return Mock(
            capability,
            behavior=behavior,
            default_value=self._default_value_policy,
        )

    # ------------------------------------------------------------------
    # Interception
    # ------------------------------------------------------------------
    def invoke(self, member: str, *args: object, **kwargs: object) -> object:
        """Dispatch a call of method *member* as if made through :attr:`object`."""
        target = self.capability.member(member, MemberKind.METHOD)
        return self._dispatch(target, target.name, target.bind_call(args, kwargs))

    def get(self, prop: str) -> object:
        """Dispatch a read of property *prop*."""
        member = self.capability.member(prop, MemberKind.PROPERTY)
        return self._dispatch(member, getter_name(prop), ())

    def set(self, prop: str, value: object) -> None:
        """Dispatch a write of *value* to property *prop*."""
        member = self.capability.member(prop, MemberKind.PROPERTY)
        self._dispatch(member, setter_name(prop), (value,))

    def raise_event(self, event: str, *args: object) -> None:
        """Call every handler subscribed to *event*, in subscription order."""
        member = self.capability.member(event, MemberKind.EVENT)
        if member.sender:
            args = (self._object, *args)
        self._events[event].fire(*args)

    def _find(self, pseudo: str, args: tuple[object, ...]) -> Expectation | None:
        # Most recently configured first, so later setups override defaults.
        for expectation in reversed(self._expectations.get(pseudo, ())):
            if expectation.matches(args):
                return expectation
        return None

    def _dispatch(
        self, member: Member, pseudo: str, args: tuple[object, ...]
    ) -> object:
        expectation = self._find(pseudo, args)
        if expectation is None:
            if self.behavior is Behavior.STRICT:
                configured = [str(exp) for exp in self._configured]
                raise UnexpectedCallError(
                    describe_unexpected_call(self.name, pseudo, args, configured)
                )
            self.journal.record(pseudo, args)
            value = self._default_for(member, pseudo)
            logger.debug(
                "Loose mock %s returned default %r for unmatched %s",
                self.name,
                value,
                pseudo,
            )
            return value
        expectation.capture(args)
        self.journal.record(pseudo, args, expectation)
        return expectation.execute(
            args,
            default=lambda: self._default_for(member, pseudo),
            raise_event=self.raise_event,
        )

    def _default_for(self, member: Member, pseudo: str | None = None) -> object:
        if pseudo is not None and pseudo.startswith(SETTER_PREFIX):
            if member.kind is MemberKind.PROPERTY:
                return None
        return self._default_value.provide(member, self)

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------
    def verify(
        self,
        member: str,
        *matchers: object,
        times: Times | None = None,
        **kw_matchers: object,
    ) -> None:
        """Assert *member* was called with matching arguments *times* times.

        ``times`` defaults to :meth:`Times.at_least_once`.
        """
        target = self.capability.member(member)
        if target.kind is MemberKind.PROPERTY and not (matchers or kw_matchers):
            self.verify_get(member, times=times)
            return
        if target.kind is not MemberKind.METHOD:
            msg = f"{self.name}.{member} is a {target.kind}; it cannot be verified"
            raise ConfigurationError(msg)
        bound = target.bind_matchers(matchers, kw_matchers)
        CallVerifier().verify(self.journal, member, bound, _times(times))

    def verify_get(self, prop: str, *, times: Times | None = None) -> None:
        """Assert property *prop* was read."""
        self.capability.member(prop, MemberKind.PROPERTY)
        CallVerifier().verify(self.journal, getter_name(prop), (), _times(times))

    def verify_set(
        self, prop: str, matcher: object = None, *, times: Times | None = None
    ) -> None:
        """Assert property *prop* was assigned a value matching *matcher*."""
        self.capability.member(prop, MemberKind.PROPERTY)
        value_matcher = Any() if matcher is None else as_matcher(matcher)
        CallVerifier().verify(
            self.journal, setter_name(prop), (value_matcher,), _times(times)
        )

    def verify_all(self) -> None:
        """Assert every expectation given a ``times``/``verifiable`` constraint."""
        ExpectationVerifier().verify(self.verification_scope())

    def verification_scope(self) -> list[Mock[t.Any]]:
        """Return this mock plus nested mocks it created itself."""
        scope: list[Mock[t.Any]] = [self]
        if self._nested_factory is None:
            for nested in self._nested.values():
                scope.extend(nested.verification_scope())
        return scope


class ProtectedMock(t.Generic[T]):
    """Configure and verify underscore-prefixed members of a mock.

    Python does not enforce visibility, so these members are intercepted like
    any other; the facade only checks that the names really are protected.
    """

    def __init__(self, mock: Mock[T]) -> None:
        self._mock = mock

    def _check(self, name: str) -> str:
        if not name.startswith("_"):
            msg = f"{name!r} is public; configure it on the mock directly"
            raise ConfigurationError(msg)
        return name

    def setup(
        self, member: str, *matchers: object, **kw_matchers: object
    ) -> ExpectationBuilder:
        """Configure calls to protected method *member*."""
        return self._mock.setup(self._check(member), *matchers, **kw_matchers)

    def setup_get(self, prop: str) -> ExpectationBuilder:
        """Configure reads of protected property *prop*."""
        return self._mock.setup_get(self._check(prop))

    def setup_set(self, prop: str, matcher: object = None) -> ExpectationBuilder:
        """Configure writes to protected property *prop*."""
        return self._mock.setup_set(self._check(prop), matcher)

    def verify(
        self,
        member: str,
        *matchers: object,
        times: Times | None = None,
        **kw_matchers: object,
    ) -> None:
        """Verify calls to protected method *member*."""
        self._mock.verify(self._check(member), *matchers, times=times, **kw_matchers)


def _times(times: Times | None) -> Times:
    return times if times is not None else Times.at_least_once()


def mock_of(obj: object) -> Mock[t.Any]:
    """Return the :class:`Mock` behind a proxy created by :attr:`Mock.object`."""
    mock = getattr(type(obj), "__obj_mox_proxy__", False) and getattr(
        obj, _MOCK_ATTR, None
    )
    if not isinstance(mock, Mock):
        msg = f"{obj!r} is not a mock object"
        raise TypeError(msg)
    return mock


# ----------------------------------------------------------------------
# Proxy generation
# ----------------------------------------------------------------------
def _owner(proxy: object) -> Mock[t.Any]:
    return object.__getattribute__(proxy, _MOCK_ATTR)


def _method(capability: type, name: str) -> t.Callable[..., object]:
    def method(self: object, *args: object, **kwargs: object) -> object:
        return _owner(self).invoke(name, *args, **kwargs)

    method.__name__ = name
    method.__qualname__ = f"{capability.__name__}.{name}"
    return method


def _property(member: Member) -> property:
    name = member.name

    def fget(self: object) -> object:
        return _owner(self).get(name)

    def fset(self: object, value: object) -> None:
        _owner(self).set(name, value)

    return property(fget, fset if member.settable else None, doc=f"Mocked {name}.")


def _event(name: str) -> property:
    def fget(self: object) -> EventSlot:
        return _owner(self).event_slot(name)

    return property(fget, doc=f"Mocked event {name}.")


def _init(self: object, mock: Mock[t.Any]) -> None:
    object.__setattr__(self, _MOCK_ATTR, mock)


def _repr(self: object) -> str:
    return f"<mock object of {_owner(self).name}>"


@functools.cache
def _proxy_type(capability: type) -> type:
    """Build the proxy class whose members dispatch to the owning mock."""
    table = describe(capability)
    namespace: dict[str, object] = {
        "__slots__": (_MOCK_ATTR,),
        "__module__": capability.__module__,
        "__init__": _init,
        "__repr__": _repr,
        "__obj_mox_proxy__": True,
    }
    for member in table.members.values():
        if member.kind is MemberKind.METHOD:
            namespace[member.name] = _method(capability, member.name)
        elif member.kind is MemberKind.PROPERTY:
            namespace[member.name] = _property(member)
        else:
            namespace[member.name] = _event(member.name)
    metaclass = type(capability)
    return metaclass(f"{capability.__name__}Mock", (capability,), namespace)
