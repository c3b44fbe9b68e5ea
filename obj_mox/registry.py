"""Registries that create mocks with shared defaults and verify them together."""

from __future__ import annotations

import logging
import typing as t

from .defaults import DefaultValue, DefaultValueProvider
from .mock import Behavior, Mock
from .verifiers import ExpectationVerifier

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    import types

logger = logging.getLogger(__name__)

T = t.TypeVar("T")


class MockRegistry:
    """Factory for mocks sharing a behavior and default-value policy."""

    def __init__(
        self,
        behavior: Behavior | str = Behavior.LOOSE,
        *,
        default_value: DefaultValue | DefaultValueProvider | str = DefaultValue.EMPTY,
        verify_on_exit: bool = True,
    ) -> None:
        """Create an empty registry.

        Parameters
        ----------
        behavior:
            Behavior applied to mocks unless :meth:`create` overrides it.
        default_value:
            Default-value policy or provider shared by every mock.
        verify_on_exit:
            When ``True`` (the default), leaving a ``with`` block without an
            exception calls :meth:`verify_all`.
        """
        self.behavior = Behavior(behavior)
        self.default_value = default_value
        self._verify_on_exit = verify_on_exit
        self._mocks: list[Mock[t.Any]] = []

    @property
    def mocks(self) -> list[Mock[t.Any]]:
        """Return every mock created so far, nested mocks included."""
        return list(self._mocks)

    def __len__(self) -> int:
        """Return the number of tracked mocks."""
        return len(self._mocks)

    def __iter__(self) -> t.Iterator[Mock[t.Any]]:
        """Iterate over tracked mocks in creation order."""
        return iter(tuple(self._mocks))

    def create(
        self,
        capability: type[T],
        behavior: Behavior | str | None = None,
        *,
        name: str | None = None,
    ) -> Mock[T]:
        """Create and track a mock of *capability*."""
        effective = self.behavior if behavior is None else Behavior(behavior)
        mock = Mock(
            capability,
            behavior=effective,
            default_value=self.default_value,
            name=name,
            nested_factory=self._create_nested,
        )
        self._mocks.append(mock)
        logger.debug("Registry created %s mock %s", effective.value, mock.name)
        return mock

    def _create_nested(self, capability: type, behavior: Behavior) -> Mock[t.Any]:
        return self.create(capability, behavior)

    def verify_all(self) -> None:
        """Check expectation constraints on every tracked mock at once."""
        ExpectationVerifier().verify(self._mocks)

    def __enter__(self) -> MockRegistry:
        """Return the registry for use in a ``with`` block."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        """Verify on a clean exit when ``verify_on_exit`` is set."""
        if exc_type is None and self._verify_on_exit:
            self.verify_all()
