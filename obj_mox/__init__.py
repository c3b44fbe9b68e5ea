"""Python-native mock objects built around a setup-exercise-verify lifecycle.

Create a :class:`Mock` for a capability (a class, protocol or ABC), configure
how it answers with :meth:`Mock.setup`, hand :attr:`Mock.object` to the code
under test and check the recorded calls with :meth:`Mock.verify`.
"""

from __future__ import annotations

from .capabilities import Event, EventSlot, describe
from .comparators import (
    Any,
    Exact,
    IsA,
    IsIn,
    IsNotIn,
    Matcher,
    Out,
    Predicate,
    Range,
    Ref,
    Regex,
)
from .defaults import (
    CustomDefaultValueProvider,
    DefaultValue,
    DefaultValueProvider,
    EmptyDefaultValueProvider,
    MockDefaultValueProvider,
)
from .errors import (
    ConfigurationError,
    ObjMoxError,
    UnexpectedCallError,
    VerificationError,
)
from .expectations import Expectation, ExpectationBuilder
from .journal import CallJournal, CallRecord
from .mock import Behavior, Mock, ProtectedMock, mock_of
from .registry import MockRegistry
from .times import Times

__all__ = [
    "Any",
    "Behavior",
    "CallJournal",
    "CallRecord",
    "ConfigurationError",
    "CustomDefaultValueProvider",
    "DefaultValue",
    "DefaultValueProvider",
    "EmptyDefaultValueProvider",
    "Event",
    "EventSlot",
    "Exact",
    "Expectation",
    "ExpectationBuilder",
    "IsA",
    "IsIn",
    "IsNotIn",
    "Matcher",
    "Mock",
    "MockDefaultValueProvider",
    "MockRegistry",
    "ObjMoxError",
    "Out",
    "Predicate",
    "ProtectedMock",
    "Range",
    "Ref",
    "Regex",
    "Times",
    "UnexpectedCallError",
    "VerificationError",
    "describe",
    "mock_of",
]
