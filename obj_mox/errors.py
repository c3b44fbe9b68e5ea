"""Exception hierarchy for :mod:`obj_mox`."""

from __future__ import annotations


class ObjMoxError(Exception):
    """Base class for errors raised by obj-mox."""


class ConfigurationError(ObjMoxError, ValueError):
    """Raised when a mock is set up with an invalid member or matchers."""


class UnexpectedCallError(ObjMoxError, AssertionError):
    """Raised when a strict mock receives a call no expectation matches."""


class VerificationError(ObjMoxError, AssertionError):
    """Raised when recorded calls do not satisfy a count constraint."""


__all__ = [
    "ConfigurationError",
    "ObjMoxError",
    "UnexpectedCallError",
    "VerificationError",
]
