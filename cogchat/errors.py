"""Exception types raised by the knowledge store and its entities."""

from __future__ import annotations


class CogChatError(Exception):
    """Base class for structural violations inside the cognitive core."""


class InvalidValueError(CogChatError, ValueError):
    """A truth value fell outside the closed interval [0.0, 1.0]."""


class InvalidReferenceError(CogChatError, ValueError):
    """A link referenced a missing atom (``None`` or not present in the store)."""


__all__ = ["CogChatError", "InvalidValueError", "InvalidReferenceError"]
