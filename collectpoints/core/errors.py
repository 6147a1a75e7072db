"""Failure types raised by the collection engine.

Inner components raise these; the public controller operations and the
configuration setters catch them, log them and abort the current call.
"""
from __future__ import annotations


class CollectPointsError(Exception):
    """Base class for every recoverable collection failure."""


class MissingInputError(CollectPointsError, ValueError):
    """A required reference (config, sampling frame, output) is unset."""


class TransformUnresolvedError(CollectPointsError, RuntimeError):
    """A transform chain could not be resolved to world coordinates."""


class UnsupportedSinkTypeError(CollectPointsError, TypeError):
    """The output target is neither a labeled point list nor a point-cloud mesh."""


class InvalidConfigurationError(CollectPointsError, ValueError):
    """The requested configuration would break an invariant."""


class UnrecognizedPersistedValueError(CollectPointsError, ValueError):
    """A persisted enum string did not match any known value."""
