"""Error types raised by the orrery core."""
from __future__ import annotations

from typing import Any


class OrreryError(Exception):
    """Base class for every error raised by the package."""


class ConfigurationError(OrreryError, ValueError):
    """A value was rejected when it was assigned.

    ``field`` names the invariant that failed and ``value`` is the offending
    input, so a UI can render a diagnostic without parsing the message.
    """

    def __init__(self, field: str, value: Any, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"{field}={value!r}: {reason}")


class InvalidElementsError(ConfigurationError):
    """Orbital elements outside ``a > 0`` and ``0 <= e < 1``."""


class InvalidMassError(ConfigurationError):
    """Central or orbiting body mass that is not strictly positive."""


class MissingCentralBodyError(ConfigurationError):
    """The solver was called without a usable gravitational parameter."""


class ScaleDomainError(OrreryError, ValueError):
    """Input outside the domain of a scale mapping."""


__all__ = [
    "ConfigurationError",
    "InvalidElementsError",
    "InvalidMassError",
    "MissingCentralBodyError",
    "OrreryError",
    "ScaleDomainError",
]
