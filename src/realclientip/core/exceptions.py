"""Exceptions raised by the client IP strategies.

Only *configuration* problems raise.  Deriving an IP from a request
never raises: a request that carries no usable address yields ``None``.
"""

from __future__ import annotations


class RealClientIPError(Exception):
    """Base class for all errors raised by this package."""


class StrategyConfigError(RealClientIPError, ValueError):
    """Raised when a strategy or trusted range is constructed with bad input."""


class InvalidAddressError(RealClientIPError, ValueError):
    """Raised when a string cannot be parsed as an IP address."""

    def __init__(self, message: str, *, value: str = "") -> None:
        super().__init__(message)
        self.value = value
