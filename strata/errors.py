"""Exception types raised by Strata."""

from __future__ import annotations


class StrataError(ValueError):
    """Raised when Strata input or configuration is invalid."""


class InvalidConfigError(StrataError):
    """Raised when a config producer returns a value of the wrong shape."""
