"""LemonDB exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Callers can tell I/O, decode, encode and misuse failures apart.
"""

from __future__ import annotations


class LemonError(Exception):
    """Base exception for all LemonDB failures."""


class LemonConfigError(LemonError):
    """Raised for invalid construction or environment configuration."""


class LemonStorageError(LemonError):
    """Raised when the database file cannot be read or written."""


class LemonStorageNotFoundError(LemonStorageError):
    """Raised when the database file does not exist."""


class LemonDecodeError(LemonError):
    """Raised when stored bytes are not valid for the configured codec."""


class LemonEncodeError(LemonError):
    """Raised when a value cannot be represented by the configured codec."""


class LemonIdError(LemonError):
    """Raised for malformed identifiers passed to the id decoder."""
