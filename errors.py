"""Exception hierarchy for the description converter and library sync.

Kept free of project imports: every other module imports it.
"""

from __future__ import annotations

from typing import Any


class BookSyncError(Exception):
    """Base exception for all errors raised by this project."""


class ConfigError(BookSyncError):
    """Raised when required configuration or credentials are missing."""


class DescriptionParseError(BookSyncError, ValueError):
    """Raised when a description cannot be converted to styled text."""


class UnbalancedStyleError(DescriptionParseError):
    """A closing style tag was found with no open style tag to close."""


class MismatchedStyleError(DescriptionParseError):
    """A closing style tag does not match the most recently opened one."""


class ApiError(BookSyncError):
    """A remote API request failed or returned a non-success status."""

    def __init__(self, message: str, status: int | None = None, body: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class ResponseFormatError(BookSyncError):
    """A remote API response did not have the expected structure."""
