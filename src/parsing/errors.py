"""Structured parsing errors for the TXT / HTML ingestion pipeline."""

from __future__ import annotations
from typing import Any


class ParsingError(Exception):
    """Base class for parsing related issues."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class HeaderMissingError(ParsingError):
    """Raised when a TXT table that must have a header line has none."""


class VersionNotFoundError(ParsingError):
    """Raised when the changelog contains no recognizable version line."""
