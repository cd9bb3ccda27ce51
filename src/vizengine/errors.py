"""Structured errors raised by the rendering engine."""

from __future__ import annotations

from typing import Any

__all__ = [
    "EngineError",
    "ConfigurationError",
    "UnknownCategoryError",
    "InvalidDataError",
]


class EngineError(Exception):
    """Base class for engine related issues."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigurationError(EngineError, ValueError):
    """Raised at setup time when options or palettes are invalid."""


class UnknownCategoryError(ConfigurationError, KeyError):
    """Raised when a category has no entry in an enumerated mapping."""

    def __str__(self) -> str:  # KeyError would otherwise repr() the message
        return str(self.args[0]) if self.args else ""


class InvalidDataError(EngineError, ValueError):
    """Raised when input data is structurally malformed (e.g. non-square matrix)."""
