"""
Error types raised by keyword_graph. Every fatal condition aborts the whole run.
"""

from __future__ import annotations


class KeywordGraphError(Exception):
    """Base class for all keyword_graph failures."""


class ConfigurationError(KeywordGraphError, ValueError):
    """Required configuration is missing or invalid."""


class ProviderError(KeywordGraphError, RuntimeError):
    """An embedding provider failed to return a vector for a label."""

    def __init__(self, message: str, label: str | None = None):
        super().__init__(message)
        self.label = label


class DimensionMismatchError(KeywordGraphError, ValueError):
    """Vectors in one table do not share a common length."""

    def __init__(self, label: str, expected: int, actual: int):
        super().__init__(
            f"Vector for label {label!r} has length {actual}, expected {expected} "
            "(all vectors in a table must share one dimension)."
        )
        self.label = label
        self.expected = expected
        self.actual = actual


class DimensionError(KeywordGraphError, ValueError):
    """Fewer source dimensions than requested output dimensions."""

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Cannot project onto {expected} components: vectors only have {actual} dimension(s)."
        )
        self.expected = expected
        self.actual = actual
