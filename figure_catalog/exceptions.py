"""
Errors raised while assembling a figure.
Every error names the offending column, tag or value.
"""

from typing import Any, Iterable, Optional


class FigureError(ValueError):
    """Base class for all figure assembly errors."""


class SchemaMismatch(FigureError):
    """A categorical value has no display label."""

    def __init__(self, column: str, value: Any, label_column: Optional[str] = None):
        self.column = column
        self.value = value
        self.label_column = label_column
        source = f"label column '{label_column}'" if label_column else "the label mapping"
        super().__init__(
            f"Value {value!r} of column '{column}' has no label in {source}"
        )


class ConfigurationError(FigureError):
    """A required column binding is missing or invalid."""

    def __init__(self, message: str, binding: Optional[str] = None, column: Optional[str] = None):
        self.binding = binding
        self.column = column
        super().__init__(message)


class UnknownFigureType(FigureError):
    """A figure type tag that no template handles."""

    def __init__(self, tag: Any):
        self.tag = tag
        super().__init__(
            f"Unknown figure type {tag!r}; single-type tables must be tagged 1, 2 or 3"
        )


class UnsupportedCombination(FigureError):
    """A set of figure type tags that cannot be combined."""

    def __init__(self, tags: Iterable[Any]):
        self.tags = sorted(tags, key=str)
        super().__init__(
            f"Unsupported figure type combination {self.tags}; only [1, 4] can be combined"
        )


class EmptyInput(FigureError):
    """Nothing to plot."""

    def __init__(self, message: str = "Table has no rows or no figure type tags", column: Optional[str] = None):
        self.column = column
        super().__init__(message)
