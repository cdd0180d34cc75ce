"""Utility functions for schema-diagram."""

from schema_diagram.utils.helpers import (
    line_starts,
    pos_to_line_col,
    qualify,
    resolve_reference,
    simple_name,
    split_qualified_name,
    unique_name,
)

__all__ = [
    "line_starts",
    "pos_to_line_col",
    "qualify",
    "resolve_reference",
    "simple_name",
    "split_qualified_name",
    "unique_name",
]
