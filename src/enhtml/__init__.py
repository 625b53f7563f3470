"""Render flat inventory records as styled, sortable HTML tables and reports."""

from .columns import ComputedColumn, NamedColumn
from .document import DocumentSpec, assemble_document, wrap_table_headers
from .errors import (
    ConfigurationError,
    EnhtmlError,
    FragmentClosedError,
    InvalidColumnError,
    MalformedMarkupError,
    StylesheetConflictError,
)
from .fragment import FragmentBuilder, Layout, render_fragment

__all__ = [
    "ComputedColumn",
    "ConfigurationError",
    "DocumentSpec",
    "EnhtmlError",
    "FragmentBuilder",
    "FragmentClosedError",
    "InvalidColumnError",
    "Layout",
    "MalformedMarkupError",
    "NamedColumn",
    "StylesheetConflictError",
    "assemble_document",
    "render_fragment",
    "wrap_table_headers",
]
