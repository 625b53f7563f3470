"""Markup helpers shared by the fragment builder: cell text, attributes, row striping."""

from typing import Any, Optional

from markupsafe import Markup, escape


def cell_text(value: Any) -> str:
    """Render one cell value as HTML text.

    None becomes an empty cell, Markup passes through untouched, lists and
    tuples are comma-joined, everything else is stringified and escaped.
    """
    if value is None:
        return ""
    if isinstance(value, Markup):
        return str(value)
    if isinstance(value, (list, tuple)):
        return ", ".join(cell_text(v) for v in value)
    return str(escape(value))


def class_attr(css_class: Optional[str]) -> str:
    """Return ` class="..."` for a non-empty class name, '' otherwise.

    Class names are inserted unescaped; callers supply attribute-safe values.
    """
    if not css_class:
        return ""
    return f' class="{css_class}"'


class RowStyleCycle:
    """Even/odd row class alternation for one fragment.

    The first row takes the odd role. A role with no class name yields None,
    so rows are left without a class attribute.
    """

    def __init__(self, even_class: Optional[str] = None, odd_class: Optional[str] = None):
        self.even_class = even_class or None
        self.odd_class = odd_class or None
        self.position = 0

    def peek(self) -> Optional[str]:
        """Class for the next row without advancing."""
        return self.odd_class if self.position % 2 == 0 else self.even_class

    def advance(self) -> Optional[str]:
        """Class for the next row; flips the role."""
        css = self.peek()
        self.position += 1
        return css
