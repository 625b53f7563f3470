"""
Fragment builder: one sequence of records -> one HTML fragment string.

A fragment is an optional heading (pre_content), a <div> container, a
<table> in either Table layout (one header row, one row per record) or
List layout (one label/value row per property, per record), and optional
trailing markup (post_content).

FragmentBuilder is a streaming accumulator: records can be fed one at a
time with add(), and the row stripe and "header written" state carry over
between calls. build() and render_fragment() are the one-shot forms and
produce the same bytes.

With wildcard columns every record is resolved against its own keys, so
records of different shapes produce ragged Table-layout rows. That is
intended; nothing here reconciles the shapes.
"""

from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence

from ._util import debug as _debug_fn, make_warning
from .columns import (
    BrokenColumn,
    Column,
    ColumnSpec,
    as_record,
    columns_for_record,
    is_wildcard,
    label_of,
    parse_column,
)
from .errors import FragmentClosedError, InvalidColumnError
from .markup import RowStyleCycle, cell_text, class_attr


def _debug(msg: str) -> None:
    _debug_fn("fragment", msg)


class Layout(str, Enum):
    TABLE = "table"
    LIST = "list"


class FragmentBuilder:
    """Accumulates the markup for one table fragment."""

    def __init__(
        self,
        table_id: str,
        div_id: str,
        *,
        layout: Layout = Layout.TABLE,
        properties: Optional[Iterable[ColumnSpec]] = None,
        even_row_class: Optional[str] = None,
        odd_row_class: Optional[str] = None,
        table_class: Optional[str] = None,
        div_class: Optional[str] = None,
        pre_content: Optional[str] = None,
        post_content: Optional[str] = None,
        hidden_section: bool = False,
    ):
        if not table_id:
            raise ValueError("table_id is required")
        if not div_id:
            raise ValueError("div_id is required")
        self.table_id = table_id
        self.div_id = div_id
        self.layout = Layout(layout)
        self.table_class = table_class
        self.div_class = div_class
        self.pre_content = pre_content
        self.post_content = post_content
        self.hidden_section = hidden_section
        self.warnings: List[dict] = []
        self.records = 0

        self._stripes = RowStyleCycle(even_row_class, odd_row_class)
        self._parts: List[str] = []
        self._opened = False
        self._header_written = False
        self._result: Optional[str] = None

        if isinstance(properties, str):
            properties = [properties]
        elif properties is not None:
            properties = list(properties)
        self._columns: Optional[List[Column]] = (
            None if is_wildcard(properties) else self._parse_columns(properties)
        )

    # ------------------------------------------------------------------
    # Column handling
    # ------------------------------------------------------------------

    def _parse_columns(self, properties: Sequence[ColumnSpec]) -> List[Column]:
        columns: List[Column] = []
        for spec in properties:
            try:
                columns.append(parse_column(spec))
            except InvalidColumnError as exc:
                _debug(f"{self.table_id}: {exc}")
                self.warnings.append(make_warning("fragment", f"{self.table_id}: {exc}"))
                columns.append(BrokenColumn(label=label_of(spec), reason=str(exc)))
        return columns

    @property
    def closed(self) -> bool:
        return self._result is not None

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------

    def open(self) -> "FragmentBuilder":
        """Emit heading, container and table openings. Safe to call more than once."""
        if self._opened:
            return self
        self._opened = True

        if self.pre_content:
            if self.hidden_section:
                self._parts.append(
                    f'<span class="sectionheader"'
                    f" onclick=\"$('#{self.div_id}').toggle(500);\">"
                    f"{self.pre_content}</span>"
                )
            else:
                self._parts.append(self.pre_content)

        style = ' style="display:none;"' if self.hidden_section else ""
        self._parts.append(f'<div id="{self.div_id}"{style}{class_attr(self.div_class)}>')
        self._parts.append(f'<table id="{self.table_id}"{class_attr(self.table_class)}>')

        if self.layout is Layout.TABLE and self._columns is not None:
            self._write_header(self._columns)
        return self

    def _write_header(self, columns: List[Column]) -> None:
        cells = "".join(f"<th>{cell_text(c.label)}</th>" for c in columns)
        self._parts.append(f"<tr>{cells}</tr>")
        self._header_written = True

    @staticmethod
    def _cell(column: Column, record: Any) -> str:
        css = column.css_class(record)
        return f"<td{class_attr(css)}>{cell_text(column.value(record))}</td>"

    def add(self, item: Any) -> "FragmentBuilder":
        """Append the row(s) for one record."""
        if self.closed:
            raise FragmentClosedError(f"fragment {self.table_id!r} is already closed")
        self.open()

        record = as_record(item)
        columns = self._columns if self._columns is not None else columns_for_record(record)
        row_class = class_attr(self._stripes.advance())

        if self.layout is Layout.TABLE:
            if not self._header_written:
                self._write_header(columns)
            cells = "".join(self._cell(c, record) for c in columns)
            self._parts.append(f"<tr{row_class}>{cells}</tr>")
        else:
            for column in columns:
                if isinstance(column, BrokenColumn):
                    continue
                self._parts.append(
                    f"<tr{row_class}><td>{cell_text(column.label)}</td>"
                    f"{self._cell(column, record)}</tr>"
                )
        self.records += 1
        return self

    def extend(self, items: Iterable[Any]) -> "FragmentBuilder":
        for item in items:
            self.add(item)
        return self

    def close(self) -> str:
        """Close table and container and return the fragment. Repeat calls return the same string."""
        if self._result is None:
            self.open()
            self._parts.append("</table>")
            self._parts.append("</div>")
            if self.post_content:
                self._parts.append(self.post_content)
            self._result = "\n".join(self._parts)
            _debug(f"{self.table_id}: {self.records} record(s), layout={self.layout.value}")
        return self._result

    def build(self, items: Iterable[Any]) -> str:
        return self.extend(items).close()


def render_fragment(
    records: Iterable[Any],
    table_id: str,
    div_id: str,
    **options: Any,
) -> str:
    """One-shot form of FragmentBuilder; options are FragmentBuilder's keyword arguments."""
    return FragmentBuilder(table_id, div_id, **options).build(records)
