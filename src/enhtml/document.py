"""
Document assembler: pre-built fragments -> one complete HTML page.

The page skeleton lives in templates/document.html.j2. This module decides
what goes into it: the stylesheet (inline or linked, never both), the
jQuery and DataTables includes, the activation block for dynamic tables,
and the body. The body is post-processed by wrap_table_headers() so that
DataTables sees a <thead>/<tbody> split.
"""

import re
from pathlib import Path
from typing import List, Optional

from jinja2 import Environment, FileSystemLoader
from markupsafe import Markup
from pydantic import BaseModel, Field

from ._util import debug as _debug_fn
from .errors import MalformedMarkupError, StylesheetConflictError

DEFAULT_JQUERY_URI = "https://ajax.aspnetcdn.com/ajax/jQuery/jquery-1.8.2.min.js"
DEFAULT_DATATABLES_URI = (
    "https://ajax.aspnetcdn.com/ajax/jquery.dataTables/1.9.3/jquery.dataTables.min.js"
)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def _debug(msg: str) -> None:
    _debug_fn("document", msg)


class DocumentSpec(BaseModel):
    """Everything that goes into one document."""

    fragments: List[str] = Field(default_factory=list)
    title: str = "Report"
    stylesheet: Optional[str] = None  # inline CSS text
    stylesheet_uri: Optional[str] = None
    pre_content: str = ""
    post_content: str = ""
    jquery_uri: str = DEFAULT_JQUERY_URI
    datatables_uri: str = DEFAULT_DATATABLES_URI
    dynamic_tables: List[str] = Field(default_factory=list)  # table ids to activate

    def activation_ids(self) -> List[str]:
        """Dynamic table ids in first-seen order, without duplicates or blanks."""
        seen: List[str] = []
        for table_id in self.dynamic_tables:
            if table_id and table_id not in seen:
                seen.append(table_id)
        return seen


# ---------------------------------------------------------------------------
# Header post-process
# ---------------------------------------------------------------------------

_TABLE_TAG = re.compile(r"<table\b[^>]*>|</table\s*>", re.IGNORECASE)
_THEAD_START = re.compile(r"\s*<thead\b", re.IGNORECASE)
_HEADER_START = re.compile(r"(\s*)(<tr\b[^>]*>\s*<th\b)", re.IGNORECASE)
_ROW_END = re.compile(r"</tr\s*>", re.IGNORECASE)
_NESTED = re.compile(r"<tr\b|<table\b|</table\s*>", re.IGNORECASE)


def wrap_table_headers(markup: str) -> str:
    """Move each table's leading header row into <thead> and the rest into <tbody>.

    Only tables whose first row starts with a <th> cell are rewritten; list
    layouts, empty shells and tables that already have a <thead> are left
    alone, so running this twice changes nothing. Raises MalformedMarkupError
    for unbalanced <table> tags or a header row that never closes.
    """
    out: List[str] = []
    pos = 0
    open_tables: List[bool] = []

    for m in _TABLE_TAG.finditer(markup):
        out.append(markup[pos:m.start()])
        tag = m.group(0)
        pos = m.end()

        if tag.startswith("</"):
            if not open_tables:
                raise MalformedMarkupError(f"</table> without matching <table> at offset {m.start()}")
            out.append("</tbody>" + tag if open_tables.pop() else tag)
            continue

        out.append(tag)
        header = None if _THEAD_START.match(markup, pos) else _HEADER_START.match(markup, pos)
        if header is None:
            open_tables.append(False)
            continue

        row_end = _ROW_END.search(markup, header.end())
        if row_end is None or _NESTED.search(markup, header.end(), row_end.start()):
            raise MalformedMarkupError(f"unterminated header row in table at offset {m.start()}")
        row = markup[header.start(2):row_end.end()]
        out.append(f"{header.group(1)}<thead>{row}</thead><tbody>")
        open_tables.append(True)
        pos = row_end.end()

    if open_tables:
        raise MalformedMarkupError(f"{len(open_tables)} <table> element(s) never closed")
    out.append(markup[pos:])
    return "".join(out)


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------

def make_environment() -> Environment:
    """Jinja2 environment over the package templates."""
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=True,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def assemble_body(spec: DocumentSpec) -> str:
    """Pre-content, fragments and post-content joined in order, headers wrapped."""
    parts = [spec.pre_content, *spec.fragments, spec.post_content]
    return wrap_table_headers("\n".join(p for p in parts if p))


def assemble_document(spec: DocumentSpec, env: Optional[Environment] = None) -> str:
    """Render the complete HTML document for spec."""
    if spec.stylesheet is not None and spec.stylesheet_uri is not None:
        raise StylesheetConflictError()

    if env is None:
        env = make_environment()
    elif env.loader is None:
        env = env.overlay(loader=FileSystemLoader(str(TEMPLATES_DIR)))

    body = assemble_body(spec)
    dynamic_tables = spec.activation_ids()
    _debug(f"{len(spec.fragments)} fragment(s), {len(dynamic_tables)} dynamic table(s)")

    template = env.get_template("document.html.j2")
    return template.render(
        title=spec.title,
        stylesheet=None if spec.stylesheet is None else Markup(spec.stylesheet),
        stylesheet_uri=spec.stylesheet_uri,
        jquery_uri=spec.jquery_uri,
        datatables_uri=spec.datatables_uri,
        dynamic_tables=dynamic_tables,
        body=Markup(body),
    )
