"""HTML inventory report renderer.

Turns an InventorySnapshot into one fragment per section and hands them to
the document assembler. Page layout lives in templates/document.html.j2;
this file only decides columns, headings and which tables are dynamic.
"""

import re
from pathlib import Path
from typing import Any, List, Optional

from jinja2 import Environment
from markupsafe import escape

from .._util import debug as _debug_fn
from ..document import TEMPLATES_DIR, DocumentSpec, assemble_document
from ..fragment import FragmentBuilder, Layout
from ..schema import InventorySnapshot, ReportOptions

_MB = 1024 ** 2
_GB = 1024 ** 3

# Thresholds for the "red" cell class
_LOW_DISK_PCT = 10.0
_HIGH_WORKING_SET = 100 * _MB

_EVEN = "even"
_ODD = "odd"
_TABLE_CLASS = "grid"


def _debug(msg: str) -> None:
    _debug_fn("html_report", msg)


# ---------------------------------------------------------------------------
# Cell helpers
# ---------------------------------------------------------------------------

def _number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _scaled(key: str, unit: int):
    def value(record) -> Optional[str]:
        n = _number(record.get(key))
        return None if n is None else f"{n / unit:.2f}"
    return value


def _free_pct(record) -> Optional[float]:
    size = _number(record.get("size"))
    free = _number(record.get("free_space"))
    if not size or free is None:
        return None
    return free / size * 100


def _free_pct_text(record) -> Optional[str]:
    pct = _free_pct(record)
    return None if pct is None else f"{pct:.1f}"


def _low_disk(record) -> Optional[str]:
    pct = _free_pct(record)
    return "red" if pct is not None and pct < _LOW_DISK_PCT else None


def _high_memory(record) -> Optional[str]:
    ws = _number(record.get("working_set"))
    return "red" if ws is not None and ws >= _HIGH_WORKING_SET else None


def _service_alert(record) -> Optional[str]:
    """Auto-start services that are not running."""
    mode = str(record.get("start_mode") or "").lower()
    state = str(record.get("state") or "").lower()
    if mode in ("auto", "automatic") and state and state != "running":
        return "red"
    return None


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------

DISK_COLUMNS = [
    {"label": "Drive", "value": "device_id"},
    {"label": "Size (GB)", "value": _scaled("size", _GB)},
    {"label": "Free (GB)", "value": _scaled("free_space", _GB), "css": _low_disk},
    {"label": "Free (%)", "value": _free_pct_text, "css": _low_disk},
]

PROCESS_COLUMNS = [
    "name",
    "id",
    {"label": "Working set (MB)", "value": _scaled("working_set", _MB), "css": _high_memory},
    {"label": "Virtual size (MB)", "value": _scaled("virtual_size", _MB)},
]

SERVICE_COLUMNS = [
    "name",
    "display_name",
    {"label": "state", "value": "state", "css": _service_alert},
    "start_mode",
    "start_name",
]

# (snapshot field, heading, layout, columns, collapsible + dynamic)
_SECTIONS = [
    ("operating_system", "Operating System", Layout.LIST, None, False),
    ("computer_system", "Computer System", Layout.LIST, None, False),
    ("disks", "Local Disks", Layout.TABLE, DISK_COLUMNS, False),
    ("processes", "Processes", Layout.TABLE, PROCESS_COLUMNS, True),
    ("services", "Services", Layout.TABLE, SERVICE_COLUMNS, True),
    ("network_adapters", "Network Adapters", Layout.TABLE, None, True),
]


def _build_fragment(
    snapshot: InventorySnapshot,
    field: str,
    heading: str,
    layout: Layout,
    columns,
    collapsible: bool,
) -> FragmentBuilder:
    builder = FragmentBuilder(
        f"{field}_table",
        f"{field}_div",
        layout=layout,
        properties=columns,
        even_row_class=_EVEN,
        odd_row_class=_ODD,
        table_class=_TABLE_CLASS,
        pre_content=f"<h2>{heading}</h2>",
        hidden_section=collapsible,
    )
    builder.build(getattr(snapshot, field))
    return builder


def default_stylesheet() -> str:
    return (TEMPLATES_DIR / "report.css").read_text()


def _build_context(snapshot: InventorySnapshot, options: ReportOptions) -> dict:
    fragments: List[str] = []
    dynamic_tables: List[str] = []
    warnings: List[dict] = []

    for field, heading, layout, columns, collapsible in _SECTIONS:
        builder = _build_fragment(snapshot, field, heading, layout, columns, collapsible)
        fragments.append(builder.close())
        warnings.extend(builder.warnings)
        if collapsible and options.dynamic:
            dynamic_tables.append(builder.table_id)
        _debug(f"{snapshot.computer_name}: {field}: {builder.records} record(s)")

    stylesheet = options.stylesheet
    if stylesheet is None and options.stylesheet_uri is None and options.use_default_stylesheet:
        stylesheet = default_stylesheet()

    name = escape(snapshot.computer_name)
    return {
        "fragments": fragments,
        "title": options.title or f"System Report: {snapshot.computer_name}",
        "stylesheet": stylesheet,
        "stylesheet_uri": options.stylesheet_uri,
        "pre_content": f"<h1>System Report: {name}</h1>",
        "post_content": '<p class="footer">Click a section heading to expand or collapse it.</p>',
        "jquery_uri": options.jquery_uri,
        "datatables_uri": options.datatables_uri,
        "dynamic_tables": dynamic_tables,
        "warnings": warnings,
    }


def report_filename(snapshot: InventorySnapshot) -> str:
    """Output file name for a snapshot: the computer name made filesystem-safe."""
    stem = re.sub(r"[^\w.-]", "_", snapshot.computer_name).strip(".") or "report"
    return f"{stem}.html"


def render_document(
    snapshot: InventorySnapshot,
    env: Optional[Environment] = None,
    options: Optional[ReportOptions] = None,
) -> str:
    """Build the complete report document for one snapshot."""
    ctx = _build_context(snapshot, options or ReportOptions())
    for w in ctx.pop("warnings"):
        _debug(f"{w['source']}: {w['message']}")
    return assemble_document(DocumentSpec(**ctx), env)


def render(
    snapshot: InventorySnapshot,
    env: Environment,
    output_dir: Path,
    options: Optional[ReportOptions] = None,
) -> Path:
    """Write <computer_name>.html into output_dir, replacing any existing file."""
    output_dir = Path(output_dir)
    html = render_document(snapshot, env, options)
    path = output_dir / report_filename(snapshot)
    path.write_text(html)
    return path
