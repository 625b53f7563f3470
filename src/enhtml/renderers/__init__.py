"""
Renderers consume one inventory snapshot and a Jinja2 environment, writing to output_dir.
"""

from pathlib import Path
from typing import List, Optional

from ..document import make_environment
from ..schema import InventorySnapshot, ReportOptions

from .html_report import render as render_html_report


def run_all(
    snapshot: InventorySnapshot,
    output_dir: Path,
    options: Optional[ReportOptions] = None,
) -> List[Path]:
    """Run all renderers. output_dir is created if it does not exist. Returns written paths."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    env = make_environment()
    return [render_html_report(snapshot, env, output_dir, options)]
