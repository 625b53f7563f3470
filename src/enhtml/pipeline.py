"""
Pipeline orchestrator: load each snapshot file, then run renderers.
Every snapshot is rendered independently; one bad host does not stop the batch.
"""

import json
import sys
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from .errors import MalformedMarkupError
from .schema import SCHEMA_VERSION, InventorySnapshot, ReportOptions, ReportOutcome


def load_snapshot(path: Path) -> InventorySnapshot:
    """Load and deserialize an inventory snapshot from JSON."""
    data = json.loads(Path(path).read_text())
    snapshot = InventorySnapshot.model_validate(data)
    if snapshot.schema_version > SCHEMA_VERSION:
        print(
            f"WARNING: {path} was written for a newer enhtml (schema v{snapshot.schema_version}, "
            f"this tool supports v{SCHEMA_VERSION}). Some fields may be dropped.",
            file=sys.stderr,
        )
    return snapshot


def save_snapshot(snapshot: InventorySnapshot, path: Path) -> None:
    """Serialize snapshot to JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(snapshot.model_dump_json(indent=2))


def run_pipeline(
    *,
    snapshot_paths: Iterable[Path],
    output_dir: Path,
    run_renderers: Callable[[InventorySnapshot, Path, Optional[ReportOptions]], List[Path]],
    options: Optional[ReportOptions] = None,
) -> List[ReportOutcome]:
    """
    Render every snapshot in snapshot_paths into output_dir.

    Unreadable or invalid snapshots and malformed report markup fail only
    their own host and are reported in the returned outcomes. Configuration
    errors propagate, since they would fail every host the same way.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    outcomes: List[ReportOutcome] = []
    for path in snapshot_paths:
        try:
            snapshot = load_snapshot(path)
            written = run_renderers(snapshot, output_dir, options)
        except (OSError, ValueError, MalformedMarkupError) as exc:
            outcomes.append(ReportOutcome(source=str(path), error=str(exc)))
            continue
        outcomes.append(ReportOutcome(source=str(path), output=", ".join(str(p) for p in written)))
    return outcomes
