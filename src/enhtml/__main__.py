"""
CLI entry point. Parses args and delegates to pipeline.
"""

import sys
from pathlib import Path
from typing import List, Optional

from .cli import parse_args
from .pipeline import run_pipeline
from .schema import InventorySnapshot, ReportOptions


def _run_renderers(
    snapshot: InventorySnapshot,
    output_dir: Path,
    options: Optional[ReportOptions],
) -> List[Path]:
    """Run all renderers."""
    from .renderers import run_all

    return run_all(snapshot, output_dir, options)


def _options_from_args(args) -> ReportOptions:
    stylesheet = args.css_file.read_text() if args.css_file is not None else None
    return ReportOptions(
        title=args.title,
        stylesheet=stylesheet,
        stylesheet_uri=args.css_uri,
        use_default_stylesheet=not args.no_default_css,
        jquery_uri=args.jquery_uri,
        datatables_uri=args.datatables_uri,
        dynamic=not args.static,
    )


def main(argv: Optional[list] = None) -> int:
    args = parse_args(argv)

    try:
        options = _options_from_args(args)
        outcomes = run_pipeline(
            snapshot_paths=args.snapshots,
            output_dir=args.output_dir,
            run_renderers=_run_renderers,
            options=options,
        )
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    failed = 0
    for outcome in outcomes:
        if outcome.ok:
            print(f"{outcome.source}: wrote {outcome.output}")
        else:
            failed += 1
            print(f"ERROR: {outcome.source}: {outcome.error}", file=sys.stderr)
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
