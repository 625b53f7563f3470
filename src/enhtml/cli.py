"""
CLI argument parsing.
"""

import argparse
from pathlib import Path
from typing import Optional

from .document import DEFAULT_DATATABLES_URI, DEFAULT_JQUERY_URI


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="enhtml",
        description="Render inventory snapshots as HTML reports with sortable tables.",
    )
    parser.add_argument(
        "snapshots",
        nargs="+",
        type=Path,
        metavar="SNAPSHOT",
        help="Inventory snapshot JSON file(s); one report is written per file",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        dest="output_dir",
        type=Path,
        default=Path("./output"),
        help="Output directory for reports (default: ./output). Existing reports are overwritten.",
    )
    parser.add_argument(
        "--title",
        type=str,
        help="Document title (default: 'System Report: <computer name>')",
    )

    # Stylesheet
    parser.add_argument(
        "--css-file",
        type=Path,
        metavar="PATH",
        help="Embed the stylesheet in PATH inline",
    )
    parser.add_argument(
        "--css-uri",
        type=str,
        metavar="URI",
        help="Link to an external stylesheet instead of embedding one",
    )
    parser.add_argument(
        "--no-default-css",
        action="store_true",
        help="Do not embed the bundled stylesheet when no other is given",
    )

    # Scripts
    parser.add_argument(
        "--jquery-uri",
        type=str,
        metavar="URI",
        default=DEFAULT_JQUERY_URI,
        help=f"jQuery script location (default: {DEFAULT_JQUERY_URI})",
    )
    parser.add_argument(
        "--datatables-uri",
        type=str,
        metavar="URI",
        default=DEFAULT_DATATABLES_URI,
        help=f"DataTables script location (default: {DEFAULT_DATATABLES_URI})",
    )
    parser.add_argument(
        "--static",
        action="store_true",
        help="Do not make tables sortable/pageable",
    )

    return parser.parse_args(argv)
