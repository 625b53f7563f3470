"""Shared utilities for enhtml: debug logging, structured warnings."""

import os
import sys

_DEBUG = bool(os.environ.get("ENHTML_DEBUG", ""))


def debug(label: str, msg: str) -> None:
    """Print a debug message to stderr when ENHTML_DEBUG is set."""
    if _DEBUG:
        print(f"[enhtml] {label}: {msg}", file=sys.stderr)


def make_warning(source: str, message: str, severity: str = "warning") -> dict:
    """Build a structured warning dict with consistent keys."""
    return {"source": source, "message": message, "severity": severity}
