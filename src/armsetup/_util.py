"""Shared utilities for armsetup: debug logging, colored status lines, warnings."""

import os
import sys
from typing import Optional, TextIO

_DEBUG = bool(os.environ.get("ARMSETUP_DEBUG", ""))

RED = "\033[1;31m"
GREEN = "\033[1;32m"
YELLOW = "\033[1;33m"
NC = "\033[0m"


def debug(label: str, msg: str) -> None:
    """Print a debug message to stderr when ARMSETUP_DEBUG is set."""
    if _DEBUG:
        print(f"[armsetup] {label}: {msg}", file=sys.stderr)


def _use_color(stream: TextIO) -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False


def _emit(color: str, msg: str, stream: Optional[TextIO] = None) -> None:
    stream = stream if stream is not None else sys.stdout
    if _use_color(stream):
        print(f"{color}{msg}{NC}", file=stream)
    else:
        print(msg, file=stream)


def status(msg: str) -> None:
    """Stage header, e.g. ``--- Detecting optical devices ---``."""
    _emit(RED, f"--- {msg} ---")


def success(msg: str) -> None:
    _emit(GREEN, msg)


def warn(msg: str) -> None:
    _emit(YELLOW, msg, sys.stderr)


def error(msg: str) -> None:
    _emit(RED, msg, sys.stderr)


def make_warning(source: str, message: str, severity: str = "warning") -> dict:
    """Build a structured warning dict with consistent keys."""
    return {"source": source, "message": message, "severity": severity}
