"""
Inspectors gather facts about the host. Each receives an executor and returns
structured data; a fact that cannot be determined degrades to a documented
default plus a warning instead of failing the run.
"""

from typing import Callable, TypeVar

from .. import _util

T = TypeVar("T")


def _safe_run(name: str, fn: Callable[[], T], default: T, warnings: list) -> T:
    """Run an inspector; on PermissionError/OSError record a warning and return *default*."""
    try:
        return fn()
    except (PermissionError, OSError) as exc:
        warnings.append(_util.make_warning(name, f"{name} inspector: {exc}"))
        return default


def report_warnings(warnings: list) -> None:
    """Show accumulated warnings to the operator."""
    for w in warnings:
        _util.warn(f"WARNING [{w['source']}]: {w['message']}")
