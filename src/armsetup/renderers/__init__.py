"""
Renderers consume the launch configuration and a Jinja2 environment.
"""

import re
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .launch_script import render as render_launch_script
from .summary import render as render_summary

_DQ_SPECIAL = re.compile(r'([\\"$`])')


def shell_dq(value) -> str:
    """Escape *value* for use inside a double-quoted shell word."""
    return _DQ_SPECIAL.sub(r"\\\1", str(value))


def make_env() -> Environment:
    """Jinja2 environment over the packaged templates.  Shell output, so no HTML autoescape."""
    templates_dir = Path(__file__).resolve().parent.parent / "templates"
    env = Environment(
        loader=FileSystemLoader(str(templates_dir)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["dq"] = shell_dq
    return env


__all__ = ["make_env", "render_launch_script", "render_summary", "shell_dq"]
