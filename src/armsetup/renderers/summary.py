"""Completion banner printed after a successful run."""

from pathlib import Path

from jinja2 import Environment

from .. import _util

TEMPLATE = "summary.txt.j2"


def render(script_path: Path, user: str, container_name: str, env: Environment) -> str:
    text = env.get_template(TEMPLATE).render(
        script_path=script_path,
        user=user,
        container_name=container_name,
    )
    _util.success(text.rstrip("\n"))
    return text
