"""start_arm_container.sh renderer: one ``docker run`` invocation for the host."""

import os
from pathlib import Path
from typing import Callable, Optional

from jinja2 import Environment

from .. import _util
from ..schema import LaunchConfig

TEMPLATE = "start_arm_container.sh.j2"


def backup_existing(path: Path) -> Optional[Path]:
    """Move an existing file at *path* to ``<path>.bak``, replacing any older backup."""
    path = Path(path)
    if not path.exists():
        return None
    backup = path.with_name(path.name + ".bak")
    _util.warn(f"'{path.name}' already exists. Backing up to '{backup.name}'...")
    os.replace(path, backup)
    return backup


def render_text(config: LaunchConfig, env: Environment) -> str:
    return env.get_template(TEMPLATE).render(config=config)


def render(
    config: LaunchConfig,
    env: Environment,
    chown: Callable[[Path, int, int], None] = os.chown,
) -> Path:
    """Write the launch script into the account's home and return its path."""
    path = config.script_path
    _util.status(f"Generating start script at: {path}")
    text = render_text(config, env)
    backup_existing(path)
    path.write_text(text)
    path.chmod(0o755)
    chown(path, config.uid, config.gid)
    _util.success("Start script generated successfully.")
    return path
