"""
Host provisioning: required packages, the service account, the Docker engine,
the ARM image, optical-drive mount points and the account's data directories.

Every step checks before it creates, so a failed run can simply be re-run.
"""

import os
import shlex
from pathlib import Path
from typing import Callable, List

from . import _util
from ._util import debug as _debug_fn
from .errors import ProvisioningError, PullError
from .executor import Executor, RunResult
from .schema import CONTAINER_PATHS, ServiceAccount

Chown = Callable[[Path, int, int], None]

_REQUIRED_PACKAGES = ["curl", "lsscsi"]
_DEVICE_GROUPS = "cdrom,video"
_DOCKER_INSTALL = "curl -fsSL https://get.docker.com | bash"
DOCKER_BINARY = Path("/usr/bin/docker")


def _debug(msg: str) -> None:
    _debug_fn("provision", msg)


def _check(result: RunResult, cmd: List[str], exc_type=ProvisioningError, stage: str = "") -> None:
    if result.returncode != 0:
        detail = (result.stderr or result.stdout or "").strip()
        msg = f"`{' '.join(cmd)}` failed (exit {result.returncode})"
        if detail:
            msg += f": {detail}"
        raise exc_type(msg, stage=stage)


def _run_checked(executor: Executor, cmd: List[str], stage: str, interactive: bool = False) -> RunResult:
    result = executor(cmd, interactive=interactive)
    _check(result, cmd, stage=stage)
    return result


# ---------------------------------------------------------------------------
# Packages
# ---------------------------------------------------------------------------

def install_requirements(executor: Executor) -> None:
    """apt-install the tools the detection stages rely on."""
    _util.status(f"Installing required packages ({', '.join(_REQUIRED_PACKAGES)})")
    _run_checked(executor, ["apt", "update", "-y"], stage="requirements")
    _run_checked(executor, ["apt", "install", "-y"] + _REQUIRED_PACKAGES, stage="requirements")
    _util.success("Required packages installed successfully.")


# ---------------------------------------------------------------------------
# Service account
# ---------------------------------------------------------------------------

def ensure_service_account(
    executor: Executor,
    user: str,
    prompt: Callable[[str], bool],
) -> ServiceAccount:
    """Create the service group and user if absent and grant device access."""
    _util.status(f"Setting up '{user}' user and group")

    if executor(["getent", "group", user]).returncode != 0:
        _run_checked(executor, ["groupadd", user], stage="account")
        _util.success(f"{user} group created.")
    else:
        _util.warn(f"{user} group already exists, skipping...")

    created = False
    if executor(["id", user]).returncode != 0:
        _run_checked(executor, ["useradd", "-m", user, "-g", user], stage="account")
        created = True
        _util.success(f"{user} user created.")
        if prompt(f"Do you want to set a password for the '{user}' user?"):
            _run_checked(executor, ["passwd", user], stage="account", interactive=True)
        else:
            _util.warn(
                f"No password set for '{user}' user. "
                f"You can set one later with 'sudo passwd {user}'."
            )
    else:
        _util.warn(f"{user} user already exists, skipping...")

    _run_checked(executor, ["usermod", "-aG", _DEVICE_GROUPS, user], stage="account")
    _util.success(f"User '{user}' added to 'cdrom' and 'video' groups.")
    return ServiceAccount(name=user, group=user, created=created)


# ---------------------------------------------------------------------------
# Container runtime
# ---------------------------------------------------------------------------

def ensure_container_runtime(
    executor: Executor,
    user: str,
    docker_binary: Path = DOCKER_BINARY,
) -> bool:
    """Install Docker unless present; give *user* access and restart the daemon.

    Returns True when Docker was installed by this call.
    """
    _util.status("Checking for Docker and installing if needed")
    installed = False
    if Path(docker_binary).exists():
        _util.warn("Docker installation detected, skipping installation...")
    else:
        _util.status("Installing Docker")
        _run_checked(executor, ["bash", "-o", "pipefail", "-c", _DOCKER_INSTALL], stage="runtime", interactive=True)
        installed = True
        _util.success("Docker installed successfully.")

    _run_checked(executor, ["usermod", "-aG", "docker", user], stage="runtime")
    _run_checked(executor, ["systemctl", "restart", "docker"], stage="runtime")
    _util.success(f"User '{user}' added to docker group and Docker restarted.")
    return installed


# ---------------------------------------------------------------------------
# Image
# ---------------------------------------------------------------------------

def pull_image(executor: Executor, user: str, image: str) -> None:
    """Pull *image* as the service account so its docker group membership is used."""
    _util.status(f"Pulling Docker image: {image}")
    cmd = ["su", "-", user, "-c", f"docker pull {shlex.quote(image)}"]
    result = executor(cmd, interactive=True)
    _check(result, cmd, exc_type=PullError)
    _util.success("Docker image pulled successfully.")


# ---------------------------------------------------------------------------
# Filesystem
# ---------------------------------------------------------------------------

def optical_nodes(dev_root: Path) -> List[Path]:
    """``sr*`` block nodes under *dev_root*, sorted."""
    try:
        return sorted(p for p in Path(dev_root).glob("sr*") if p.exists())
    except (PermissionError, OSError):
        return []


def prepare_mount_points(
    dev_root: Path,
    mnt_root: Path,
    uid: int,
    gid: int,
    chown: Chown = os.chown,
) -> List[Path]:
    """Create ``<mnt_root>/dev/srN`` for every optical node, owned by the account."""
    _util.status("Creating mount points for optical drives")
    created: List[Path] = []
    for node in optical_nodes(dev_root):
        mount_point = Path(mnt_root) / "dev" / node.name
        mount_point.mkdir(parents=True, exist_ok=True)
        chown(mount_point, uid, gid)
        _util.success(f"Created mount point: {mount_point}")
        created.append(mount_point)

    if not created:
        _util.warn("No optical drives found for mount point creation.")
    else:
        _util.success(f"Created {len(created)} mount points.")
    return created


def ensure_directories(
    home: Path,
    uid: int,
    gid: int,
    mode: int = 0o755,
    chown: Chown = os.chown,
) -> List[Path]:
    """Create the music/logs/media/config directories under *home*."""
    paths: List[Path] = []
    for name in CONTAINER_PATHS:
        d = Path(home) / name
        if not d.is_dir():
            _debug(f"creating {d}")
            d.mkdir(parents=True, exist_ok=True)
        d.chmod(mode)
        chown(d, uid, gid)
        paths.append(d)
    _util.success("ARM directories created and configured.")
    return paths
