"""
Container entrypoint: provision the ``arm`` user and its expected directory
layout inside the image, then exec the container command as that user.

Reads PUID/PGID (or UID/GID), MAKEMKV_APP_KEY and RUN_AS_USER from the
environment.  Every step is safe to repeat on container restart.
"""

import os
import shutil
import stat
import sys
from pathlib import Path
from typing import Callable, List, Mapping, NamedTuple, Optional

from . import _util
from ._util import debug as _debug_fn
from .errors import ProvisioningError
from .executor import Executor, make_executor

USER = "arm"
SUBDIRS = [
    "config",
    "media",
    "media/completed",
    "media/raw",
    "media/movies",
    "encode",
    "logs",
    "db",
    "Music",
    ".MakeMKV",
]
GOSU = "/usr/sbin/gosu"


class SampleConfig(NamedTuple):
    source: Path
    target: str  # relative to home
    link: Optional[str] = None  # symlink to create pointing at target


SAMPLE_CONFIGS = [
    SampleConfig(Path("/opt/arm/docs/arm.yaml.sample"), "config/arm.yaml"),
    SampleConfig(Path("/opt/arm/docs/apprise.yaml"), "config/apprise.yaml"),
    SampleConfig(Path("/opt/arm/setup/.abcde.conf"), ".abcde.conf", link="config/.abcde.conf"),
]


def _debug(msg: str) -> None:
    _debug_fn("entrypoint", msg)


def _id_from_env(environ: Mapping[str, str], *names: str, default: int = 1000) -> int:
    for name in names:
        value = environ.get(name, "")
        if value:
            try:
                return int(value)
            except ValueError:
                _util.warn(f"Ignoring non-numeric {name}={value!r}")
    return default


def ensure_user(executor: Executor, uid: int, gid: int, home: Path) -> bool:
    """Create the arm group/user with the requested ids. Returns True if the user was created."""
    print(f"creating group [{USER}] with id {gid}")
    r = executor(["groupadd", "-fo", "-g", str(gid), USER])
    if r.returncode != 0:
        raise ProvisioningError(f"groupadd failed: {r.stderr.strip()}", stage="entrypoint")

    if executor(["id", "-u", USER]).returncode == 0:
        return False

    print(f"creating user [{USER}] with id {uid}")
    r = executor([
        "useradd", "--shell", "/bin/bash",
        "-u", str(uid), "-g", str(gid), "-G", "video,cdrom",
        "-o", "-c", "", USER,
    ])
    if r.returncode != 0:
        raise ProvisioningError(f"useradd failed: {r.stderr.strip()}", stage="entrypoint")
    home.mkdir(parents=True, exist_ok=True)
    os.chown(home, uid, gid)
    # ug+rwX
    home.chmod(stat.S_IMODE(home.stat().st_mode) | 0o770)
    return True


def ensure_subdirs(home: Path, uid: int, gid: int, subdirs: List[str] = SUBDIRS) -> List[Path]:
    """Create missing directories under *home*; existing ones are left alone."""
    created: List[Path] = []
    for sub in subdirs:
        d = home / sub
        if d.is_dir():
            continue
        print(f"creating dir {d}")
        d.mkdir(mode=0o755, parents=True, exist_ok=True)
        os.chown(d, uid, gid)
        created.append(d)
    return created


def seed_configs(
    home: Path,
    uid: int,
    gid: int,
    samples: Optional[List[SampleConfig]] = None,
) -> List[Path]:
    """Copy example configs into place when the operator has none yet."""
    if samples is None:
        samples = SAMPLE_CONFIGS
    written: List[Path] = []
    for sample in samples:
        target = home / sample.target
        if target.is_file():
            continue
        if not sample.source.is_file():
            _util.warn(f"sample config {sample.source} not found, skipping {target}")
            continue
        print(f"creating example config {target}")
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy(sample.source, target)
        os.chown(target, uid, gid)
        if sample.link:
            link = home / sample.link
            if not link.is_symlink() and not link.exists():
                link.symlink_to(target)
        written.append(target)
    return written


def write_makemkv_key(home: Path, key: str) -> Optional[Path]:
    if not key:
        return None
    print("setting makemkv app-Key")
    settings = home / ".MakeMKV" / "settings.conf"
    settings.parent.mkdir(parents=True, exist_ok=True)
    settings.write_text(f'app_Key = "{key}"\n')
    return settings


def ensure_cdrom_link(dev_root: Path = Path("/dev")) -> bool:
    link = dev_root / "cdrom"
    if link.is_symlink():
        return False
    try:
        link.symlink_to(dev_root / "sr0")
    except FileExistsError:
        _debug(f"{link} exists and is not a symlink, leaving it")
        return False
    print(f"'{link}' -> '{dev_root / 'sr0'}'")
    return True


def exec_command(argv: List[str], run_as_user: bool, execvp: Callable = os.execvp) -> None:
    """Replace this process with *argv*, dropping to the arm user via gosu."""
    if not argv:
        return
    if run_as_user:
        argv = [GOSU, USER] + list(argv)
    _debug(f"exec {argv}")
    execvp(argv[0], argv)


def provision(
    executor: Executor,
    environ: Mapping[str, str],
    home: Path = Path("/home") / USER,
    dev_root: Path = Path("/dev"),
) -> None:
    uid = _id_from_env(environ, "PUID", "UID")
    gid = _id_from_env(environ, "PGID", "GID")
    ensure_user(executor, uid, gid, home)
    ensure_subdirs(home, uid, gid)
    seed_configs(home, uid, gid)
    write_makemkv_key(home, environ.get("MAKEMKV_APP_KEY", ""))
    ensure_cdrom_link(dev_root)


def main(argv: Optional[list] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    environ = os.environ
    try:
        provision(make_executor(), environ)
    except ProvisioningError as e:
        _util.error(f"Error [{e.stage}]: {e}")
        return 1
    except OSError as e:
        _util.error(f"Error [entrypoint]: {e}")
        return 1
    exec_command(argv, environ.get("RUN_AS_USER", "true") == "true")
    return 0


if __name__ == "__main__":
    sys.exit(main())
