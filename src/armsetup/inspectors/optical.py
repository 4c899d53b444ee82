"""Optical drive inspector: lsscsi classification plus udev properties of /dev/sr*.

Both sources are treated as equally authoritative; the result is their union,
deduplicated by path in first-seen order.
"""

import re
from pathlib import Path
from typing import Iterable, List, Optional

from ..executor import Executor
from .._util import debug as _debug_fn, make_warning

_OPTICAL_TYPE_RE = re.compile(r"cd/dvd|rom")
_DEVICE_RE = re.compile(r"/dev/s[rg]\d+")


def _debug(msg: str) -> None:
    _debug_fn("optical", msg)


def _node(dev_root: Path, device: str) -> Path:
    """Map an absolute /dev path onto *dev_root*."""
    return Path(dev_root) / Path(device).name


def _parse_lsscsi(text: str) -> List[str]:
    """Device paths from ``lsscsi -g`` lines whose type column names an optical drive."""
    devices: List[str] = []
    for line in text.splitlines():
        parts = line.split()
        if len(parts) < 2 or not _OPTICAL_TYPE_RE.search(parts[1]):
            continue
        devices.extend(_DEVICE_RE.findall(line))
    return devices


def from_lsscsi(executor: Executor, dev_root: Path) -> List[str]:
    r = executor(["lsscsi", "-g"])
    if r.returncode != 0:
        _debug(f"lsscsi unavailable (rc={r.returncode})")
        return []
    return [d for d in _parse_lsscsi(r.stdout) if _node(dev_root, d).exists()]


def from_udev(executor: Executor, dev_root: Path) -> List[str]:
    devices: List[str] = []
    try:
        nodes = sorted(Path(dev_root).glob("sr*"))
    except (PermissionError, OSError):
        return devices
    for node in nodes:
        device = f"/dev/{node.name}"
        r = executor(["udevadm", "info", "--query=property", f"--name={device}"])
        if r.returncode == 0 and any(l.strip() == "ID_CDROM=1" for l in r.stdout.splitlines()):
            devices.append(device)
        else:
            _debug(f"{device}: not reported as a CD-ROM by udev")
    return devices


def merge(*sources: Iterable[str]) -> List[str]:
    """Union of device lists, first-seen order, no duplicates."""
    seen: dict = {}
    for source in sources:
        for device in source:
            seen.setdefault(device, None)
    return list(seen)


def run(executor: Executor, dev_root: Path = Path("/dev"), warnings: Optional[list] = None) -> List[str]:
    devices = merge(from_lsscsi(executor, dev_root), from_udev(executor, dev_root))
    if not devices and warnings is not None:
        warnings.append(make_warning("optical", "No optical drives detected."))
    _debug(f"detected: {devices}")
    return devices
