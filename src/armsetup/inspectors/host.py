"""Host inspector: service account ids and home, timezone, CPU topology."""

from pathlib import Path
from typing import List, Tuple

from ..errors import ProvisioningError
from ..executor import Executor
from ..schema import HostFacts
from .._util import debug as _debug_fn, make_warning


def _debug(msg: str) -> None:
    _debug_fn("host", msg)


def cpu_pinning(total_cores: int) -> List[int]:
    """Cores the container may use: all but core 0, or just core 0 on one-core hosts."""
    if total_cores > 1:
        return list(range(1, total_cores))
    return [0]


def _parse_passwd_entry(line: str) -> Tuple[int, int, Path]:
    parts = line.strip().split(":")
    if len(parts) < 7:
        raise ValueError(f"malformed passwd entry: {line!r}")
    return int(parts[2]), int(parts[3]), Path(parts[5])


def _account(executor: Executor, user: str) -> Tuple[int, int, Path]:
    cmd = ["getent", "passwd", user]
    r = executor(cmd)
    if r.returncode != 0 or not r.stdout.strip():
        raise ProvisioningError(f"service account '{user}' not found", stage="account")
    try:
        return _parse_passwd_entry(r.stdout.splitlines()[0])
    except ValueError as exc:
        raise ProvisioningError(str(exc), stage="account") from exc


def _timezone(executor: Executor, warnings: list) -> str:
    r = executor(["timedatectl", "show", "-p", "Timezone", "--value"])
    tz = r.stdout.strip() if r.returncode == 0 else ""
    if not tz:
        _debug(f"timedatectl rc={r.returncode}: {r.stderr.strip()}")
        warnings.append(make_warning("host", "Could not determine timezone; using UTC."))
        return "UTC"
    return tz


def _total_cores(executor: Executor, warnings: list) -> int:
    r = executor(["nproc"])
    if r.returncode == 0:
        try:
            n = int(r.stdout.strip())
            if n >= 1:
                return n
        except ValueError:
            pass
    _debug(f"nproc rc={r.returncode}: {r.stdout.strip()!r}")
    warnings.append(make_warning("host", "Could not determine CPU count; assuming a single core."))
    return 1


def run(executor: Executor, user: str) -> HostFacts:
    uid, gid, home = _account(executor, user)
    _debug(f"{user}: uid={uid} gid={gid} home={home}")
    warnings: list = []
    timezone = _timezone(executor, warnings)
    total = _total_cores(executor, warnings)
    return HostFacts(
        uid=uid,
        gid=gid,
        home=home,
        timezone=timezone,
        total_cores=total,
        cpu_cores=cpu_pinning(total),
        warnings=warnings,
    )
