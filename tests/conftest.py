"""Shared fixtures: a scripted executor and fake /dev trees."""

from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

from armsetup.executor import RunResult

FIXTURES = Path(__file__).parent / "fixtures"


class FakeExecutor:
    """Executor returning canned results and recording every command.

    *responses* maps a command prefix (tuple of leading argv words) to a
    RunResult or a callable returning one.  Longest matching prefix wins;
    unknown commands succeed with empty output.
    """

    def __init__(self, responses: Optional[Dict[tuple, object]] = None) -> None:
        self.responses = dict(responses or {})
        self.calls: List[List[str]] = []

    def __call__(self, cmd, cwd=None, interactive=False) -> RunResult:
        self.calls.append(list(cmd))
        best = None
        for prefix in self.responses:
            if tuple(cmd[: len(prefix)]) == prefix:
                if best is None or len(prefix) > len(best):
                    best = prefix
        if best is None:
            return RunResult(stdout="", stderr="", returncode=0)
        resp = self.responses[best]
        if callable(resp):
            return resp(cmd)
        return resp

    def ran(self, *prefix: str) -> bool:
        return any(tuple(c[: len(prefix)]) == prefix for c in self.calls)


def ok(stdout: str = "") -> RunResult:
    return RunResult(stdout=stdout, stderr="", returncode=0)


def fail(stderr: str = "failed", returncode: int = 1) -> RunResult:
    return RunResult(stdout="", stderr=stderr, returncode=returncode)


def provisioned_host(home: Path, nproc: str = "4", timezone: str = "Europe/Berlin") -> Dict[tuple, object]:
    """Responses for a host where the arm account and docker already exist."""
    return {
        ("getent", "group", "arm"): ok("arm:x:1001:\n"),
        ("id", "arm"): ok("uid=1001(arm) gid=1001(arm) groups=1001(arm)\n"),
        ("getent", "passwd", "arm"): ok(f"arm:x:1001:1001::{home}:/bin/sh\n"),
        ("timedatectl",): ok(timezone + "\n"),
        ("nproc",): ok(nproc + "\n"),
        ("lsscsi",): ok((FIXTURES / "lsscsi_g_output.txt").read_text()),
        ("udevadm", "info", "--query=property", "--name=/dev/sr0"): ok((FIXTURES / "udevadm_sr0.txt").read_text()),
        ("udevadm", "info", "--query=property", "--name=/dev/sr1"): ok((FIXTURES / "udevadm_sr1.txt").read_text()),
    }


@pytest.fixture
def dev_root(tmp_path) -> Path:
    """Fake /dev with two optical drives and their generic SCSI nodes."""
    d = tmp_path / "dev"
    d.mkdir()
    for name in ("sr0", "sr1", "sg1", "sg2", "sda"):
        (d / name).touch()
    return d


@pytest.fixture
def empty_dev_root(tmp_path) -> Path:
    d = tmp_path / "emptydev"
    d.mkdir()
    return d


@pytest.fixture
def home(tmp_path) -> Path:
    h = tmp_path / "home" / "arm"
    h.mkdir(parents=True)
    return h


@pytest.fixture
def chown_calls():
    """A recording stand-in for os.chown, so tests never need root."""
    calls: List[tuple] = []

    def _chown(path, uid, gid):
        calls.append((Path(path), uid, gid))

    _chown.calls = calls
    return _chown
