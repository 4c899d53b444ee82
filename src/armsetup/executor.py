"""
Command execution seam. Every external tool (apt, getent, useradd, docker,
lsscsi, udevadm, timedatectl, ...) is invoked through an Executor so the
pipeline can be driven by canned results in tests.
"""

import subprocess
from typing import Callable, List, NamedTuple, Optional

from ._util import debug as _debug_fn


class RunResult(NamedTuple):
    stdout: str
    stderr: str
    returncode: int


# (cmd, cwd=None, interactive=False) -> RunResult
Executor = Callable[..., RunResult]


def _debug(msg: str) -> None:
    _debug_fn("exec", msg)


def make_executor() -> Executor:
    """Return an executor that runs commands on the local host.

    Interactive commands (``passwd``, ``docker pull``) inherit the terminal so
    the operator sees progress and can answer prompts; their output is not
    captured.  A missing binary is reported as returncode 127, the way a shell
    would.
    """

    def run(cmd: List[str], cwd: Optional[str] = None, interactive: bool = False) -> RunResult:
        _debug(" ".join(cmd))
        try:
            if interactive:
                proc = subprocess.run(cmd, cwd=cwd)
                return RunResult(stdout="", stderr="", returncode=proc.returncode)
            proc = subprocess.run(cmd, cwd=cwd, capture_output=True, text=True)
        except FileNotFoundError as exc:
            _debug(f"{cmd[0]}: not found")
            return RunResult(stdout="", stderr=str(exc), returncode=127)
        if proc.returncode != 0:
            _debug(f"{cmd[0]} exited {proc.returncode}: {proc.stderr.strip()}")
        return RunResult(stdout=proc.stdout, stderr=proc.stderr, returncode=proc.returncode)

    return run
