"""
Preflight checks, run before anything on the host is touched.

The generator creates accounts, installs packages and restarts services, so
it must run as root (directly or via sudo).
"""

import os
from typing import List, Optional

from ._util import debug as _debug_fn
from .errors import PrivilegeError


def _debug(msg: str) -> None:
    _debug_fn("preflight", msg)


def _check_root() -> Optional[str]:
    """Check that the effective uid is 0."""
    euid = os.geteuid()
    if euid == 0:
        _debug("root: ok")
        return None
    _debug(f"root: FAIL (euid={euid})")
    return "This script must be run as root or with sudo."


def check_privileges() -> List[str]:
    """Run all preflight checks. Returns a list of error strings (empty = all good)."""
    errors: List[str] = []
    for check in (_check_root,):
        msg = check()
        if msg:
            errors.append(msg)
    return errors


def require_privileges() -> None:
    """Raise PrivilegeError if any preflight check fails."""
    errors = check_privileges()
    if errors:
        raise PrivilegeError(" ".join(errors))
