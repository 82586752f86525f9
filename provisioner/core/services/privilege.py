"""
Privilege check — the first action on every privileged path.
"""

from __future__ import annotations

import os

from provisioner.core.errors import PrivilegeError


def is_root() -> bool:
    return os.geteuid() == 0


def require_root() -> None:
    """Raise unless running with root privileges.

    Raises:
        PrivilegeError: When the effective UID is not 0.
    """
    if not is_root():
        raise PrivilegeError(
            "This installer must be run as root (use sudo)",
            f"effective uid is {os.geteuid()}",
        )
