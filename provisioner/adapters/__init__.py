"""Adapters — the runner seam between core services and the host.

Public re-exports for convenient access.
"""

from provisioner.adapters.base import CommandRunner
from provisioner.adapters.mock import MockRunner
from provisioner.adapters.shell.command import SubprocessRunner

__all__ = [
    "CommandRunner",
    "MockRunner",
    "SubprocessRunner",
]
