"""
Host environment model — what the detector learned about the machine.

Built once by ``core.services.detection`` and never mutated. The
package-manager kind is the selector every later component uses to
pick its command templates.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class PackageManagerKind(str, Enum):
    """Supported package managers, in detection priority order."""

    APT = "apt"
    DNF = "dnf"
    YUM = "yum"
    PACMAN = "pacman"
    ZYPPER = "zypper"

    @property
    def executable(self) -> str:
        """The binary looked up on PATH for this kind."""
        return "apt-get" if self is PackageManagerKind.APT else self.value


class Environment(BaseModel):
    """Distribution identity plus the selected package manager."""

    model_config = ConfigDict(frozen=True)

    distro_id: str = "unknown"
    distro_family: str = ""         # ID_LIKE hint, space separated
    distro_name: str = ""           # PRETTY_NAME
    version_id: str = ""
    codename: str = ""              # VERSION_CODENAME (apt repo suite)
    arch: str = ""                  # uname -m
    package_manager: PackageManagerKind

    @property
    def label(self) -> str:
        """Human-readable distribution label for log lines."""
        return self.distro_name or self.distro_id
