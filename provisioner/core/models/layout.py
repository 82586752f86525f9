"""
Installed layout, service identity, and build output models.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict

ARTIFACT_NAME = "proxy-balancer.jar"
CONFIG_NAME = "config.yaml"
UNIT_NAME = "proxy-balancer.service"

DIR_MODE = 0o750
CONFIG_MODE = 0o640


class ServiceIdentity(BaseModel):
    """Dedicated non-interactive, home-less system account."""

    model_config = ConfigDict(frozen=True)

    user: str = "proxy-balancer"
    group: str = "proxy-balancer"
    shell: str = "/usr/sbin/nologin"


class InstalledLayout(BaseModel):
    """Target filesystem state: three owned directories plus the unit file."""

    model_config = ConfigDict(frozen=True)

    install_dir: Path = Path("/opt/proxy-balancer")
    config_dir: Path = Path("/etc/proxy-balancer")
    log_dir: Path = Path("/var/log/proxy-balancer")
    unit_dir: Path = Path("/etc/systemd/system")

    @property
    def directories(self) -> tuple[Path, Path, Path]:
        """The three provisioned directories (install, config, log)."""
        return (self.install_dir, self.config_dir, self.log_dir)

    @property
    def artifact_path(self) -> Path:
        return self.install_dir / ARTIFACT_NAME

    @property
    def config_path(self) -> Path:
        return self.config_dir / CONFIG_NAME

    @property
    def unit_path(self) -> Path:
        return self.unit_dir / UNIT_NAME


class BuildOutput(BaseModel):
    """Verified products of one build."""

    model_config = ConfigDict(frozen=True)

    workspace: Path
    source_dir: Path
    artifact: Path
    unit_file: Path


class UnitState(str, Enum):
    """Registration state of the service unit."""

    ABSENT = "absent"
    INSTALLED_DISABLED = "installed_disabled"
    INSTALLED_ENABLED = "installed_enabled"
    RUNNING = "running"
