"""
Uninstall use case — reverse provisioning, best-effort throughout.

Independent of the install pipeline: no detection, no build. Safe on a
host where install never ran.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from provisioner.adapters.base import CommandRunner
from provisioner.core.config.settings import Settings
from provisioner.core.models.receipt import Receipt
from provisioner.core.observability.logging_config import log_success
from provisioner.core.services.provisioning import remove_identity, remove_layout
from provisioner.core.services.service_unit import unregister_service

logger = logging.getLogger(__name__)


@dataclass
class UninstallResult:
    """What the uninstall removed."""

    removed_dirs: list[Path] = field(default_factory=list)
    identity_removed: bool = False
    receipts: list[Receipt] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "removed_dirs": [str(p) for p in self.removed_dirs],
            "identity_removed": self.identity_removed,
            "steps": [
                {"command": r.display, "status": r.status}
                for r in self.receipts
            ],
        }


def run_uninstall(settings: Settings, runner: CommandRunner) -> UninstallResult:
    """Unit, then directories, then the service identity."""
    logger.info("Uninstalling proxy-balancer...")
    result = UninstallResult()

    result.receipts = unregister_service(settings.layout, runner)
    result.removed_dirs = remove_layout(settings.layout)
    result.identity_removed = remove_identity(settings.identity, runner)

    log_success(logger, "Uninstallation completed")
    return result
