"""
Install use case — the full provisioning pipeline.

    detect → resolve deps → build → identity → files → service → cleanup

Strictly linear; any ``ProvisionError`` aborts the run and propagates
to the entrypoint. The build workspace is released on every exit path,
including that one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from provisioner.adapters.base import CommandRunner
from provisioner.core.config.settings import Settings
from provisioner.core.context import ProvisionContext
from provisioner.core.models.dependency import Resolution
from provisioner.core.models.environment import Environment
from provisioner.core.models.layout import UnitState
from provisioner.core.services import detection
from provisioner.core.services.build import build_artifact
from provisioner.core.services.dependencies import resolve_all
from provisioner.core.services.provisioning import ensure_identity, provision_files
from provisioner.core.services.service_unit import register_service, unit_state
from provisioner.core.services.workspace import BuildWorkspace

logger = logging.getLogger(__name__)


@dataclass
class InstallResult:
    """What a successful install produced."""

    settings: Settings
    environment: Environment
    resolutions: list[Resolution] = field(default_factory=list)
    workspace: Path | None = None
    identity_created: bool = False
    config_written: bool = False
    unit_state: UnitState = UnitState.ABSENT

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        layout = self.settings.layout
        return {
            "environment": self.environment.model_dump(mode="json"),
            "dependencies": {
                r.dependency: {
                    "installed": r.installed,
                    "state": r.state.value,
                    "version": r.found_version,
                    "channel": r.channel_used,
                }
                for r in self.resolutions
            },
            "paths": {
                "artifact": str(layout.artifact_path),
                "config": str(layout.config_path),
                "log_dir": str(layout.log_dir),
                "unit": str(layout.unit_path),
            },
            "identity_created": self.identity_created,
            "config_written": self.config_written,
            "unit_state": self.unit_state.value,
        }


def run_install(
    settings: Settings,
    runner: CommandRunner,
    *,
    detect: Callable[[CommandRunner], Environment] = detection.detect_environment,
    workspace_factory: Callable[[], BuildWorkspace] = BuildWorkspace,
) -> InstallResult:
    """Run the install pipeline end to end.

    Args:
        settings: Operator settings, read once by the entrypoint.
        runner: Command runner for every external call.
        detect: Environment detector (overridable for tests).
        workspace_factory: Builds the scoped workspace.

    Raises:
        ProvisionError: Any fatal condition; nothing after it runs.
    """
    environment = detect(runner)
    logger.debug("Target host: %s (%s)", environment.label, environment.arch)
    ctx = ProvisionContext(settings=settings, environment=environment)
    result = InstallResult(settings=settings, environment=environment)

    result.resolutions = resolve_all(ctx, runner)

    with workspace_factory() as workspace:
        result.workspace = workspace
        build = build_artifact(ctx, workspace, runner)
        result.identity_created = ensure_identity(ctx.identity, runner)
        result.config_written = provision_files(
            build, ctx.layout, ctx.identity, ctx.settings,
        )
        register_service(runner)

    result.unit_state = unit_state(ctx.layout, runner)
    return result
