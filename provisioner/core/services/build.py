"""
Build orchestration — clone, package, verify.

The downstream project is opaque: all we require is that
``mvn package`` leaves ``target/proxy-balancer.jar`` behind and that
the tree ships ``systemd/proxy-balancer.service``. Its test suite runs
elsewhere, so the build skips it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from provisioner.adapters.base import CommandRunner
from provisioner.core.context import ProvisionContext
from provisioner.core.errors import BuildError
from provisioner.core.models.layout import ARTIFACT_NAME, UNIT_NAME, BuildOutput
from provisioner.core.models.receipt import Receipt
from provisioner.core.observability.logging_config import log_success

logger = logging.getLogger(__name__)

SOURCE_DIRNAME = "repo"
ARTIFACT_RELPATH = Path("target") / ARTIFACT_NAME
UNIT_RELPATH = Path("systemd") / UNIT_NAME


def clone_command(repo_url: str, dest: Path) -> list[str]:
    return ["git", "clone", "--depth", "1", repo_url, str(dest)]


def build_command() -> list[str]:
    return ["mvn", "clean", "package", "-DskipTests", "-q"]


def _reason(receipt: Receipt) -> str:
    return receipt.error or f"exit code {receipt.return_code}"


def build_artifact(
    ctx: ProvisionContext,
    workspace: Path,
    runner: CommandRunner,
) -> BuildOutput:
    """Produce exactly one verified artifact, or raise.

    Args:
        ctx: Run context (source repository URL lives in settings).
        workspace: Acquired build workspace directory.
        runner: Command runner.

    Raises:
        BuildError: On clone failure, build failure, or a build that
            reported success without leaving the artifact behind.
    """
    logger.info("Building project...")
    source = workspace / SOURCE_DIRNAME

    logger.info("Cloning repository...")
    receipt = runner.run(clone_command(ctx.settings.repo_url, source), cwd=workspace)
    if not receipt.ok:
        raise BuildError(f"Failed to clone {ctx.settings.repo_url}", _reason(receipt))

    logger.info("Building with Maven (this may take a few minutes)...")
    receipt = runner.run(build_command(), cwd=source)
    if not receipt.ok:
        raise BuildError("Maven build failed", _reason(receipt))

    artifact = source / ARTIFACT_RELPATH
    if not artifact.is_file():
        raise BuildError(
            f"Build failed: {ARTIFACT_NAME} not found",
            f"build reported success but {ARTIFACT_RELPATH} does not exist",
        )

    unit_file = source / UNIT_RELPATH
    if not unit_file.is_file():
        raise BuildError(
            f"Build failed: {UNIT_NAME} not found",
            f"source tree does not ship {UNIT_RELPATH}",
        )

    log_success(logger, "Build completed successfully")
    return BuildOutput(
        workspace=workspace,
        source_dir=source,
        artifact=artifact,
        unit_file=unit_file,
    )
