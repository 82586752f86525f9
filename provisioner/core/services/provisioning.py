"""
Identity and filesystem provisioning.

Converges the host to the target layout. Every function is idempotent:
running it against an already-provisioned host leaves the same final
state (ownership, modes, contents) as running it once.

Ownership is applied before the stricter modes, so the final state is
reached regardless of what a previous, interrupted run left behind.
"""

from __future__ import annotations

import grp
import logging
import os
import pwd
import shutil
from pathlib import Path

from provisioner.adapters.base import CommandRunner
from provisioner.core.config.balancer_config import default_config, load_config, render_config
from provisioner.core.config.settings import Settings
from provisioner.core.errors import ConfigError, ProvisionError
from provisioner.core.models.layout import (
    CONFIG_MODE,
    DIR_MODE,
    BuildOutput,
    InstalledLayout,
    ServiceIdentity,
)
from provisioner.core.observability.logging_config import log_success

logger = logging.getLogger(__name__)


# ── Service identity ─────────────────────────────────────────────


def user_exists(user: str) -> bool:
    try:
        pwd.getpwnam(user)
    except KeyError:
        return False
    return True


def group_exists(group: str) -> bool:
    try:
        grp.getgrnam(group)
    except KeyError:
        return False
    return True


def ensure_identity(identity: ServiceIdentity, runner: CommandRunner) -> bool:
    """Create the system account and group if absent.

    A pre-existing account whose group is missing gets the group created
    and assigned as its primary group, so ownership can be applied.

    Returns:
        True if the account was created, False if it already existed.

    Raises:
        ProvisionError: If ``groupadd``/``useradd``/``usermod`` fails.
    """
    group_created = False
    if not group_exists(identity.group):
        logger.info("Creating system group: %s", identity.group)
        receipt = runner.run(["groupadd", "--system", identity.group])
        if not receipt.ok:
            raise ProvisionError(f"Failed to create group {identity.group}", receipt.error or "")
        group_created = True

    if user_exists(identity.user):
        if group_created:
            receipt = runner.run(["usermod", "-g", identity.group, identity.user])
            if not receipt.ok:
                raise ProvisionError(
                    f"Failed to assign group {identity.group} to {identity.user}",
                    receipt.error or "",
                )
        logger.info("User %s already exists", identity.user)
        return False

    logger.info("Creating system user: %s", identity.user)
    receipt = runner.run([
        "useradd",
        "--system",
        "--no-create-home",
        "--shell", identity.shell,
        "--gid", identity.group,
        identity.user,
    ])
    if not receipt.ok:
        raise ProvisionError(f"Failed to create user {identity.user}", receipt.error or "")
    return True


def remove_identity(identity: ServiceIdentity, runner: CommandRunner) -> bool:
    """Delete the account (best-effort). Absence is not an error.

    Returns:
        True if something was removed.
    """
    removed = False
    if user_exists(identity.user):
        receipt = runner.run(["userdel", identity.user])
        if receipt.ok:
            removed = True
        else:
            logger.warning("Could not remove user %s: %s", identity.user, receipt.error)
    else:
        logger.debug("User %s not present", identity.user)

    # userdel drops a same-named primary group on most distros
    if group_exists(identity.group):
        receipt = runner.run(["groupdel", identity.group])
        if receipt.ok:
            removed = True
        else:
            logger.debug("Could not remove group %s: %s", identity.group, receipt.error)
    return removed


# ── Filesystem layout ────────────────────────────────────────────


def ensure_directories(layout: InstalledLayout) -> list[Path]:
    """Create the install, config and log directories. Returns the new ones."""
    created: list[Path] = []
    for directory in layout.directories:
        if not directory.is_dir():
            created.append(directory)
        directory.mkdir(parents=True, exist_ok=True)
    return created


def place_artifact(build: BuildOutput, layout: InstalledLayout) -> Path:
    """Copy the verified artifact into the install dir, replacing any prior one."""
    shutil.copy2(build.artifact, layout.artifact_path)
    return layout.artifact_path


def write_config(layout: InstalledLayout, settings: Settings) -> bool:
    """Write the default config.yaml unless one already exists.

    Operator edits survive re-installs; ``settings.overwrite_config``
    forces regeneration.

    Returns:
        True if the file was written.
    """
    path = layout.config_path
    if path.exists() and not settings.overwrite_config:
        logger.warning("Keeping existing configuration %s", path)
        try:
            load_config(path)
        except ConfigError as e:
            logger.warning("Existing configuration is invalid: %s", e)
        return False

    path.write_text(render_config(default_config(settings)), encoding="utf-8")
    logger.info("Wrote default configuration %s", path)
    return True


def place_unit(build: BuildOutput, layout: InstalledLayout) -> Path:
    """Copy the shipped unit file into the init system's unit dir."""
    layout.unit_dir.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(build.unit_file, layout.unit_path)
    return layout.unit_path


def _chown_tree(root: Path, user: str, group: str) -> None:
    shutil.chown(root, user, group)
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames + filenames:
            shutil.chown(os.path.join(dirpath, name), user, group)


def converge_permissions(layout: InstalledLayout, identity: ServiceIdentity) -> None:
    """Recursive ``user:group`` ownership, then 750 dirs and a 640 config."""
    for directory in layout.directories:
        _chown_tree(directory, identity.user, identity.group)
    for directory in layout.directories:
        os.chmod(directory, DIR_MODE)
    if layout.config_path.exists():
        os.chmod(layout.config_path, CONFIG_MODE)


def provision_files(
    build: BuildOutput,
    layout: InstalledLayout,
    identity: ServiceIdentity,
    settings: Settings,
) -> bool:
    """Directories, artifact, config, unit file, then ownership/modes.

    Returns:
        Whether config.yaml was (re)written.

    Raises:
        ProvisionError: If a filesystem step fails or the identity
            cannot be resolved for ``chown``.
    """
    logger.info("Installing files...")
    try:
        ensure_directories(layout)
        place_artifact(build, layout)
        config_written = write_config(layout, settings)
        place_unit(build, layout)
        converge_permissions(layout, identity)
    except (OSError, LookupError) as e:
        raise ProvisionError("Failed to install files", str(e)) from e
    log_success(logger, "Files installed successfully")
    return config_written


def remove_layout(layout: InstalledLayout) -> list[Path]:
    """Delete the three provisioned directories (best-effort)."""
    removed: list[Path] = []
    for directory in layout.directories:
        if not directory.exists():
            continue
        try:
            shutil.rmtree(directory)
            removed.append(directory)
        except OSError as e:
            logger.warning("Could not remove %s: %s", directory, e)
    return removed
