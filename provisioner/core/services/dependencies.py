"""
Dependency resolution — runtime version gate plus build tooling.

Each dependency walks an explicit two-tier state machine (see
``core.models.dependency``): check, then the primary channel for the
detected package manager, then at most one fallback channel. A channel
only counts as successful once the post-install check passes, so an
install that "worked" but left the wrong version behind falls through
to the fallback and finally to ``DependencyError``.
"""

from __future__ import annotations

import logging
import os
import re
import tarfile
from pathlib import Path

from provisioner.adapters.base import CommandRunner
from provisioner.core.context import ProvisionContext
from provisioner.core.data.recipes import build_tooling, java_runtime
from provisioner.core.errors import DependencyError
from provisioner.core.models.dependency import (
    DependencySpec,
    InstallChannel,
    InstallStep,
    Resolution,
    ResolutionState,
    StepKind,
    VersionCheck,
)
from provisioner.core.models.environment import Environment
from provisioner.core.models.receipt import Receipt
from provisioner.core.observability.logging_config import log_success
from provisioner.core.services import download

logger = logging.getLogger(__name__)


# ── Version checking ──────────────────────────────────────────


def parse_major(version: str) -> int | None:
    """Major component of a version string.

    The major is whatever precedes the first dot, so ``"21.0.2"`` is
    21 and a legacy ``"1.8.0_392"`` is 1. Trailing qualifiers such as
    ``"22-ea"`` are ignored.
    """
    match = re.match(r"\s*(\d+)", version.split(".", 1)[0])
    return int(match.group(1)) if match else None


def check_dependency(spec: DependencySpec, runner: CommandRunner) -> VersionCheck:
    """Check ``spec`` on the host. Read-only."""
    missing = [b for b in spec.binaries if not runner.has(b)]
    if missing:
        what = spec.display_name if len(missing) == len(spec.binaries) else ", ".join(missing)
        return VersionCheck(
            satisfied=False,
            missing=missing,
            message=f"{what} is not installed",
        )

    if spec.minimum_major is None:
        return VersionCheck(satisfied=True, message=f"{spec.display_name} present")

    receipt = runner.run(list(spec.version_command))
    # java -version reports on stderr
    text = "\n".join(
        part for part in (
            receipt.output,
            receipt.metadata.get("stderr", ""),
            receipt.error or "",
        ) if part
    )
    match = re.search(spec.version_pattern, text)
    if not match:
        return VersionCheck(
            satisfied=False,
            message=f"Cannot determine {spec.name} version from {' '.join(spec.version_command)!r}",
        )

    found = match.group(1)
    major = parse_major(found)
    if major is None:
        return VersionCheck(
            satisfied=False,
            found_version=found,
            message=f"Unparseable {spec.name} version {found!r}",
        )

    name = spec.name.capitalize()
    if major >= spec.minimum_major:
        return VersionCheck(
            satisfied=True,
            found_version=found,
            major=major,
            message=f"{name} {major} is installed (required: {spec.minimum_major}+)",
        )
    return VersionCheck(
        satisfied=False,
        found_version=found,
        major=major,
        message=f"{name} {major} found, but {name} {spec.minimum_major}+ is required",
    )


# ── Step execution ────────────────────────────────────────────


def substitute(template: str, env: Environment) -> str:
    """Fill ``{codename}``, ``{version_id}`` and ``{arch}`` placeholders."""
    variables = {
        "codename": env.codename,
        "version_id": env.version_id,
        "arch": env.arch,
    }
    result = template
    for key, value in variables.items():
        result = result.replace(f"{{{key}}}", value)
    return result


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _force_symlink(link: Path, target: Path) -> None:
    """``ln -sf target link``."""
    link.parent.mkdir(parents=True, exist_ok=True)
    if link.is_symlink() or link.exists():
        link.unlink()
    os.symlink(target, link)


def execute_step(step: InstallStep, env: Environment, runner: CommandRunner) -> Receipt:
    """Run one install step; never raises for step failures."""
    argv = [substitute(a, env) for a in step.argv]

    if step.kind == StepKind.COMMAND:
        return runner.run(argv)

    label = [step.kind.value, step.path or step.url]
    try:
        if step.kind == StepKind.WRITE_FILE:
            content = step.content
            if "{codename}" in content and not env.codename:
                content = content.replace("{codename}", _lsb_codename(runner))
            _write_file(Path(step.path), substitute(content, env))
            return Receipt.success(command=label)

        if step.kind == StepKind.FETCH_PIPE:
            data = download.fetch_bytes(substitute(step.url, env))
            # Only ASCII-armored keys are fed to stdin (gpg --dearmor)
            try:
                armored = data.decode("ascii")
            except UnicodeDecodeError:
                return Receipt.failure(command=label, error="downloaded key is not ASCII-armored")
            return runner.run(argv, input_text=armored)

        if step.kind == StepKind.FETCH_ARCHIVE:
            data = download.fetch_bytes(substitute(step.url, env))
            names = download.extract_tarball(data, Path(step.target))
            return Receipt.success(command=label, output=", ".join(names))

        if step.kind == StepKind.SYMLINK:
            _force_symlink(Path(step.path), Path(step.target))
            return Receipt.success(command=label)

    except (OSError, tarfile.TarError) as e:
        return Receipt.failure(command=label, error=str(e))

    return Receipt.failure(command=label, error=f"Unknown step kind: {step.kind}")


def _lsb_codename(runner: CommandRunner) -> str:
    """Release codename from ``lsb_release -cs`` when os-release lacks one."""
    receipt = runner.run(["lsb_release", "-cs"])
    return receipt.output.strip() if receipt.ok else ""


def run_channel(
    channel: InstallChannel,
    env: Environment,
    runner: CommandRunner,
) -> tuple[bool, list[Receipt]]:
    """Run every step of ``channel`` in order, stopping at the first failure."""
    receipts: list[Receipt] = []
    for step in channel.steps:
        logger.debug("[%s] %s", channel.name, step.describe())
        receipt = execute_step(step, env, runner)
        receipts.append(receipt)
        if not receipt.ok:
            logger.warning(
                "Step failed (%s): %s: %s",
                channel.name, step.describe(), receipt.error,
            )
            return False, receipts
    return True, receipts


# ── Resolution state machine ──────────────────────────────────


def _attempt(
    spec: DependencySpec,
    channel: InstallChannel,
    ctx: ProvisionContext,
    runner: CommandRunner,
    resolution: Resolution,
) -> tuple[VersionCheck | None, str]:
    """Run a channel and re-verify.

    Returns:
        ``(passing_check, "")`` on success, ``(None, reason)`` otherwise.
    """
    ok, receipts = run_channel(channel, ctx.environment, runner)
    resolution.receipts.extend(receipts)
    if not ok:
        return None, receipts[-1].error or f"{channel.name} channel failed"

    check = check_dependency(spec, runner)
    if not check.satisfied:
        logger.warning(
            "%s channel completed but verification failed: %s",
            channel.name, check.message,
        )
        return None, check.message
    return check, ""


def resolve_dependency(
    spec: DependencySpec,
    ctx: ProvisionContext,
    runner: CommandRunner,
) -> Resolution:
    """Guarantee ``spec`` is satisfied on the host.

    Raises:
        DependencyError: If neither channel leaves the host satisfying
            the check. There is no degraded mode.
    """
    resolution = Resolution(dependency=spec.name)

    check = check_dependency(spec, runner)
    if check.satisfied:
        resolution.found_version = check.found_version
        resolution.advance(ResolutionState.CHECKED_OK)
        if spec.minimum_major is not None:
            log_success(logger, check.message)
        else:
            logger.info("%s already installed", spec.display_name)
        return resolution

    logger.warning(check.message)
    logger.info("Installing %s...", spec.display_name)
    kind = ctx.package_manager
    reason = f"no install channel for {kind.value}"

    for state, channels in (
        (ResolutionState.PRIMARY_ATTEMPTED, spec.primary),
        (ResolutionState.FALLBACK_ATTEMPTED, spec.fallback),
    ):
        channel = channels.get(kind)
        if channel is None:
            continue
        if state == ResolutionState.FALLBACK_ATTEMPTED:
            logger.info("Trying %s channel for %s...", channel.name, spec.display_name)
        resolution.advance(state)

        passed, reason = _attempt(spec, channel, ctx, runner, resolution)
        if passed is not None:
            resolution.found_version = passed.found_version
            resolution.channel_used = channel.name
            resolution.advance(ResolutionState.RESOLVED)
            log_success(logger, "%s installed successfully", spec.display_name)
            return resolution

    resolution.advance(ResolutionState.FAILED)
    raise DependencyError(f"Failed to install {spec.display_name}", reason)


def ensure_runtime(ctx: ProvisionContext, runner: CommandRunner) -> Resolution:
    return resolve_dependency(java_runtime(ctx.settings.required_java_major), ctx, runner)


def ensure_build_tooling(ctx: ProvisionContext, runner: CommandRunner) -> Resolution:
    """git, Maven and curl; presence is enough."""
    logger.info("Installing build dependencies...")
    return resolve_dependency(build_tooling(), ctx, runner)


def resolve_all(ctx: ProvisionContext, runner: CommandRunner) -> list[Resolution]:
    """Runtime first, then build tooling."""
    runtime = ensure_runtime(ctx, runner)
    return [runtime, ensure_build_tooling(ctx, runner)]
