"""
Service lifecycle — systemd unit registration.

Install registers and enables the unit but never starts it: a fresh
install points at an upstream the operator has not configured yet.
Uninstall stops, disables, deletes, reloads — in that order, so systemd
never tracks an active unit whose backing file has vanished.
"""

from __future__ import annotations

import logging

from provisioner.adapters.base import CommandRunner
from provisioner.core.errors import ServiceError
from provisioner.core.models.layout import UNIT_NAME, InstalledLayout, UnitState
from provisioner.core.models.receipt import Receipt
from provisioner.core.observability.logging_config import log_success

logger = logging.getLogger(__name__)


def systemctl(*args: str) -> list[str]:
    return ["systemctl", *args]


def register_service(runner: CommandRunner, unit: str = UNIT_NAME) -> list[Receipt]:
    """Reload the unit cache and enable ``unit`` (start at next boot).

    Raises:
        ServiceError: If systemd rejects either call.
    """
    logger.info("Setting up systemd service...")
    receipts: list[Receipt] = []
    for cmd in (systemctl("daemon-reload"), systemctl("enable", unit)):
        receipt = runner.run(cmd)
        receipts.append(receipt)
        if not receipt.ok:
            raise ServiceError(f"'{receipt.display}' failed", receipt.error or "")

    log_success(logger, "Service enabled (will start on boot)")
    return receipts


def unregister_service(
    layout: InstalledLayout,
    runner: CommandRunner,
    unit: str = UNIT_NAME,
) -> list[Receipt]:
    """Stop, disable, delete and reload. Every step is best-effort."""
    receipts: list[Receipt] = []

    for cmd in (systemctl("stop", unit), systemctl("disable", unit)):
        receipt = runner.run(cmd)
        receipts.append(receipt)
        if not receipt.ok:
            logger.debug("Ignoring '%s': %s", receipt.display, receipt.error)

    unit_path = layout.unit_dir / unit
    try:
        unit_path.unlink()
        receipts.append(Receipt.success(command=["rm", str(unit_path)]))
    except FileNotFoundError:
        receipts.append(Receipt.skip(command=["rm", str(unit_path)], reason="not present"))
    except OSError as e:
        logger.warning("Could not remove %s: %s", unit_path, e)
        receipts.append(Receipt.failure(command=["rm", str(unit_path)], error=str(e)))

    receipt = runner.run(systemctl("daemon-reload"))
    receipts.append(receipt)
    if not receipt.ok:
        logger.debug("Ignoring '%s': %s", receipt.display, receipt.error)
    return receipts


def unit_state(
    layout: InstalledLayout,
    runner: CommandRunner,
    unit: str = UNIT_NAME,
) -> UnitState:
    """Read-only check of the unit's registration state."""
    if not (layout.unit_dir / unit).exists():
        return UnitState.ABSENT

    if runner.run(systemctl("is-active", "--quiet", unit)).ok:
        return UnitState.RUNNING

    enabled = runner.run(systemctl("is-enabled", unit))
    if enabled.ok and enabled.output.strip() == "enabled":
        return UnitState.INSTALLED_ENABLED
    return UnitState.INSTALLED_DISABLED
