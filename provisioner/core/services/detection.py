"""
Environment detection — distribution identity and package manager.

Read-only: parses host identification files and searches PATH for known
package-manager executables. Produces the frozen ``Environment`` every
later component keys its command templates on.
"""

from __future__ import annotations

import logging
import platform
import shlex
from pathlib import Path

from provisioner.adapters.base import CommandRunner
from provisioner.core.errors import UnsupportedHostError
from provisioner.core.models.environment import Environment, PackageManagerKind

logger = logging.getLogger(__name__)

OS_RELEASE = Path("/etc/os-release")
REDHAT_RELEASE = Path("/etc/redhat-release")
DEBIAN_VERSION = Path("/etc/debian_version")

# Debian family first, then the two RPM tools, then Arch, then openSUSE.
SEARCH_ORDER: tuple[PackageManagerKind, ...] = (
    PackageManagerKind.APT,
    PackageManagerKind.DNF,
    PackageManagerKind.YUM,
    PackageManagerKind.PACMAN,
    PackageManagerKind.ZYPPER,
)


def parse_os_release(text: str) -> dict[str, str]:
    """Parse ``KEY=value`` lines from os-release into a dict.

    Values may be quoted (single or double); comments and blank lines
    are ignored.
    """
    fields: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, raw = line.partition("=")
        try:
            parts = shlex.split(raw)
        except ValueError:
            parts = [raw.strip("\"'")]
        fields[key.strip()] = parts[0] if parts else ""
    return fields


def detect_distro(
    os_release: Path = OS_RELEASE,
    redhat_release: Path = REDHAT_RELEASE,
    debian_version: Path = DEBIAN_VERSION,
) -> dict[str, str]:
    """Identify the distribution.

    Returns::

        {"id": "ubuntu", "family": "debian", "name": "Ubuntu 24.04 LTS",
         "version_id": "24.04", "codename": "noble"}
    """
    info = {"id": "unknown", "family": "", "name": "", "version_id": "", "codename": ""}

    if os_release.is_file():
        try:
            fields = parse_os_release(os_release.read_text(encoding="utf-8"))
        except OSError as e:
            logger.warning("Cannot read %s: %s", os_release, e)
            fields = {}
        info.update({
            "id": fields.get("ID", "unknown").lower() or "unknown",
            "family": fields.get("ID_LIKE", ""),
            "name": fields.get("PRETTY_NAME", ""),
            "version_id": fields.get("VERSION_ID", ""),
            "codename": fields.get("VERSION_CODENAME", "")
                        or fields.get("UBUNTU_CODENAME", ""),
        })
    elif redhat_release.is_file():
        info["id"] = "rhel"
    elif debian_version.is_file():
        info["id"] = "debian"

    return info


def detect_package_manager(runner: CommandRunner) -> PackageManagerKind | None:
    """First supported package manager found on PATH, in search order."""
    for kind in SEARCH_ORDER:
        if runner.has(kind.executable):
            return kind
    return None


def detect_environment(
    runner: CommandRunner,
    os_release: Path = OS_RELEASE,
    redhat_release: Path = REDHAT_RELEASE,
    debian_version: Path = DEBIAN_VERSION,
) -> Environment:
    """Detect the host and select the package manager.

    Raises:
        UnsupportedHostError: If none of the supported package managers
            is installed. There is no "unknown" continuation path.
    """
    distro = detect_distro(os_release, redhat_release, debian_version)
    logger.info("Detected distribution: %s", distro["id"])

    kind = detect_package_manager(runner)
    if kind is None:
        raise UnsupportedHostError(
            "No supported package manager found",
            "expected one of: " + ", ".join(k.executable for k in SEARCH_ORDER),
        )
    logger.info("Using package manager: %s", kind.value)

    return Environment(
        distro_id=distro["id"],
        distro_family=distro["family"],
        distro_name=distro["name"],
        version_id=distro["version_id"],
        codename=distro["codename"],
        arch=platform.machine(),
        package_manager=kind,
    )
