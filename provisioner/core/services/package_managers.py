"""
Package-manager command builders.

One typed builder per ``PackageManagerKind`` turns "install these
packages" into argv lists. Nothing here executes anything; the
resolver runs the resulting steps through a CommandRunner.
"""

from __future__ import annotations

from provisioner.core.models.dependency import InstallStep
from provisioner.core.models.environment import PackageManagerKind

# kind → (refresh argv or None, install argv prefix)
_TEMPLATES: dict[PackageManagerKind, tuple[tuple[str, ...] | None, tuple[str, ...]]] = {
    PackageManagerKind.APT:    (("apt-get", "update", "-qq"),
                                ("apt-get", "install", "-y")),
    PackageManagerKind.DNF:    (None,
                                ("dnf", "install", "-y")),
    PackageManagerKind.YUM:    (None,
                                ("yum", "install", "-y")),
    PackageManagerKind.PACMAN: (None,
                                ("pacman", "-Sy", "--noconfirm")),
    PackageManagerKind.ZYPPER: (None,
                                ("zypper", "--non-interactive", "install")),
}


class PackageManager:
    """Command templates for one package-manager kind."""

    def __init__(self, kind: PackageManagerKind):
        self.kind = kind
        self._refresh, self._install = _TEMPLATES[kind]

    def refresh(self) -> list[str] | None:
        """Metadata refresh argv, or None when install refreshes implicitly."""
        return list(self._refresh) if self._refresh else None

    def install(self, *packages: str) -> list[str]:
        """Argv installing ``packages`` non-interactively."""
        return [*self._install, *packages]

    def install_steps(self, *packages: str, refresh: bool = True) -> tuple[InstallStep, ...]:
        """Steps for a channel: optional refresh, then install."""
        steps: list[InstallStep] = []
        refresh_argv = self.refresh() if refresh else None
        if refresh_argv:
            steps.append(InstallStep.command(*refresh_argv))
        steps.append(InstallStep.command(*self.install(*packages)))
        return tuple(steps)

    def __repr__(self) -> str:
        return f"<PackageManager kind={self.kind.value!r}>"


def package_manager(kind: PackageManagerKind) -> PackageManager:
    """Builder for ``kind``."""
    return PackageManager(kind)
