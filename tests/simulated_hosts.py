"""
Test fixtures — a simulated Linux host behind MockRunner.

The host keeps just enough state for the provisioner to observe the
effects of its own commands:

    - binaries on PATH (package installs add them)
    - the installed Java version (``java -version`` reports it on stderr)
    - system users and groups (useradd / userdel / groupadd / groupdel)
    - file ownership (``shutil.chown`` is redirected here)
    - enabled / active systemd units
    - what ``git clone`` and ``mvn package`` leave on disk

``host.install(monkeypatch)`` wires the host into the provisioner's
module-level seams (user lookups, chown, downloads, repo file writes).
"""

from __future__ import annotations

from pathlib import Path

from provisioner.adapters.mock import MockRunner
from provisioner.core.models.environment import Environment, PackageManagerKind
from provisioner.core.models.layout import UNIT_NAME
from provisioner.core.models.receipt import Receipt

PM = PackageManagerKind

INSTALL_PREFIX: dict[PackageManagerKind, tuple[str, ...]] = {
    PM.APT: ("apt-get", "install"),
    PM.DNF: ("dnf", "install"),
    PM.YUM: ("yum", "install"),
    PM.PACMAN: ("pacman", "-Sy"),
    PM.ZYPPER: ("zypper", "--non-interactive", "install"),
}

# package name → binary it provides
_PROVIDES = {
    "git": "git",
    "maven": "mvn",
    "curl": "curl",
}

UNIT_TEXT = "[Unit]\nDescription=SOCKS Proxy Load Balancer\n"


def make_environment(kind: PackageManagerKind = PM.APT, **overrides) -> Environment:
    """A plausible Environment for ``kind``."""
    defaults = {
        PM.APT: {"distro_id": "debian", "version_id": "12", "codename": "bookworm"},
        PM.DNF: {"distro_id": "fedora", "distro_family": "", "version_id": "40"},
        PM.YUM: {"distro_id": "centos", "distro_family": "rhel fedora", "version_id": "7"},
        PM.PACMAN: {"distro_id": "arch", "version_id": ""},
        PM.ZYPPER: {"distro_id": "opensuse-leap", "distro_family": "suse", "version_id": "15.5"},
    }[kind]
    values = {"arch": "x86_64", "package_manager": kind, **defaults, **overrides}
    return Environment(**values)


class SimulatedHost:
    """Mutable fake host driven by MockRunner handlers."""

    def __init__(
        self,
        kind: PackageManagerKind = PM.APT,
        *,
        java: str | None = None,
        tools: tuple[str, ...] = (),
        installs_java: str = "21.0.2",
        broken_packages: tuple[str, ...] = (),
        produces_artifact: bool = True,
        ships_unit: bool = True,
    ):
        self.kind = kind
        self.java_version = java
        self.installs_java = installs_java
        self.broken_packages = set(broken_packages)
        self.produces_artifact = produces_artifact
        self.ships_unit = ships_unit

        self.users: set[str] = set()
        self.groups: set[str] = set()
        self.owners: dict[str, tuple[str, str]] = {}
        self.enabled: set[str] = set()
        self.active: set[str] = set()
        self.written_files: dict[str, str] = {}
        self.symlinks: dict[str, str] = {}
        self.downloads: list[str] = []

        binaries = [kind.executable, *tools]
        if java:
            binaries.append("java")
        self.runner = MockRunner(binaries=binaries)
        self._wire_handlers()

    # ── Wiring ──────────────────────────────────────────────────

    def install(self, monkeypatch) -> SimulatedHost:
        from provisioner.core.services import dependencies, download, provisioning

        monkeypatch.setattr(provisioning, "user_exists", lambda u: u in self.users)
        monkeypatch.setattr(provisioning, "group_exists", lambda g: g in self.groups)
        monkeypatch.setattr(provisioning.shutil, "chown", self._chown)
        monkeypatch.setattr(dependencies, "_write_file", self._write_file)
        monkeypatch.setattr(dependencies, "_force_symlink", self._symlink)
        monkeypatch.setattr(download, "fetch_bytes", self._fetch)
        monkeypatch.setattr(download, "extract_tarball", lambda data, target: ["apache-maven"])
        return self

    def _wire_handlers(self) -> None:
        r = self.runner
        r.on(("java", "-version"), self._java_version)
        r.on(INSTALL_PREFIX[self.kind], self._pkg_install)
        r.on(("git", "clone"), self._git_clone)
        r.on(("mvn",), self._mvn)
        r.on(("groupadd",), self._groupadd)
        r.on(("useradd",), self._useradd)
        r.on(("userdel",), self._userdel)
        r.on(("groupdel",), self._groupdel)
        r.on(("systemctl",), self._systemctl)

    # ── Handlers ────────────────────────────────────────────────

    def _java_version(self, cmd, cwd):
        if not self.java_version:
            return Receipt.failure(command=cmd, error="java: command not found", return_code=127)
        banner = f'openjdk version "{self.java_version}" 2024-01-16\nOpenJDK Runtime Environment'
        return Receipt.success(command=cmd, output="", metadata={"stderr": banner})

    def _pkg_install(self, cmd, cwd):
        prefix = INSTALL_PREFIX[self.kind]
        packages = [a for a in cmd[len(prefix):] if not a.startswith("-")]
        for pkg in packages:
            if pkg in self.broken_packages:
                return Receipt.failure(
                    command=cmd, error=f"E: Unable to locate package {pkg}", return_code=100,
                )
        for pkg in packages:
            if "jre" in pkg or "jdk" in pkg:
                self.java_version = self.installs_java
                self.runner.binaries.add("java")
            if pkg in _PROVIDES:
                self.runner.binaries.add(_PROVIDES[pkg])
        return None

    def _git_clone(self, cmd, cwd):
        dest = Path(cmd[-1])
        dest.mkdir(parents=True, exist_ok=True)
        if self.ships_unit:
            (dest / "systemd").mkdir()
            (dest / "systemd" / UNIT_NAME).write_text(UNIT_TEXT)
        (dest / "pom.xml").write_text("<project/>")
        return None

    def _mvn(self, cmd, cwd):
        if self.produces_artifact:
            target = Path(cwd) / "target"
            target.mkdir(exist_ok=True)
            (target / "proxy-balancer.jar").write_bytes(b"PK\x03\x04jar")
        return None

    def _groupadd(self, cmd, cwd):
        self.groups.add(cmd[-1])
        return None

    def _useradd(self, cmd, cwd):
        self.users.add(cmd[-1])
        return None

    def _userdel(self, cmd, cwd):
        name = cmd[-1]
        if name not in self.users:
            return Receipt.failure(command=cmd, error=f"userdel: user '{name}' does not exist", return_code=6)
        self.users.discard(name)
        self.groups.discard(name)
        return None

    def _groupdel(self, cmd, cwd):
        name = cmd[-1]
        if name not in self.groups:
            return Receipt.failure(command=cmd, error=f"groupdel: group '{name}' does not exist", return_code=6)
        self.groups.discard(name)
        return None

    def _systemctl(self, cmd, cwd):
        verb, unit = cmd[1], cmd[-1]
        if verb == "enable":
            self.enabled.add(unit)
        elif verb == "disable":
            self.enabled.discard(unit)
        elif verb == "start":
            self.active.add(unit)
        elif verb == "stop":
            if unit not in self.active:
                return Receipt.failure(command=cmd, error=f"Unit {unit} not loaded.", return_code=5)
            self.active.discard(unit)
        elif verb == "is-active":
            if unit not in self.active:
                return Receipt.failure(command=cmd, error="", return_code=3)
        elif verb == "is-enabled":
            if unit in self.enabled:
                return Receipt.success(command=cmd, output="enabled")
            return Receipt.failure(command=cmd, error="", output="disabled", return_code=1)
        return None

    # ── Seams ───────────────────────────────────────────────────

    def _chown(self, path, user=None, group=None):
        if user is not None and user not in self.users:
            raise LookupError(f"no such user: {user!r}")
        if group is not None and group not in self.groups:
            raise LookupError(f"no such group: {group!r}")
        self.owners[str(path)] = (user, group)

    def _write_file(self, path: Path, content: str) -> None:
        self.written_files[str(path)] = content

    def _symlink(self, link: Path, target: Path) -> None:
        self.symlinks[str(link)] = str(target)
        if link.name == "mvn":
            self.runner.binaries.add("mvn")

    def _fetch(self, url: str) -> bytes:
        self.downloads.append(url)
        return b"-----BEGIN PGP PUBLIC KEY BLOCK-----\n"
