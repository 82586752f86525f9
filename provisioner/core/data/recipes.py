"""
Dependency recipes — static install data.

Pure data. No logic beyond assembling steps from the package-manager
builders. Placeholders ``{codename}``, ``{version_id}`` and ``{arch}``
are substituted from the detected Environment when a step runs.
"""

from __future__ import annotations

from provisioner.core.models.dependency import DependencySpec, InstallChannel, InstallStep
from provisioner.core.models.environment import PackageManagerKind as PM
from provisioner.core.services.package_managers import package_manager

ADOPTIUM_KEY_URL = "https://packages.adoptium.net/artifactory/api/gpg/key/public"
ADOPTIUM_KEYRING = "/usr/share/keyrings/adoptium.gpg"
ADOPTIUM_APT_LIST = "/etc/apt/sources.list.d/adoptium.list"
ADOPTIUM_YUM_REPO = "/etc/yum.repos.d/adoptium.repo"

MAVEN_VERSION = "3.9.6"
MAVEN_URL = (
    f"https://dlcdn.apache.org/maven/maven-3/{MAVEN_VERSION}/binaries/"
    f"apache-maven-{MAVEN_VERSION}-bin.tar.gz"
)
MAVEN_HOME = f"/opt/apache-maven-{MAVEN_VERSION}"
MAVEN_LINK = "/usr/local/bin/mvn"

# java -version prints e.g.  openjdk version "21.0.2" 2024-01-16
JAVA_VERSION_PATTERN = r'version\s+"([^"]+)"'

_ADOPTIUM_RPM_REPO = """\
[Adoptium]
name=Adoptium
baseurl=https://packages.adoptium.net/artifactory/rpm/rhel/$releasever/$basearch
enabled=1
gpgcheck=1
gpgkey=https://packages.adoptium.net/artifactory/api/gpg/key/public
"""


def _channel(name: str, *steps: InstallStep) -> InstallChannel:
    return InstallChannel(name=name, steps=steps)


def java_runtime(major: int = 21) -> DependencySpec:
    """Recipe for a headless Java runtime of at least ``major``."""
    headless = f"java-{major}-openjdk-headless"
    temurin = f"temurin-{major}-jre"
    apt, dnf, yum = package_manager(PM.APT), package_manager(PM.DNF), package_manager(PM.YUM)
    pacman, zypper = package_manager(PM.PACMAN), package_manager(PM.ZYPPER)

    return DependencySpec(
        name="java",
        label=f"Java {major}",
        binaries=("java",),
        minimum_major=major,
        version_command=("java", "-version"),
        version_pattern=JAVA_VERSION_PATTERN,
        primary={
            PM.APT: _channel("primary", *apt.install_steps(f"openjdk-{major}-jre-headless")),
            PM.DNF: _channel("primary", *dnf.install_steps(headless)),
            PM.YUM: _channel("primary", *yum.install_steps(headless)),
            PM.PACMAN: _channel("primary", *pacman.install_steps(f"jre{major}-openjdk-headless")),
            PM.ZYPPER: _channel("primary", *zypper.install_steps(headless)),
        },
        fallback={
            PM.APT: _channel(
                "adoptium",
                InstallStep.command(*apt.install("apt-transport-https", "gnupg")),
                InstallStep.fetch_pipe(
                    ADOPTIUM_KEY_URL, "gpg", "--dearmor", "--yes", "-o", ADOPTIUM_KEYRING,
                ),
                InstallStep.write_file(
                    ADOPTIUM_APT_LIST,
                    f"deb [signed-by={ADOPTIUM_KEYRING}] "
                    "https://packages.adoptium.net/artifactory/deb {codename} main\n",
                ),
                *apt.install_steps(temurin),
            ),
            PM.DNF: _channel(
                "adoptium",
                InstallStep.write_file(ADOPTIUM_YUM_REPO, _ADOPTIUM_RPM_REPO),
                *dnf.install_steps(temurin),
            ),
            PM.YUM: _channel(
                "adoptium",
                InstallStep.write_file(ADOPTIUM_YUM_REPO, _ADOPTIUM_RPM_REPO),
                *yum.install_steps(temurin),
            ),
            PM.PACMAN: _channel(
                "jdk",
                *pacman.install_steps(f"jdk{major}-openjdk"),
            ),
            PM.ZYPPER: _channel(
                "adoptium",
                InstallStep.command(
                    "zypper", "addrepo", "--gpgcheck-strict", "-f",
                    "https://packages.adoptium.net/artifactory/rpm/opensuse/{version_id}/{arch}",
                    "adoptium",
                ),
                *zypper.install_steps(temurin),
            ),
        },
    )


def build_tooling() -> DependencySpec:
    """Recipe for git, Maven and curl. Presence is enough, no version gate."""
    apt, dnf, yum = package_manager(PM.APT), package_manager(PM.DNF), package_manager(PM.YUM)
    pacman, zypper = package_manager(PM.PACMAN), package_manager(PM.ZYPPER)

    return DependencySpec(
        name="build-tooling",
        label="build tools (git, maven, curl)",
        binaries=("git", "mvn", "curl"),
        primary={
            PM.APT: _channel("primary", *apt.install_steps("git", "maven", "curl")),
            PM.DNF: _channel("primary", *dnf.install_steps("git", "maven", "curl")),
            # Maven is not in the default repositories here
            PM.YUM: _channel("primary", *yum.install_steps("git", "curl")),
            PM.PACMAN: _channel("primary", *pacman.install_steps("git", "maven", "curl")),
            PM.ZYPPER: _channel("primary", *zypper.install_steps("git", "maven", "curl")),
        },
        fallback={
            PM.YUM: _channel(
                "manual-download",
                InstallStep.fetch_archive(MAVEN_URL, "/opt"),
                InstallStep.symlink(MAVEN_LINK, f"{MAVEN_HOME}/bin/mvn"),
            ),
        },
    )
