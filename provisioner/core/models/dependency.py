"""
Dependency models — static install recipes and their resolution record.

A ``DependencySpec`` is pure data: how to check for a dependency and
which install channels exist per package-manager kind. Steps may carry
``{codename}``, ``{version_id}`` and ``{arch}`` placeholders that are
substituted from the detected Environment at execution time.

A ``Resolution`` records one dependency's walk through the two-tier
state machine::

    not_checked ─▶ checked_ok
         │
         └─▶ primary_attempted ─▶ resolved
                    │
                    └─▶ fallback_attempted ─▶ resolved | failed
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from provisioner.core.models.environment import PackageManagerKind
from provisioner.core.models.receipt import Receipt


class StepKind(str, Enum):
    """What an install step does."""

    COMMAND = "command"             # run argv
    WRITE_FILE = "write_file"       # write content to path
    FETCH_PIPE = "fetch_pipe"       # download an ASCII-armored url, feed it to argv on stdin
    FETCH_ARCHIVE = "fetch_archive" # download a tarball, extract into target
    SYMLINK = "symlink"             # point path at target


class InstallStep(BaseModel):
    """One action inside an install channel."""

    model_config = ConfigDict(frozen=True)

    kind: StepKind
    argv: tuple[str, ...] = ()
    path: str = ""
    content: str = ""
    url: str = ""
    target: str = ""

    @classmethod
    def command(cls, *argv: str) -> InstallStep:
        return cls(kind=StepKind.COMMAND, argv=argv)

    @classmethod
    def write_file(cls, path: str, content: str) -> InstallStep:
        return cls(kind=StepKind.WRITE_FILE, path=path, content=content)

    @classmethod
    def fetch_pipe(cls, url: str, *argv: str) -> InstallStep:
        return cls(kind=StepKind.FETCH_PIPE, url=url, argv=argv)

    @classmethod
    def fetch_archive(cls, url: str, target: str) -> InstallStep:
        return cls(kind=StepKind.FETCH_ARCHIVE, url=url, target=target)

    @classmethod
    def symlink(cls, path: str, target: str) -> InstallStep:
        return cls(kind=StepKind.SYMLINK, path=path, target=target)

    def describe(self) -> str:
        """Short one-line description for logs."""
        if self.kind == StepKind.COMMAND:
            return " ".join(self.argv)
        if self.kind == StepKind.WRITE_FILE:
            return f"write {self.path}"
        if self.kind == StepKind.FETCH_PIPE:
            return f"{self.url} | {' '.join(self.argv)}"
        if self.kind == StepKind.FETCH_ARCHIVE:
            return f"extract {self.url} -> {self.target}"
        return f"ln -sf {self.target} {self.path}"


class InstallChannel(BaseModel):
    """An ordered list of steps that installs a dependency."""

    model_config = ConfigDict(frozen=True)

    name: str
    steps: tuple[InstallStep, ...] = ()


class DependencySpec(BaseModel):
    """Static recipe for one runtime dependency or tool group.

    ``minimum_major`` of ``None`` means presence of every binary in
    ``binaries`` is sufficient (build tooling has no version gate).
    """

    model_config = ConfigDict(frozen=True)

    name: str
    label: str = ""
    binaries: tuple[str, ...] = ()
    minimum_major: int | None = None
    version_command: tuple[str, ...] = ()
    version_pattern: str = ""
    primary: dict[PackageManagerKind, InstallChannel] = Field(default_factory=dict)
    fallback: dict[PackageManagerKind, InstallChannel] = Field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.label or self.name


class ResolutionState(str, Enum):
    """States of the per-dependency resolution machine."""

    NOT_CHECKED = "not_checked"
    CHECKED_OK = "checked_ok"
    PRIMARY_ATTEMPTED = "primary_attempted"
    FALLBACK_ATTEMPTED = "fallback_attempted"
    RESOLVED = "resolved"
    FAILED = "failed"


class VersionCheck(BaseModel):
    """Outcome of probing a dependency."""

    satisfied: bool
    found_version: str | None = None
    major: int | None = None
    missing: list[str] = Field(default_factory=list)
    message: str = ""


class Resolution(BaseModel):
    """Record of one dependency's trip through the state machine."""

    dependency: str
    state: ResolutionState = ResolutionState.NOT_CHECKED
    history: list[ResolutionState] = Field(
        default_factory=lambda: [ResolutionState.NOT_CHECKED],
    )
    found_version: str | None = None
    channel_used: str | None = None
    receipts: list[Receipt] = Field(default_factory=list)

    def advance(self, state: ResolutionState) -> None:
        """Move to ``state`` and remember the transition."""
        self.state = state
        self.history.append(state)

    @property
    def installed(self) -> bool:
        """Whether an install channel had to run."""
        return self.state == ResolutionState.RESOLVED
