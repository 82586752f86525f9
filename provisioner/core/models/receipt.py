"""
Receipt model — the execution contract for external commands.

Every external command the provisioner issues (package managers, git,
maven, useradd, systemctl) is run through a runner that returns a
Receipt. Runners NEVER raise for a failing command: a non-zero exit
is data, and callers branch on ``receipt.ok`` instead of chaining
exit codes.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Receipt(BaseModel):
    """Result of one external command."""

    command: list[str] = Field(default_factory=list)
    status: Literal["ok", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    ended_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    return_code: int | None = None
    output: str = ""
    error: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the command succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the command failed."""
        return self.status == "failed"

    @property
    def display(self) -> str:
        """The command as a single printable line."""
        return " ".join(self.command)

    @classmethod
    def success(
        cls,
        command: list[str],
        output: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a success receipt."""
        kwargs.setdefault("return_code", 0)
        return cls(command=list(command), status="ok", output=output, **kwargs)

    @classmethod
    def failure(
        cls,
        command: list[str],
        error: str,
        **kwargs: Any,
    ) -> Receipt:
        """Create a failure receipt."""
        return cls(command=list(command), status="failed", error=error, **kwargs)

    @classmethod
    def skip(
        cls,
        command: list[str],
        reason: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a skip receipt."""
        return cls(command=list(command), status="skipped", output=reason, **kwargs)
