"""
Runner base — the protocol contract between services and the host.

Services never call ``subprocess`` or ``shutil.which`` directly; they
go through a CommandRunner. That keeps every external side effect
behind one seam that tests replace with ``MockRunner``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from provisioner.core.models.receipt import Receipt


class CommandRunner(ABC):
    """Abstract base class for command runners.

    Runners execute argv lists and return receipts.
    They NEVER raise for a failing command — failures are captured
    in the Receipt with status='failed'.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The runner identifier (e.g., 'subprocess', 'mock')."""

    @abstractmethod
    def which(self, binary: str) -> str | None:
        """Return the resolved path of ``binary`` on PATH, or None."""

    @abstractmethod
    def run(
        self,
        cmd: list[str],
        *,
        cwd: Path | str | None = None,
        input_text: str | None = None,
        timeout: int | None = None,
    ) -> Receipt:
        """Run ``cmd`` to completion and return a receipt.

        ``timeout`` of None blocks until the command exits.
        """

    def has(self, binary: str) -> bool:
        """Whether ``binary`` is on PATH."""
        return self.which(binary) is not None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
