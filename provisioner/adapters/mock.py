"""
Mock runner — test double for every external command.

Simulates the host without touching it. By default every command
succeeds; responses can be configured per argv prefix, and handlers
can mutate the simulated host (e.g. make ``java`` appear on PATH once
the install command has run).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Optional

from provisioner.adapters.base import CommandRunner
from provisioner.core.models.receipt import Receipt

Handler = Callable[[list[str], Any], Optional[Receipt]]


class MockRunner(CommandRunner):
    """Universal mock runner for testing.

    Later registrations win over earlier ones for the same prefix.
    """

    def __init__(
        self,
        binaries: tuple[str, ...] | list[str] = (),
        default_output: str = "[mock] executed",
    ):
        self.binaries: set[str] = set(binaries)
        self._default_output = default_output
        self._responses: list[tuple[tuple[str, ...], Receipt | Handler]] = []
        self._call_log: list[dict] = []

    @property
    def name(self) -> str:
        return "mock"

    @property
    def call_log(self) -> list[dict]:
        """Every ``{"cmd", "cwd", "input"}`` this mock has received."""
        return self._call_log

    @property
    def commands(self) -> list[list[str]]:
        """Argv of every call, in order."""
        return [entry["cmd"] for entry in self._call_log]

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def called(self, *prefix: str) -> bool:
        """Whether any call started with ``prefix``."""
        return any(_matches(cmd, prefix) for cmd in self.commands)

    def which(self, binary: str) -> str | None:
        return f"/usr/bin/{binary}" if binary in self.binaries else None

    def set_response(self, prefix: tuple[str, ...], receipt: Receipt) -> None:
        """Return ``receipt`` for commands starting with ``prefix``."""
        self._responses.append((tuple(prefix), receipt))

    def set_output(self, prefix: tuple[str, ...], output: str = "", stderr: str = "") -> None:
        """Succeed with the given stdout/stderr."""
        self._responses.append((
            tuple(prefix),
            Receipt.success(command=list(prefix), output=output, metadata={"stderr": stderr}),
        ))

    def set_failure(
        self,
        prefix: tuple[str, ...],
        error: str = "Mock failure",
        return_code: int = 1,
    ) -> None:
        """Configure commands starting with ``prefix`` to fail."""
        self._responses.append((
            tuple(prefix),
            Receipt.failure(command=list(prefix), error=error, return_code=return_code),
        ))

    def on(self, prefix: tuple[str, ...], handler: Handler) -> None:
        """Call ``handler(cmd, cwd)``; a None return means default success."""
        self._responses.append((tuple(prefix), handler))

    def run(
        self,
        cmd: list[str],
        *,
        cwd: Path | str | None = None,
        input_text: str | None = None,
        timeout: int | None = None,
    ) -> Receipt:
        self._call_log.append({"cmd": list(cmd), "cwd": cwd, "input": input_text})

        for prefix, response in reversed(self._responses):
            if not _matches(cmd, prefix):
                continue
            if isinstance(response, Receipt):
                return response.model_copy(update={"command": list(cmd)})
            receipt = response(list(cmd), cwd)
            if receipt is not None:
                return receipt
            break

        return Receipt.success(
            command=cmd,
            output=self._default_output,
            metadata={"mock": True},
        )

    def reset(self) -> None:
        """Clear call log and custom responses."""
        self._call_log.clear()
        self._responses.clear()


def _matches(cmd: list[str], prefix: tuple[str, ...]) -> bool:
    return tuple(cmd[: len(prefix)]) == prefix
