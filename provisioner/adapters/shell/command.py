"""
Subprocess runner — execute argv lists on the host.

The SINGLE PLACE where ``subprocess.run`` is called. Logging and
error capture for every package-manager, git, maven, useradd and
systemctl invocation is centralised here.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from pathlib import Path

from provisioner.adapters.base import CommandRunner
from provisioner.core.models.receipt import Receipt

logger = logging.getLogger(__name__)

# Keep receipts small; package managers can be very chatty.
_OUTPUT_TAIL = 4000


class SubprocessRunner(CommandRunner):
    """Run commands with ``subprocess.run`` and capture their output."""

    @property
    def name(self) -> str:
        return "subprocess"

    def which(self, binary: str) -> str | None:
        return shutil.which(binary)

    def run(
        self,
        cmd: list[str],
        *,
        cwd: Path | str | None = None,
        input_text: str | None = None,
        timeout: int | None = None,
    ) -> Receipt:
        logger.debug("Executing: %s (cwd=%s)", " ".join(cmd), cwd)
        start = time.monotonic()

        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                input=input_text,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except FileNotFoundError:
            return Receipt.failure(
                command=cmd,
                error=f"Command not found: {cmd[0]}",
                return_code=127,
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                command=cmd,
                error=f"Command timed out after {timeout}s",
                metadata={"timeout": timeout},
            )
        except OSError as e:
            logger.exception("Subprocess error: %s", cmd)
            return Receipt.failure(command=cmd, error=f"Command execution error: {e}")

        elapsed_ms = int((time.monotonic() - start) * 1000)
        stdout = (result.stdout or "")[-_OUTPUT_TAIL:]
        stderr = (result.stderr or "")[-_OUTPUT_TAIL:]

        if result.returncode == 0:
            return Receipt.success(
                command=cmd,
                output=stdout.strip(),
                duration_ms=elapsed_ms,
                metadata={"stderr": stderr.strip()},
            )

        logger.debug("Command exited %d: %s", result.returncode, " ".join(cmd))
        return Receipt.failure(
            command=cmd,
            error=stderr.strip() or f"Command exited with code {result.returncode}",
            return_code=result.returncode,
            output=stdout.strip(),
            duration_ms=elapsed_ms,
        )
