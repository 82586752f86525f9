"""
Build workspace — ephemeral directory with guaranteed release.

Acquiring the workspace creates the directory AND registers its
release in the same call: an ``atexit`` hook, plus SIGTERM/SIGHUP
handlers that turn the signal into ``SystemExit`` so the ``with``
block unwinds normally. ``release()`` is idempotent, so whichever
path gets there first (context exit, atexit, explicit call) does the
work and the rest are no-ops.

    with BuildWorkspace() as workspace:
        build_artifact(ctx, workspace, runner)

At most one workspace is live per process.
"""

from __future__ import annotations

import atexit
import logging
import shutil
import signal
import tempfile
import threading
from pathlib import Path
from types import FrameType
from typing import Any, ClassVar

logger = logging.getLogger(__name__)

_RELEASE_SIGNALS = (signal.SIGTERM, signal.SIGHUP)


class BuildWorkspace:
    """Scoped temporary directory owning the cloned source tree."""

    _live: ClassVar[BuildWorkspace | None] = None

    def __init__(self, prefix: str = "proxy-balancer-build-", base_dir: Path | None = None):
        self._prefix = prefix
        self._base_dir = base_dir
        self._path: Path | None = None
        self._released = False
        self._previous_handlers: dict[int, Any] = {}

    @property
    def path(self) -> Path:
        """The workspace directory. Only valid while acquired."""
        if self._path is None or self._released:
            raise RuntimeError("Build workspace is not acquired")
        return self._path

    @property
    def released(self) -> bool:
        return self._released

    @classmethod
    def live(cls) -> BuildWorkspace | None:
        """The currently acquired workspace, if any."""
        return cls._live

    def acquire(self) -> Path:
        """Create the directory and register its release."""
        if BuildWorkspace._live is not None:
            raise RuntimeError("A build workspace is already live in this process")
        if self._path is not None:
            raise RuntimeError("Build workspace cannot be re-acquired")

        self._path = Path(tempfile.mkdtemp(prefix=self._prefix, dir=self._base_dir))
        BuildWorkspace._live = self
        atexit.register(self.release)
        self._install_signal_handlers()
        logger.debug("Acquired build workspace %s", self._path)
        return self._path

    def release(self) -> None:
        """Remove the directory. Safe to call any number of times."""
        if self._released or self._path is None:
            return
        self._released = True

        atexit.unregister(self.release)
        self._restore_signal_handlers()
        if BuildWorkspace._live is self:
            BuildWorkspace._live = None

        if self._path.exists():
            logger.info("Cleaning up temporary files...")
            try:
                shutil.rmtree(self._path)
            except OSError as e:
                logger.warning("Could not remove %s: %s", self._path, e)

    def __enter__(self) -> Path:
        return self.acquire()

    def __exit__(self, *exc_info: object) -> None:
        self.release()

    # ── Signals ─────────────────────────────────────────────────

    def _install_signal_handlers(self) -> None:
        # signal.signal only works from the main thread
        if threading.current_thread() is not threading.main_thread():
            return
        for signum in _RELEASE_SIGNALS:
            self._previous_handlers[signum] = signal.signal(signum, self._on_signal)

    def _restore_signal_handlers(self) -> None:
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers.clear()

    def _on_signal(self, signum: int, frame: FrameType | None) -> None:
        logger.warning("Interrupted by %s", signal.Signals(signum).name)
        raise SystemExit(128 + signum)
