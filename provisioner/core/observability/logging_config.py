"""
Logging configuration — central setup for the installer entrypoint.

Called once at startup by main.py.  Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

Levels are resolved in precedence order:
    CLI flag  >  PB_LOG_LEVEL env var  >  INFO (default)

Console lines are severity-tagged and colored::

    [INFO] Detected distribution: debian
    [SUCCESS] Java 21 is installed (required: 21+)
    [WARN] Java is not installed
    [ERROR] Failed to install Java 21

Optional file output via PB_LOG_FILE / PB_LOG_FILE_LEVEL env vars.
"""

from __future__ import annotations

import logging
import sys

import click

# Between INFO (20) and WARNING (30)
SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

# ── Format strings ──────────────────────────────────────────────

_FMT_CONSOLE = "%(message)s"

# DEBUG level — adds module context and line number
_FMT_DEBUG = "%(message)s  (%(name)s:%(lineno)d)"

# File output — always full detail, never colored
_FMT_FILE = "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

_TAGS: dict[int, tuple[str, str]] = {
    logging.DEBUG: ("DEBUG", "white"),
    logging.INFO: ("INFO", "blue"),
    SUCCESS: ("SUCCESS", "green"),
    logging.WARNING: ("WARN", "yellow"),
    logging.ERROR: ("ERROR", "red"),
    logging.CRITICAL: ("ERROR", "red"),
}


class SeverityTagFormatter(logging.Formatter):
    """Prefix each record with a colored ``[TAG]``."""

    def __init__(self, fmt: str, color: bool = True) -> None:
        super().__init__(fmt)
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        tag, fg = _TAGS.get(record.levelno, (record.levelname, "white"))
        label = f"[{tag}]"
        if self.color:
            label = click.style(label, fg=fg, bold=record.levelno == SUCCESS)
        return f"{label} {message}"


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    log_file_level: str | None = None,
    color: bool | None = None,
) -> None:
    """Configure Python logging for the entire process.

    Args:
        level: Log level name (DEBUG, INFO, SUCCESS, WARNING, ERROR).
        log_file: Optional path to a log file.
        log_file_level: Optional separate level for the log file.
            Defaults to the same as ``level``.
        color: Force colors on/off. Defaults to on when stderr is a TTY.
    """
    numeric_level = _parse_level(level)
    if color is None:
        color = sys.stderr.isatty()

    # ── Console handler (stderr) ────────────────────────────────
    fmt = _FMT_DEBUG if numeric_level <= logging.DEBUG else _FMT_CONSOLE
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(SeverityTagFormatter(fmt, color=color))

    # ── Root logger ─────────────────────────────────────────────
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root.setLevel(numeric_level)

    if log_file:
        attach_log_file(log_file, log_file_level or level)

    # Don't propagate exceptions from logging itself
    logging.raiseExceptions = False


def attach_log_file(log_file: str, log_file_level: str | None = None) -> None:
    """Add a full-detail file handler to the configured root logger.

    The installer calls this only after the root check, so a non-root
    invocation never creates the file.

    Args:
        log_file: Path to the log file (opened for append).
        log_file_level: Level for the file. Defaults to the root level.
    """
    root = logging.getLogger()
    file_level = _parse_level(log_file_level) if log_file_level else root.level

    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
    root.addHandler(fh)
    root.setLevel(min(root.level, file_level))


def log_success(logger: logging.Logger, msg: str, *args: object) -> None:
    """Log ``msg`` at the SUCCESS level."""
    logger.log(SUCCESS, msg, *args)


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.INFO
    name = level.upper()
    if name == "SUCCESS":
        return SUCCESS
    numeric = getattr(logging, name, None)
    if not isinstance(numeric, int):
        return logging.INFO
    return numeric
