"""
Fatal error taxonomy.

Every fatal condition is a ``ProvisionError`` subclass carrying a
human-readable message and a reason. Core services raise them; the
CLI edge logs ``message`` + ``reason`` and exits 1. Best-effort
teardown problems during uninstall are logged, never raised.
"""

from __future__ import annotations


class ProvisionError(Exception):
    """Base class for fatal provisioning errors."""

    category = "provision"

    def __init__(self, message: str, reason: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.reason = reason

    def __str__(self) -> str:
        if self.reason:
            return f"{self.message}: {self.reason}"
        return self.message


class PrivilegeError(ProvisionError):
    """Not running with the required elevation."""

    category = "privilege"


class UnsupportedHostError(ProvisionError):
    """No supported package manager was found on the host."""

    category = "environment"


class DependencyError(ProvisionError):
    """A dependency is missing or too old after exhausting every channel."""

    category = "dependency"


class BuildError(ProvisionError):
    """Clone, build, or artifact verification failed."""

    category = "build"


class ServiceError(ProvisionError):
    """The init system refused to register the unit."""

    category = "service"


class ConfigError(ProvisionError):
    """An environment-variable override is invalid."""

    category = "config"
