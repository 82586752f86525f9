"""
Shared test fixtures and configuration.
"""

import logging
from pathlib import Path

import pytest

from provisioner.adapters.mock import MockRunner
from provisioner.core.config.settings import Settings
from provisioner.core.context import ProvisionContext
from provisioner.core.models.layout import InstalledLayout
from provisioner.core.services.workspace import BuildWorkspace
from tests.simulated_hosts import make_environment


@pytest.fixture
def layout(tmp_path: Path) -> InstalledLayout:
    """Installed layout rooted under a temporary directory."""
    root = tmp_path / "host"
    return InstalledLayout(
        install_dir=root / "opt" / "proxy-balancer",
        config_dir=root / "etc" / "proxy-balancer",
        log_dir=root / "var" / "log" / "proxy-balancer",
        unit_dir=root / "etc" / "systemd" / "system",
    )


@pytest.fixture
def settings(layout: InstalledLayout) -> Settings:
    """Default settings pointed at the temporary layout."""
    return Settings(layout=layout)


@pytest.fixture
def ctx(settings: Settings) -> ProvisionContext:
    """Debian-family context."""
    return ProvisionContext(settings=settings, environment=make_environment())


@pytest.fixture
def mock_runner() -> MockRunner:
    return MockRunner()


@pytest.fixture
def workspace_dir(tmp_path: Path) -> Path:
    """Base directory for build workspaces created during a test."""
    base = tmp_path / "tmp"
    base.mkdir()
    return base


@pytest.fixture(autouse=True)
def _no_leaked_workspace():
    """Fail loudly if a test leaves a workspace acquired."""
    yield
    live = BuildWorkspace.live()
    if live is not None:
        live.release()
        pytest.fail("test leaked a live BuildWorkspace")


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Undo setup_logging() calls made by the CLI under test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
