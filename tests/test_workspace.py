"""
Tests for the build workspace — creation, guaranteed release, signals.
"""

from __future__ import annotations

import atexit
import os
import signal

import pytest

from provisioner.core.services.workspace import BuildWorkspace


class TestBuildWorkspace:
    def test_created_and_removed(self, workspace_dir):
        with BuildWorkspace(base_dir=workspace_dir) as path:
            assert path.is_dir()
            assert path.parent == workspace_dir
            assert path.name.startswith("proxy-balancer-build-")
            (path / "repo").mkdir()
            (path / "repo" / "pom.xml").write_text("<project/>")
        assert not path.exists()
        assert list(workspace_dir.iterdir()) == []

    def test_removed_on_exception(self, workspace_dir):
        with pytest.raises(ValueError):
            with BuildWorkspace(base_dir=workspace_dir) as path:
                raise ValueError("build blew up")
        assert not path.exists()
        assert BuildWorkspace.live() is None

    def test_release_idempotent(self, workspace_dir):
        workspace = BuildWorkspace(base_dir=workspace_dir)
        path = workspace.acquire()
        workspace.release()
        workspace.release()
        assert workspace.released
        assert not path.exists()

    def test_release_before_acquire_is_noop(self):
        workspace = BuildWorkspace()
        workspace.release()
        assert not workspace.released

    def test_path_requires_acquire(self, workspace_dir):
        workspace = BuildWorkspace(base_dir=workspace_dir)
        with pytest.raises(RuntimeError):
            _ = workspace.path
        with workspace:
            assert workspace.path.is_dir()
        with pytest.raises(RuntimeError):
            _ = workspace.path

    def test_single_live_workspace(self, workspace_dir):
        with BuildWorkspace(base_dir=workspace_dir) as first:
            with pytest.raises(RuntimeError, match="already live"):
                BuildWorkspace(base_dir=workspace_dir).acquire()
            assert first.is_dir()

    def test_cannot_reacquire(self, workspace_dir):
        workspace = BuildWorkspace(base_dir=workspace_dir)
        with workspace:
            pass
        with pytest.raises(RuntimeError, match="re-acquired"):
            workspace.acquire()

    def test_live_tracks_workspace(self, workspace_dir):
        workspace = BuildWorkspace(base_dir=workspace_dir)
        assert BuildWorkspace.live() is None
        with workspace:
            assert BuildWorkspace.live() is workspace
        assert BuildWorkspace.live() is None

    def test_release_after_external_removal(self, workspace_dir):
        workspace = BuildWorkspace(base_dir=workspace_dir)
        path = workspace.acquire()
        path.rmdir()
        workspace.release()
        assert workspace.released

    def test_cleanup_logged(self, workspace_dir, caplog):
        with caplog.at_level("INFO"):
            with BuildWorkspace(base_dir=workspace_dir):
                pass
        assert "Cleaning up temporary files..." in caplog.text


# ── Release hooks ────────────────────────────────────────────────


class TestReleaseHooks:
    def test_atexit_registered_on_acquire(self, workspace_dir, monkeypatch):
        registered, unregistered = [], []
        monkeypatch.setattr(atexit, "register", registered.append)
        monkeypatch.setattr(atexit, "unregister", unregistered.append)

        workspace = BuildWorkspace(base_dir=workspace_dir)
        with workspace:
            assert registered == [workspace.release]
        assert unregistered == [workspace.release]

    def test_signal_handlers_restored(self, workspace_dir):
        before = signal.getsignal(signal.SIGTERM)
        with BuildWorkspace(base_dir=workspace_dir):
            assert signal.getsignal(signal.SIGTERM) != before
        assert signal.getsignal(signal.SIGTERM) == before

    def test_sigterm_unwinds_and_removes(self, workspace_dir):
        with pytest.raises(SystemExit) as exc_info:
            with BuildWorkspace(base_dir=workspace_dir) as path:
                os.kill(os.getpid(), signal.SIGTERM)
        assert exc_info.value.code == 128 + signal.SIGTERM
        assert not path.exists()

    def test_sighup_unwinds_and_removes(self, workspace_dir):
        with pytest.raises(SystemExit) as exc_info:
            with BuildWorkspace(base_dir=workspace_dir) as path:
                os.kill(os.getpid(), signal.SIGHUP)
        assert exc_info.value.code == 128 + signal.SIGHUP
        assert not path.exists()
