"""
Tests for build orchestration — clone, package, artifact verification.
"""

from __future__ import annotations

import pytest

from provisioner.core.errors import BuildError
from provisioner.core.services.build import build_artifact, build_command, clone_command
from tests.simulated_hosts import SimulatedHost


class TestCommands:
    def test_shallow_clone(self, tmp_path):
        cmd = clone_command("https://github.com/example/repo", tmp_path / "repo")
        assert cmd == ["git", "clone", "--depth", "1", "https://github.com/example/repo", str(tmp_path / "repo")]

    def test_build_skips_tests(self):
        assert build_command() == ["mvn", "clean", "package", "-DskipTests", "-q"]


class TestBuildArtifact:
    def test_success(self, ctx, tmp_path):
        host = SimulatedHost(tools=("git", "mvn"))
        build = build_artifact(ctx, tmp_path, host.runner)

        assert build.source_dir == tmp_path / "repo"
        assert build.artifact == tmp_path / "repo" / "target" / "proxy-balancer.jar"
        assert build.artifact.is_file()
        assert build.unit_file.name == "proxy-balancer.service"
        assert host.runner.commands == [
            clone_command(ctx.settings.repo_url, tmp_path / "repo"),
            build_command(),
        ]
        assert host.runner.call_log[1]["cwd"] == tmp_path / "repo"

    def test_clone_failure(self, ctx, tmp_path):
        host = SimulatedHost()
        host.runner.set_failure(("git", "clone"), "fatal: unable to access", return_code=128)

        with pytest.raises(BuildError) as exc_info:
            build_artifact(ctx, tmp_path, host.runner)
        assert "Failed to clone" in exc_info.value.message
        assert exc_info.value.reason == "fatal: unable to access"
        assert not host.runner.called("mvn")

    def test_maven_failure(self, ctx, tmp_path):
        host = SimulatedHost()
        host.runner.set_failure(("mvn",), "", return_code=1)

        with pytest.raises(BuildError) as exc_info:
            build_artifact(ctx, tmp_path, host.runner)
        assert exc_info.value.message == "Maven build failed"
        assert exc_info.value.reason == "exit code 1"

    def test_missing_artifact(self, ctx, tmp_path):
        host = SimulatedHost(produces_artifact=False)

        with pytest.raises(BuildError) as exc_info:
            build_artifact(ctx, tmp_path, host.runner)
        assert exc_info.value.message == "Build failed: proxy-balancer.jar not found"

    def test_missing_unit_file(self, ctx, tmp_path):
        host = SimulatedHost(ships_unit=False)

        with pytest.raises(BuildError) as exc_info:
            build_artifact(ctx, tmp_path, host.runner)
        assert "proxy-balancer.service" in exc_info.value.message
