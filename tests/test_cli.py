"""Tests for the ubiety-build command line."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from ubiety_build import cli as cli_module, context
from ubiety_build.cli import cli

PARAM_ENV = ("NUGET_KEY", "SONAR_KEY", "SONAR_PROJECT_KEY", "CONFIGURATION", "COVER", "BRANCH", "SOLUTION")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in PARAM_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(context, "detect_version", lambda root, branch: None)
    monkeypatch.setattr(cli_module, "repository_name", lambda root: "ubiety-lib")


@pytest.fixture
def runner():
    return CliRunner()


class TestListAndPlan:
    def test_list_hides_unlisted(self, runner):
        result = runner.invoke(cli, ["--list"])
        assert result.exit_code == 0
        assert "Compile" in result.output
        assert "Test (default)" in result.output
        assert "SonarBegin" not in result.output

    def test_plan(self, runner):
        result = runner.invoke(cli, ["CI", "--plan"])
        assert result.exit_code == 0
        lines = [line.strip() for line in result.output.splitlines() if ". " in line]
        assert lines[0] == "1. Clean"
        assert lines[-1] == "9. CI"

    def test_unknown_target(self, runner):
        result = runner.invoke(cli, ["Deploy", "--plan"])
        assert result.exit_code == 1
        assert "no such target 'Deploy'" in result.output


class TestRun:
    def test_default_target_runs_test(self, runner, fake_run, dotnet_repo):
        result = runner.invoke(cli, ["--root", str(dotnet_repo), "--branch", "main"])
        assert result.exit_code == 0, result.output
        assert fake_run.verbs() == ["restore", "build", "test"]
        assert "Test: SUCCEEDED" in result.output

    def test_configuration_option(self, runner, fake_run, dotnet_repo):
        result = runner.invoke(cli, ["Compile", "--root", str(dotnet_repo), "--branch", "main", "--configuration", "release"])
        assert result.exit_code == 0, result.output
        assert "Release" in fake_run.calls[1]

    def test_bad_configuration(self, runner, fake_run, dotnet_repo):
        result = runner.invoke(cli, ["--root", str(dotnet_repo), "--branch", "main", "--configuration", "Fast"])
        assert result.exit_code == 1
        assert "invalid configuration 'Fast'" in result.output
        assert fake_run.calls == []

    def test_publish_without_key(self, runner, fake_run, dotnet_repo):
        result = runner.invoke(
            cli, ["Publish", "--root", str(dotnet_repo), "--branch", "main", "--configuration", "Release"]
        )
        assert result.exit_code == 1
        assert "nuget_key" in result.output
        assert "--nuget-key" in result.output
        assert fake_run.calls == []

    def test_key_from_environment(self, runner, fake_run, dotnet_repo, monkeypatch):
        (dotnet_repo / "artifacts").mkdir()
        (dotnet_repo / "artifacts" / "Lib.nupkg").write_text("x")
        monkeypatch.setenv("NUGET_KEY", "from-env")
        result = runner.invoke(
            cli,
            ["Publish", "--skip", "Pack", "--root", str(dotnet_repo), "--branch", "main", "--configuration", "Release"],
        )
        assert result.exit_code == 0, result.output
        assert fake_run.calls[0][fake_run.calls[0].index("--api-key") + 1] == "from-env"
        assert "from-env" not in result.output

    def test_command_failure_exit_code(self, runner, fake_run, dotnet_repo):
        fake_run.exit_codes = [1]
        result = runner.invoke(cli, ["Restore", "--root", str(dotnet_repo), "--branch", "main"])
        assert result.exit_code == 1
        assert "Restore: FAILED" in result.output

    def test_misspelled_skip_fails_before_any_command(self, runner, fake_run, dotnet_repo):
        result = runner.invoke(cli, ["CI", "--skip", "Pakc", "--root", str(dotnet_repo), "--branch", "main"])
        assert result.exit_code == 1
        assert "no such target 'Pakc'" in result.output
        assert "ubiety-build --list" in result.output
        assert fake_run.calls == []

    def test_banner_names_repository(self, runner, fake_run, dotnet_repo):
        result = runner.invoke(cli, ["Restore", "--root", str(dotnet_repo), "--branch", "main"])
        assert result.exit_code == 0, result.output
        assert "Repository: ubiety-lib" in result.output
