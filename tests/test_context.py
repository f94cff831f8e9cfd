"""Tests for ubiety_build.context."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from ubiety_build import context
from ubiety_build.context import Configuration, is_local_build, resolve_context
from ubiety_build.errors import ConfigurationError
from ubiety_build.git_facts.version import VersionInfo


@pytest.fixture(autouse=True)
def no_git_version(monkeypatch):
    monkeypatch.setattr(context, "detect_version", lambda root, branch: None)


def resolve(root, **kwargs):
    kwargs.setdefault("branch", "main")
    kwargs.setdefault("env", {})
    return resolve_context(root=root, **kwargs)


class TestIsLocalBuild:
    def test_empty_environment_is_local(self):
        assert is_local_build({}) is True

    @pytest.mark.parametrize("name", ["CI", "TF_BUILD", "GITHUB_ACTIONS", "APPVEYOR"])
    def test_ci_variables_mean_server(self, name):
        assert is_local_build({name: "true"}) is False

    def test_false_values_ignored(self):
        assert is_local_build({"CI": "false"}) is True


class TestConfiguration:
    def test_parse_case_insensitive(self):
        assert Configuration.parse("release") is Configuration.RELEASE
        assert Configuration.parse(" Debug ") is Configuration.DEBUG

    def test_parse_rejects_unknown(self):
        with pytest.raises(ConfigurationError) as exc:
            Configuration.parse("Banana")
        assert exc.value.details["parameter"] == "configuration"


class TestResolveContext:
    def test_local_defaults_to_debug(self, dotnet_repo):
        ctx = resolve(dotnet_repo)
        assert ctx.configuration is Configuration.DEBUG
        assert ctx.is_local_build is True

    def test_server_defaults_to_release(self, dotnet_repo):
        ctx = resolve(dotnet_repo, env={"CI": "true"})
        assert ctx.configuration is Configuration.RELEASE
        assert ctx.is_local_build is False

    def test_explicit_configuration_wins(self, dotnet_repo):
        ctx = resolve(dotnet_repo, configuration="Release")
        assert ctx.configuration is Configuration.RELEASE

    def test_solution_discovered(self, dotnet_repo):
        assert resolve(dotnet_repo).solution == dotnet_repo / "Lib.sln"

    def test_no_solution(self, tmp_path):
        assert resolve(tmp_path).solution is None

    def test_multiple_solutions_rejected(self, dotnet_repo):
        (dotnet_repo / "Other.sln").write_text("")
        with pytest.raises(ConfigurationError):
            resolve(dotnet_repo)

    def test_explicit_solution_must_exist(self, dotnet_repo):
        with pytest.raises(ConfigurationError):
            resolve(dotnet_repo, solution="Missing.sln")

    def test_missing_root(self, tmp_path):
        with pytest.raises(ConfigurationError):
            resolve(tmp_path / "nope")

    def test_blank_keys_become_none(self, dotnet_repo):
        ctx = resolve(dotnet_repo, nuget_key="", sonar_key="")
        assert ctx.nuget_key is None
        assert ctx.sonar_key is None

    def test_bad_retry_count(self, dotnet_repo):
        with pytest.raises(ConfigurationError) as exc:
            resolve(dotnet_repo, push_retries=0)
        assert exc.value.details["parameter"] == "push_retries"

    def test_branch_is_normalized(self, dotnet_repo):
        ctx = resolve(dotnet_repo, branch="refs/heads/master")
        assert ctx.branch == "master"
        assert ctx.is_on_main_branch is True

    def test_version_attached(self, dotnet_repo, monkeypatch):
        info = VersionInfo(major=1, minor=2, patch=3)
        monkeypatch.setattr(context, "detect_version", lambda root, branch: info)
        assert resolve(dotnet_repo).version == info


class TestRunContext:
    def test_paths(self, make_ctx, dotnet_repo):
        ctx = make_ctx()
        assert ctx.source_dir == dotnet_repo / "src"
        assert ctx.tests_dir == dotnet_repo / "tests"
        assert ctx.artifacts_dir == dotnet_repo / "artifacts"

    def test_frozen(self, make_ctx):
        ctx = make_ctx()
        with pytest.raises(ValidationError):
            ctx.nuget_key = "changed"

    def test_secrets(self, make_ctx):
        assert make_ctx(nuget_key="n", sonar_key="s").secrets == ["n", "s"]
        assert make_ctx().secrets == []

    def test_feature_branch_not_main(self, make_ctx):
        assert make_ctx(branch="feature/x").is_on_main_branch is False
