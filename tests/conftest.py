"""Shared fixtures."""

from __future__ import annotations

import subprocess

import pytest

from ubiety_build.context import Configuration, RunContext
from ubiety_build.ui.console import Console, set_console

_real_run = subprocess.run


class FakeRun:
    """Stands in for subprocess.run: records dotnet invocations, lets others through."""

    def __init__(self):
        self.calls: list[list[str]] = []
        self.exit_codes: list[int] = []
        self.on_call = None

    def __call__(self, argv, *args, **kwargs):
        argv = list(argv) if not isinstance(argv, str) else [argv]
        if argv[0] != "dotnet":
            return _real_run(argv, *args, **kwargs)
        self.calls.append(argv)
        if self.on_call is not None:
            self.on_call(argv)
        code = self.exit_codes.pop(0) if self.exit_codes else 0
        return subprocess.CompletedProcess(argv, code)

    def verbs(self) -> list[str]:
        return [c[1] for c in self.calls]


@pytest.fixture(autouse=True)
def console():
    c = Console()
    set_console(c)
    return c


@pytest.fixture
def fake_run(monkeypatch) -> FakeRun:
    fake = FakeRun()
    monkeypatch.setattr(subprocess, "run", fake)
    monkeypatch.setattr("ubiety_build.tooling.time.sleep", lambda _s: None)
    return fake


@pytest.fixture
def dotnet_repo(tmp_path):
    """A minimal solution layout: Lib.sln, src/Lib, tests/Lib.Test."""
    (tmp_path / "Lib.sln").write_text("")
    (tmp_path / "src" / "Lib").mkdir(parents=True)
    (tmp_path / "src" / "Lib" / "Lib.csproj").write_text("<Project />")
    (tmp_path / "tests" / "Lib.Test").mkdir(parents=True)
    (tmp_path / "tests" / "Lib.Test" / "Lib.Test.csproj").write_text("<Project />")
    return tmp_path


@pytest.fixture
def make_ctx(dotnet_repo):
    def _make(**overrides) -> RunContext:
        values = {
            "root": dotnet_repo,
            "configuration": Configuration.RELEASE,
            "is_local_build": False,
            "solution": dotnet_repo / "Lib.sln",
            "branch": "main",
        }
        values.update(overrides)
        return RunContext(**values)

    return _make
