"""Build parameters and the immutable run context."""

from __future__ import annotations

import os
import subprocess
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigurationError
from .git_facts import git
from .git_facts.version import VersionInfo, detect_version

DEFAULT_NUGET_SOURCE = "https://api.nuget.org/v3/index.json"
DEFAULT_SONAR_ORGANIZATION = "ubiety"
DEFAULT_SONAR_SERVER = "https://sonarcloud.io"

# Any of these being set means we run on a build server.
CI_SERVER_VARIABLES = (
    "CI",
    "TF_BUILD",
    "GITHUB_ACTIONS",
    "APPVEYOR",
    "TRAVIS",
    "GITLAB_CI",
    "JENKINS_URL",
    "TEAMCITY_VERSION",
    "BITBUCKET_BUILD_NUMBER",
)


class Configuration(str, Enum):
    DEBUG = "Debug"
    RELEASE = "Release"

    @classmethod
    def parse(cls, value: str) -> "Configuration":
        for member in cls:
            if member.value.lower() == value.strip().lower():
                return member
        raise ConfigurationError(
            f"invalid configuration '{value}' (expected one of: "
            f"{', '.join(m.value for m in cls)})",
            parameter="configuration",
        )


def is_local_build(env: Mapping[str, str]) -> bool:
    for name in CI_SERVER_VARIABLES:
        value = env.get(name, "").strip().lower()
        if value and value not in ("0", "false"):
            return False
    return True


class RunContext(BaseModel):
    """Resolved parameters and repository metadata for one invocation."""

    model_config = ConfigDict(frozen=True)

    root: Path
    configuration: Configuration
    is_local_build: bool = True
    cover: bool = True

    nuget_key: Optional[str] = None
    nuget_source: str = DEFAULT_NUGET_SOURCE
    push_retries: int = Field(default=5, ge=1)
    skip_duplicate: bool = True

    sonar_key: Optional[str] = None
    sonar_project_key: Optional[str] = None
    sonar_organization: str = DEFAULT_SONAR_ORGANIZATION
    sonar_server: str = DEFAULT_SONAR_SERVER

    solution: Optional[Path] = None
    branch: Optional[str] = None
    version: Optional[VersionInfo] = None

    @property
    def source_dir(self) -> Path:
        return self.root / "src"

    @property
    def tests_dir(self) -> Path:
        return self.root / "tests"

    @property
    def artifacts_dir(self) -> Path:
        return self.root / "artifacts"

    @property
    def is_on_main_branch(self) -> bool:
        return git.is_on_main_branch(self.branch)

    @property
    def secrets(self) -> list[str]:
        return [s for s in (self.nuget_key, self.sonar_key) if s]


def find_solution(root: Path) -> Optional[Path]:
    """The single *.sln at the root; None when there is none."""
    found = sorted(root.glob("*.sln"))
    if len(found) > 1:
        raise ConfigurationError(
            f"multiple solution files in {root}: {', '.join(p.name for p in found)}; "
            "pass --solution",
            parameter="solution",
        )
    return found[0] if found else None


def resolve_context(
    *,
    root: str | Path | None = None,
    configuration: str | None = None,
    cover: bool = True,
    nuget_key: str | None = None,
    nuget_source: str | None = None,
    push_retries: int = 5,
    skip_duplicate: bool = True,
    sonar_key: str | None = None,
    sonar_project_key: str | None = None,
    sonar_organization: str | None = None,
    sonar_server: str | None = None,
    solution: str | Path | None = None,
    branch: str | None = None,
    env: Optional[Mapping[str, str]] = None,
) -> RunContext:
    """
    Evaluate defaults (local vs. server, solution, branch, version) once and
    freeze the result. Raises ConfigurationError on malformed values.
    """
    env = os.environ if env is None else env

    if root is None:
        try:
            root_p = git.repo_root()
        except (subprocess.CalledProcessError, FileNotFoundError):
            root_p = Path.cwd()
    else:
        root_p = Path(root)
    root_p = root_p.expanduser().resolve()
    if not root_p.is_dir():
        raise ConfigurationError(f"root directory not found: {root_p}", parameter="root")

    local = is_local_build(env)
    if configuration:
        config = Configuration.parse(configuration)
    else:
        config = Configuration.DEBUG if local else Configuration.RELEASE

    if solution is not None:
        sln = Path(solution)
        if not sln.is_absolute():
            sln = root_p / sln
        if not sln.exists():
            raise ConfigurationError(f"solution file not found: {sln}", parameter="solution")
    else:
        sln = find_solution(root_p)

    branch = git.normalize_branch(branch) if branch else git.current_branch(root_p, env)
    version = detect_version(root_p, branch)

    try:
        return RunContext(
            root=root_p,
            configuration=config,
            is_local_build=local,
            cover=cover,
            nuget_key=nuget_key or None,
            nuget_source=nuget_source or DEFAULT_NUGET_SOURCE,
            push_retries=push_retries,
            skip_duplicate=skip_duplicate,
            sonar_key=sonar_key or None,
            sonar_project_key=sonar_project_key or None,
            sonar_organization=sonar_organization or DEFAULT_SONAR_ORGANIZATION,
            sonar_server=sonar_server or DEFAULT_SONAR_SERVER,
            solution=sln,
            branch=branch,
            version=version,
        )
    except ValidationError as e:
        err = e.errors()[0]
        field_name = ".".join(str(p) for p in err["loc"])
        raise ConfigurationError(f"{field_name}: {err['msg']}", parameter=field_name) from e
