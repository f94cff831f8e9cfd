# step_workflows/dotnet.py
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

from .. import tooling
from ..errors import BuildError
from ..git_facts.version import VersionInfo

DOTNET = "dotnet"


def _flag(value: bool) -> str:
    # MSBuild reads booleans the way .NET prints them
    return "True" if value else "False"


# ---------------------------------------------------------------------
# Argument builders
# ---------------------------------------------------------------------

def restore_args(project: Path) -> List[str]:
    return [DOTNET, "restore", str(project)]


def build_args(
    project: Path,
    configuration: str,
    version: Optional[VersionInfo] = None,
) -> List[str]:
    args = [DOTNET, "build", str(project), "--configuration", configuration, "--no-restore"]
    if version is not None:
        args += [
            f"/p:AssemblyVersion={version.assembly_sem_ver}",
            f"/p:FileVersion={version.assembly_sem_file_ver}",
            f"/p:InformationalVersion={version.informational_version}",
        ]
    return args


def dotnet_test_args(
    project: Path,
    configuration: str,
    *,
    cover: bool,
    coverage_output: Path,
    coverage_format: str = "opencover",
    exclude: str = "[xunit.*]*",
) -> List[str]:
    return [
        DOTNET, "test", str(project),
        "--no-build",
        "--configuration", configuration,
        f"/p:CollectCoverage={_flag(cover)}",
        f"/p:CoverletOutput={coverage_output}",
        f"/p:CoverletOutputFormat={coverage_format}",
        f"/p:Exclude={exclude}",
    ]


def pack_args(
    project: Path,
    configuration: str,
    output: Path,
    version: Optional[VersionInfo] = None,
) -> List[str]:
    args = [
        DOTNET, "pack", str(project),
        "--no-build",
        "--configuration", configuration,
        "--output", str(output),
    ]
    if version is not None:
        args.append(f"/p:Version={version.nuget_version_v2}")
    return args


def push_args(package: Path, *, api_key: str, source: str, skip_duplicate: bool) -> List[str]:
    args = [DOTNET, "nuget", "push", str(package), "--source", source, "--api-key", api_key]
    if skip_duplicate:
        args.append("--skip-duplicate")
    return args


# ---------------------------------------------------------------------
# Project discovery
# ---------------------------------------------------------------------

def find_test_project(root: Path, pattern: str = "*.Test.csproj") -> Path:
    """The single test project below root whose file name matches pattern."""
    found = sorted(
        p for p in root.glob(f"**/{pattern}")
        if not {"bin", "obj"} & set(p.relative_to(root).parts)
    )
    if not found:
        raise BuildError(kind="project_not_found", message=f"no project matching '{pattern}' under {root}")
    if len(found) > 1:
        raise BuildError(
            kind="project_ambiguous",
            message=f"more than one project matches '{pattern}'",
            details={"projects": ", ".join(str(p) for p in found)},
        )
    return found[0]


def find_packages(directory: Path, pattern: str = "*.nupkg") -> List[Path]:
    """Packages in directory; at least one must exist."""
    found = sorted(directory.glob(pattern)) if directory.is_dir() else []
    if not found:
        raise BuildError(kind="no_packages", message=f"no packages matching '{pattern}' in {directory}")
    return found


# ---------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------

def run(args: Sequence[str], *, cwd: Path, secrets: Sequence[str] = ()) -> None:
    tooling.run_tool(args, cwd=cwd, secrets=secrets)


def push_all(
    packages: Sequence[Path],
    *,
    api_key: str,
    source: str,
    cwd: Path,
    retries: int = 5,
    skip_duplicate: bool = True,
) -> None:
    """
    Push each package in turn. A package that keeps failing after `retries`
    attempts aborts the fan-out; packages already pushed stay pushed.
    """
    for package in packages:
        args = push_args(package, api_key=api_key, source=source, skip_duplicate=skip_duplicate)
        tooling.retry(
            lambda args=args: tooling.run_tool(args, cwd=cwd, secrets=[api_key]),
            attempts=retries,
        )
