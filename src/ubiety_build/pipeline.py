# pipeline.py
# The build definition: .NET restore/compile/test/pack/publish plus SonarCloud
# analysis, wired as a target graph.
from __future__ import annotations

from pathlib import Path
from typing import List

from .context import Configuration, RunContext
from .dsl import build, check, targets
from .errors import BuildError
from .model import Target
from .step_workflows import dotnet, fs, sonar

DEFAULT_TARGET = "Test"


def _solution(ctx: RunContext) -> Path:
    if ctx.solution is None:
        raise BuildError(
            kind="configuration",
            message=f"no solution file found in {ctx.root}",
            details={"parameter": "solution"},
        )
    return ctx.solution


def _version(ctx: RunContext) -> str | None:
    return ctx.version.nuget_version_v2 if ctx.version else None


def coverage_report(ctx: RunContext) -> Path:
    # coverlet appends the format extension to CoverletOutput
    return ctx.artifacts_dir / "coverage.opencover.xml"


# ---------------------------------------------------------------------
# Target actions
# ---------------------------------------------------------------------

def clean(ctx: RunContext) -> None:
    fs.clean_build_outputs(ctx.source_dir)
    fs.clean_build_outputs(ctx.tests_dir)
    fs.ensure_clean_directory(ctx.artifacts_dir)


def restore(ctx: RunContext) -> None:
    dotnet.run(dotnet.restore_args(_solution(ctx)), cwd=ctx.root)


def compile_solution(ctx: RunContext) -> None:
    args = dotnet.build_args(_solution(ctx), ctx.configuration.value, ctx.version)
    dotnet.run(args, cwd=ctx.root)


def sonar_begin(ctx: RunContext) -> None:
    args = sonar.begin_args(
        login=ctx.sonar_key,
        project_key=ctx.sonar_project_key,
        organization=ctx.sonar_organization,
        server=ctx.sonar_server,
        version=_version(ctx),
        opencover_report=coverage_report(ctx),
    )
    dotnet.run(args, cwd=ctx.root, secrets=ctx.secrets)


def sonar_end(ctx: RunContext) -> None:
    dotnet.run(sonar.end_args(login=ctx.sonar_key), cwd=ctx.root, secrets=ctx.secrets)


def run_tests(ctx: RunContext) -> None:
    project = dotnet.find_test_project(ctx.root)
    args = dotnet.dotnet_test_args(
        project,
        ctx.configuration.value,
        cover=ctx.cover,
        coverage_output=ctx.artifacts_dir / "coverage",
    )
    dotnet.run(args, cwd=ctx.root)


def pack(ctx: RunContext) -> None:
    args = dotnet.pack_args(_solution(ctx), ctx.configuration.value, ctx.artifacts_dir, ctx.version)
    dotnet.run(args, cwd=ctx.root)


def publish(ctx: RunContext) -> None:
    dotnet.push_all(
        dotnet.find_packages(ctx.artifacts_dir),
        api_key=ctx.nuget_key,
        source=ctx.nuget_source,
        cwd=ctx.root,
        retries=ctx.push_retries,
        skip_duplicate=ctx.skip_duplicate,
    )


# ---------------------------------------------------------------------
# Target graph
# ---------------------------------------------------------------------

on_main_branch = check("on the main branch", lambda ctx: ctx.is_on_main_branch)
release_configuration = check(
    "configuration is Release",
    lambda ctx: ctx.configuration == Configuration.RELEASE,
)


def build_targets() -> List[Target]:
    """All targets, in declaration order."""
    return targets(
        build("Clean")
        .describe("Delete bin/obj folders and empty the artifacts directory")
        .before("Restore")
        .executes(clean),

        build("Restore")
        .describe("Restore NuGet dependencies")
        .executes(restore),

        build("Compile")
        .describe("Build the solution")
        .depends_on("Restore")
        .executes(compile_solution),

        build("SonarBegin")
        .before("Compile")
        .requires_param("sonar_key")
        .unlisted()
        .executes(sonar_begin),

        build("SonarEnd")
        .after("Test")
        .depends_on("SonarBegin")
        .requires_param("sonar_key")
        .unlisted()
        .executes(sonar_end),

        build("Test")
        .describe("Run the test project with coverage")
        .depends_on("Compile")
        .executes(run_tests),

        build("Pack")
        .describe("Create NuGet packages (main branch only)")
        .after("Test")
        .only_when(on_main_branch)
        .executes(pack),

        build("Publish")
        .describe("Push packages to the NuGet feed (main branch only)")
        .depends_on("Pack")
        .requires_param("nuget_key")
        .requires(release_configuration)
        .only_when(on_main_branch)
        .executes(publish),

        build("CI")
        .describe("Everything a build server runs")
        .depends_on("Clean", "Test", "SonarEnd", "Publish"),
    )
