# cli.py
from __future__ import annotations

import sys

import click

from ubiety_build.context import resolve_context
from ubiety_build.errors import BuildError, TargetFailed
from ubiety_build.git_facts.git import repository_name
from ubiety_build.pipeline import DEFAULT_TARGET, build_targets
from ubiety_build.runner import execute, plan
from ubiety_build.ui.console import Console, get_console, set_console


def _report(error: BuildError) -> None:
    console = get_console()
    details = [f"{k}: {v}" for k, v in error.details.items()]
    if error.target:
        details.insert(0, f"target: {error.target}")

    suggestion = None
    if error.kind == "unknown_target":
        suggestion = "List available targets:\n  ubiety-build --list"
    elif error.kind == "requirement" and getattr(error, "parameter", None):
        option = "--" + error.parameter.replace("_", "-")
        envvar = error.parameter.upper()
        suggestion = f"Pass {option} or set {envvar} in the environment."

    console.print_error(error.kind.replace("_", " "), error.message, details=details or None, suggestion=suggestion)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("targets", nargs=-1)
@click.option(
    "--configuration",
    envvar="CONFIGURATION",
    default=None,
    help="Configuration to build - Default is 'Debug' (local) or 'Release' (server)",
)
@click.option("--cover/--no-cover", envvar="COVER", default=True, show_default=True, help="Collect code coverage")
@click.option("--nuget-key", envvar="NUGET_KEY", default=None, help="API key for the NuGet feed")
@click.option("--nuget-source", envvar="NUGET_SOURCE", default=None, help="NuGet feed URL")
@click.option("--push-retries", envvar="PUSH_RETRIES", default=5, type=click.IntRange(min=1), show_default=True, help="Attempts per package push")
@click.option("--skip-duplicate/--no-skip-duplicate", default=True, show_default=True, help="Treat an already published package as success")
@click.option("--sonar-key", envvar="SONAR_KEY", default=None, help="SonarCloud login token")
@click.option("--sonar-project-key", envvar="SONAR_PROJECT_KEY", default=None, help="SonarCloud project key")
@click.option("--sonar-organization", envvar="SONAR_ORGANIZATION", default=None, help="SonarCloud organization")
@click.option("--sonar-server", envvar="SONAR_SERVER", default=None, help="SonarQube/SonarCloud server URL")
@click.option("--solution", envvar="SOLUTION", default=None, help="Solution file (defaults to the single *.sln at the root)")
@click.option("--branch", envvar="BRANCH", default=None, help="Override the detected git branch")
@click.option("--root", default=None, type=click.Path(file_okay=False), help="Repository root (defaults to the git toplevel)")
@click.option("--skip", "skip", multiple=True, help="Skip a target's action (repeatable)")
@click.option("--list", "list_targets", is_flag=True, default=False, help="List available targets and exit")
@click.option("--plan", "show_plan", is_flag=True, default=False, help="Print the execution plan and exit")
@click.option("--debug", is_flag=True, default=False, help="Enable debug mode (show stack traces and detailed output)")
def cli(
    targets,
    configuration,
    cover,
    nuget_key,
    nuget_source,
    push_retries,
    skip_duplicate,
    sonar_key,
    sonar_project_key,
    sonar_organization,
    sonar_server,
    solution,
    branch,
    root,
    skip,
    list_targets,
    show_plan,
    debug,
):
    """ubiety-build: restore, compile, test, pack and publish a .NET solution.

    TARGETS defaults to Test.
    """
    console = Console(debug=debug)
    set_console(console)

    all_targets = build_targets()
    requested = list(targets) or [DEFAULT_TARGET]

    if list_targets:
        console.print_target_list(all_targets, DEFAULT_TARGET)
        return

    try:
        if show_plan:
            console.print_plan(plan(all_targets, requested))
            return

        ctx = resolve_context(
            root=root,
            configuration=configuration,
            cover=cover,
            nuget_key=nuget_key,
            nuget_source=nuget_source,
            push_retries=push_retries,
            skip_duplicate=skip_duplicate,
            sonar_key=sonar_key,
            sonar_project_key=sonar_project_key,
            sonar_organization=sonar_organization,
            sonar_server=sonar_server,
            solution=solution,
            branch=branch,
        )

        console.print_run_started(
            repository=repository_name(ctx.root),
            root=str(ctx.root),
            targets=requested,
            configuration=ctx.configuration.value,
            branch=ctx.branch,
            version=ctx.version.nuget_version_v2 if ctx.version else None,
        )

        results = execute(all_targets, requested, ctx, skip=skip, console=console)
        console.print_results(results)

    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except TargetFailed as e:
        console.print_results(e.results)
        _report(e)
        if debug:
            console.print_exception(e)
        sys.exit(1)
    except BuildError as e:
        _report(e)
        if debug:
            console.print_exception(e)
        sys.exit(1)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
