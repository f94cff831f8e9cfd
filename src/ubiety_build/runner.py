# runner.py
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from .dag import build_graph, build_plan, resolve_names
from .errors import BuildError, CommandFailure, RequirementError, TargetFailed
from .model import Target, TargetState
from .ui.console import Console, get_console


# ----------------------------------------------------------------------
# Guards
# ----------------------------------------------------------------------

def check_requirements(plan: List[Target], ctx: Any) -> None:
    """
    Evaluate every `requires` guard of the whole plan before anything runs.
    The first unmet guard aborts the run.
    """
    for t in plan:
        for guard in t.requires:
            if not guard(ctx):
                raise RequirementError(t.name, guard.description, parameter=guard.parameter)


def _skip_reason(t: Target, ctx: Any, skip: set) -> Optional[str]:
    if t.name in skip:
        return "skipped by request"
    for guard in t.only_when:
        if not guard(ctx):
            return f"condition false: {guard.description}"
    return None


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------

def plan(targets: Iterable[Target], requested: Iterable[str]) -> List[str]:
    """Ordered target names that a run of `requested` would go through."""
    return [t.name for t in build_plan(targets, requested)]


def execute(
    targets: Iterable[Target],
    requested: Iterable[str],
    ctx: Any,
    *,
    skip: Iterable[str] = (),
    console: Console | None = None,
) -> Dict[str, TargetState]:
    """
    Run the requested targets and everything they depend on.

    - Graph and requirement errors, including unknown names in `skip`, are
      raised before any action runs.
    - Targets run one at a time in plan order, each at most once.
    - On first failure the rest of the plan is aborted and TargetFailed is
      raised (its `results` hold the state of every planned target).

    Returns the ordered mapping name -> final state.
    """
    console = console or get_console()
    targets = list(targets)

    steps = build_plan(targets, requested)
    by_name, _ = build_graph(targets)
    skip_set = set(resolve_names(by_name, skip))

    check_requirements([t for t in steps if t.name not in skip_set], ctx)

    results: Dict[str, TargetState] = {t.name: TargetState.PENDING for t in steps}

    for t in steps:
        if results[t.name] is not TargetState.PENDING:
            continue

        reason = _skip_reason(t, ctx, skip_set)
        if reason is not None:
            console.print_target_skipped(t.name, reason)
            results[t.name] = TargetState.SKIPPED
            continue

        console.print_target_start(t.name)
        results[t.name] = TargetState.RUNNING
        try:
            if t.action is not None:
                t.action(ctx)
        except Exception as e:
            results[t.name] = TargetState.FAILED
            for name, state in results.items():
                if state is TargetState.PENDING:
                    results[name] = TargetState.ABORTED

            exit_code = e.exit_code if isinstance(e, CommandFailure) else None
            reason_text = e.message if isinstance(e, BuildError) else str(e)
            console.print_failure(t.name, reason_text, exit_code=exit_code)
            raise TargetFailed(t.name, e, results) from e

        results[t.name] = TargetState.SUCCEEDED
        console.print_success(t.name)

    return results
