# src/ubiety_build/dsl.py
from __future__ import annotations

from typing import Any, Callable, List, Optional, Sequence

from .model import Guard, Target


# ---------------------------------------------------------------------
# Guard helpers
# ---------------------------------------------------------------------

def _is_set(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def param_set(name: str) -> Guard:
    """Guard: the named context parameter is present and non-empty."""
    return Guard(
        description=f"parameter '{name}' is set",
        predicate=lambda ctx: _is_set(getattr(ctx, name, None)),
        parameter=name,
    )


def check(description: str, predicate: Callable[[Any], bool]) -> Guard:
    """Guard from an arbitrary predicate over the run context."""
    return Guard(description=description, predicate=predicate)


def _as_guard(g: Guard | Callable[[Any], bool]) -> Guard:
    if isinstance(g, Guard):
        return g
    name = getattr(g, "__name__", "<predicate>")
    return Guard(description=name, predicate=g)


# ---------------------------------------------------------------------
# Functional Target helper
# ---------------------------------------------------------------------

def target(
    name: str,
    action: Optional[Callable[[Any], None]] = None,
    *,
    depends_on: Optional[List[str]] = None,
    before: Optional[List[str]] = None,
    after: Optional[List[str]] = None,
    requires: Optional[Sequence[Guard | Callable[[Any], bool]]] = None,
    only_when: Optional[Sequence[Guard | Callable[[Any], bool]]] = None,
    unlisted: bool = False,
    description: str = "",
) -> Target:
    if not name or not name.strip():
        raise ValueError("target name must not be empty")

    return Target(
        name=name,
        action=action,
        depends_on=list(depends_on or []),
        before=list(before or []),
        after=list(after or []),
        requires=[_as_guard(g) for g in requires or []],
        only_when=[_as_guard(g) for g in only_when or []],
        unlisted=unlisted,
        description=description,
    )


# ---------------------------------------------------------------------
# Builder API
# ---------------------------------------------------------------------

class TargetBuilder:
    """
    Fluent target definition:

        TargetBuilder("Publish")
            .depends_on("Pack")
            .requires_param("nuget_key")
            .only_when(lambda ctx: ctx.is_on_main_branch)
            .executes(publish)
            .build()
    """

    def __init__(self, name: str):
        self.name = name
        self._action: Optional[Callable[[Any], None]] = None
        self._depends_on: list[str] = []
        self._before: list[str] = []
        self._after: list[str] = []
        self._requires: list[Guard] = []
        self._only_when: list[Guard] = []
        self._unlisted: bool = False
        self._description: str = ""

    def depends_on(self, *target_names: str):
        self._depends_on.extend(target_names)
        return self

    def before(self, *target_names: str):
        self._before.extend(target_names)
        return self

    def after(self, *target_names: str):
        self._after.extend(target_names)
        return self

    def requires(self, *guards: Guard | Callable[[Any], bool]):
        self._requires.extend(_as_guard(g) for g in guards)
        return self

    def requires_param(self, *names: str):
        self._requires.extend(param_set(n) for n in names)
        return self

    def only_when(self, *guards: Guard | Callable[[Any], bool]):
        self._only_when.extend(_as_guard(g) for g in guards)
        return self

    def unlisted(self, hidden: bool = True):
        self._unlisted = hidden
        return self

    def describe(self, text: str):
        self._description = text
        return self

    def executes(self, action: Callable[[Any], None]):
        if self._action is not None:
            raise ValueError(f"Target '{self.name}' already has an action")
        self._action = action
        return self

    def build(self) -> Target:
        return target(
            self.name,
            self._action,
            depends_on=self._depends_on,
            before=self._before,
            after=self._after,
            requires=self._requires,
            only_when=self._only_when,
            unlisted=self._unlisted,
            description=self._description,
        )


def build(name: str) -> TargetBuilder:
    """Convenience: build('Test').depends_on('Compile').executes(fn).build()"""
    return TargetBuilder(name)


# ---------------------------------------------------------------------
# Registry helper
# ---------------------------------------------------------------------

def targets(*items: Target | TargetBuilder) -> List[Target]:
    """
    Target registry helper. Declaration order is kept and used to break
    ordering ties in the plan.

        TARGETS = targets(
            build("Restore").executes(restore),
            build("Compile").depends_on("Restore").executes(compile),
        )
    """
    return [t.build() if isinstance(t, TargetBuilder) else t for t in items]
