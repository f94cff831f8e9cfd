# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional


class TargetState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"
    ABORTED = "aborted"


@dataclass(frozen=True)
class Guard:
    """A boolean check against the run context."""
    description: str
    predicate: Callable[[Any], bool]
    parameter: str | None = None  # set when the guard checks a single parameter

    def __call__(self, ctx: Any) -> bool:
        return bool(self.predicate(ctx))


@dataclass
class Target:
    """
    A named unit of work: an action + dependencies + guards.

    depends_on: targets that must run first (pulled into the plan)
    before/after: ordering hints only, they never pull targets into the plan
    requires: fatal guards, checked before anything runs
    only_when: skip guards, a false one turns the action into a no-op
    """
    name: str
    action: Optional[Callable[[Any], None]] = None

    depends_on: List[str] = field(default_factory=list)
    before: List[str] = field(default_factory=list)
    after: List[str] = field(default_factory=list)

    requires: List[Guard] = field(default_factory=list)
    only_when: List[Guard] = field(default_factory=list)

    unlisted: bool = False
    description: str = ""

    def references(self) -> List[str]:
        return [*self.depends_on, *self.before, *self.after]
