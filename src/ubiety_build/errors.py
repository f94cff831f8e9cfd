# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List


@dataclass(eq=False)
class BuildError(Exception):
    """
    Structured build error with enough context for:
      - clean CLI output
      - tests asserting on the failure kind
      - debugging without full tracebacks
    """
    kind: str
    message: str
    target: str | None = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        if self.target:
            lines.append(f"target={self.target}")
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


class ConfigurationError(BuildError):
    def __init__(self, message: str, *, parameter: str | None = None) -> None:
        details = {"parameter": parameter} if parameter else {}
        super().__init__(kind="configuration", message=message, details=details)


class UnknownTargetError(BuildError):
    def __init__(self, name: str, known: Iterable[str], *, referenced_by: str | None = None) -> None:
        message = f"no such target '{name}'"
        if referenced_by:
            message += f" (referenced by '{referenced_by}')"
        super().__init__(
            kind="unknown_target",
            message=message,
            target=name,
            details={"known": ", ".join(sorted(known))},
        )


class CycleError(BuildError):
    def __init__(self, cycle: List[str]) -> None:
        self.cycle = list(cycle)
        super().__init__(
            kind="cycle",
            message="target graph has a cycle: " + " -> ".join(self.cycle),
        )


class RequirementError(BuildError):
    def __init__(self, target: str, requirement: str, *, parameter: str | None = None) -> None:
        if parameter:
            message = f"required parameter '{parameter}' is not set"
        else:
            message = f"requirement not met: {requirement}"
        super().__init__(
            kind="requirement",
            message=message,
            target=target,
            details={"parameter": parameter} if parameter else {},
        )
        self.parameter = parameter


class CommandFailure(BuildError):
    def __init__(self, cmd: str, exit_code: int, *, reason: str | None = None) -> None:
        self.cmd = cmd
        self.exit_code = exit_code
        super().__init__(
            kind="command_failed",
            message=reason or f"command exited with status {exit_code}",
            details={"cmd": cmd, "exit_code": exit_code},
        )


class TargetFailed(BuildError):
    """Raised by the executor when a target action fails; carries the partial results."""

    def __init__(self, target: str, cause: BaseException, results: dict) -> None:
        self.cause = cause
        self.results = results
        details: dict = {}
        if isinstance(cause, CommandFailure):
            details = dict(cause.details)
        super().__init__(
            kind="target_failed",
            message=f"target '{target}' failed: {cause.message if isinstance(cause, BuildError) else cause}",
            target=target,
            details=details,
        )


class GraphError(BuildError):
    """A malformed target registry or request (duplicate names, nothing requested)."""

    def __init__(self, message: str, *, details: dict | None = None) -> None:
        super().__init__(kind="graph", message=message, details=details or {})
