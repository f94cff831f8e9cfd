from .dsl import build, check, param_set, target, targets, TargetBuilder
from .errors import BuildError, CommandFailure, CycleError, GraphError, RequirementError, TargetFailed, UnknownTargetError
from .model import Guard, Target, TargetState
from .runner import execute, plan

__all__ = [
    "build",
    "check",
    "param_set",
    "target",
    "targets",
    "TargetBuilder",
    "BuildError",
    "CommandFailure",
    "CycleError",
    "GraphError",
    "RequirementError",
    "TargetFailed",
    "UnknownTargetError",
    "Guard",
    "Target",
    "TargetState",
    "execute",
    "plan",
]
