"""Release orchestration: version computation, tagging, pushing and hooks."""

from __future__ import annotations

from .errors import PartialSuccess, ReleaseError, ReleaseFailure, describe_failure
from .executor import execute, plan_version, resolve_previous
from .model import ReleasePhase, ReleaseRequest, ReleaseResult, VersionPlan

__all__ = [
    "PartialSuccess",
    "ReleaseError",
    "ReleaseFailure",
    "ReleasePhase",
    "ReleaseRequest",
    "ReleaseResult",
    "VersionPlan",
    "describe_failure",
    "execute",
    "plan_version",
    "resolve_previous",
]
