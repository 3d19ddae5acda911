"""Common type definitions for pythonbuild.

This module contains the shared enums and data structures passed between
the configuration layer, the orchestrator and the command-line wrapper.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ErrorCategory(Enum):
    """Classification of a failed run for upstream reporting."""

    UNDEFINED = "undefined"
    CONFIGURATION = "configuration"


class Phase(Enum):
    """Phases of a build run, in execution order."""

    PRECONDITION = "precondition"
    BUILD = "build"
    BOM = "bom"
    PUBLISH = "publish"


class PhaseStatus(Enum):
    """Outcome of a single phase."""

    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    # Failed, but the run is allowed to continue
    DEGRADED = "degraded"


@dataclass(frozen=True)
class BuildOptions:
    """Immutable input parameters for one orchestration run."""

    build_flags: Tuple[str, ...] = ()
    create_bom: bool = False
    publish: bool = False
    target_repository_user: str = ""
    target_repository_password: str = ""
    target_repository_url: str = ""
    python_executable: str = "python3"

    def __post_init__(self) -> None:
        # Accept any iterable of flags but always store a tuple
        object.__setattr__(self, "build_flags", tuple(self.build_flags))

    def __repr__(self) -> str:
        password = "***" if self.target_repository_password else ""
        return (
            f"BuildOptions(build_flags={self.build_flags!r}, "
            f"create_bom={self.create_bom}, publish={self.publish}, "
            f"target_repository_user={self.target_repository_user!r}, "
            f"target_repository_password={password!r}, "
            f"target_repository_url={self.target_repository_url!r}, "
            f"python_executable={self.python_executable!r})"
        )


@dataclass(frozen=True)
class PhaseResult:
    """Result of one phase; ``error`` is set only for degraded phases."""

    phase: Phase
    status: PhaseStatus
    error: Optional[Exception] = None

    @property
    def degraded(self) -> bool:
        return self.status is PhaseStatus.DEGRADED


@dataclass
class BuildReport:
    """Ordered phase results of a completed run."""

    results: List[PhaseResult] = field(default_factory=list)

    def add(self, result: PhaseResult) -> None:
        self.results.append(result)

    def get(self, phase: Phase) -> Optional[PhaseResult]:
        """Return the result recorded for ``phase``, if the phase ran."""
        for result in self.results:
            if result.phase is phase:
                return result
        return None

    @property
    def degraded(self) -> bool:
        return any(result.degraded for result in self.results)

    def summary(self) -> Dict[str, str]:
        return {result.phase.value: result.status.value for result in self.results}


@dataclass
class TelemetryRecord:
    """Output-only record filled by the step wrapper.

    The orchestrator receives it but never reads or writes it.
    """

    step_name: str = "pythonBuild"
    error_category: ErrorCategory = ErrorCategory.UNDEFINED
    duration_seconds: float = 0.0
    custom_data: Dict[str, Any] = field(default_factory=dict)
