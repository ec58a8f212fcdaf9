"""
Bootstrap Run Result Models.

Dataclasses describing what a run did, stage by stage, for logging and
for the --json output of the command line entry point.

Exports:
    StageResult: Result of a single stage
    RunResult: Complete result of a bootstrap run
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .enums import RunOutcome, RunState, StageStatus


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class StageResult:
    """Result of a single bootstrap stage."""
    name: str
    status: StageStatus
    message: str = ""
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "error": self.error,
            "details": self.details
        }


@dataclass
class RunResult:
    """Complete result of one bootstrap run."""
    run_id: str
    database_host: str
    namespace: str
    collection: str
    started_at: str = field(default_factory=_utc_now)
    finished_at: Optional[str] = None
    state: RunState = RunState.IDLE
    outcome: Optional[RunOutcome] = None
    steps: List[StageResult] = field(default_factory=list)
    inserted_count: Optional[int] = None
    rows: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    session_released: bool = False

    @property
    def success(self) -> bool:
        return self.outcome == RunOutcome.COMPLETED

    def add_step(self, step: StageResult) -> StageResult:
        self.steps.append(step)
        if step.error:
            self.errors.append(f"{step.name}: {step.error}")
        return step

    def get_step(self, name: str) -> Optional[StageResult]:
        for step in self.steps:
            if step.name == name:
                return step
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "run_id": self.run_id,
            "database_host": self.database_host,
            "namespace": self.namespace,
            "collection": self.collection,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "state": self.state.value,
            "outcome": self.outcome.value if self.outcome else None,
            "success": self.success,
            "inserted_count": self.inserted_count,
            "row_count": len(self.rows),
            "rows": self.rows,
            "session_released": self.session_released,
            "steps": [s.to_dict() for s in self.steps],
            "errors": self.errors,
            "warnings": self.warnings,
            "summary": {
                "total_steps": len(self.steps),
                "successful": len([s for s in self.steps if s.status == StageStatus.SUCCESS]),
                "failed": len([s for s in self.steps if s.status == StageStatus.FAILED]),
                "skipped": len([s for s in self.steps if s.status == StageStatus.SKIPPED])
            }
        }
