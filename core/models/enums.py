"""
Pure Enumeration Types for the Bootstrap Client.

Defines valid states for a bootstrap run and its stages.
No business logic - pure type definitions only.

Exports:
    RunState: Run controller state enumeration
    RunOutcome: Final outcome of a run
    StageStatus: Per-stage result status
    FieldType: Column types a collection spec may use
"""

from enum import Enum


class RunState(Enum):
    """
    Valid states of a bootstrap run.

    State transitions:
    - IDLE -> CONNECTING -> INITIALIZING -> LOADING -> REPORTING -> CLOSED (normal flow)
    - CONNECTING -> CLOSED (connection retries exhausted)
    - INITIALIZING -> CLOSED (schema creation failed)
    - LOADING -> REPORTING even when the seed load failed
    - any state -> CLOSED on fatal failure
    """

    IDLE = "idle"
    CONNECTING = "connecting"
    INITIALIZING = "initializing"
    LOADING = "loading"
    REPORTING = "reporting"
    CLOSED = "closed"


class RunOutcome(Enum):
    """
    How a run that reached CLOSED ended.
    """

    COMPLETED = "completed"
    COMPLETED_WITH_ERRORS = "completed_with_errors"  # Load or read-back failed, reporting still ran
    FAILED = "failed"  # Connection exhausted or schema error


class StageStatus(Enum):
    """
    Result status of one bootstrap stage.
    """

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"  # Stage never ran because an earlier stage was fatal


class FieldType(str, Enum):
    """
    Column types available to a collection spec.

    Mapped to PostgreSQL types by the schema initializer.
    """

    TEXT = "text"
    VARCHAR = "varchar"  # Requires max_length
    INTEGER = "integer"
    BIGINT = "bigint"
    NUMERIC = "numeric"
    BOOLEAN = "boolean"
    DATE = "date"
    TIMESTAMPTZ = "timestamptz"
