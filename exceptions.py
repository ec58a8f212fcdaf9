# ============================================================================
# EXCEPTIONS
# ============================================================================
# STATUS: Shared - used by every bootstrap stage
# PURPOSE: Exception hierarchy separating contract violations, stage failures
#          and configuration errors
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: ContractViolationError, BusinessLogicError, BootstrapStageError,
#          ConnectionExhaustedError, SchemaError, LoadError, ReadError,
#          ConfigurationError
# ============================================================================

"""
Custom Exception Hierarchy

Distinguishes between:
1. Contract Violations (programming bugs that need fixing)
2. Business Logic Failures (expected runtime issues, one class per stage)
3. Configuration Errors (the run cannot start)

The run controller decides per failure kind whether the run is terminal
before mutation, terminal after partial mutation, or continues with the
error reported.
"""

from typing import Optional


class ContractViolationError(TypeError):
    """
    Raised when component contracts are violated (programming bugs).

    These indicate:
    - Invalid run state transitions
    - Collection specs that reference unknown fields
    - Wrong types passed across component seams

    These should NEVER be caught and handled - they indicate bugs
    that need to be fixed in the code.
    """
    pass


class BusinessLogicError(Exception):
    """
    Base class for expected runtime failures.

    These are normal failures that occur while talking to a remote,
    slow-to-appear database and should be handled gracefully without
    crashing the process.
    """
    pass


class BootstrapStageError(BusinessLogicError):
    """
    Failure of one bootstrap stage.

    Carries the stage name and the underlying driver error so log lines
    and run results can say where and why the run stopped.
    """

    stage = "unknown"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause

    def __str__(self) -> str:
        base = super().__str__()
        if self.cause is not None:
            return f"{base}: {self.cause}"
        return base


class ConnectionExhaustedError(BootstrapStageError):
    """
    Retry budget used up without a live session.

    Fatal. Raised before anything in the store was touched.
    """

    stage = "connecting"

    def __init__(self, attempts: int, last_error: Optional[BaseException] = None):
        super().__init__(
            f"Could not connect after {attempts} attempt(s)",
            cause=last_error
        )
        self.attempts = attempts
        self.last_error = last_error


class SchemaError(BootstrapStageError):
    """
    Conditional namespace/collection creation failed.

    Examples:
        - Permission denied on CREATE SCHEMA
        - Malformed column type in the collection spec
        - Lost connection mid-transaction

    Fatal. No rows are written after this.
    """

    stage = "initializing"


class LoadError(BootstrapStageError):
    """
    Seed batch insert failed and was rolled back.

    Examples:
        - Value does not fit the column type
        - NOT NULL violation on a non-key field
        - Collection missing (dropped between stages)

    Reported; the run still attempts to show current state.
    """

    stage = "loading"


class ReadError(BootstrapStageError):
    """
    Read-back of the collection failed.

    Reported; treated as an empty result for display.
    """

    stage = "reporting"


class ConfigurationError(Exception):
    """
    System configuration error.

    These are fatal and prevent a run from starting.

    Examples:
        - Missing required environment variables
        - Unreadable or malformed seed file
        - Provisioning output without the expected address key
    """
    pass
