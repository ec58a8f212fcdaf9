# ============================================================================
# BOOTSTRAP RUN CONTROLLER
# ============================================================================
# STATUS: Service - Orchestrates one bootstrap run
# PURPOSE: Drive connect -> initialize -> load -> report through an explicit
#          state machine and release the session exactly once
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: BootstrapRunController, run_bootstrap, STAGE_NAMES
# DEPENDENCIES: config, core.logic.transitions, infrastructure
# PATTERNS: State machine, scoped resource release
# ENTRY_POINTS: result = BootstrapRunController(config).run()
# ============================================================================
"""
Bootstrap Run Controller.

States and transitions:

    IDLE -> CONNECTING -> INITIALIZING -> LOADING -> REPORTING -> CLOSED
                 |              |
                 +--------------+------------------------------> CLOSED

    CONNECTING   -> CLOSED    retries exhausted (nothing touched)
    INITIALIZING -> CLOSED    schema creation failed (no rows written)
    LOADING      -> REPORTING always, even when the load failed
    REPORTING    -> CLOSED    always; a failed read shows as zero rows

Entering CLOSED releases the session, if one was acquired, exactly once.
Transition rules live in core.logic.transitions; asking for a transition
the table does not allow is a ContractViolationError.

Outcome:
    completed              every stage succeeded
    completed_with_errors  load or read-back failed, run still reported
    failed                 connection exhausted or schema error

Usage:
    from config import BootstrapConfig
    from services.run_controller import BootstrapRunController

    result = BootstrapRunController(BootstrapConfig.from_environment()).run()
    print(result.outcome)
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

import psycopg

from config import BootstrapConfig
from core.logic.transitions import can_run_transition, is_run_terminal
from core.models import RunOutcome, RunResult, RunState, StageResult, StageStatus
from exceptions import (
    ConnectionExhaustedError,
    ContractViolationError,
    LoadError,
    ReadError,
    SchemaError,
)
from infrastructure.connection import ConnectionAcquirer
from infrastructure.record_reader import report
from infrastructure.schema_initializer import ensure_schema, verify_schema
from infrastructure.seed_loader import load_seed
from services.reporting import render_table
from util_logger import LoggerFactory, ComponentType


STAGE_NAMES = ("connecting", "initializing", "loading", "reporting")

# A failure in one of these stages ends the run before loading
FATAL_STAGES = ("connecting", "initializing")


class BootstrapRunController:
    """
    Runs the bootstrap once against the configured endpoint.

    A controller instance is single-use: run() may be called once.
    """

    def __init__(
        self,
        config: BootstrapConfig,
        acquirer: Optional[ConnectionAcquirer] = None,
        run_id: Optional[str] = None
    ):
        self.config = config
        self.acquirer = acquirer or ConnectionAcquirer.from_config(config)
        self.run_id = run_id or uuid.uuid4().hex[:8]
        self.state = RunState.IDLE

        self._conn = None
        self._released = False

        self.logger = LoggerFactory.create_with_context(
            ComponentType.CONTROLLER,
            "BootstrapRunController",
            run_id=self.run_id,
            host=config.endpoint.host,
            namespace=config.namespace,
            collection=config.collection_name
        )

    # ========================================================================
    # RUN
    # ========================================================================

    def run(self) -> RunResult:
        """
        Execute the run to CLOSED.

        Stage failures are recorded in the result, not raised. Only
        programming errors (ContractViolationError) propagate, after the
        session has been released.
        """
        if self.state != RunState.IDLE:
            raise ContractViolationError(
                f"Run {self.run_id} already started (state={self.state.value})"
            )

        result = RunResult(
            run_id=self.run_id,
            database_host=self.config.endpoint.host,
            namespace=self.config.namespace,
            collection=self.config.collection_name,
        )

        self.logger.info("=" * 70)
        self.logger.info("🚀 BOOTSTRAP RUN STARTED")
        self.logger.info(f"   Run: {self.run_id}")
        self.logger.info(f"   Target: {self.config.endpoint.display_name}")
        self.logger.info(f"   Collection: {self.config.namespace}.{self.config.collection_name}")
        self.logger.info("=" * 70)

        try:
            self._transition(RunState.CONNECTING, result)
            if self._connect(result):
                self._transition(RunState.INITIALIZING, result)
                if self._initialize(result):
                    self._transition(RunState.LOADING, result)
                    self._load(result)
                    self._transition(RunState.REPORTING, result)
                    self._report(result)
        finally:
            self._close(result)

        return result

    # ========================================================================
    # STATE MACHINE
    # ========================================================================

    def _transition(self, target: RunState, result: RunResult) -> None:
        if not can_run_transition(self.state, target):
            raise ContractViolationError(
                f"Invalid run transition: {self.state.value} -> {target.value}"
            )
        self.logger.debug(f"🔄 {self.state.value} -> {target.value}")
        self.state = target
        result.state = target

    # ========================================================================
    # STAGES
    # ========================================================================

    def _connect(self, result: RunResult) -> bool:
        self.logger.info("🔌 Stage: connecting")
        try:
            self._conn = self.acquirer.acquire()
        except ConnectionExhaustedError as e:
            result.add_step(StageResult(
                name="connecting",
                status=StageStatus.FAILED,
                message=f"Gave up after {e.attempts} attempt(s)",
                error=str(e),
                details={"attempts": e.attempts}
            ))
            self.logger.error(f"❌ {e}")
            return False

        result.add_step(StageResult(
            name="connecting",
            status=StageStatus.SUCCESS,
            message=f"Connected on attempt {self.acquirer.attempts_made}",
            details={"attempts": self.acquirer.attempts_made}
        ))
        return True

    def _initialize(self, result: RunResult) -> bool:
        self.logger.info("📦 Stage: initializing")
        collection = self.config.seed.collection
        try:
            ensure_schema(self._conn, self.config.namespace, collection)
        except SchemaError as e:
            result.add_step(StageResult(
                name="initializing",
                status=StageStatus.FAILED,
                message="Namespace/collection creation failed",
                error=str(e)
            ))
            return False

        details = {}
        try:
            drift = verify_schema(self._conn, self.config.namespace, collection)
            details["drift"] = drift
            if drift["has_drift"]:
                result.warnings.append(
                    f"{self.config.namespace}.{collection.name} does not match its collection spec: "
                    f"missing={drift['missing_columns']}, "
                    f"type_mismatches={sorted(drift['type_mismatches'])}"
                )
            if drift["missing_unique_key"]:
                result.warnings.append(
                    f"{self.config.namespace}.{collection.name} has no unique index on "
                    f"'{collection.natural_key}'; seed inserts will be rejected"
                )
        except SchemaError as e:
            # Drift check is advisory
            result.warnings.append(f"Schema verification skipped: {e}")
            self.logger.warning(f"⚠️ Schema verification skipped: {e}")

        result.add_step(StageResult(
            name="initializing",
            status=StageStatus.SUCCESS,
            message=f"{self.config.namespace}.{collection.name} ready",
            details=details
        ))
        return True

    def _load(self, result: RunResult) -> None:
        self.logger.info("📥 Stage: loading")
        try:
            inserted = load_seed(self._conn, self.config.namespace, self.config.seed)
        except LoadError as e:
            result.add_step(StageResult(
                name="loading",
                status=StageStatus.FAILED,
                message="Seed load rolled back",
                error=str(e)
            ))
            return

        result.inserted_count = inserted
        result.add_step(StageResult(
            name="loading",
            status=StageStatus.SUCCESS,
            message=f"Inserted {inserted} of {len(self.config.seed.records)} seed record(s)",
            details={
                "inserted": inserted,
                "seed_records": len(self.config.seed.records)
            }
        ))

    def _report(self, result: RunResult) -> None:
        self.logger.info("📋 Stage: reporting")
        try:
            result.rows = list(report(
                self._conn, self.config.namespace, self.config.seed.collection
            ))
        except ReadError as e:
            result.rows = []
            result.add_step(StageResult(
                name="reporting",
                status=StageStatus.FAILED,
                message="Read-back failed; showing no rows",
                error=str(e)
            ))
            return

        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(
                "Collection contents:\n"
                + render_table(self.config.seed.collection.field_names, result.rows)
            )

        result.add_step(StageResult(
            name="reporting",
            status=StageStatus.SUCCESS,
            message=f"Read {len(result.rows)} row(s)",
            details={"row_count": len(result.rows)}
        ))

    # ========================================================================
    # CLOSE
    # ========================================================================

    def _close(self, result: RunResult) -> None:
        """Enter CLOSED: release the session once, settle the outcome."""
        if not is_run_terminal(self.state):
            self._transition(RunState.CLOSED, result)

        if self._conn is not None:
            self._release(result)

        for name in STAGE_NAMES:
            if result.get_step(name) is None:
                result.add_step(StageResult(
                    name=name,
                    status=StageStatus.SKIPPED,
                    message="Not reached"
                ))

        result.outcome = self._decide_outcome(result)
        result.finished_at = datetime.now(timezone.utc).isoformat()

        summary = result.to_dict()["summary"]
        self.logger.info("=" * 70)
        if result.outcome == RunOutcome.FAILED:
            self.logger.error(f"🏁 Run failed: {'; '.join(result.errors) or 'aborted'}")
        elif result.outcome == RunOutcome.COMPLETED_WITH_ERRORS:
            self.logger.warning(f"🏁 Run finished with errors: {'; '.join(result.errors)}")
        else:
            self.logger.info("🏁 Run finished")
        self.logger.info(
            f"   Steps: {summary['successful']} succeeded, {summary['failed']} failed, "
            f"{summary['skipped']} skipped"
        )
        if result.inserted_count is not None:
            self.logger.info(f"   Inserted: {result.inserted_count}, rows now: {len(result.rows)}")
        if result.warnings:
            self.logger.warning(f"   Warnings: {result.warnings}")
        self.logger.info("=" * 70)

    def _release(self, result: RunResult) -> None:
        if self._released:
            raise ContractViolationError(f"Session of run {self.run_id} released twice")
        self._released = True
        result.session_released = True
        try:
            self.acquirer.release(self._conn)
        except psycopg.Error as e:
            result.warnings.append(f"Closing the session raised {type(e).__name__}: {e}")
            self.logger.warning(f"⚠️ Closing the session raised {type(e).__name__}: {e}")

    @staticmethod
    def _decide_outcome(result: RunResult) -> RunOutcome:
        for name in FATAL_STAGES:
            step = result.get_step(name)
            if step is None or step.status != StageStatus.SUCCESS:
                return RunOutcome.FAILED
        if result.get_step("reporting").status == StageStatus.SKIPPED:
            # Aborted mid-run by an unexpected exception
            return RunOutcome.FAILED
        if any(step.status == StageStatus.FAILED for step in result.steps):
            return RunOutcome.COMPLETED_WITH_ERRORS
        return RunOutcome.COMPLETED


def run_bootstrap(config: BootstrapConfig, **kwargs) -> RunResult:
    """Convenience wrapper: one controller, one run."""
    return BootstrapRunController(config, **kwargs).run()
