"""
Run controller tests — end-to-end scenarios against the in-memory store.

Scenario A: fresh store
Scenario B: collection already holds some seed keys
Scenario C: endpoint never reachable
Scenario D: schema creation fails
plus idempotence over repeated runs and the single-release guarantee.
"""

import psycopg
import pytest

from core.models import RunOutcome, RunState, StageStatus
from exceptions import ContractViolationError
from services.run_controller import BootstrapRunController, STAGE_NAMES

USER_COLUMNS = [
    ("username", "character varying"),
    ("email", "character varying"),
    ("full_name", "character varying"),
    ("role", "character varying"),
    ("active", "boolean"),
]


def _statuses(result):
    return {step.name: step.status for step in result.steps}


# ============================================================================
# SCENARIOS
# ============================================================================

class TestScenarioFreshStore:

    def test_creates_everything_and_reports_five(self, fake_db, make_controller):
        result = make_controller().run()

        assert "app" in fake_db.schemas
        assert ("app", "users") in fake_db.tables
        assert result.inserted_count == 5
        assert len(result.rows) == 5
        assert sorted(r["username"] for r in result.rows) == ["alice", "bob", "carol", "dave", "erin"]
        assert result.outcome == RunOutcome.COMPLETED
        assert result.success is True
        assert result.state == RunState.CLOSED
        assert all(status == StageStatus.SUCCESS for status in _statuses(result).values())
        assert result.errors == []


class TestScenarioPartialData:

    def test_inserts_only_missing_keys(self, fake_db, make_controller, users_dataset):
        existing = [r.values for r in users_dataset.records if r.values["username"] in ("alice", "dave")]
        fake_db.create_table("app", "users", USER_COLUMNS, unique="username", rows=existing)

        result = make_controller().run()

        assert result.inserted_count == 3
        assert len(result.rows) == 5
        keys = fake_db.keys("app", "users")
        assert len(keys) == len(set(keys)) == 5
        assert result.outcome == RunOutcome.COMPLETED


class TestScenarioUnreachable:

    def test_closes_via_connection_exhausted(self, fake_db, make_controller, no_sleep):
        fake_db.unreachable_attempts = None

        result = make_controller().run()

        assert fake_db.connect_calls == 3
        assert no_sleep.calls == [0.5, 0.5]
        assert result.state == RunState.CLOSED
        assert result.outcome == RunOutcome.FAILED
        assert fake_db.schemas == set()
        assert fake_db.tables == {}
        assert fake_db.open_connections == []
        assert result.session_released is False
        assert _statuses(result) == {
            "connecting": StageStatus.FAILED,
            "initializing": StageStatus.SKIPPED,
            "loading": StageStatus.SKIPPED,
            "reporting": StageStatus.SKIPPED,
        }
        assert result.get_step("connecting").details["attempts"] == 3
        assert result.errors[0].startswith("connecting: Could not connect after 3 attempt(s)")


class TestScenarioSchemaFailure:

    def test_closes_via_schema_error_with_no_rows(self, fake_db, make_controller):
        fake_db.fail_on["create_table"] = psycopg.errors.InsufficientPrivilege(
            "permission denied for schema app"
        )

        result = make_controller().run()

        assert result.outcome == RunOutcome.FAILED
        assert result.state == RunState.CLOSED
        assert ("app", "users") not in fake_db.tables
        assert result.rows == []
        assert result.inserted_count is None
        assert not any(s.startswith("INSERT") for s in fake_db.statements)
        assert _statuses(result) == {
            "connecting": StageStatus.SUCCESS,
            "initializing": StageStatus.FAILED,
            "loading": StageStatus.SKIPPED,
            "reporting": StageStatus.SKIPPED,
        }

    def test_session_released_once(self, fake_db, make_controller):
        fake_db.fail_on["create_schema"] = psycopg.errors.InsufficientPrivilege("permission denied")
        result = make_controller().run()
        assert result.session_released is True
        assert [c.close_calls for c in fake_db.connections] == [1]


# ============================================================================
# NON-FATAL FAILURES
# ============================================================================

class TestLoadAndReadFailures:

    def test_load_failure_still_reports(self, fake_db, make_controller):
        fake_db.fail_on["insert"] = psycopg.errors.StringDataRightTruncation("value too long")

        result = make_controller().run()

        assert result.outcome == RunOutcome.COMPLETED_WITH_ERRORS
        assert result.get_step("loading").status == StageStatus.FAILED
        assert result.get_step("reporting").status == StageStatus.SUCCESS
        assert result.rows == []
        assert result.inserted_count is None
        assert any(e.startswith("loading:") for e in result.errors)

    def test_load_failure_reports_existing_rows(self, fake_db, make_controller, users_dataset):
        existing = [users_dataset.records[0].values]
        fake_db.create_table("app", "users", USER_COLUMNS, unique="username", rows=existing)
        fake_db.fail_on["insert"] = psycopg.OperationalError("server closed the connection")

        result = make_controller().run()

        assert [r["username"] for r in result.rows] == ["alice"]
        assert result.outcome == RunOutcome.COMPLETED_WITH_ERRORS

    def test_read_failure_is_treated_as_empty(self, fake_db, make_controller):
        fake_db.fail_on["select"] = psycopg.errors.InsufficientPrivilege("permission denied")

        result = make_controller().run()

        assert result.inserted_count == 5
        assert result.rows == []
        assert result.get_step("reporting").status == StageStatus.FAILED
        assert result.outcome == RunOutcome.COMPLETED_WITH_ERRORS
        assert result.session_released is True

    def test_drift_is_a_warning_not_a_failure(self, fake_db, make_controller):
        fake_db.create_table(
            "app", "users",
            USER_COLUMNS[:4] + [("active", "text")],
            unique="username",
        )

        result = make_controller().run()

        assert result.outcome == RunOutcome.COMPLETED
        assert any("does not match its collection spec" in w for w in result.warnings)
        assert result.get_step("initializing").details["drift"]["type_mismatches"] == {
            "active": {"expected": "boolean", "actual": "text"}
        }

    def test_missing_unique_key_is_warned_and_load_fails(self, fake_db, make_controller):
        fake_db.create_table("app", "users", USER_COLUMNS, unique=None)

        result = make_controller().run()

        assert result.get_step("initializing").status == StageStatus.SUCCESS
        assert result.get_step("initializing").details["drift"]["missing_unique_key"] is True
        assert any("has no unique index on 'username'" in w for w in result.warnings)
        assert result.get_step("loading").status == StageStatus.FAILED
        assert result.outcome == RunOutcome.COMPLETED_WITH_ERRORS
        assert result.session_released is True


# ============================================================================
# PROPERTIES
# ============================================================================

class TestIdempotence:

    @pytest.mark.parametrize("runs", [2, 3, 5])
    def test_n_runs_equal_one_run(self, fake_db, make_controller, runs):
        first = make_controller().run()
        state_after_one = fake_db.snapshot()

        results = [make_controller().run() for _ in range(runs - 1)]

        assert fake_db.snapshot() == state_after_one
        assert first.inserted_count == 5
        assert all(r.inserted_count == 0 for r in results)
        assert all(len(r.rows) == 5 for r in results)
        assert all(r.outcome == RunOutcome.COMPLETED for r in results)

    def test_no_duplicate_keys_after_any_sequence(self, fake_db, make_controller):
        make_controller().run()
        fake_db.fail_on["insert"] = psycopg.OperationalError("connection lost")
        make_controller().run()
        fake_db.fail_on.clear()
        make_controller().run()

        keys = fake_db.keys("app", "users")
        assert len(keys) == len(set(keys)) == 5


class TestSessionRelease:

    @pytest.mark.parametrize("fault", [None, "create_schema", "insert", "select", "columns"])
    def test_released_exactly_once_on_every_path(self, fake_db, make_controller, fault):
        if fault:
            fake_db.fail_on[fault] = psycopg.OperationalError(f"{fault} failed")

        result = make_controller().run()

        assert result.session_released is True
        assert len(fake_db.connections) == 1
        assert fake_db.connections[0].close_calls == 1
        assert fake_db.open_connections == []

    def test_released_when_unexpected_error_escapes(self, fake_db, make_controller, monkeypatch):
        import services.run_controller as run_controller

        def broken_load(*args, **kwargs):
            raise ContractViolationError("bad call")

        monkeypatch.setattr(run_controller, "load_seed", broken_load)
        controller = make_controller()

        with pytest.raises(ContractViolationError):
            controller.run()

        assert controller.state == RunState.CLOSED
        assert fake_db.connections[0].close_calls == 1


class TestControllerContract:

    def test_run_is_single_use(self, make_controller):
        controller = make_controller()
        controller.run()
        with pytest.raises(ContractViolationError):
            controller.run()

    def test_state_walks_the_happy_path(self, fake_db, make_controller, monkeypatch):
        controller = make_controller()
        seen = []
        original = BootstrapRunController._transition

        def spy(self, target, result):
            seen.append(target)
            return original(self, target, result)

        monkeypatch.setattr(BootstrapRunController, "_transition", spy)
        controller.run()

        assert seen == [
            RunState.CONNECTING, RunState.INITIALIZING, RunState.LOADING,
            RunState.REPORTING, RunState.CLOSED,
        ]

    def test_every_stage_recorded_once(self, make_controller):
        result = make_controller().run()
        assert [s.name for s in result.steps] == list(STAGE_NAMES)

    def test_result_serializes(self, make_controller):
        data = make_controller(run_id="abc12345").run().to_dict()
        assert data["run_id"] == "abc12345"
        assert data["outcome"] == "completed"
        assert data["state"] == "closed"
        assert data["row_count"] == 5
        assert data["summary"] == {"total_steps": 4, "successful": 4, "failed": 0, "skipped": 0}


class TestFinalMessage:

    def test_success_message(self, make_controller, caplog):
        with caplog.at_level("INFO", logger="controller.BootstrapRunController"):
            make_controller().run()
        assert "Run finished" in caplog.text
        assert "Run failed" not in caplog.text

    def test_failure_message_is_distinct(self, fake_db, make_controller, caplog):
        fake_db.unreachable_attempts = None
        with caplog.at_level("INFO", logger="controller.BootstrapRunController"):
            make_controller().run()
        assert "Run failed" in caplog.text
        assert "Run finished" not in caplog.text

    def test_partial_message(self, fake_db, make_controller, caplog):
        fake_db.fail_on["insert"] = psycopg.OperationalError("boom")
        with caplog.at_level("INFO", logger="controller.BootstrapRunController"):
            make_controller().run()
        assert "Run finished with errors" in caplog.text

    def test_debug_logs_collection_table(self, make_controller, caplog):
        controller = make_controller()
        with caplog.at_level("DEBUG", logger="controller.BootstrapRunController"):
            controller.run()
        assert "Collection contents:" in caplog.text
        assert "(5 rows)" in caplog.text

    def test_each_controller_logs_its_own_run_id(self, make_controller, caplog):
        first = make_controller(run_id="run-one")
        second = make_controller(run_id="run-two")
        with caplog.at_level("INFO", logger="controller.BootstrapRunController"):
            first.run()
            second.run()

        run_ids = [
            r.custom_dimensions["run_id"] for r in caplog.records
            if r.name == "controller.BootstrapRunController"
        ]
        assert run_ids.count("run-one") > 0
        assert run_ids.count("run-two") > 0
        split = run_ids.index("run-two")
        assert set(run_ids[:split]) == {"run-one"}
        assert set(run_ids[split:]) == {"run-two"}


class TestRunBootstrap:

    def test_one_call_helper(self, fake_db, bootstrap_config, no_sleep):
        from infrastructure import ConnectionAcquirer
        from services import run_bootstrap

        acquirer = ConnectionAcquirer.from_config(bootstrap_config, connect=fake_db.connect, sleep=no_sleep)
        result = run_bootstrap(bootstrap_config, acquirer=acquirer, run_id="helper01")

        assert result.run_id == "helper01"
        assert result.outcome == RunOutcome.COMPLETED


class TestPackageExports:

    def test_infrastructure_lazy_attributes(self):
        import infrastructure
        from infrastructure.record_reader import report
        from infrastructure.seed_loader import load_seed

        assert infrastructure.load_seed is load_seed
        assert infrastructure.report is report
        with pytest.raises(AttributeError):
            infrastructure.drop_everything
