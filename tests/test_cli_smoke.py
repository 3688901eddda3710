"""
Minimal smoke tests for the repcycle CLI.

Tests basic functionality:
- App runs without errors
- Data directory initializes
- Plans can be built and followed
- Sets can be logged, deleted and restored
- Cycles can be built and activated
"""

import tempfile
from datetime import datetime
from pathlib import Path

import pytest
from typer.testing import CliRunner

from repcycle.cli import app as cli_app
from repcycle.cli.main import app
from repcycle.core.clock import FixedClock
from repcycle.io.store import Store

runner = CliRunner()


@pytest.fixture
def data_dir(monkeypatch):
    """Temporary data directory, isolated HOME and a frozen clock."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        monkeypatch.setenv("HOME", str(root / "home"))
        monkeypatch.delenv("REPCYCLE_HOME", raising=False)
        monkeypatch.setattr(cli_app, "clock", FixedClock(datetime(2026, 3, 10, 9, 0)))
        yield root / "data"


def _run(data_dir: Path, *args: str):
    return runner.invoke(app, [*args, "--data-dir", str(data_dir)])


def _setup_plan(data_dir: Path) -> None:
    assert _run(data_dir, "init").exit_code == 0
    assert _run(data_dir, "plan-create", "PPL").exit_code == 0
    assert _run(data_dir, "plan-add-day", "PPL", "--name", "Push").exit_code == 0
    assert _run(data_dir, "plan-add-day", "PPL", "--name", "Pull").exit_code == 0
    assert _run(data_dir, "plan-add-exercise", "PPL", "1", "bench", "--targets", "60x8,60x8").exit_code == 0
    assert _run(data_dir, "plan-add-exercise", "PPL", "2", "row", "--sets", "2").exit_code == 0
    assert _run(data_dir, "plan-activate", "PPL").exit_code == 0


class TestCLISmoke:
    """Basic smoke tests for CLI commands."""

    def test_app_help(self):
        """Test that app runs and shows help."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "plan-create" in result.output

    def test_init_creates_files(self, data_dir):
        result = _run(data_dir, "init", "--transition-hour", "4")
        assert result.exit_code == 0
        assert (data_dir / "profile.json").exists()

        store = Store(data_dir)
        store.load()
        assert store.profile.day_transition_hour == 4

    def test_init_rejects_bad_hour(self, data_dir):
        result = _run(data_dir, "init", "--transition-hour", "25")
        assert result.exit_code == 1

    def test_command_before_init_fails(self, data_dir):
        result = _run(data_dir, "today")
        assert result.exit_code == 1
        assert "init" in result.output

    def test_plan_show_and_list(self, data_dir):
        _setup_plan(data_dir)
        shown = _run(data_dir, "plan-show", "PPL")
        assert shown.exit_code == 0
        assert "Push" in shown.output
        listed = _run(data_dir, "plan-list")
        assert listed.exit_code == 0
        assert "PPL" in listed.output

    def test_unknown_plan(self, data_dir):
        _setup_plan(data_dir)
        result = _run(data_dir, "plan-show", "Nope")
        assert result.exit_code == 1

    def test_today_log_and_complete(self, data_dir):
        _setup_plan(data_dir)
        today = _run(data_dir, "today")
        assert today.exit_code == 0
        assert "bench" in today.output

        assert _run(data_dir, "log-set", "1", "60x8").exit_code == 0
        assert _run(data_dir, "log-set", "1", "62.5x8").exit_code == 0
        result = _run(data_dir, "complete")
        assert result.exit_code == 0

        store = Store(data_dir)
        store.load()
        workout = next(iter(store.workout_days.values()))
        assert workout.total_completed_sets == 2

    def test_log_set_invalid_value(self, data_dir):
        _setup_plan(data_dir)
        result = _run(data_dir, "log-set", "1", "heavy")
        assert result.exit_code == 1

    def test_complete_before_all_sets_fails(self, data_dir):
        _setup_plan(data_dir)
        _run(data_dir, "log-set", "1", "60x8")
        result = _run(data_dir, "complete")
        assert result.exit_code == 1

    def test_change_day_and_guard(self, data_dir):
        _setup_plan(data_dir)
        _run(data_dir, "today")

        result = _run(data_dir, "change-day", "2", "--skip")
        assert result.exit_code == 0
        assert "Pull" in result.output

        _run(data_dir, "log-set", "1", "50x10")
        blocked = _run(data_dir, "change-day", "1")
        assert blocked.exit_code == 1

        out_of_range = _run(data_dir, "change-day", "9")
        assert out_of_range.exit_code == 1

    def test_delete_and_restore_set(self, data_dir):
        _setup_plan(data_dir)
        _run(data_dir, "log-set", "1", "60x8")

        store = Store(data_dir)
        store.load()
        set_id = next(iter(store.workout_days.values())).entries[0].sorted_sets[0].id

        assert _run(data_dir, "delete-set", set_id[:8]).exit_code == 0
        store.load()
        assert next(iter(store.workout_days.values())).total_completed_sets == 0

        assert _run(data_dir, "restore-set", set_id[:8]).exit_code == 0
        store.load()
        assert next(iter(store.workout_days.values())).total_completed_sets == 1

    def test_preview(self, data_dir):
        _setup_plan(data_dir)
        _run(data_dir, "today")
        result = _run(data_dir, "preview", "2026-03-11")
        assert result.exit_code == 0
        assert "Day 2/2" in result.output

        bad = _run(data_dir, "preview", "tomorrow")
        assert bad.exit_code == 1

    def test_cycle_flow(self, data_dir):
        _setup_plan(data_dir)
        assert _run(data_dir, "cycle-create", "Block").exit_code == 0
        assert _run(data_dir, "cycle-add-plan", "Block", "PPL").exit_code == 0
        assert _run(data_dir, "cycle-activate", "Block").exit_code == 0

        shown = _run(data_dir, "cycle-show")
        assert shown.exit_code == 0
        assert "day 1/2" in shown.output

        today = _run(data_dir, "today")
        assert today.exit_code == 0
        assert "bench" in today.output

        store = Store(data_dir)
        store.load()
        assert store.profile.execution_mode == "cycle"
        assert [c.is_active for c in store.cycles.values()] == [True]

    def test_complete_earlier_day(self, data_dir, monkeypatch):
        _setup_plan(data_dir)
        _run(data_dir, "log-set", "1", "60x8")
        _run(data_dir, "log-set", "1", "60x8")

        monkeypatch.setattr(cli_app, "clock", FixedClock(datetime(2026, 3, 11, 9, 0)))
        today = _run(data_dir, "today")
        assert today.exit_code == 0
        assert "row" in today.output

        result = _run(data_dir, "complete", "--date", "2026-03-10")
        assert result.exit_code == 0

        store = Store(data_dir)
        store.load()
        progress = next(iter(store.plan_progress.values()))
        assert progress.current_day_index == 2

    def test_complete_date_errors(self, data_dir):
        _setup_plan(data_dir)
        assert _run(data_dir, "complete", "--date", "2026-03-01").exit_code == 1
        assert _run(data_dir, "complete", "--date", "2026-03-20").exit_code == 1
        assert _run(data_dir, "complete", "--date", "soon").exit_code == 1
