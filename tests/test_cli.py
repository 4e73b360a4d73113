import logging

import pytest
from rich.console import Console
from typer.testing import CliRunner

from tasktracker.api import cli

runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch, tmp_path):
    # wide output so table cells are never wrapped; logs go to tmp
    monkeypatch.setattr(cli, "console", Console(width=250, color_system=None))
    monkeypatch.setenv("TASKTRACKER_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("TASKTRACKER_DB", raising=False)
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        if h not in handlers:
            h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)


@pytest.fixture
def db(tmp_path):
    path = str(tmp_path / "cli.db")
    result = runner.invoke(cli.app, ["--db", path, "seed"])
    assert result.exit_code == 0, result.output
    return path


def test_seed_creates_users(db):
    result = runner.invoke(cli.app, ["--db", db, "users", "list"])

    assert result.exit_code == 0
    for name in ("John Doe", "Jane Smith", "Bob Johnson"):
        assert name in result.output


def test_list_shows_only_own_tasks(db):
    result = runner.invoke(cli.app, ["--db", db, "--as", "jane@example.com", "list"])

    assert result.exit_code == 0
    assert "Fix authentication bug" in result.output
    assert "Complete project documentation" in result.output
    assert "Update dependencies" not in result.output
    assert "Total: 2" in result.output


def test_list_all_sorted_by_priority(db):
    result = runner.invoke(cli.app, ["--db", db, "--as", "bob@example.com", "list-all", "--sort-by", "priority"])

    assert result.exit_code == 0
    out = result.output
    assert out.index("Fix authentication bug") < out.index("Review pull requests") < out.index("Update dependencies")


def test_add_then_assignee_cannot_rename(db):
    added = runner.invoke(
        cli.app,
        ["--db", db, "--as", "john@example.com", "add", "Write tests", "-d", "CLI coverage",
         "--due", "2030-01-01", "-a", "jane@example.com"],
    )
    assert added.exit_code == 0, added.output
    task_id = next(line for line in added.output.splitlines() if "ID:" in line).split("ID:")[1].strip(" │")

    renamed = runner.invoke(cli.app, ["--db", db, "--as", "jane@example.com", "update", task_id, "-t", "x"])
    assert renamed.exit_code == 1
    assert "Only the creator" in renamed.output

    hidden = runner.invoke(cli.app, ["--db", db, "--as", "bob@example.com", "update", task_id, "-p", "urgent"])
    assert hidden.exit_code == 1
    assert "Forbidden" in hidden.output
    assert "urgent" not in hidden.output

    completed = runner.invoke(cli.app, ["--db", db, "--as", "jane@example.com", "done", task_id])
    assert completed.exit_code == 0
    assert "completed" in completed.output


def test_add_reports_all_missing_fields(db):
    result = runner.invoke(cli.app, ["--db", db, "--as", "john@example.com", "add", " "])

    assert result.exit_code == 1
    for field in ("title", "description", "due_date"):
        assert field in result.output


def test_show_malformed_id_is_not_found(db):
    result = runner.invoke(cli.app, ["--db", db, "--as", "john@example.com", "show", "not-an-id"])

    assert result.exit_code == 1
    assert "not found" in result.output


def test_unknown_principal(db):
    result = runner.invoke(cli.app, ["--db", db, "--as", "eve@example.com", "list"])

    assert result.exit_code == 1
    assert "eve@example.com" in result.output


def test_demo_runs_in_memory():
    result = runner.invoke(cli.app, ["demo"])

    assert result.exit_code == 0, result.output
    assert "Only the creator can edit task details" in result.output
    assert "Task removed" in result.output


def test_board_shows_status_totals(db):
    result = runner.invoke(cli.app, ["--db", db, "--as", "jane@example.com", "board"])

    assert result.exit_code == 0
    assert "Total: 5 • Pending: 4 • Completed: 1" in result.output


def test_admin_adds_and_removes_user(db):
    added = runner.invoke(
        cli.app, ["--db", db, "--as", "john@example.com", "users", "add", "Alice", "alice@example.com", "--role", "admin"]
    )
    assert added.exit_code == 0, added.output
    assert "<alice@example.com> (admin)" in added.output

    removed = runner.invoke(cli.app, ["--db", db, "--as", "john@example.com", "users", "rm", "alice@example.com"])
    assert removed.exit_code == 0
    listed = runner.invoke(cli.app, ["--db", db, "users", "list"])
    assert "Alice" not in listed.output


def test_non_admin_cannot_add_user(db):
    result = runner.invoke(cli.app, ["--db", db, "--as", "jane@example.com", "users", "add", "Eve", "eve@example.com"])

    assert result.exit_code == 1
    assert "Admin role required" in result.output
