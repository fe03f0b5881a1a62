"""
Tests for Git utilities.

"Git is complicated. Tests make it less so." — schema.cx
"""

import shlex
from datetime import datetime
from pathlib import Path

import pytest

from ghvault.git_utils import GitOperations, commit_message, init_script
from ghvault.models import StageOutcome
from ghvault.runner import CommandResult


class RecordingRunner:
    """Records commands and answers with canned exit codes by command prefix."""

    def __init__(self, codes: dict[str, int] | None = None) -> None:
        self.codes = codes or {}
        self.calls: list[tuple[str, Path | None]] = []

    def run(self, command: str, cwd: Path | None = None) -> CommandResult:
        self.calls.append((command, cwd))
        for prefix, code in self.codes.items():
            if command.startswith(prefix):
                return CommandResult(command, code, "" if code in (0, 1) else "fatal: boom")
        return CommandResult(command, 0, "")

    @property
    def commands(self) -> list[str]:
        return [command for command, _ in self.calls]


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    return tmp_path / "ws"


def test_commit_message() -> None:
    when = datetime(2024, 3, 4, 5, 6, 7)
    assert commit_message("widgets", when) == "Backup Added on 2024-03-04 Monday 05:06:07 for the repo widgets"


def test_init_script_quotes_arguments() -> None:
    """Test that every user-supplied value is shell-quoted."""
    script = init_script("git@github.com:me/backup.git", "main", "Jane O'Neil", "jane@example.com")

    assert "git init" in script
    quoted_name = shlex.quote("Jane O'Neil")
    assert f"git config user.name {quoted_name}" in script
    assert "git config user.email jane@example.com" in script
    assert "git remote add origin git@github.com:me/backup.git" in script
    assert "git push --force origin main" in script
    assert script.index("git init") < script.index("git push --force")


def test_init_script_reuses_existing_remote_branch() -> None:
    script = init_script("file:///srv/backup.git", "backup", "me", "me@example.com")

    assert "git ls-remote --heads origin backup" in script
    assert "git checkout -B backup FETCH_HEAD" in script
    assert "git symbolic-ref HEAD refs/heads/backup" in script
    assert "README.md" in script


def test_clone_runs_in_workspace(workspace: Path) -> None:
    runner = RecordingRunner()
    git = GitOperations(runner, workspace)

    result = git.clone("git@github.com:acme/one.git", "one")

    assert result.ok
    assert runner.calls == [("git clone --quiet -- git@github.com:acme/one.git one", workspace)]


def test_clone_name_starting_with_dash_is_not_an_option(workspace: Path) -> None:
    runner = RecordingRunner()

    GitOperations(runner, workspace).clone("git@github.com:acme/-n.git", "-n")

    assert runner.commands == ["git clone --quiet -- git@github.com:acme/-n.git -n"]


def test_push(workspace: Path) -> None:
    runner = RecordingRunner()

    GitOperations(runner, workspace).push("main")

    assert runner.commands == ["git push --quiet origin main"]


def test_stage_and_commit_with_changes(workspace: Path) -> None:
    """Test that a non-empty staged diff is committed."""
    runner = RecordingRunner({"git diff --staged": 1})

    outcome, _ = GitOperations(runner, workspace).stage_and_commit("one", "Backup of 'one' $HOME")

    assert outcome is StageOutcome.COMMITTED
    assert runner.commands[0] == "git add --all -- one"
    assert runner.commands[1] == "git diff --staged --quiet -- one"
    quoted_message = shlex.quote("Backup of 'one' $HOME")
    assert runner.commands[2] == f"git commit --quiet -m {quoted_message}"


def test_stage_and_commit_no_changes(workspace: Path) -> None:
    """Test that an empty staged diff is a valid outcome without a commit."""
    runner = RecordingRunner({"git diff --staged": 0})

    outcome, detail = GitOperations(runner, workspace).stage_and_commit("one", "msg")

    assert outcome is StageOutcome.NO_CHANGES
    assert detail == "no changes"
    assert not any(command.startswith("git commit") for command in runner.commands)


def test_stage_and_commit_add_failure(workspace: Path) -> None:
    runner = RecordingRunner({"git add": 128})

    outcome, detail = GitOperations(runner, workspace).stage_and_commit("one", "msg")

    assert outcome is StageOutcome.FAILED
    assert "git add failed" in detail
    assert len(runner.commands) == 1


def test_stage_and_commit_commit_failure(workspace: Path) -> None:
    runner = RecordingRunner({"git diff --staged": 1, "git commit": 128})

    outcome, detail = GitOperations(runner, workspace).stage_and_commit("one", "msg")

    assert outcome is StageOutcome.FAILED
    assert "git commit failed" in detail
