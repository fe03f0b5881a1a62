"""
Tests for the ghvault CLI.

"The command line is where the real work happens." — schema.cx
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from ghvault.cli import app
from ghvault.github_api import GitHubAPIError
from ghvault.models import BackupOutcome, RunSummary
from ghvault.workspace import WorkspaceError

runner = CliRunner()


@pytest.fixture
def env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """A clean environment with just enough to run."""
    for name in ("ORG_ACCOUNT", "PROJECT_ACCOUNT", "GITHUB_TOKEN_PERSONAL", "GITHUB_TOKEN_PRIVATE", "GHVAULT_CONFIG"):
        monkeypatch.delenv(name, raising=False)
    return {
        "BACKUP_REMOTE_URL": "git@github.com:me/backup.git",
        "BACKUP_REPO_PATH": str(tmp_path / "ws"),
        "ORG_ACCOUNT": "acme",
    }


@pytest.fixture(autouse=True)
def git_on_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("ghvault.cli.shutil.which", lambda name: f"/usr/bin/{name}")


def summary_with(*outcomes: BackupOutcome) -> RunSummary:
    summary = RunSummary()
    for outcome in outcomes:
        summary.add_outcome(outcome)
    return summary


def test_version() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert "ghvault version" in result.stdout


@patch("ghvault.cli.BackupOrchestrator")
@patch("ghvault.cli.discover_repositories")
def test_run_success(mock_discover: MagicMock, mock_orchestrator: MagicMock, env: dict[str, str]) -> None:
    """Test a run where every repository is backed up."""
    mock_discover.return_value = ["acme/one", "acme/two"]
    mock_orchestrator.return_value.run.return_value = summary_with(
        BackupOutcome("acme/one", success=True),
        BackupOutcome("acme/two", success=True),
    )

    result = runner.invoke(app, ["run"], env=env)

    assert result.exit_code == 0
    assert "Backup Summary" in result.stdout
    mock_orchestrator.return_value.run.assert_called_once_with(["acme/one", "acme/two"])


@patch("ghvault.cli.BackupOrchestrator")
@patch("ghvault.cli.discover_repositories")
def test_run_partial_failure_exits_zero(mock_discover: MagicMock, mock_orchestrator: MagicMock, env: dict[str, str]) -> None:
    """Test that failed repositories are listed but do not fail the process."""
    mock_discover.return_value = ["acme/one", "acme/two"]
    mock_orchestrator.return_value.run.return_value = summary_with(
        BackupOutcome("acme/one", success=True),
        BackupOutcome("acme/two", success=False, reason="clone failed after 3 attempt(s)"),
    )

    result = runner.invoke(app, ["run"], env=env)

    assert result.exit_code == 0
    assert "Failed repositories" in result.stdout
    assert "acme/two" in result.stdout


@patch("ghvault.cli.BackupOrchestrator")
@patch("ghvault.cli.discover_repositories")
def test_run_workspace_override(mock_discover: MagicMock, mock_orchestrator: MagicMock, env: dict[str, str], tmp_path: Path) -> None:
    mock_discover.return_value = []
    mock_orchestrator.return_value.run.return_value = RunSummary()

    result = runner.invoke(app, ["run", "--workspace", str(tmp_path / "custom")], env=env)

    assert result.exit_code == 0
    settings = mock_orchestrator.call_args.args[0]
    workspace = mock_orchestrator.call_args.args[1]
    assert settings.workspace == tmp_path / "custom"
    assert workspace.path == tmp_path / "custom"


@patch("ghvault.cli.discover_repositories")
def test_run_api_error_is_fatal(mock_discover: MagicMock, env: dict[str, str]) -> None:
    mock_discover.side_effect = GitHubAPIError("Unexpected status 500: boom")

    result = runner.invoke(app, ["run"], env=env)

    assert result.exit_code == 1
    assert "GitHub API Error" in result.stdout


@patch("ghvault.cli.BackupOrchestrator")
@patch("ghvault.cli.discover_repositories")
def test_run_workspace_error_is_fatal(mock_discover: MagicMock, mock_orchestrator: MagicMock, env: dict[str, str]) -> None:
    mock_discover.return_value = ["acme/one"]
    mock_orchestrator.return_value.run.side_effect = WorkspaceError("Initial git setup: fatal")

    result = runner.invoke(app, ["run"], env=env)

    assert result.exit_code == 1
    assert "Workspace error" in result.stdout


def test_run_config_error(env: dict[str, str]) -> None:
    env = {**env, "BACKUP_REMOTE_URL": ""}

    result = runner.invoke(app, ["run"], env=env)

    assert result.exit_code == 1
    assert "Configuration error" in result.stdout


@patch("ghvault.cli.BackupOrchestrator")
@patch("ghvault.cli.discover_repositories")
def test_run_dry_run(mock_discover: MagicMock, mock_orchestrator: MagicMock, env: dict[str, str]) -> None:
    """Test that a dry run discovers but never touches the workspace."""
    mock_discover.return_value = ["acme/one"]
    env = {**env, "BACKUP_REMOTE_URL": ""}

    result = runner.invoke(app, ["run", "--dry-run"], env=env)

    assert result.exit_code == 0
    assert "DRY RUN" in result.stdout
    mock_orchestrator.assert_not_called()


@patch("ghvault.cli.BackupOrchestrator")
@patch("ghvault.cli.discover_repositories")
def test_run_interrupted(mock_discover: MagicMock, mock_orchestrator: MagicMock, env: dict[str, str]) -> None:
    mock_discover.return_value = ["acme/one"]
    mock_orchestrator.return_value.run.side_effect = KeyboardInterrupt

    result = runner.invoke(app, ["run"], env=env)

    assert result.exit_code == 130


@patch("ghvault.cli.discover_repositories")
def test_list(mock_discover: MagicMock, env: dict[str, str]) -> None:
    mock_discover.return_value = ["acme/one"]
    env = {**env, "BACKUP_REMOTE_URL": ""}

    result = runner.invoke(app, ["list"], env=env)

    assert result.exit_code == 0
    mock_discover.assert_called_once()
    assert mock_discover.call_args.args[0].org_account == "acme"


@patch("ghvault.cli.discover_repositories")
def test_run_without_git(mock_discover: MagicMock, env: dict[str, str], monkeypatch: pytest.MonkeyPatch) -> None:
    mock_discover.return_value = ["acme/one"]
    monkeypatch.setattr("ghvault.cli.shutil.which", lambda name: None)

    result = runner.invoke(app, ["run"], env=env)

    assert result.exit_code == 1
    assert "git executable not found" in result.stdout
