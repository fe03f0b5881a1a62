"""
ghvault CLI interface.

"The command line is where the real work happens. Everything else is just theater." — schema.cx
"""

import shutil
import sys
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.markup import escape

from .backup import BackupOrchestrator
from .config import ConfigError, Settings, load_settings
from .github_api import GitHubAPIClient, GitHubAPIError, discover_repositories
from .rich_utils import console, print_error, print_info, print_run_summary, print_warning
from .runner import ShellRunner
from .workspace import Workspace, WorkspaceError

# Load environment variables from .env file if it exists
load_dotenv()

# Exit codes
EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_INTERRUPTED = 130

app = typer.Typer(
    name="ghvault",
    help="Snapshot every GitHub repo you can reach into one backup repository.",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from . import __version__
        console.print(f"ghvault version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """
    Snapshot every GitHub repo you can reach into one backup repository.

    "Control is an illusion. But backups? Those are real." — schema.cx
    """
    pass


def _load(config_file: Path | None, require_remote: bool) -> Settings:
    try:
        return load_settings(config_file, require_remote=require_remote)
    except ConfigError as e:
        print_error(f"Configuration error: {escape(str(e))}")
        sys.exit(EXIT_FATAL)


def _discover(settings: Settings) -> list[str]:
    if not settings.token_personal:
        print_warning("No GITHUB_TOKEN_PERSONAL found; org and public listings are unauthenticated.")
    if not settings.token_private:
        print_warning("No GITHUB_TOKEN_PRIVATE found; GitHub will reject the private listing.")

    try:
        with GitHubAPIClient(timeout=settings.request_timeout) as client:
            return discover_repositories(settings, client)
    except GitHubAPIError as e:
        print_error(f"GitHub API Error: {escape(str(e))}")
        sys.exit(EXIT_FATAL)


@app.command()
def run(
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML settings file (environment variables override it)",
        envvar="GHVAULT_CONFIG",
    ),
    workspace: Path | None = typer.Option(
        None,
        "--workspace",
        "-w",
        help="Local workspace directory (default: BACKUP_REPO_PATH or _Repos). Wiped on every run!",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Discover repositories and show what would be backed up",
    ),
) -> None:
    """
    Back up every reachable repository into the backup remote.

    "In a world of ephemeral clouds, be the one with local backups." — schema.cx

    Example:
        ghvault run
        ghvault run --config ghvault.yaml --workspace /srv/backup
        ghvault run --dry-run
    """
    console.print("[bold cyan]Hello from GitHub Backup[/bold cyan]")
    settings = _load(config_file, require_remote=not dry_run)
    if workspace is not None:
        settings = settings.with_workspace(workspace)

    try:
        repos = _discover(settings)

        if dry_run:
            console.print(
                f"\n[yellow]DRY RUN - {len(repos)} repositories would be snapshotted into "
                f"{escape(str(settings.workspace))}[/yellow]"
            )
            sys.exit(EXIT_SUCCESS)

        if shutil.which("git") is None:
            print_error("git executable not found in PATH")
            sys.exit(EXIT_FATAL)

        print_info(f"Backing up into {escape(settings.remote_url)} ({settings.branch})")
        orchestrator = BackupOrchestrator(settings, Workspace(settings.workspace), ShellRunner())
        try:
            summary = orchestrator.run(repos)
        except WorkspaceError as e:
            print_error(f"Workspace error: {escape(str(e))}")
            sys.exit(EXIT_FATAL)

        print_run_summary(summary)
        # Failed repositories are reported, not fatal
        sys.exit(EXIT_SUCCESS)

    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(EXIT_INTERRUPTED)


@app.command("list")
def list_repos(
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML settings file (environment variables override it)",
        envvar="GHVAULT_CONFIG",
    ),
) -> None:
    """
    List every repository a backup run would process.

    Example:
        ghvault list
    """
    settings = _load(config_file, require_remote=False)
    _discover(settings)
    sys.exit(EXIT_SUCCESS)


if __name__ == "__main__":
    app()
