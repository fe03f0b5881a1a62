"""
Backup orchestration into a single consolidated repository.

"One repo at a time. That's how you build an empire." — schema.cx
"""

import time
from datetime import datetime
from typing import Callable

from rich.markup import escape

from .config import Settings
from .git_utils import GitOperations, commit_message
from .models import BackupOutcome, RunState, RunSummary, StageOutcome
from .retry import GitError, RetryExecutor
from .rich_utils import Colors, console, format_repo_name, print_section_header, print_success, print_warning
from .runner import ProcessRunner
from .validation import ValidationError, repository_dirname
from .workspace import Workspace, WorkspaceError


class BackupOrchestrator:
    """
    Snapshots every repository into a subdirectory of the workspace.

    Repositories are processed strictly in order, one at a time. A failure
    in one repository is recorded and the run moves on; only workspace reset
    and initialization failures abort the run.
    """

    def __init__(
        self,
        settings: Settings,
        workspace: Workspace,
        runner: ProcessRunner,
        retry: RetryExecutor | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.settings = settings
        self.workspace = workspace
        self.git = GitOperations(runner, workspace.path)
        self.retry = retry or RetryExecutor(
            max_attempts=settings.max_attempts,
            base_delay=settings.base_delay,
            sleep=sleep,
        )
        self.sleep = sleep
        self.clock = clock
        self.state = RunState.IDLE

    def run(self, identifiers: list[str]) -> RunSummary:
        """
        Run a full backup over the given identifiers.

        Args:
            identifiers: Repository identifiers in the order to back them up

        Returns:
            The finalized RunSummary

        Raises:
            WorkspaceError: If the workspace cannot be reset or initialized
        """
        summary = RunSummary()

        self.prepare_workspace()

        print_section_header("=== Starting Repository Backup ===")
        self.state = RunState.PROCESSING
        total = len(identifiers)

        for index, identifier in enumerate(identifiers):
            if index > 0 and self.settings.repo_delay > 0:
                self.sleep(self.settings.repo_delay)

            console.print(f"[{index + 1}/{total}] Processing: {format_repo_name(escape(identifier))}", highlight=False)
            outcome = self.backup_repository(identifier)
            summary.add_outcome(outcome)

            if outcome.success:
                print_success(
                    f"Successfully backed up ({summary.succeeded}/{total} successful)",
                    prefix="  ✓",
                )
            console.print()

        self.state = RunState.SUMMARIZED
        return summary

    def prepare_workspace(self) -> None:
        """
        Reset the workspace and bring it to the remote's base state.

        Raises:
            WorkspaceError: On any failure; nothing can be backed up safely
        """
        self.workspace.reset()
        self.state = RunState.WORKSPACE_RESET

        name, email = self.settings.git_identity
        try:
            self.retry.run(
                lambda: self.git.init_workspace(self.settings.remote_url, self.settings.branch, name, email),
                "Initial git setup",
            )
        except GitError as e:
            raise WorkspaceError(str(e)) from e

        self.state = RunState.WORKSPACE_INITIALIZED

    def backup_repository(self, identifier: str) -> BackupOutcome:
        """
        Snapshot one repository and push it.

        Never raises for repository-level problems; they come back as a
        failed BackupOutcome.
        """
        try:
            name = repository_dirname(identifier)
        except ValidationError as e:
            console.print(f"  [red]✗ Invalid repository identifier: {escape(str(e))}[/red]")
            return BackupOutcome(identifier, success=False, reason=f"invalid identifier: {e}")

        try:
            self.workspace.remove_subdir(name)
        except OSError as e:
            print_warning(f"Warning: cleanup failed: {escape(str(e))}", prefix="  ⚠")

        try:
            self.retry.run(
                lambda: self.git.clone(self.settings.clone_url(identifier), name),
                f"Clone {name}",
            )
        except GitError as e:
            console.print(f"  [red]✗ Failed to clone: {escape(str(e))}[/red]")
            return BackupOutcome(identifier, success=False, reason=f"clone failed after {e.attempts} attempt(s)")

        try:
            self.workspace.strip_history(name)
        except OSError as e:
            print_warning(f"Warning: failed to remove .git: {escape(str(e))}", prefix="  ⚠")

        stage, detail = self.git.stage_and_commit(name, commit_message(name, self.clock()))
        if stage is StageOutcome.FAILED:
            print_warning(f"Warning: commit failed: {escape(detail)}", prefix="  ⚠")
        elif stage is StageOutcome.NO_CHANGES:
            console.print(f"  [{Colors.MUTED}]no changes[/{Colors.MUTED}]")

        try:
            self.retry.run(lambda: self.git.push(self.settings.branch), f"Push {name}")
        except GitError as e:
            console.print(f"  [red]✗ Failed to push: {escape(str(e))}[/red]")
            return BackupOutcome(
                identifier,
                success=False,
                reason=f"push failed after {e.attempts} attempt(s)",
                stage=stage,
            )

        return BackupOutcome(identifier, success=True, stage=stage)
