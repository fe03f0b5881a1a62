"""
Git operations for the consolidated backup repository.

"Git is just a time machine for code. Use it wisely." — schema.cx

Every command is built as a single shell string with each argument passed
through shlex.quote, then handed to a ProcessRunner with the workspace as
its working directory.
"""

import shlex
from datetime import datetime
from pathlib import Path

from .models import StageOutcome
from .runner import CommandResult, ProcessRunner

PLACEHOLDER_FILE = "README.md"
COMMIT_TIME_FORMAT = "%Y-%m-%d %A %H:%M:%S"


def commit_message(name: str, when: datetime | None = None) -> str:
    """Commit message recorded for one repository snapshot."""
    when = when or datetime.now()
    return f"Backup Added on {when.strftime(COMMIT_TIME_FORMAT)} for the repo {name}"


def init_script(remote_url: str, branch: str, committer_name: str, committer_email: str) -> str:
    """
    Shell script that brings a freshly reset workspace to the remote's state.

    If the remote already has the branch it is fetched and checked out, so an
    unchanged repository stages as "no changes" on the next run. Otherwise the
    branch starts from a placeholder commit. The script is safe to re-run as a
    whole, which the retry executor relies on.
    """
    remote = shlex.quote(remote_url)
    q_branch = shlex.quote(branch)
    ref = shlex.quote(f"refs/heads/{branch}")
    steps = [
        "git init --quiet",
        f"git config user.email {shlex.quote(committer_email)}",
        f"git config user.name {shlex.quote(committer_name)}",
        f"(git remote add origin {remote} || git remote set-url origin {remote})",
        f"heads=$(git ls-remote --heads origin {q_branch})",
        (
            f'if [ -n "$heads" ]; then git fetch origin {q_branch} && git checkout -B {q_branch} FETCH_HEAD; '
            f"else git symbolic-ref HEAD {ref}; fi"
        ),
        (
            "(git rev-parse --verify --quiet HEAD >/dev/null || "
            f"(touch {PLACEHOLDER_FILE} && git add {PLACEHOLDER_FILE} && git commit -m 'Initial commit'))"
        ),
        f"git push --force origin {q_branch}",
    ]
    return " && ".join(steps)


class GitOperations:
    """
    Wrapper for git commands run inside the workspace.

    "Every git command is a leap of faith. Make backups." — schema.cx
    """

    def __init__(self, runner: ProcessRunner, workspace: Path) -> None:
        self.runner = runner
        self.workspace = workspace

    def _run(self, command: str) -> CommandResult:
        return self.runner.run(command, cwd=self.workspace)

    def init_workspace(self, remote_url: str, branch: str, committer_name: str, committer_email: str) -> CommandResult:
        """Run the workspace initialization script."""
        return self._run(init_script(remote_url, branch, committer_name, committer_email))

    def clone(self, url: str, name: str) -> CommandResult:
        """Clone a repository into ``<workspace>/<name>``."""
        return self._run(f"git clone --quiet -- {shlex.quote(url)} {shlex.quote(name)}")

    def stage_and_commit(self, name: str, message: str) -> tuple[StageOutcome, str]:
        """
        Stage a snapshot directory and commit it if anything changed.

        Returns:
            Tuple of (outcome, detail); detail carries the failing command's
            output when the outcome is FAILED
        """
        q_name = shlex.quote(name)

        result = self._run(f"git add --all -- {q_name}")
        if not result.ok:
            return StageOutcome.FAILED, f"git add failed: {result.output.strip()}"

        # --quiet implies --exit-code: 0 means nothing staged, 1 means changes
        result = self._run(f"git diff --staged --quiet -- {q_name}")
        if result.returncode == 0:
            return StageOutcome.NO_CHANGES, "no changes"
        if result.returncode != 1:
            return StageOutcome.FAILED, f"git diff failed: {result.output.strip()}"

        result = self._run(f"git commit --quiet -m {shlex.quote(message)}")
        if not result.ok:
            return StageOutcome.FAILED, f"git commit failed: {result.output.strip()}"

        return StageOutcome.COMMITTED, "committed"

    def push(self, branch: str) -> CommandResult:
        """Push the backup branch to origin."""
        return self._run(f"git push --quiet origin {shlex.quote(branch)}")
