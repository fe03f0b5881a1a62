"""
The local backup workspace.

"One directory to hold them all. Wipe it, rebuild it, push it." — schema.cx
"""

import shutil
from pathlib import Path


class WorkspaceError(Exception):
    """The workspace could not be reset or initialized."""

    pass


class Workspace:
    """
    Handle on the single local directory housing the backup repository.

    The orchestrator is its only writer. Nothing here survives a run except
    what gets pushed to the remote.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"Workspace({str(self.path)!r})"

    def subdir(self, name: str) -> Path:
        return self.path / name

    def reset(self) -> None:
        """
        Delete and recreate the workspace directory.

        Raises:
            WorkspaceError: If the directory cannot be removed or created
        """
        try:
            if self.path.is_symlink() or self.path.is_file():
                self.path.unlink()
            elif self.path.exists():
                shutil.rmtree(self.path)
            self.path.mkdir(parents=True)
        except OSError as e:
            raise WorkspaceError(f"Failed to reset workspace {self.path}: {e}") from e

    def remove_subdir(self, name: str) -> None:
        """
        Remove a stale copy of a repository subdirectory, if present.

        Raises:
            OSError: If the directory exists but cannot be removed
        """
        target = self.subdir(name)
        if target.is_symlink() or target.is_file():
            target.unlink()
        elif target.exists():
            shutil.rmtree(target)

    def strip_history(self, name: str) -> bool:
        """
        Remove a cloned repository's own .git metadata.

        Returns:
            True if metadata was removed, False if there was none

        Raises:
            OSError: If the metadata exists but cannot be removed
        """
        git_dir = self.subdir(name) / ".git"
        if git_dir.is_dir() and not git_dir.is_symlink():
            shutil.rmtree(git_dir)
            return True
        if git_dir.exists() or git_dir.is_symlink():
            # worktrees and submodule checkouts use a .git file
            git_dir.unlink()
            return True
        return False
