"""
Process runner abstraction.

"Shelling out is easy. Knowing what came back is the hard part." — schema.cx
"""

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True)
class CommandResult:
    """Exit status and combined stdout/stderr of one command."""

    command: str
    returncode: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class ProcessRunner(Protocol):
    """Anything that can run a shell command and report what happened."""

    def run(self, command: str, cwd: Path | None = None) -> CommandResult: ...


class ShellRunner:
    """
    Runs commands through ``/bin/sh`` with stderr folded into stdout.

    Never raises for a failing command: a non-zero exit, a timeout or a
    missing working directory all come back as a failed CommandResult.
    """

    def __init__(self, timeout: float | None = 600) -> None:
        self.timeout = timeout

    def run(self, command: str, cwd: Path | None = None) -> CommandResult:
        try:
            result = subprocess.run(
                command,
                shell=True,
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            return CommandResult(command, -1, f"Command timed out after {self.timeout}s")
        except OSError as e:
            return CommandResult(command, 127, str(e))

        return CommandResult(command, result.returncode, result.stdout or "")
