"""
Bounded retry for network-sensitive git commands.

"Persistence is the difference between a bug and a feature." — schema.cx
"""

import time
from typing import Callable

from .runner import CommandResult
from .rich_utils import console

# Substrings in git/ssh output that point at a flaky network rather than a
# real problem with the repository. Matched case-insensitively.
TRANSIENT_SIGNATURES = (
    "Could not resolve hostname",
    "Connection reset",
    "Connection timed out",
    "temporary failure",
)


class GitError(Exception):
    """A git operation failed, possibly after several attempts."""

    def __init__(self, operation: str, output: str = "", attempts: int = 1, message: str | None = None) -> None:
        self.operation = operation
        self.output = output
        self.attempts = attempts
        super().__init__(message or f"{operation}: {output.strip()}")


def is_transient(output: str) -> bool:
    """Check whether captured command output looks like network flakiness."""
    lowered = output.lower()
    return any(signature.lower() in lowered for signature in TRANSIENT_SIGNATURES)


class RetryExecutor:
    """
    Runs a unit of process work with exponential-backoff retry.

    Only transient failures are retried. The delay before attempt ``n + 1``
    is ``base_delay * 2 ** (n - 1)``.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.sleep = sleep

    def run(self, work: Callable[[], CommandResult], operation: str) -> CommandResult:
        """
        Run ``work`` until it succeeds, fails permanently, or attempts run out.

        Args:
            work: Zero-argument callable that runs the command; called once per attempt
            operation: Human-readable label used in messages and errors

        Returns:
            The successful CommandResult

        Raises:
            GitError: On a non-transient failure or after the last transient one
        """
        attempt = 1
        while True:
            result = work()
            if result.ok:
                return result

            if not is_transient(result.output):
                raise GitError(operation, result.output, attempts=attempt)

            if attempt >= self.max_attempts:
                raise GitError(
                    operation,
                    result.output,
                    attempts=attempt,
                    message=f"{operation} failed after {attempt} attempts: {result.output.strip()}",
                )

            delay = self.base_delay * (2 ** (attempt - 1))
            console.print(
                f"[yellow][ATTEMPT {attempt}/{self.max_attempts}] {operation} failed "
                f"(transient error). Retrying in {delay:g}s...[/yellow]"
            )
            self.sleep(delay)
            attempt += 1
