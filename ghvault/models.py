"""
Data models for ghvault.

"A backup you can't count is a backup you can't trust." — schema.cx
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .config import Settings


class RunState(str, Enum):
    """Lifecycle of a single backup run."""

    IDLE = "idle"
    WORKSPACE_RESET = "workspace_reset"
    WORKSPACE_INITIALIZED = "workspace_initialized"
    PROCESSING = "processing"
    SUMMARIZED = "summarized"


class StageOutcome(str, Enum):
    """Result of the stage-and-commit step for one repository."""

    COMMITTED = "committed"
    NO_CHANGES = "no changes"
    FAILED = "failed"


@dataclass(frozen=True)
class Endpoint:
    """
    A repository listing endpoint.

    Paginated endpoints get a ``page`` query parameter appended by the client;
    single-shot endpoints are requested exactly once with their fixed params.
    """

    name: str
    url: str
    params: dict[str, Any] = field(default_factory=dict)
    paginated: bool = True


@dataclass(frozen=True)
class EndpointSet:
    """The three listing surfaces a run enumerates, in discovery order."""

    org: Endpoint | None
    public: Endpoint | None
    private: Endpoint

    ORG_PER_PAGE = 50
    PUBLIC_PER_PAGE = 50
    PRIVATE_PER_PAGE = 100

    @classmethod
    def from_settings(cls, settings: "Settings") -> "EndpointSet":
        """Derive the endpoint set from settings; unset accounts yield None."""
        base = settings.api_url.rstrip("/")

        org = None
        if settings.org_account:
            org = Endpoint(
                name="org",
                url=f"{base}/orgs/{settings.org_account}/repos",
                params={"type": "all", "per_page": cls.ORG_PER_PAGE},
            )

        public = None
        if settings.project_account:
            public = Endpoint(
                name="public",
                url=f"{base}/users/{settings.project_account}/repos",
                params={"type": "public", "per_page": cls.PUBLIC_PER_PAGE},
            )

        private = Endpoint(
            name="private",
            url=f"{base}/user/repos",
            params={"type": "private", "per_page": cls.PRIVATE_PER_PAGE, "page": 1},
            paginated=False,
        )
        return cls(org=org, public=public, private=private)


@dataclass
class BackupOutcome:
    """
    Result of backing up a single repository.

    "Every repo gets a verdict. Some just get a longer one." — schema.cx
    """

    identifier: str
    success: bool
    reason: str | None = None
    stage: StageOutcome | None = None


@dataclass
class RunSummary:
    """
    Running tally of a backup run.

    ``failed`` keeps the order in which repositories failed, which is the
    order they were attempted.
    """

    total: int = 0
    succeeded: int = 0
    failed: list[str] = field(default_factory=list)
    outcomes: list[BackupOutcome] = field(default_factory=list)

    def add_outcome(self, outcome: BackupOutcome) -> None:
        """Record the outcome of one repository."""
        self.total += 1
        self.outcomes.append(outcome)

        if outcome.success:
            self.succeeded += 1
        else:
            self.failed.append(outcome.identifier)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def has_failures(self) -> bool:
        """Check if any repository failed."""
        return bool(self.failed)

    def outcome_for(self, identifier: str) -> BackupOutcome | None:
        """Return the recorded outcome for an identifier, if any."""
        for outcome in self.outcomes:
            if outcome.identifier == identifier:
                return outcome
        return None
