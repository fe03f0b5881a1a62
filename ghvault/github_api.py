"""
GitHub API client for repository discovery.

"The API is just a door. Your token is the key. Don't lose it." — schema.cx
"""

from datetime import datetime
from typing import Any

import requests
from rich.markup import escape

from . import __version__
from .config import Settings
from .models import Endpoint, EndpointSet
from .rich_utils import Colors, console, print_info, print_warning


class GitHubAPIError(Exception):
    """GitHub API error."""

    pass


class RateLimitError(GitHubAPIError):
    """Rate limit exceeded or access forbidden."""

    pass


class GitHubAPIClient:
    """
    Lists repository identifiers from GitHub REST v3 listing endpoints.

    "They track everything. Might as well use their API." — schema.cx
    """

    def __init__(self, session: requests.Session | None = None, timeout: float = 30.0) -> None:
        """Initialize the client with an optional shared session."""
        self.session = session or requests.Session()
        self.timeout = timeout
        self.session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "User-Agent": f"ghvault/{__version__}",
            }
        )

    def __enter__(self) -> "GitHubAPIClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP session and release resources."""
        self.session.close()

    def list_repositories(self, endpoint: Endpoint, token: str | None) -> list[str]:
        """List identifiers from an endpoint, honoring its pagination mode."""
        if endpoint.paginated:
            return self.list_paginated(endpoint, token)
        return self.list_single(endpoint, token)

    def list_paginated(self, endpoint: Endpoint, token: str | None) -> list[str]:
        """
        Walk page=1, 2, 3... until a page comes back empty.

        "Pagination is just recursion with extra steps." — schema.cx

        Args:
            endpoint: Paginated listing endpoint
            token: Optional token; when empty the requests are unauthenticated

        Returns:
            Repository identifiers in API order, without duplicates
        """
        names: list[str] = []
        seen: set[str] = set()
        page = 1

        while True:
            params = {**endpoint.params, "page": page}
            response = self._get(endpoint.url, params, token)

            if response.status_code == 401 and token:
                # An expired or bad personal token should not block public listings
                print_warning(
                    f"Unauthorized (401) with provided token for {endpoint.name} repos; "
                    "retrying unauthenticated"
                )
                response = self._get(endpoint.url, params, None)

            self._check_response(response, token_hint="GITHUB_TOKEN_PERSONAL")
            page_names = self._decode(response)

            if not page_names:
                break

            for name in page_names:
                if name not in seen:
                    seen.add(name)
                    names.append(name)

            page += 1

        return names

    def list_single(self, endpoint: Endpoint, token: str | None) -> list[str]:
        """
        Issue exactly one authenticated request and decode it.

        Args:
            endpoint: Single-shot listing endpoint (page size carried in its params)
            token: Token for the request; GitHub rejects the call without one

        Returns:
            Repository identifiers in API order, without duplicates
        """
        response = self._get(endpoint.url, dict(endpoint.params), token)

        if response.status_code == 401:
            raise GitHubAPIError(
                "Unauthorized (401). Check GITHUB_TOKEN_PRIVATE in your environment or .env. "
                f"Response: {response.text}"
            )

        self._check_response(response, token_hint="GITHUB_TOKEN_PRIVATE")
        return list(dict.fromkeys(self._decode(response)))

    def _get(self, url: str, params: dict[str, Any], token: str | None) -> requests.Response:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        try:
            return self.session.get(url, params=params, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise GitHubAPIError(f"Network error contacting {url}: {e}") from e

    def _check_response(self, response: requests.Response, token_hint: str) -> None:
        """
        Raise for any non-200 response.

        "Persistence is key. Even when the API says no." — schema.cx
        """
        if response.status_code == 200:
            return

        if response.status_code == 403:
            raise RateLimitError(
                "Forbidden or rate limited (403). "
                f"Set {token_hint} to increase rate limits."
                f"{self._rate_limit_info(response)} Response: {response.text}"
            )

        raise GitHubAPIError(f"Unexpected status {response.status_code}: {response.text}")

    @staticmethod
    def _rate_limit_info(response: requests.Response) -> str:
        remaining = response.headers.get("X-RateLimit-Remaining")
        if remaining is None:
            return ""

        reset_timestamp = response.headers.get("X-RateLimit-Reset", "0")
        try:
            reset_str = datetime.fromtimestamp(int(reset_timestamp)).strftime("%Y-%m-%d %H:%M:%S")
        except (ValueError, OSError):
            reset_str = "unknown"

        return f" Remaining requests: {remaining}, limit resets at: {reset_str}."

    @staticmethod
    def _decode(response: requests.Response) -> list[str]:
        """Extract full_name from each repository record, in array order."""
        try:
            data = response.json()
        except ValueError as e:
            raise GitHubAPIError(f"Invalid JSON from {response.url}: {e}") from e

        if not isinstance(data, list):
            raise GitHubAPIError(f"Expected a list of repositories from {response.url}, got {type(data).__name__}")

        names = []
        for record in data:
            if not isinstance(record, dict) or not record.get("full_name"):
                raise GitHubAPIError(f"Repository record without full_name from {response.url}")
            names.append(record["full_name"])
        return names


def discover_repositories(settings: Settings, client: GitHubAPIClient) -> list[str]:
    """
    Enumerate org, public and private repositories, in that order.

    Later duplicates are dropped, since a private org repository shows up in
    both the org listing and the private listing.

    Raises:
        GitHubAPIError: On any fatal listing failure
    """
    endpoints = EndpointSet.from_settings(settings)
    listings: list[tuple[str, Endpoint | None, str | None]] = [
        ("Org", endpoints.org, settings.token_personal),
        ("Public", endpoints.public, settings.token_personal),
        ("Private", endpoints.private, settings.token_private),
    ]

    all_repos: list[str] = []
    seen: set[str] = set()

    for label, endpoint, token in listings:
        if endpoint is None:
            print_warning(f"{label} account not configured; skipping {label.lower()} repos")
            continue

        names = client.list_repositories(endpoint, token)
        print_info(f"{label} repos count: {len(names)}")

        for name in names:
            if name not in seen:
                seen.add(name)
                all_repos.append(name)

    console.print(f"[green]✓ The amount of repos is: {len(all_repos)}[/green]")
    for name in all_repos:
        console.print(f"   [{Colors.MUTED}]{escape(name)}[/{Colors.MUTED}]")

    return all_repos
