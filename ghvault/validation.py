"""
Input validation utilities for ghvault.

"Trust, but verify. Especially anything that ends up in a shell." — schema.cx
"""

import re

GITHUB_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9._-]+$")


class ValidationError(Exception):
    """Raised when input validation fails."""

    pass


def validate_repository_identifier(identifier: str) -> tuple[str, str]:
    """
    Validate and split a repository identifier in 'owner/name' format.

    Args:
        identifier: Repository identifier as returned by the listing API

    Returns:
        Tuple of (owner, name)

    Raises:
        ValidationError: If the format is invalid or the name could escape
            the workspace directory
    """
    if not identifier or not isinstance(identifier, str):
        raise ValidationError("Repository identifier must be a non-empty string")

    parts = identifier.split("/")
    if len(parts) != 2:
        raise ValidationError(f"Repository identifier must be 'owner/name': '{identifier}'")

    owner, name = parts

    if not GITHUB_NAME_PATTERN.match(owner):
        raise ValidationError(
            f"Invalid owner name '{owner}'. "
            "Only alphanumeric characters, '.', '-', and '_' are allowed."
        )

    if not GITHUB_NAME_PATTERN.match(name):
        raise ValidationError(
            f"Invalid repository name '{name}'. "
            "Only alphanumeric characters, '.', '-', and '_' are allowed."
        )

    # "." and ".." would resolve to the workspace itself or its parent
    if name in (".", "..") or ".." in name:
        raise ValidationError("Path traversal patterns are not allowed")

    if name == ".git":
        raise ValidationError("Repository name '.git' would clobber the workspace repository")

    return owner, name


def repository_dirname(identifier: str) -> str:
    """Subdirectory name used for a repository inside the workspace."""
    _, name = validate_repository_identifier(identifier)
    return name


def validate_github_token(token: str | None) -> str | None:
    """
    Validate GitHub personal access token format.

    Args:
        token: GitHub PAT token string or None

    Returns:
        The token if valid, None if token is None or empty

    Raises:
        ValidationError: If token format is invalid
    """
    if token is None or token == "":
        return None

    if len(token) < 10:
        raise ValidationError("Token is too short to be valid")

    if len(token) > 255:
        raise ValidationError("Token is too long")

    if any(c in token for c in [" ", "\n", "\r", "\t"]):
        raise ValidationError("Token contains invalid whitespace characters")

    return token
