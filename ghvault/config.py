"""
Settings loading for ghvault.

"Configuration is just organized secrets." — schema.cx

Settings are resolved once per process: an optional YAML file provides
defaults keyed by field name, and environment variables override it.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from .validation import ValidationError, validate_github_token

DEFAULT_WORKSPACE = "_Repos"
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_COMMITTER_EMAIL = "ghvault@users.noreply.github.com"
DEFAULT_CLONE_URL_TEMPLATE = "git@{host}:{identifier}.git"

# Environment variable -> Settings field
ENV_VARS: dict[str, str] = {
    "ORG_ACCOUNT": "org_account",
    "PROJECT_ACCOUNT": "project_account",
    "MAIN_ACCOUNT": "main_account",
    "GITHUB_TOKEN_PERSONAL": "token_personal",
    "GITHUB_TOKEN_PRIVATE": "token_private",
    "BACKUP_REPO_PATH": "workspace",
    "BACKUP_REMOTE_URL": "remote_url",
    "BACKUP_BRANCH": "branch",
    "BACKUP_GIT_NAME": "committer_name",
    "BACKUP_GIT_EMAIL": "committer_email",
    "CLONE_HOST": "clone_host",
    "CLONE_URL_TEMPLATE": "clone_url_template",
    "BACKUP_MAX_ATTEMPTS": "max_attempts",
    "BACKUP_RETRY_DELAY": "base_delay",
    "BACKUP_REPO_DELAY": "repo_delay",
    "GITHUB_API_URL": "api_url",
    "GITHUB_API_TIMEOUT": "request_timeout",
}


class ConfigError(Exception):
    """Raised when settings are missing or malformed."""

    pass


@dataclass(frozen=True)
class Settings:
    """
    Everything a backup run needs to know, read once at startup.

    "Configuration is just organized paranoia." — schema.cx
    """

    remote_url: str = ""
    org_account: str = ""
    project_account: str = ""
    main_account: str = ""
    token_personal: str | None = None
    token_private: str | None = None
    workspace: Path = Path(DEFAULT_WORKSPACE)
    branch: str = "main"
    committer_name: str = ""
    committer_email: str = DEFAULT_COMMITTER_EMAIL
    clone_host: str = "github.com"
    clone_url_template: str = DEFAULT_CLONE_URL_TEMPLATE
    max_attempts: int = 3
    base_delay: float = 2.0
    repo_delay: float = 0.3
    api_url: str = DEFAULT_API_URL
    request_timeout: float = 30.0

    def __post_init__(self) -> None:
        """Normalize paths and fill derived defaults."""
        workspace = self.workspace if isinstance(self.workspace, Path) else Path(self.workspace)
        object.__setattr__(self, "workspace", workspace.expanduser())

        if not self.committer_name:
            object.__setattr__(self, "committer_name", self.main_account or "ghvault")

    @property
    def git_identity(self) -> tuple[str, str]:
        return self.committer_name, self.committer_email

    def clone_url(self, identifier: str) -> str:
        """Clone URL for a repository identifier (SSH unless the template says otherwise)."""
        return self.clone_url_template.format(host=self.clone_host, identifier=identifier)

    def with_workspace(self, workspace: Path) -> "Settings":
        return replace(self, workspace=workspace)


def _coerce(name: str, value: Any) -> Any:
    """Convert a raw file/env value to the type of the named field."""
    if name in ("max_attempts",):
        try:
            number = int(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"{name} must be an integer, got {value!r}") from e
        if number < 1:
            raise ConfigError(f"{name} must be at least 1, got {number}")
        return number

    if name in ("base_delay", "repo_delay", "request_timeout"):
        try:
            number = float(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"{name} must be a number, got {value!r}") from e
        if number < 0:
            raise ConfigError(f"{name} must not be negative, got {number}")
        return number

    if name == "workspace":
        return Path(str(value))

    return str(value).strip()


def load_config_file(path: Path) -> dict[str, Any]:
    """
    Read a YAML settings file.

    Args:
        path: YAML file whose top-level keys are Settings field names

    Returns:
        Mapping of field name to raw value

    Raises:
        ConfigError: If the file is unreadable, not a mapping, or has unknown keys
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown keys in {path}: {', '.join(unknown)}")

    return data


def load_settings(
    config_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
    require_remote: bool = True,
) -> Settings:
    """
    Resolve Settings from an optional YAML file and the environment.

    Empty environment variables are treated as unset, so a blank entry in a
    .env file never clobbers a value from the config file.

    Raises:
        ConfigError: If a value is malformed or the backup remote is missing
    """
    if environ is None:
        environ = os.environ

    raw: dict[str, Any] = {}
    if config_file is not None:
        raw.update(load_config_file(config_file))

    for env_name, field_name in ENV_VARS.items():
        value = environ.get(env_name)
        if value:
            raw[field_name] = value

    values = {name: _coerce(name, value) for name, value in raw.items() if value is not None}

    if require_remote and not values.get("remote_url"):
        raise ConfigError(
            "No backup remote configured. Set BACKUP_REMOTE_URL "
            "(e.g. git@github.com:you/backup.git) or remote_url in the config file."
        )

    try:
        values["token_personal"] = validate_github_token(values.get("token_personal"))
        values["token_private"] = validate_github_token(values.get("token_private"))
    except ValidationError as e:
        raise ConfigError(f"Invalid token: {e}") from e

    return Settings(**values)
