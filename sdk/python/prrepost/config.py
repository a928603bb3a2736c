"""
Configuration for a repost invocation.

All per-invocation state (credentials, repository, working directory) lives
in a RepostConfig value that is passed explicitly to the gateways and the
orchestrator.
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path

from prrepost.exceptions import ConfigurationError

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_GIT_BASE_URL = "https://github.com"
DEFAULT_BASE_BRANCH = "develop"
DEFAULT_WORK_DIR = "temp_repo"


@dataclass(frozen=True)
class RepostConfig:
    """Settings for reposting pull requests of one repository."""

    token: str = field(repr=False)
    owner: str
    repo: str
    base_branch: str = DEFAULT_BASE_BRANCH
    api_url: str = DEFAULT_API_URL
    git_base_url: str = DEFAULT_GIT_BASE_URL
    work_dir: Path = Path(DEFAULT_WORK_DIR)
    timeout: float = 30.0
    git_timeout: float = 600.0
    git_user_name: str = "prrepost"
    git_user_email: str = "prrepost@users.noreply.github.com"
    keep_work_dir: bool = False
    use_credential_store: bool = True

    def __post_init__(self) -> None:
        if not self.owner or not self.repo:
            raise ConfigurationError("Repository owner and name are required")
        if not self.base_branch:
            raise ConfigurationError("Base branch must not be empty")

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def git_host(self) -> str:
        """Host part of git_base_url, used for the credential store entry."""
        return self.git_base_url.split("://", 1)[-1].split("/", 1)[0]

    def repo_url(self, full_name: str | None = None) -> str:
        """Clone URL for ``owner/name`` (the base repository by default)."""
        return f"{self.git_base_url.rstrip('/')}/{full_name or self.full_name}.git"

    def working_copy_path(self, number: int) -> Path:
        return Path(self.work_dir) / f"{self.owner}-{self.repo}-pr{number}"

    def credential_store_path(self, number: int) -> Path:
        """Credential-store file used while reposting PR ``number``."""
        return Path(self.work_dir) / f".git-credentials-{self.owner}-{self.repo}-pr{number}"

    def integration_branch(self, number: int) -> str:
        return f"repost/integration-{number}"

    def publish_branch(self, number: int) -> str:
        return f"pr{number}_fix"

    def with_overrides(self, **changes: object) -> "RepostConfig":
        """Return a copy with the given fields replaced (None values ignored)."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "RepostConfig":
        """
        Create a configuration from environment variables.

        Environment variables:
            GITHUB_TOKEN: API token (required)
            REPO_OWNER: Base repository owner (required)
            REPO_NAME: Base repository name (required)
            BASE_BRANCH: Branch to repost onto (optional, default: develop)
            GITHUB_API_URL: API base URL (optional, default: https://api.github.com)
            GIT_BASE_URL: Git host base URL (optional, default: https://github.com)
            PRREPOST_WORK_DIR: Directory holding working copies (optional)
            PRREPOST_GIT_USER_NAME / PRREPOST_GIT_USER_EMAIL: merge commit identity

        Raises:
            ConfigurationError: If required environment variables are missing
        """
        env = os.environ if environ is None else environ

        token = env.get("GITHUB_TOKEN")
        owner = env.get("REPO_OWNER")
        repo = env.get("REPO_NAME")

        if not token:
            raise ConfigurationError("GITHUB_TOKEN environment variable not set")
        if not owner:
            raise ConfigurationError("REPO_OWNER environment variable not set")
        if not repo:
            raise ConfigurationError("REPO_NAME environment variable not set")

        return cls(
            token=token,
            owner=owner,
            repo=repo,
            base_branch=env.get("BASE_BRANCH") or DEFAULT_BASE_BRANCH,
            api_url=env.get("GITHUB_API_URL") or DEFAULT_API_URL,
            git_base_url=env.get("GIT_BASE_URL") or DEFAULT_GIT_BASE_URL,
            work_dir=Path(env.get("PRREPOST_WORK_DIR") or DEFAULT_WORK_DIR),
            git_user_name=env.get("PRREPOST_GIT_USER_NAME") or cls.git_user_name,
            git_user_email=env.get("PRREPOST_GIT_USER_EMAIL") or cls.git_user_email,
        )
