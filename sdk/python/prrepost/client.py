"""
GitHub hosting-platform client.

Provides the interface the repost workflow needs from the GitHub REST API.
"""

from typing import Any

import httpx

from prrepost.clients import PullsClient
from prrepost.config import DEFAULT_API_URL, RepostConfig
from prrepost.exceptions import NotFoundError
from prrepost.logging import get_logger
from prrepost.transport import HTTPTransport
from prrepost.types.pulls import CreatedPullRequest, PullRequestMetadata

logger = get_logger()


class GitHubClient:
    """
    Client for the GitHub pull request API of one repository.

    Example:
        ```python
        from prrepost import GitHubClient

        client = GitHubClient(token="ghp_...", owner="octo", repo="app")
        pr = client.fetch_pull_request(42)
        print(pr.author, pr.head_branch)

        # Or create from environment variables
        client = GitHubClient.from_env()
        ```
    """

    DEFAULT_BASE_URL = DEFAULT_API_URL
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        http_transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the GitHub client.

        Args:
            token: API token
            owner: Base repository owner
            repo: Base repository name
            base_url: Base URL for API requests (default: https://api.github.com)
            timeout: Request timeout in seconds (default: 30.0)
            http_transport: Optional httpx transport override
        """
        self.owner = owner
        self.repo = repo
        self.base_url = base_url
        self.timeout = timeout

        self._transport = HTTPTransport(
            base_url=base_url,
            token=token,
            timeout=timeout,
            http_transport=http_transport,
        )

        self.pulls = PullsClient(self._transport, owner, repo)

    @classmethod
    def from_config(
        cls,
        config: RepostConfig,
        http_transport: httpx.BaseTransport | None = None,
    ) -> "GitHubClient":
        """Create a client from a RepostConfig."""
        return cls(
            token=config.token,
            owner=config.owner,
            repo=config.repo,
            base_url=config.api_url,
            timeout=config.timeout,
            http_transport=http_transport,
        )

    @classmethod
    def from_env(cls, timeout: float = DEFAULT_TIMEOUT) -> "GitHubClient":
        """
        Create a client from environment variables.

        Uses GITHUB_TOKEN, REPO_OWNER, REPO_NAME and optionally GITHUB_API_URL.

        Raises:
            ConfigurationError: If required environment variables are missing
        """
        config = RepostConfig.from_env()
        return cls.from_config(config.with_overrides(timeout=timeout))

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    def fetch_pull_request(self, number: int) -> PullRequestMetadata:
        """
        Fetch a pull request snapshot.

        Raises:
            NotFoundError: If the PR does not exist
            AuthenticationError: If credentials are rejected
            TransientNetworkError: If the API could not be reached
        """
        pr = self.pulls.get(number)
        logger.info(
            "Fetched PR #%d by @%s (%s:%s)",
            pr.number, pr.author, pr.head_repo_full_name or "<unknown>", pr.head_branch,
        )
        return pr

    def create_pull_request(
        self,
        title: str,
        head_branch: str,
        base_branch: str,
        body: str,
    ) -> CreatedPullRequest:
        """
        Open a pull request. The head branch must already be pushed.

        Raises:
            ValidationError: If the head branch is missing or the PR is invalid
            AuthenticationError: If credentials are rejected
            TransientNetworkError: If the API could not be reached
        """
        created = self.pulls.create(title=title, head=head_branch, base=base_branch, body=body)
        logger.info("Created PR #%d: %s", created.number, created.url)
        return created

    def find_open_pull_request(self, head_branch: str) -> CreatedPullRequest | None:
        """Return the open PR whose head is ``head_branch`` on this repository, if any."""
        try:
            pulls = self.pulls.list(state="open", head=f"{self.owner}:{head_branch}")
        except NotFoundError:
            return None
        return pulls[0] if pulls else None

    @property
    def transport(self) -> HTTPTransport:
        """Get the underlying HTTP transport (for advanced use cases)."""
        return self._transport

    def close(self) -> None:
        """Close the client and release resources."""
        self._transport.close()

    def __enter__(self) -> "GitHubClient":
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit - closes the client."""
        self.close()
