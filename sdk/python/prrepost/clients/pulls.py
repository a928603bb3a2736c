"""Pull requests resource client."""

from typing import TYPE_CHECKING, Any

from prrepost.exceptions import ValidationError
from prrepost.types.pulls import CreatedPullRequest, PullRequestMetadata, PullRequestRef

if TYPE_CHECKING:
    from prrepost.transport import HTTPTransport


class PullsClient:
    """Client for pull request operations on a single repository."""

    def __init__(self, transport: "HTTPTransport", owner: str, repo: str) -> None:
        """
        Initialize the pulls client.

        Args:
            transport: HTTP transport for making requests
            owner: Base repository owner
            repo: Base repository name
        """
        self.transport = transport
        self.owner = owner
        self.repo = repo

    @property
    def _path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}/pulls"

    def get(self, number: int) -> PullRequestMetadata:
        """
        Get pull request information.

        Args:
            number: The pull request number

        Returns:
            PullRequestMetadata snapshot

        Raises:
            NotFoundError: If the pull request does not exist
            AuthenticationError: If the token is rejected
            TransientNetworkError: If the API could not be reached
            ValidationError: If the response lacks the number or head ref
        """
        data = self.transport.request(method="GET", path=f"{self._path}/{number}")
        return self._parse_pull_request(data)

    def create(
        self,
        title: str,
        head: str,
        base: str,
        body: str | None = None,
    ) -> CreatedPullRequest:
        """
        Create a pull request.

        Args:
            title: Pull request title
            head: Branch containing changes (must already exist on the remote)
            base: Branch to merge into
            body: Optional pull request description

        Returns:
            CreatedPullRequest with number and html url

        Raises:
            ValidationError: If the head branch does not exist or a PR is already open
            AuthenticationError: If the token is rejected
        """
        payload: dict[str, Any] = {
            "title": title,
            "head": head,
            "base": base,
        }
        if body is not None:
            payload["body"] = body

        data = self.transport.request(method="POST", path=self._path, body=payload)
        return CreatedPullRequest(number=data["number"], url=data["html_url"])

    def list(
        self,
        state: str = "open",
        head: str | None = None,
        base: str | None = None,
    ) -> list[CreatedPullRequest]:
        """
        List pull requests.

        Args:
            state: "open", "closed" or "all"
            head: Optional "owner:branch" filter
            base: Optional base branch filter
        """
        params: dict[str, str] = {"state": state}
        if head:
            params["head"] = head
        if base:
            params["base"] = base

        data = self.transport.request(method="GET", path=self._path, params=params)
        return [CreatedPullRequest(number=pr["number"], url=pr["html_url"]) for pr in data]

    def _parse_pull_request(self, data: dict) -> PullRequestMetadata:
        """Parse pull request data from API response."""
        head = data.get("head") or {}
        head_repo = head.get("repo") or {}
        base = data.get("base") or {}
        user = data.get("user") or {}

        if "number" not in data or "ref" not in head:
            raise ValidationError("INVALID_RESPONSE", "Pull request response is missing its number or head ref")

        return PullRequestMetadata(
            number=data["number"],
            author=user.get("login", "ghost"),
            title=data.get("title") or "",
            body=data.get("body"),
            head_branch=head["ref"],
            head_repo_full_name=head_repo.get("full_name"),
            base_branch=base.get("ref", ""),
            html_url=data.get("html_url"),
            state=data.get("state", "open"),
            ref=self._parse_ref(data["number"], base),
        )

    def _parse_ref(self, number: int, base: dict) -> PullRequestRef | None:
        """Where the PR lives, as reported by its base repository."""
        repo = base.get("repo") or {}
        owner = (repo.get("owner") or {}).get("login")
        name = repo.get("name")
        if not (owner and name) and "/" in (repo.get("full_name") or ""):
            owner, name = repo["full_name"].split("/", 1)
        if not (owner and name and base.get("ref")):
            return None
        return PullRequestRef(number=number, owner=owner, repo=name, base_branch=base["ref"])
