"""Pull request-related data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PullRequestRef:
    """Identifies a pull request on its base repository."""

    number: int
    owner: str
    repo: str
    base_branch: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class PullRequestMetadata:
    """Read-only snapshot of a pull request taken at the start of a repost."""

    number: int
    author: str
    title: str
    body: str | None
    head_branch: str
    head_repo_full_name: str | None  # None when the head repository was deleted
    base_branch: str
    html_url: str | None = None
    state: str = "open"
    ref: PullRequestRef | None = None

    def is_fork(self, base_full_name: str) -> bool:
        """True when the head branch lives in a repository other than the base.

        Missing head repository information is treated as same-repo.
        """
        if not self.head_repo_full_name:
            return False
        return self.head_repo_full_name.lower() != base_full_name.lower()


@dataclass(frozen=True)
class CreatedPullRequest:
    """A pull request returned by create or lookup calls."""

    number: int
    url: str
