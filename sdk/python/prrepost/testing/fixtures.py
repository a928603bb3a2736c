"""
Pytest fixtures for prrepost testing.

Provides common fixtures for testing code that drives the repost workflow.
"""

from pathlib import Path
from typing import Generator

import pytest

from prrepost.config import RepostConfig
from prrepost.git import GitHelper
from prrepost.testing.mock import MockGitHubClient
from prrepost.testing.sandbox import GitSandbox
from prrepost.types.pulls import CreatedPullRequest, PullRequestMetadata, PullRequestRef


# ============================================================================
# Factories
# ============================================================================


def create_mock_pull_request(
    number: int = 42,
    author: str = "octocat",
    title: str = "Add feature X",
    body: str | None = "Implements feature X.",
    head_branch: str = "feature-x",
    head_repo_full_name: str | None = "acme/app",
    base_branch: str = "develop",
    base_full_name: str = "acme/app",
) -> PullRequestMetadata:
    """Create a PullRequestMetadata with sensible defaults."""
    owner, repo = base_full_name.split("/", 1)
    return PullRequestMetadata(
        number=number,
        author=author,
        title=title,
        body=body,
        head_branch=head_branch,
        head_repo_full_name=head_repo_full_name,
        base_branch=base_branch,
        html_url=f"https://github.com/{base_full_name}/pull/{number}",
        ref=PullRequestRef(number=number, owner=owner, repo=repo, base_branch=base_branch),
    )


def create_mock_created_pull_request(number: int = 1001, full_name: str = "acme/app") -> CreatedPullRequest:
    """Create a CreatedPullRequest for the given repository."""
    return CreatedPullRequest(number=number, url=f"https://github.com/{full_name}/pull/{number}")


# ============================================================================
# Mock Client Fixtures
# ============================================================================


@pytest.fixture
def mock_client() -> Generator[MockGitHubClient, None, None]:
    """
    Provide a MockGitHubClient for the ``acme/app`` repository.

    Example:
        ```python
        def test_my_feature(mock_client):
            mock_client.pulls.configure_get(response=create_mock_pull_request())
            result = my_function(mock_client)
            assert mock_client.was_called("pulls.get")
        ```
    """
    client = MockGitHubClient(owner="acme", repo="app")
    yield client
    client.reset()


@pytest.fixture
def sample_pull_request() -> PullRequestMetadata:
    """Provide a same-repository PR (#42, feature-x onto develop)."""
    return create_mock_pull_request()


@pytest.fixture
def sample_fork_pull_request() -> PullRequestMetadata:
    """Provide a PR (#7) whose head lives in the contributor/repo fork."""
    return create_mock_pull_request(
        number=7,
        author="contributor",
        title="Fix typo",
        head_branch="fix-typo",
        head_repo_full_name="contributor/repo",
    )


# ============================================================================
# Git Fixtures
# ============================================================================


@pytest.fixture
def git_sandbox(tmp_path: Path) -> GitSandbox:
    """Provide an empty GitSandbox rooted in the test's tmp_path."""
    return GitSandbox(tmp_path / "sandbox")


@pytest.fixture
def repost_config(git_sandbox: GitSandbox, tmp_path: Path) -> RepostConfig:
    """Provide a RepostConfig for acme/app that clones from the sandbox."""
    return RepostConfig(
        token="test-token",
        owner="acme",
        repo="app",
        base_branch="develop",
        git_base_url=git_sandbox.base_url,
        work_dir=tmp_path / "work",
        use_credential_store=False,
    )


@pytest.fixture
def git_helper() -> GitHelper:
    """Provide a GitHelper with a fixed committer identity."""
    return GitHelper(user_name="Repost Bot", user_email="bot@example.com", timeout=60)
