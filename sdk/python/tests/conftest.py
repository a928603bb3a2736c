"""Shared fixtures for the prrepost test suite."""

from prrepost.testing.fixtures import (  # noqa: F401
    git_helper,
    git_sandbox,
    mock_client,
    repost_config,
    sample_fork_pull_request,
    sample_pull_request,
)
