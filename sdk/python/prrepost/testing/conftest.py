"""
Pytest plugin for prrepost testing fixtures.

This module re-exports all fixtures from fixtures.py so they can be
discovered by pytest. To use them in your tests, add this to your conftest.py:

    pytest_plugins = ["prrepost.testing.conftest"]
"""

from prrepost.testing.fixtures import (
    git_helper,
    git_sandbox,
    mock_client,
    repost_config,
    sample_fork_pull_request,
    sample_pull_request,
)

__all__ = [
    "mock_client",
    "sample_pull_request",
    "sample_fork_pull_request",
    "git_sandbox",
    "repost_config",
    "git_helper",
]
