"""prrepost testing utilities.

Provides a mock GitHub client, on-disk git remotes and fixtures for testing
code that uses prrepost.
"""

from prrepost.testing.fixtures import (
    create_mock_created_pull_request,
    create_mock_pull_request,
)
from prrepost.testing.mock import MockCall, MockGitHubClient, MockResponse
from prrepost.testing.sandbox import GitSandbox

__all__ = [
    # Mock client
    "MockGitHubClient",
    "MockCall",
    "MockResponse",
    # Git remotes
    "GitSandbox",
    # Helper functions
    "create_mock_pull_request",
    "create_mock_created_pull_request",
]
