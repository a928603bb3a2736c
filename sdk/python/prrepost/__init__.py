"""prrepost - repost a pull request as a fresh PR merged onto the current base branch."""

from prrepost.client import GitHubClient
from prrepost.config import RepostConfig
from prrepost.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    GitCommandError,
    NotFoundError,
    RateLimitedError,
    RemoteRejectedError,
    RemoteUnreachableError,
    RepostError,
    ServerError,
    TransientNetworkError,
    ValidationError,
)
from prrepost.git import GitHelper, WorkingCopy, write_credential_store
from prrepost.logging import configure_logging, get_logger
from prrepost.orchestrator import RepostOrchestrator
from prrepost.retry import RetryConfig, run_with_retry
from prrepost.transport import HTTPTransport
from prrepost.types import (
    Conflict,
    ConflictsRequireManualIntervention,
    CreatedPullRequest,
    Failed,
    Found,
    Merged,
    NotFound,
    Published,
    PullRequestMetadata,
    PullRequestRef,
    RepostState,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Workflow
    "RepostOrchestrator",
    "RepostConfig",
    "RetryConfig",
    "run_with_retry",
    # Gateways
    "GitHubClient",
    "HTTPTransport",
    "GitHelper",
    "WorkingCopy",
    "write_credential_store",
    # Types
    "PullRequestRef",
    "PullRequestMetadata",
    "CreatedPullRequest",
    "Found",
    "NotFound",
    "Merged",
    "Conflict",
    "RepostState",
    "Published",
    "ConflictsRequireManualIntervention",
    "Failed",
    # Exceptions
    "RepostError",
    "ConfigurationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ValidationError",
    "RateLimitedError",
    "ServerError",
    "TransientNetworkError",
    "GitCommandError",
    "RemoteUnreachableError",
    "RemoteRejectedError",
    # Logging
    "configure_logging",
    "get_logger",
]
