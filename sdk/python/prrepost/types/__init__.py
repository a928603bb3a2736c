"""prrepost type definitions.

This module exports all data model types used by the package.
"""

from prrepost.types.outcomes import (
    Conflict,
    ConflictsRequireManualIntervention,
    Failed,
    Found,
    Merged,
    MergeAttemptResult,
    NotFound,
    Published,
    RefResolution,
    RepostOutcome,
    RepostState,
)
from prrepost.types.pulls import CreatedPullRequest, PullRequestMetadata, PullRequestRef

__all__ = [
    # Pull request types
    "PullRequestRef",
    "PullRequestMetadata",
    "CreatedPullRequest",
    # Git results
    "Found",
    "NotFound",
    "RefResolution",
    "Merged",
    "Conflict",
    "MergeAttemptResult",
    # Workflow
    "RepostState",
    "Published",
    "ConflictsRequireManualIntervention",
    "Failed",
    "RepostOutcome",
]
