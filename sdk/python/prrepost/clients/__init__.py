"""prrepost resource clients."""

from prrepost.clients.pulls import PullsClient

__all__ = [
    "PullsClient",
]
