"""Result types produced by the VCS gateway and the repost workflow."""

from dataclasses import dataclass, field
from enum import Enum

from prrepost.exceptions import RepostError


class RepostState(str, Enum):
    """States of the repost workflow."""

    START = "start"
    METADATA_RESOLVED = "metadata_resolved"
    WORKING_COPY_READY = "working_copy_ready"
    BASE_MERGED = "base_merged"
    PUBLISHED = "published"
    ABORTED = "aborted"


@dataclass(frozen=True)
class Found:
    """A branch resolved to a remote-tracking ref."""

    remote: str
    ref: str  # e.g. "refs/remotes/origin/develop"
    commit: str


@dataclass(frozen=True)
class NotFound:
    """A branch that none of the searched remotes carries."""

    branch: str
    searched: tuple[str, ...]


RefResolution = Found | NotFound


@dataclass(frozen=True)
class Merged:
    """A clean merge.

    ``up_to_date`` is set when the merged ref was already contained in the
    current branch and no merge commit was created.
    """

    commit: str
    up_to_date: bool = False


@dataclass(frozen=True)
class Conflict:
    """A merge that stopped on conflicts. The working copy has been cleaned."""

    files: tuple[str, ...]
    detail: str = ""


MergeAttemptResult = Merged | Conflict


@dataclass(frozen=True)
class Published:
    """Terminal success: the repost PR exists."""

    url: str
    number: int
    branch: str
    reused_existing: bool = False

    def message(self) -> str:
        if self.reused_existing:
            return f"Updated existing repost PR: {self.url}"
        return f"Successfully created new PR: {self.url}"


@dataclass(frozen=True)
class ConflictsRequireManualIntervention:
    """Terminal result when the PR does not merge cleanly with the base branch."""

    base_branch: str
    files: tuple[str, ...] = ()
    working_copy_path: str | None = None

    def message(self) -> str:
        text = (
            f"Failed to merge {self.base_branch} branch. "
            "Manual intervention required."
        )
        if self.files:
            text += f" Conflicting files: {', '.join(self.files)}"
        return text


@dataclass(frozen=True)
class Failed:
    """Terminal failure carrying the underlying reason verbatim."""

    reason: str
    state: RepostState = RepostState.START
    error: RepostError | None = field(default=None, compare=False)

    @property
    def retryable(self) -> bool:
        return self.error is not None and self.error.retryable

    def message(self) -> str:
        return f"Repost failed during {self.state.value}: {self.reason}"


RepostOutcome = Published | ConflictsRequireManualIntervention | Failed
