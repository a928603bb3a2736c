"""
Repost workflow.

Drives one repost attempt through its states:

    START -> METADATA_RESOLVED -> WORKING_COPY_READY -> BASE_MERGED -> PUBLISHED

Any state may move to ABORTED. Gateway errors end the attempt as Failed with
the error text verbatim; merge conflicts are an ordinary outcome, not an
error.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from prrepost.config import RepostConfig
from prrepost.exceptions import RepostError
from prrepost.git import GitHelper, WorkingCopy, write_credential_store
from prrepost.logging import get_logger
from prrepost.types.outcomes import (
    Conflict,
    ConflictsRequireManualIntervention,
    Failed,
    Found,
    NotFound,
    Published,
    RepostOutcome,
    RepostState,
)
from prrepost.types.pulls import PullRequestMetadata

if TYPE_CHECKING:
    from prrepost.client import GitHubClient

logger = get_logger()

ORIGIN_REMOTE = "origin"
SOURCE_REMOTE = "source"
TITLE_PREFIX = "[Repost]"


def provenance_trailer(number: int) -> str:
    """Commit-message line marking branches produced by reposting PR ``number``."""
    return f"Reposted-From: #{number}"


def repost_title(pr: PullRequestMetadata) -> str:
    return f"{TITLE_PREFIX} {pr.title}"


def repost_body(pr: PullRequestMetadata) -> str:
    """Body of the new PR: provenance header followed by the original body verbatim."""
    return (
        f"This is a reposted PR originally created by @{pr.author}\n\n"
        f"Original PR: #{pr.number}\n\n"
        f"---\n"
        f"{pr.body or ''}"
    )


@dataclass
class _Attempt:
    """Mutable bookkeeping for a single repost attempt."""

    number: int
    git: GitHelper
    state: RepostState = RepostState.START
    pr: PullRequestMetadata | None = None
    working_copy: WorkingCopy | None = None
    is_fork: bool = False


class RepostOrchestrator:
    """
    Reposts a pull request as a new PR merged onto the current base branch.

    Example:
        ```python
        from prrepost import RepostConfig, RepostOrchestrator

        config = RepostConfig.from_env()
        with RepostOrchestrator.from_config(config) as orchestrator:
            outcome = orchestrator.repost(42)
        print(outcome.message())
        ```
    """

    def __init__(
        self,
        client: "GitHubClient",
        git: GitHelper,
        config: RepostConfig,
        confirm: Callable[[str], bool] | None = None,
    ) -> None:
        """
        Args:
            client: Hosting-platform gateway
            git: VCS gateway
            config: Invocation settings
            confirm: Optional hook asked before anything is published; returning
                False aborts the attempt
        """
        self.client = client
        self.git = git
        self.config = config
        self.confirm = confirm

    @classmethod
    def from_config(
        cls,
        config: RepostConfig,
        confirm: Callable[[str], bool] | None = None,
    ) -> "RepostOrchestrator":
        """Build an orchestrator with real GitHub and git gateways."""
        from prrepost.client import GitHubClient

        git = GitHelper(
            user_name=config.git_user_name,
            user_email=config.git_user_email,
            timeout=config.git_timeout,
        )
        return cls(GitHubClient.from_config(config), git, config, confirm=confirm)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "RepostOrchestrator":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def repost(self, number: int) -> RepostOutcome:
        """
        Run the whole workflow for PR ``number`` and return its terminal outcome.

        Never raises for gateway failures; they are returned as Failed.
        """
        attempt = _Attempt(number=number, git=self._git_for(number))
        logger.info("Reposting PR #%d of %s onto %s", number, self.config.full_name, self.config.base_branch)

        try:
            self._write_credentials(attempt)
            outcome = self._run(attempt)
        except RepostError as e:
            logger.error("Repost of PR #%d failed in state %s: %s", number, attempt.state.value, e)
            outcome = Failed(reason=str(e), state=attempt.state, error=e)
        finally:
            self._remove_credentials(attempt)

        if isinstance(outcome, Published):
            self._transition(attempt, RepostState.PUBLISHED)
            if attempt.working_copy is not None and not self.config.keep_work_dir:
                attempt.git.remove(attempt.working_copy)
        else:
            self._transition(attempt, RepostState.ABORTED)
            if attempt.working_copy is not None:
                logger.info("Working copy kept for inspection at %s", attempt.working_copy.path)

        return outcome

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _run(self, attempt: _Attempt) -> RepostOutcome:
        pr = self._resolve_metadata(attempt)

        head = self._prepare_working_copy(attempt, pr)
        if isinstance(head, Failed):
            return head

        merged = self._merge_base(attempt, pr, head)
        if not isinstance(merged, str):
            return merged

        return self._publish(attempt, pr, merged)

    def _resolve_metadata(self, attempt: _Attempt) -> PullRequestMetadata:
        pr = self.client.fetch_pull_request(attempt.number)
        attempt.pr = pr
        attempt.is_fork = pr.is_fork(self.config.full_name)
        if pr.head_repo_full_name is None:
            logger.warning("PR #%d has no head repository information; treating as same-repo", pr.number)
        if pr.ref is not None and pr.ref.base_branch != self.config.base_branch:
            logger.warning(
                "PR #%d targets %s on %s; reposting onto %s instead",
                pr.number, pr.ref.base_branch, pr.ref.full_name, self.config.base_branch,
            )
        self._transition(attempt, RepostState.METADATA_RESOLVED)
        return pr

    def _prepare_working_copy(self, attempt: _Attempt, pr: PullRequestMetadata) -> Found | Failed:
        """Clone fresh, add the fork remote when needed and locate the PR head."""
        wc = attempt.git.clone(self.config.repo_url(), self.config.working_copy_path(pr.number))
        attempt.working_copy = wc
        attempt.git.fetch_all_branches(wc, ORIGIN_REMOTE)

        if attempt.is_fork:
            assert pr.head_repo_full_name is not None
            attempt.git.add_remote_if_absent(wc, SOURCE_REMOTE, self.config.repo_url(pr.head_repo_full_name))
            attempt.git.fetch_all_branches(wc, SOURCE_REMOTE)

        head_remote = SOURCE_REMOTE if attempt.is_fork else ORIGIN_REMOTE
        head = attempt.git.resolve_branch(wc, pr.head_branch, [head_remote])
        if isinstance(head, NotFound):
            logger.warning(
                "Head branch %s not found on %s; falling back to the PR head ref",
                pr.head_branch, head_remote,
            )
            head = attempt.git.fetch_pull_head(wc, pr.number, ORIGIN_REMOTE)
        if isinstance(head, NotFound):
            return self._abort(
                attempt,
                f"Head branch {pr.head_branch} of PR #{pr.number} could not be found",
            )

        self._transition(attempt, RepostState.WORKING_COPY_READY)
        return head

    def _merge_base(
        self, attempt: _Attempt, pr: PullRequestMetadata, head: Found
    ) -> str | RepostOutcome:
        """Merge the PR head onto the base branch. Returns the merge commit on success."""
        assert attempt.working_copy is not None
        wc = attempt.working_copy
        base_branch = self.config.base_branch

        search = [ORIGIN_REMOTE, SOURCE_REMOTE] if wc.has_remote(SOURCE_REMOTE) else [ORIGIN_REMOTE]
        base = attempt.git.resolve_branch(wc, base_branch, search)
        if isinstance(base, NotFound):
            return self._abort(
                attempt,
                f"Base branch {base_branch} not found on {', '.join(base.searched)}",
            )
        if base.remote != ORIGIN_REMOTE:
            logger.info("Base branch %s resolved via %s remote", base_branch, base.remote)

        attempt.git.create_and_checkout_branch(
            wc, self.config.integration_branch(pr.number), base.commit, force=True
        )
        message = (
            f"Repost PR #{pr.number}: merge {pr.head_branch} into {base_branch}\n\n"
            f"{provenance_trailer(pr.number)}"
        )
        result = attempt.git.merge(wc, head.ref, message)

        if isinstance(result, Conflict):
            logger.warning(
                "PR #%d conflicts with %s: %s", pr.number, base_branch, ", ".join(result.files) or result.detail,
            )
            return ConflictsRequireManualIntervention(
                base_branch=base_branch,
                files=result.files,
                working_copy_path=str(wc.path),
            )
        if result.up_to_date:
            return self._abort(
                attempt,
                f"Changes of PR #{pr.number} are already contained in {base_branch}; nothing to repost",
            )

        self._transition(attempt, RepostState.BASE_MERGED)
        return result.commit

    def _publish(self, attempt: _Attempt, pr: PullRequestMetadata, merge_commit: str) -> RepostOutcome:
        """Push a publish branch derived from the integration branch and open the PR."""
        assert attempt.working_copy is not None
        wc = attempt.working_copy
        publish_branch = self.config.publish_branch(pr.number)
        base_branch = self.config.base_branch

        attempt.git.create_and_checkout_branch(wc, publish_branch, merge_commit, force=True)

        existing = attempt.git.resolve_branch(wc, publish_branch, [ORIGIN_REMOTE])
        if isinstance(existing, Found) and not attempt.git.history_contains_line(
            wc, existing.ref, provenance_trailer(pr.number)
        ):
            return self._abort(
                attempt,
                f"Remote branch {publish_branch} exists but was not created by a repost "
                f"of PR #{pr.number}; refusing to overwrite it",
            )

        if self.confirm is not None and not self.confirm(
            f"Push {publish_branch} to {self.config.full_name} and open a PR against {base_branch}?"
        ):
            return self._abort(attempt, "Publishing declined by operator")

        attempt.git.push(wc, f"refs/heads/{publish_branch}", publish_branch, ORIGIN_REMOTE, force=True)

        open_pr = self.client.find_open_pull_request(publish_branch)
        if open_pr is not None:
            logger.info("Repost PR #%d already open for %s; branch updated", open_pr.number, publish_branch)
            return Published(url=open_pr.url, number=open_pr.number, branch=publish_branch, reused_existing=True)

        created = self.client.create_pull_request(
            title=repost_title(pr),
            head_branch=publish_branch,
            base_branch=base_branch,
            body=repost_body(pr),
        )
        return Published(url=created.url, number=created.number, branch=publish_branch)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _transition(self, attempt: _Attempt, state: RepostState) -> None:
        logger.info("PR #%d: %s -> %s", attempt.number, attempt.state.value, state.value)
        attempt.state = state

    def _abort(self, attempt: _Attempt, reason: str) -> Failed:
        logger.error("Repost of PR #%d aborted: %s", attempt.number, reason)
        return Failed(reason=reason, state=attempt.state)

    def _git_for(self, number: int) -> GitHelper:
        """VCS gateway for one attempt, with its own credential store when enabled."""
        if not self.config.use_credential_store:
            return self.git
        return self.git.with_credential_store(self.config.credential_store_path(number))

    def _write_credentials(self, attempt: _Attempt) -> None:
        if attempt.git.credential_store is not None:
            write_credential_store(attempt.git.credential_store, self.config.token, self.config.git_host)

    def _remove_credentials(self, attempt: _Attempt) -> None:
        store = attempt.git.credential_store
        if store is not None and store.exists():
            store.unlink()
