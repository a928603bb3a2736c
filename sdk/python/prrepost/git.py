"""
Git helper utilities for prrepost.

Wraps the git CLI for the operations a repost needs: clone, remotes, fetch,
branch creation, merge with conflict cleanup, and push. Every operation acts
on a single WorkingCopy.
"""

import copy
import os
import shlex
import shutil
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from prrepost.exceptions import (
    AuthenticationError,
    ConfigurationError,
    GitCommandError,
    RemoteRejectedError,
    RemoteUnreachableError,
)
from prrepost.logging import get_logger, log_git_command, mask_sensitive_data
from prrepost.types.outcomes import (
    Conflict,
    Found,
    Merged,
    MergeAttemptResult,
    NotFound,
    RefResolution,
)

logger = get_logger("git")

CREDENTIAL_USERNAME = "x-access-token"

_AUTH_MARKERS = (
    "authentication failed",
    "could not read username",
    "could not read password",
    "invalid username or password",
    "the requested url returned error: 401",
    "the requested url returned error: 403",
)
_UNREACHABLE_MARKERS = (
    "could not resolve host",
    "unable to access",
    "connection refused",
    "connection timed out",
    "operation timed out",
    "does not appear to be a git repository",
    "could not read from remote repository",
    "the remote end hung up unexpectedly",
    "repository not found",
    "does not exist",
)
_REJECTED_MARKERS = (
    "[rejected]",
    "[remote rejected]",
    "protected branch",
    "non-fast-forward",
    "pre-receive hook declined",
    "permission to",
    "returned error: 403",
)


@dataclass
class WorkingCopy:
    """A disposable local clone used by exactly one repost attempt."""

    path: Path
    remotes: dict[str, str] = field(default_factory=dict)
    current_ref: str | None = None

    def has_remote(self, name: str) -> bool:
        return name in self.remotes


def write_credential_store(path: str | Path, token: str, host: str = "github.com") -> Path:
    """
    Write a git credential-store file holding ``token``.

    The token is presented as the password with a fixed placeholder username,
    which is what GitHub expects for token authentication over HTTPS.

    Returns:
        The path written

    Raises:
        ConfigurationError: If the file cannot be written
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as f:
            f.write(f"https://{CREDENTIAL_USERNAME}:{token}@{host}\n")
        os.chmod(path, 0o600)
    except OSError as e:
        raise ConfigurationError(f"Could not write credential store {path}: {e.strerror or e}") from e
    return path


class GitHelper:
    """
    Helper for git operations on repost working copies.

    Example:
        ```python
        from prrepost.git import GitHelper

        git = GitHelper()
        wc = git.clone("https://github.com/octo/app.git", "./work/app-pr42")
        git.fetch_all_branches(wc, "origin")
        base = git.resolve_branch(wc, "develop", ["origin"])
        ```
    """

    def __init__(
        self,
        credential_store: str | Path | None = None,
        user_name: str = "prrepost",
        user_email: str = "prrepost@users.noreply.github.com",
        timeout: float | None = 600.0,
    ) -> None:
        """
        Initialize the helper.

        Args:
            credential_store: Credential-store file used for every command (optional)
            user_name: Committer name for merge commits
            user_email: Committer email for merge commits
            timeout: Per-command timeout in seconds (None disables it)
        """
        self.credential_store = Path(credential_store) if credential_store else None
        self.user_name = user_name
        self.user_email = user_email
        self.timeout = timeout

    def with_credential_store(self, credential_store: str | Path | None) -> "GitHelper":
        """Return a copy of this helper that authenticates with ``credential_store``."""
        helper = copy.copy(self)
        helper.credential_store = Path(credential_store) if credential_store else None
        return helper

    # ------------------------------------------------------------------
    # Working copy setup
    # ------------------------------------------------------------------

    def clone(self, base_repo_url: str, dest: str | Path) -> WorkingCopy:
        """
        Clone a repository into ``dest``, destroying anything already there.

        Raises:
            RemoteUnreachableError: If the remote could not be reached
            AuthenticationError: If credentials are rejected
            GitCommandError: If ``dest`` cannot be cleared or git cannot be run
        """
        dest = Path(dest)
        try:
            if dest.is_dir() and not dest.is_symlink():
                logger.info("Removing existing working copy at %s", dest)
                shutil.rmtree(dest)
            elif dest.exists() or dest.is_symlink():
                dest.unlink()
            dest.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise GitCommandError(
                "WORKING_COPY_UNAVAILABLE",
                f"Cannot prepare working copy at {dest}: {e.strerror or e}",
                command=["git", "clone"],
            ) from e

        self._run("clone", "--no-tags", base_repo_url, str(dest))

        wc = WorkingCopy(path=dest, remotes={"origin": base_repo_url})
        wc.current_ref = self.current_branch(wc)
        return wc

    def add_remote_if_absent(self, wc: WorkingCopy, name: str, url: str) -> bool:
        """
        Add a remote unless one with that name already exists.

        Returns:
            True if the remote was added
        """
        existing = self.list_remotes(wc)
        if name in existing:
            wc.remotes[name] = existing[name]
            return False

        self._run("remote", "add", name, url, cwd=wc.path)
        wc.remotes[name] = url
        return True

    def list_remotes(self, wc: WorkingCopy) -> dict[str, str]:
        """List configured remotes and their fetch URLs."""
        result = self._run("remote", "-v", cwd=wc.path)
        remotes = {}
        for line in result.stdout.splitlines():
            # Format: "origin\thttps://github.com/org/repo.git (fetch)"
            parts = line.split()
            if len(parts) >= 2 and line.endswith("(fetch)"):
                remotes[parts[0]] = parts[1]
        return remotes

    def fetch_all_branches(self, wc: WorkingCopy, remote_name: str) -> None:
        """
        Fetch every branch of ``remote_name`` into refs/remotes/<remote_name>/.

        Raises:
            RemoteUnreachableError: If the remote could not be reached
            AuthenticationError: If credentials are rejected
        """
        self._run(
            "fetch", "--prune", "--no-tags", remote_name,
            f"+refs/heads/*:refs/remotes/{remote_name}/*",
            cwd=wc.path,
        )

    def fetch_pull_head(
        self, wc: WorkingCopy, number: int, remote_name: str = "origin"
    ) -> RefResolution:
        """
        Fetch the hosting platform's head ref for PR ``number``.

        The ref lands at refs/prrepost/pull/<number>, outside the pruned
        remote-tracking namespace. A missing
        ref is reported as NotFound rather than raised.
        """
        local_ref = f"refs/prrepost/pull/{number}"
        result = self._run(
            "fetch", "--no-tags", remote_name, f"+refs/pull/{number}/head:{local_ref}",
            cwd=wc.path,
            check=False,
        )
        if result.returncode != 0:
            if "couldn't find remote ref" in result.stderr.lower():
                return NotFound(branch=f"pull/{number}", searched=(remote_name,))
            raise self._error_for(result)

        return Found(remote=remote_name, ref=local_ref, commit=self.rev_parse(wc, local_ref))

    # ------------------------------------------------------------------
    # Refs and branches
    # ------------------------------------------------------------------

    def resolve_branch(
        self, wc: WorkingCopy, branch: str, remotes: Sequence[str]
    ) -> RefResolution:
        """
        Resolve ``branch`` to a remote-tracking ref.

        Remotes are searched in the given order and the first one carrying
        the branch wins.
        """
        for remote in remotes:
            ref = f"refs/remotes/{remote}/{branch}"
            result = self._run(
                "rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}",
                cwd=wc.path,
                check=False,
            )
            if result.returncode == 0:
                return Found(remote=remote, ref=ref, commit=result.stdout.strip())
        return NotFound(branch=branch, searched=tuple(remotes))

    def create_and_checkout_branch(
        self, wc: WorkingCopy, name: str, from_commit: str, force: bool = False
    ) -> None:
        """
        Create branch ``name`` at ``from_commit`` and check it out.

        With ``force`` an existing branch of that name is reset.
        """
        self._run("checkout", "-B" if force else "-b", name, from_commit, cwd=wc.path)
        wc.current_ref = name

    def current_branch(self, wc: WorkingCopy) -> str | None:
        result = self._run("symbolic-ref", "--quiet", "--short", "HEAD", cwd=wc.path, check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def rev_parse(self, wc: WorkingCopy, ref: str) -> str:
        return self._run("rev-parse", "--verify", f"{ref}^{{commit}}", cwd=wc.path).stdout.strip()

    def head_commit(self, wc: WorkingCopy) -> str:
        return self.rev_parse(wc, "HEAD")

    def history_contains_line(self, wc: WorkingCopy, ref: str, line: str) -> bool:
        """True if any commit reachable from ``ref`` has ``line`` in its message."""
        result = self._run(
            "log", "--fixed-strings", f"--grep={line}", "--format=%B%x1e", ref,
            cwd=wc.path,
        )
        for message in result.stdout.split("\x1e"):
            if any(candidate.strip() == line for candidate in message.splitlines()):
                return True
        return False

    # ------------------------------------------------------------------
    # Merge
    # ------------------------------------------------------------------

    def merge(self, wc: WorkingCopy, other_ref: str, message: str) -> MergeAttemptResult:
        """
        Merge ``other_ref`` into the checked-out branch.

        On conflict the merge is aborted so the working copy is left clean
        (no MERGE_HEAD, no conflict markers) and Conflict is returned.

        Raises:
            GitCommandError: If the merge failed for a reason other than conflicts
        """
        head_before = self.head_commit(wc)
        result = self._run(
            "merge", "--no-ff", "--no-edit", "-m", message, other_ref,
            cwd=wc.path,
            check=False,
        )

        if result.returncode == 0:
            head_after = self.head_commit(wc)
            return Merged(commit=head_after, up_to_date=head_after == head_before)

        files = self.unmerged_paths(wc)
        if not files and "CONFLICT" not in result.stdout:
            self._abort_merge(wc)
            raise self._error_for(result)

        detail = "\n".join(
            line for line in result.stdout.splitlines() if line.startswith("CONFLICT")
        )
        logger.info("Merge of %s stopped on %d conflicting file(s)", other_ref, len(files))
        self._abort_merge(wc)
        return Conflict(files=tuple(files), detail=detail)

    def unmerged_paths(self, wc: WorkingCopy) -> list[str]:
        result = self._run("diff", "--name-only", "--diff-filter=U", cwd=wc.path, check=False)
        return [line for line in result.stdout.splitlines() if line]

    def is_merging(self, wc: WorkingCopy) -> bool:
        result = self._run("rev-parse", "--quiet", "--verify", "MERGE_HEAD", cwd=wc.path, check=False)
        return result.returncode == 0

    def _abort_merge(self, wc: WorkingCopy) -> None:
        """Return the working copy to a clean, non-merging state."""
        self._run("merge", "--abort", cwd=wc.path, check=False)
        if self.is_merging(wc) or self.unmerged_paths(wc):
            self._run("reset", "--hard", "HEAD", cwd=wc.path)
            self._run("clean", "-fd", cwd=wc.path)
        if self.is_merging(wc):
            raise GitCommandError(
                "MERGE_CLEANUP_FAILED",
                f"Could not clear merge state in {wc.path}",
            )

    # ------------------------------------------------------------------
    # Publish and cleanup
    # ------------------------------------------------------------------

    def push(
        self,
        wc: WorkingCopy,
        local_ref: str,
        remote_branch_name: str,
        remote: str = "origin",
        force: bool = False,
    ) -> None:
        """
        Push ``local_ref`` to refs/heads/<remote_branch_name> on ``remote``.

        Raises:
            RemoteRejectedError: If the remote refused the update
            RemoteUnreachableError: If the remote could not be reached
            AuthenticationError: If credentials are rejected
        """
        refspec = f"{'+' if force else ''}{local_ref}:refs/heads/{remote_branch_name}"
        self._run("push", "--porcelain", remote, refspec, cwd=wc.path)
        logger.info("Pushed %s to %s/%s", local_ref, remote, remote_branch_name)

    def remove(self, wc: WorkingCopy) -> None:
        """Delete the working copy from disk."""
        if wc.path.exists():
            shutil.rmtree(wc.path)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _base_args(self) -> list[str]:
        args = [
            "-c", f"user.name={self.user_name}",
            "-c", f"user.email={self.user_email}",
        ]
        if self.credential_store is not None:
            store = shlex.quote(str(self.credential_store.resolve()))
            args.extend([
                "-c", "credential.helper=",
                "-c", f"credential.helper=store --file={store}",
            ])
        return args

    def _run(
        self,
        *args: str,
        cwd: Path | None = None,
        check: bool = True,
    ) -> subprocess.CompletedProcess:
        """Run a git command, raising a classified error on failure when ``check``."""
        cmd = ["git", *self._base_args(), *args]
        env = os.environ.copy()
        env["GIT_TERMINAL_PROMPT"] = "0"
        env["LC_ALL"] = "C"

        log_git_command(["git", *args], cwd=str(cwd) if cwd else None)
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                env=env,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise RemoteUnreachableError(
                "GIT_TIMEOUT",
                f"git {args[0]} timed out after {self.timeout}s",
                command=["git", *args],
            ) from e
        except OSError as e:
            raise GitCommandError(
                "GIT_NOT_AVAILABLE",
                f"Could not run git {args[0]}: {e.strerror or e}",
                command=["git", *args],
            ) from e

        if result.returncode != 0:
            log_git_command(["git", *args], returncode=result.returncode, stderr=result.stderr)
            if check:
                raise self._error_for(result)
        return result

    def _error_for(self, result: subprocess.CompletedProcess) -> GitCommandError | AuthenticationError:
        """Map a failed git command to a typed error based on its stderr."""
        command = ["git", *result.args[1 + len(self._base_args()):]]
        stderr = mask_sensitive_data(result.stderr.strip())
        text = f"{result.stdout}\n{result.stderr}".lower()
        subcommand = next((a for a in command[1:] if not a.startswith("-")), "git")
        message = f"git {subcommand} failed: {stderr.splitlines()[-1] if stderr else 'exit ' + str(result.returncode)}"

        if subcommand == "push" and any(marker in text for marker in _REJECTED_MARKERS):
            return RemoteRejectedError(
                "PUSH_REJECTED", message, command=command,
                returncode=result.returncode, stderr=stderr,
            )
        if any(marker in text for marker in _AUTH_MARKERS):
            return AuthenticationError("GIT_AUTH_FAILED", message)
        if any(marker in text for marker in _UNREACHABLE_MARKERS):
            return RemoteUnreachableError(
                "REMOTE_UNREACHABLE", message, command=command,
                returncode=result.returncode, stderr=stderr,
            )
        return GitCommandError(
            "GIT_COMMAND_FAILED", message, command=command,
            returncode=result.returncode, stderr=stderr,
        )
