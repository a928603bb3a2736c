#!/usr/bin/env python3
"""
prrepost - Step-by-step repost example

This example drives the same workflow as the ``prrepost`` command, but one
step at a time so each intermediate result can be inspected:
1. Fetch the PR metadata
2. Clone the base repository (and the fork, if any)
3. Merge the PR head onto the base branch
4. Report what would be published

Nothing is pushed and no PR is opened.

Usage: GITHUB_TOKEN=... REPO_OWNER=... REPO_NAME=... python repost_workflow.py 42
"""

import logging
import sys
from pathlib import Path

# Add SDK to path for development
sdk_path = Path(__file__).parent.parent.parent / "sdk" / "python"
sys.path.insert(0, str(sdk_path))

from prrepost import GitHelper, GitHubClient, RepostConfig, configure_logging, write_credential_store
from prrepost.exceptions import RepostError
from prrepost.orchestrator import repost_body, repost_title
from prrepost.types import Conflict, NotFound


def main() -> None:
    if len(sys.argv) != 2 or not sys.argv[1].isdigit():
        print(f"Usage: {sys.argv[0]} <pr_number>")
        sys.exit(2)
    number = int(sys.argv[1])

    configure_logging(level=logging.WARNING)
    print("=== prrepost Example ===\n")

    config = RepostConfig.from_env().with_overrides(work_dir=Path("example_work"))
    git = GitHelper(credential_store=config.credential_store_path(number))
    write_credential_store(git.credential_store, config.token, config.git_host)

    client = GitHubClient.from_config(config)
    try:
        # Step 1: Metadata
        print(f"1. Fetching PR #{number} from {config.full_name}...")
        pr = client.fetch_pull_request(number)
        print(f"   Title:  {pr.title}")
        print(f"   Author: @{pr.author}")
        print(f"   Head:   {pr.head_repo_full_name or config.full_name}:{pr.head_branch}")
        fork = pr.is_fork(config.full_name)

        # Step 2: Working copy
        print("\n2. Cloning working copy...")
        wc = git.clone(config.repo_url(), config.working_copy_path(number))
        git.fetch_all_branches(wc, "origin")
        if fork:
            git.add_remote_if_absent(wc, "source", config.repo_url(pr.head_repo_full_name))
            git.fetch_all_branches(wc, "source")
        print(f"   Path:    {wc.path}")
        print(f"   Remotes: {', '.join(sorted(wc.remotes))}")

        head = git.resolve_branch(wc, pr.head_branch, ["source" if fork else "origin"])
        if isinstance(head, NotFound):
            head = git.fetch_pull_head(wc, number)
        base = git.resolve_branch(wc, config.base_branch, ["origin", "source"] if fork else ["origin"])
        if isinstance(head, NotFound) or isinstance(base, NotFound):
            print("   Head or base branch is missing; nothing to do")
            sys.exit(1)
        print(f"   Base {config.base_branch} at {base.commit[:10]} (from {base.remote})")

        # Step 3: Merge
        print("\n3. Merging...")
        git.create_and_checkout_branch(wc, config.integration_branch(number), base.commit, force=True)
        result = git.merge(wc, head.ref, f"Repost PR #{number}")
        if isinstance(result, Conflict):
            print(f"   Conflicts in: {', '.join(result.files)}")
            sys.exit(0)
        print(f"   Merge commit: {result.commit[:10]}")

        # Step 4: What would be published
        print("\n4. Would publish:")
        print(f"   Branch: {config.publish_branch(number)}")
        print(f"   Title:  {repost_title(pr)}")
        print("   Body:")
        for line in repost_body(pr).splitlines():
            print(f"     {line}")

        print("\n=== Example Complete ===")

    except RepostError as e:
        print(f"\nError: [{e.code}] {e.message}")
        sys.exit(1)
    finally:
        client.close()
        git.credential_store.unlink(missing_ok=True)


if __name__ == "__main__":
    main()
