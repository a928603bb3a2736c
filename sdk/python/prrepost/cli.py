"""Command-line entry point: ``prrepost <pr_number>``."""

import logging
import sys
from pathlib import Path

import click

from prrepost.config import RepostConfig
from prrepost.exceptions import ConfigurationError
from prrepost.logging import configure_logging
from prrepost.orchestrator import RepostOrchestrator
from prrepost.retry import RetryConfig, run_with_retry
from prrepost.types.outcomes import Failed


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("pr_number", type=int, required=False)
@click.option("--no-interactive", is_flag=True, help="Publish without asking for confirmation.")
@click.option(
    "--work-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory that holds the disposable working copies.",
)
@click.option("--keep-work-dir", is_flag=True, help="Keep the working copy after a successful repost.")
@click.option("--retries", type=click.IntRange(min=0), default=0, show_default=True,
              help="Re-run the whole repost this many times on network failures.")
@click.option("-v", "--verbose", count=True, help="-v for INFO logs, -vv to include git and HTTP traffic.")
@click.pass_context
def main(
    ctx: click.Context,
    pr_number: int | None,
    no_interactive: bool,
    work_dir: Path | None,
    keep_work_dir: bool,
    retries: int,
    verbose: int,
) -> None:
    """Repost pull request PR_NUMBER as a new PR merged onto the base branch.

    Reads GITHUB_TOKEN, REPO_OWNER, REPO_NAME and BASE_BRANCH (default:
    develop) from the environment.
    """
    if pr_number is None:
        click.echo(ctx.get_usage())
        ctx.exit(0)

    if verbose:
        configure_logging(
            level=logging.INFO,
            http_level=logging.DEBUG if verbose > 1 else logging.INFO,
            git_level=logging.DEBUG if verbose > 1 else logging.INFO,
        )

    try:
        config = RepostConfig.from_env().with_overrides(
            work_dir=work_dir,
            keep_work_dir=keep_work_dir or None,
        )
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        ctx.exit(1)

    interactive = not no_interactive and sys.stdin.isatty()
    confirm = (lambda prompt: click.confirm(prompt, default=True)) if interactive else None

    with RepostOrchestrator.from_config(config, confirm=confirm) as orchestrator:
        outcome = run_with_retry(
            lambda: orchestrator.repost(pr_number),
            RetryConfig(max_retries=retries),
        )

    click.echo(outcome.message())
    ctx.exit(1 if isinstance(outcome, Failed) else 0)


if __name__ == "__main__":
    main()
