"""Command-line entry point for unsubscribing from review-request notifications."""

import logging
import sys

import click
import requests
from dotenv import load_dotenv

from . import __version__
from .api_client import GitHubAPIClient
from .config import build_policy, configure_logging, resolve_github_token
from .exceptions import AuthError, ConfigError, PayloadError, RateLimitError, ValidationError
from .output import OutputFormatter
from .unsubscriber import NotificationUnsubscriber

EXIT_FATAL = 1
EXIT_USAGE = 2


@click.command("gh-review-unsubscribe")
@click.version_option(version=__version__, prog_name="gh-review-unsubscribe")
@click.option(
    "--exclude",
    "-x",
    multiple=True,
    metavar="REF",
    help="Pull request to leave alone (owner/repo#123 or PR URL). Repeatable, comma lists allowed.",
)
@click.option(
    "--since",
    default=None,
    metavar="DATE",
    help="Only notifications updated on or after this date (YYYY-MM-DD or YYYY-MM-DDTHH:MM:SSZ).",
)
@click.option(
    "--team",
    default=None,
    metavar="ORG/SLUG",
    help="Only PRs requesting review from this team and not authored by you.",
)
@click.option("--dry-run", is_flag=True, help="Show what would be unsubscribed without changing anything.")
@click.option("--unread-only", is_flag=True, help="Only consider notifications not yet marked as read.")
@click.option("--show-excluded", is_flag=True, help="Also print a line for every excluded notification.")
@click.option("--no-color", is_flag=True, help="Disable colored output.")
def main(exclude, since, team, dry_run, unread_only, show_excluded, no_color):
    """Unsubscribe from GitHub pull request review-request notifications."""
    load_dotenv()
    configure_logging()

    try:
        policy = build_policy(exclude=exclude, since=since, team=team)
    except ValidationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_USAGE)

    formatter = OutputFormatter(use_color=not no_color, show_excluded=show_excluded)

    try:
        client = GitHubAPIClient(resolve_github_token())
        formatter.print_header(policy.describe(), dry_run=dry_run)
        unsubscriber = NotificationUnsubscriber(
            client,
            policy,
            dry_run=dry_run,
            unread_only=unread_only,
            on_outcome=formatter.print_outcome
        )
        summary = unsubscriber.run()
    except (ConfigError, AuthError, RateLimitError, PayloadError, requests.RequestException) as e:
        logging.error(str(e))
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_FATAL)

    formatter.print_summary(summary)


if __name__ == "__main__":
    main()
