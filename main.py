"""
LinkedIn Outreach -- campaign command line
==========================================

Commands:
  campaign [QUERY]   Send connection requests with a note to new search results
  pending [QUERY]    Record search results that already have a pending invite
  followup           Send the second-touch message to matching inbox threads
  save-session       Log in manually once and store the browser session

Usage:
  1. pip install -e .
  2. playwright install chromium
  3. Copy .env.example to .env and set LINKEDIN_EMAIL / LINKEDIN_PASSWORD
     (or run `python main.py save-session` once)
  4. python main.py campaign "cto" --target 50
"""
import logging
import sys

import click

from outreach.config import settings, setup_logging
from outreach.errors import SessionInvalid
from outreach.linkedin.browser import BrowserSession, save_session_interactively
from outreach.services.campaign_service import CampaignOrchestrator, CampaignPaths
from outreach.services.followup_service import FollowUpScanner

logger = logging.getLogger("outreach")


def _banner(title: str, lines: list[str]) -> None:
    click.echo()
    click.echo("=" * 60)
    click.echo(f"  {title}")
    click.echo("=" * 60)
    for line in lines:
        click.echo(f"  {line}")
    click.echo("=" * 60)
    click.echo()


def _run(job):
    """
    Run `job(session)` inside a browser session.

    The browser is closed whatever happens; files already written stay valid.
    """
    setup_logging()
    try:
        settings.validate()
        with BrowserSession() as session:
            return job(session)
    except SessionInvalid as e:
        logger.critical(f"Login failed: {e}")
        click.echo(f"\n[!] Login failed: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\n\n[!] Interrupted by user. Saved results are intact. Exiting.")
        sys.exit(0)
    except Exception as e:
        logger.critical(f"Fatal error: {e}", exc_info=True)
        click.echo(f"\n[!] Fatal error: {e}")
        click.echo("    Check the log file in logs/ for details.")
        sys.exit(1)


@click.group()
def cli():
    """LinkedIn outreach campaigns."""
    pass


@cli.command()
@click.argument("query", required=False, default=settings.default_query)
@click.option("--target", type=click.IntRange(min=1), default=settings.max_results,
              show_default=True, help="Number of new profiles to collect")
def campaign(query: str, target: int):
    """Send connection requests with a note to new search results."""
    paths = CampaignPaths.from_settings()
    _banner("LinkedIn Outreach -- Campaign", [
        f"Search query:  {query}",
        f"Target:        {target} new profiles",
        f"Run log:       {paths.run_file}",
        f"Failed sends:  {paths.failed_send_file}",
    ])

    summary = _run(lambda session: CampaignOrchestrator(session, paths).run(query, target))

    click.echo(f"\nRun complete! New profiles: {len(summary.results)}")
    click.echo(f"Invitations sent: {summary.sent}")
    click.echo(f"Already pending: {summary.pending}")
    if summary.failed_sends:
        click.echo(f"Failed sends: {len(summary.failed_sends)} (see {paths.failed_send_file})")


@cli.command()
@click.argument("query", required=False, default=settings.default_query)
@click.option("--target", type=click.IntRange(min=1), default=settings.max_results,
              show_default=True, help="Number of pending profiles to collect")
def pending(query: str, target: int):
    """Record search results that already have a pending invitation."""
    pending_file = settings.pending_results_file()
    _banner("LinkedIn Outreach -- Pending harvest", [
        f"Search query:  {query}",
        f"Target:        {target} pending profiles",
        f"Output:        {pending_file}",
    ])

    summary = _run(
        lambda session: CampaignOrchestrator(session, CampaignPaths.from_settings())
        .harvest_pending(query, target, pending_file)
    )

    if not summary.results:
        click.echo("\nNo new pending profiles found.")
    else:
        click.echo(f"\nSaved {summary.rows_written} pending profiles to {pending_file}")


@cli.command()
@click.option("--max-send", type=click.IntRange(min=1), default=settings.max_send_messages,
              show_default=True, help="Stop after this many follow-ups")
@click.option("--max-passes", type=click.IntRange(min=1), default=settings.max_scroll_passes,
              show_default=True, help="Maximum inbox scroll / load-more passes")
def followup(max_send: int, max_passes: int):
    """Send the second-touch message to inbox threads that match the opening line."""
    _banner("LinkedIn Outreach -- Inbox follow-up", [
        f"Max sends:     {max_send}",
        f"Max passes:    {max_passes}",
    ])

    summary = _run(
        lambda session: FollowUpScanner(session, max_send=max_send, max_passes=max_passes).run()
    )

    click.echo(f"\nMatching conversations: {summary.matched}")
    click.echo(f"Follow-ups sent: {len(summary.sent)}")


@cli.command(name="save-session")
def save_session():
    """Open a browser, log in by hand, and store the session for later runs."""
    setup_logging()
    click.echo("Log in manually, then wait until you see the feed page.")
    try:
        path = save_session_interactively(
            settings.storage_state_file,
            wait_for_user=lambda: click.prompt(
                "Press Enter once logged in", default="", show_default=False
            ),
        )
    except SessionInvalid as e:
        click.echo(f"[!] {e}")
        sys.exit(1)
    click.echo(f"Saved LinkedIn storage state to {path}")


if __name__ == "__main__":
    cli()
