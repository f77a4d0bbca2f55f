"""sync command: summarize merged PRs and append them to a Notion page."""

from __future__ import annotations

import sys

import click
import requests
from github import GithubException
from rich.console import Console

from prmemory_cli.auth import require_github_token
from prmemory_cli.stores import APPEND, build_store
from prmemory_core.config import load_summary_prompt
from prmemory_core.errors import ConfigurationError, PRMemoryError
from prmemory_core.gh.collector import PullRequestCollector
from prmemory_core.sync import get_summarizer, run_sync
from prmemory_store.cache import SyncCache
from prmemory_store.files import write_summary

console = Console()


def _stdin_is_interactive() -> bool:
    return sys.stdin.isatty()


def choose_limit(total: int, cli_limit: int | None, env_limit: int | None) -> int:
    """Decide how many of the ``total`` most recently updated PRs to process.

    --limit wins, then PR_LIMIT; otherwise ask when running in a terminal and
    take everything when not.
    """
    if cli_limit is not None and cli_limit > 0:
        return min(cli_limit, total)
    if env_limit:
        return min(env_limit, total)
    if total == 0 or not _stdin_is_interactive():
        return total

    answer = click.prompt(f'How many PRs to summarize? (1-{total}, or "all")', default="all", show_default=False)
    answer = answer.strip().lower()
    if answer in ("", "all"):
        return total
    try:
        n = int(answer)
    except ValueError:
        return total
    return min(n, total) if n > 0 else total


@click.command("sync")
@click.option("--force", is_flag=True, help="Ignore the sync cache and summarize every selected PR again.")
@click.option(
    "--limit",
    type=int,
    default=None,
    help="Process only the N most recently updated merged PRs. Overrides PR_LIMIT.",
)
@click.pass_context
def sync_cmd(ctx, force: bool, limit: int | None):
    """Summarize your merged pull requests into a Notion page.

    Fetches every merged PR you authored, enriches it with the diff, changed
    files, review comments and linked issues, summarizes it with the
    configured model and appends the summary to NOTION_PAGE_ID. PRs already
    in the sync cache are skipped unless --force is given.

    \b
    Required environment variables:
      NOTION_API_KEY       Notion integration token
      NOTION_PAGE_ID       Page to append summaries to
      GITHUB_TOKEN         GitHub token (or gh CLI session / GITHUB_CLIENT_ID)
      ANTHROPIC_API_KEY    Required when model is anthropic (default)
      OPENAI_API_KEY       Required when model is openai
      GEMINI_API_KEY       Required when model is gemini
    """
    config = ctx.obj["config"]

    store = build_store(config, APPEND)
    try:
        try:
            summarizer = get_summarizer(config)
            instructions = load_summary_prompt(config)
        except (ConfigurationError, FileNotFoundError) as e:
            raise click.UsageError(str(e))

        token = require_github_token(config)
        collector = PullRequestCollector.from_token(token, config)
        cache = SyncCache.load(config["cache_path"])

        summary_dir = config.get("summary_dir")
        writer = (lambda stem, markdown: write_summary(summary_dir, stem, markdown)) if summary_dir else None

        try:
            summary = run_sync(
                collector,
                summarizer,
                store,
                cache,
                instructions,
                force=force,
                choose_limit=lambda total: choose_limit(total, limit, config.get("pr_limit")),
                summary_writer=writer,
            )
        except (PRMemoryError, GithubException, requests.RequestException) as e:
            raise click.ClickException(str(e))
    finally:
        store.close()

    console.print(
        f"Done. [green]{summary.processed} published[/green], "
        f"{summary.cached} cached, [red]{summary.failed} failed[/red]."
    )
    console.print(f"Page: {store.url}")
