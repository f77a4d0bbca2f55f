"""export command: write the LLM payload for each merged PR to disk."""

from __future__ import annotations

import click
import requests
from github import GithubException
from rich.console import Console
from rich.markup import escape

from prmemory_cli.auth import require_github_token
from prmemory_core.errors import PRMemoryError
from prmemory_core.gh.collector import PullRequestCollector
from prmemory_core.payload import build_llm_payload
from prmemory_core.stem import pr_to_stem
from prmemory_store.files import write_payload

console = Console()


@click.command("export")
@click.option("--limit", type=int, default=None, help="Export only the N most recently updated merged PRs.")
@click.option("--out", "out_dir", default=None, help="Output folder. Overrides payload_dir from the config file.")
@click.pass_context
def export_cmd(ctx, limit: int | None, out_dir: str | None):
    """Export the exact JSON each PR would be summarized from.

    Writes one {stem}.json per merged PR. Nothing is summarized, published
    or cached, so this is safe to run at any time to inspect the input.
    """
    config = ctx.obj["config"]
    out_dir = out_dir or config["payload_dir"]

    token = require_github_token(config)
    collector = PullRequestCollector.from_token(token, config)

    console.print("Fetching merged PRs from GitHub...")
    try:
        collector.authenticate()
        records = collector.fetch_merged()
    except (PRMemoryError, GithubException, requests.RequestException) as e:
        raise click.ClickException(str(e))

    if limit is not None and limit > 0:
        records = records[:limit]
    console.print(f"Found {len(records)} merged PR(s). Exporting to {escape(str(out_dir))}...")

    n = len(records)
    failed = 0
    for i, record in enumerate(records, 1):
        stem = pr_to_stem(record)
        try:
            payload = build_llm_payload(collector.enrich(record))
            write_payload(out_dir, stem, payload)
            console.print(f"  [{i}/{n}] {escape(stem)}.json")
        except Exception as e:
            failed += 1
            console.print(f"[red]  [{i}/{n}] {escape(stem)} FAILED: {escape(str(e))}[/red]")

    console.print(f"Done. {n - failed} exported, {failed} failed.")
