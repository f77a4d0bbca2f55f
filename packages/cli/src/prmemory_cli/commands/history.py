"""history command: list the PRs recorded in the sync cache."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from prmemory_store.cache import SyncCache
from prmemory_store.notion.blocks import stem_to_title
from prmemory_store.notion.client import page_url

console = Console()


@click.command("history")
@click.option("--pages", is_flag=True, help="Show the standalone-page cache instead of the sync cache.")
@click.option("--limit", default=20, show_default=True, help="Maximum number of records to show.")
@click.pass_context
def history_cmd(ctx, pages: bool, limit: int):
    """Show which PRs have already been summarized.

    Reads the local cache file only; nothing is fetched from GitHub or Notion.
    """
    config = ctx.obj["config"]
    cache = SyncCache.load(config["page_cache_path"] if pages else config["cache_path"])

    if not len(cache):
        console.print("[yellow]No cached PRs found.[/yellow]")
        return

    # Newest merges first; the date is the stem's last segment.
    entries = sorted(cache.items(), key=lambda item: item[0].rsplit("_", 1)[-1], reverse=True)[:limit]

    table = Table(title=f"PR history ({cache.path})", show_header=True, header_style="bold cyan")
    table.add_column("Title", max_width=60)
    table.add_column("Merged", width=10)
    table.add_column("Page" if pages else "Published")

    for stem, marker in entries:
        title = stem_to_title(stem.rsplit("_", 1)[0])
        merged = stem.rsplit("_", 1)[-1]
        shown = page_url(marker) if isinstance(marker, str) else ("yes" if marker else "no")
        table.add_row(title, merged, shown)

    console.print(table)
