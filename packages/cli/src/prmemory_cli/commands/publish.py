"""publish command: turn summary files into standalone Notion pages."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from prmemory_cli.stores import PAGES, build_store
from prmemory_store.cache import SyncCache
from prmemory_store.publish import publish_summary_files

console = Console()


@click.command("publish")
@click.argument("summaries_dir", type=click.Path(exists=True, file_okay=False))
@click.option("--force", is_flag=True, help="Ignore the page cache and create new pages for every file.")
@click.pass_context
def publish_cmd(ctx, summaries_dir: str, force: bool):
    """Create one Notion page per {stem}_summary.md file in SUMMARIES_DIR.

    Pages are created under NOTION_PAGE_ID (or in a database when
    notion_parent_type is "database"). Page ids are cached by stem, so
    re-running only publishes new files.
    """
    config = ctx.obj["config"]
    store = build_store(config, PAGES)
    cache = SyncCache.load(config["page_cache_path"])

    try:
        results = publish_summary_files(store, cache, summaries_dir, force=force)
    finally:
        store.close()

    if not results:
        console.print("[yellow]No *_summary.md files found.[/yellow]")
        return

    table = Table(title="Published summaries", show_header=True, header_style="bold cyan")
    table.add_column("Stem", style="bold")
    table.add_column("Status", width=10)
    table.add_column("Page")

    for r in results:
        if r["error"]:
            table.add_row(r["stem"], "[red]failed[/red]", escape(r["error"]))
        elif r["cached"]:
            table.add_row(r["stem"], "[dim]cached[/dim]", r["url"] or "")
        else:
            table.add_row(r["stem"], "[green]created[/green]", r["url"] or "")

    console.print(table)
