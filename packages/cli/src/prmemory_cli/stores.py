"""Build note-store destinations from prmemory config.

This factory lives in the CLI package so neither prmemory_core nor
prmemory_store know about the config format.
"""

from __future__ import annotations

import click

APPEND = "append"
PAGES = "pages"


def build_store(config: dict, mode: str = APPEND):
    """Return the Notion destination for ``mode``.

      append → NotionAppendStore: every summary appended to NOTION_PAGE_ID
      pages  → NotionPageStore: one page per summary under NOTION_PAGE_ID
               (a database when notion_parent_type is "database")
    """
    from prmemory_store.notion.client import NotionClient
    from prmemory_store.notion.store import NotionAppendStore, NotionPageStore

    api_key = config.get("notion_api_key")
    page_id = config.get("notion_page_id")
    if not api_key or not page_id:
        raise click.UsageError(
            "Notion env missing: set NOTION_API_KEY and NOTION_PAGE_ID (the page to write PR summaries to)."
        )

    client = NotionClient(api_key, timeout=config.get("http_timeout", 30))
    if mode == PAGES:
        return NotionPageStore(
            client,
            parent_id=page_id,
            parent_type=config.get("notion_parent_type", "page"),
            title_property=config.get("notion_title_property", "Name"),
        )
    return NotionAppendStore(client, page_id)
