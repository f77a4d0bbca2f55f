"""Notion destinations for PR summaries.

NotionAppendStore: every summary is appended to one shared page. The page
    keeps growing, there is no per-PR object to point at, so the cache marker
    is just ``True``.
NotionPageStore: every summary becomes its own page under a parent page or
    database. The cache marker is the new page's id.
"""

from __future__ import annotations

from prmemory_store.base import BaseNoteStore
from prmemory_store.notion.blocks import markdown_to_blocks, stem_to_title, summary_section
from prmemory_store.notion.client import NotionClient, page_url


class NotionAppendStore(BaseNoteStore):
    def __init__(self, client: NotionClient, page_id: str):
        self._client = client
        self._page_id = page_id

    @property
    def url(self) -> str:
        return page_url(self._page_id)

    def publish(self, stem: str, markdown: str) -> bool:
        self._client.append_blocks(self._page_id, summary_section(stem, markdown))
        return True

    def close(self) -> None:
        self._client.close()


class NotionPageStore(BaseNoteStore):
    def __init__(
        self,
        client: NotionClient,
        parent_id: str,
        parent_type: str = "page",
        title_property: str = "Name",
    ):
        self._client = client
        self._parent_id = parent_id
        self._parent_type = parent_type
        self._title_property = title_property
        self.last_url: str | None = None

    @property
    def url(self) -> str:
        return page_url(self._parent_id)

    def publish(self, stem: str, markdown: str) -> str:
        page = self._client.create_page(
            parent_type=self._parent_type,
            parent_id=self._parent_id,
            title=stem_to_title(stem),
            blocks=markdown_to_blocks(markdown),
            title_property=self._title_property,
        )
        self.last_url = page["url"]
        return page["id"]

    def close(self) -> None:
        self._client.close()
