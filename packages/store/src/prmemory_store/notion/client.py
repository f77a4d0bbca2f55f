"""Minimal Notion REST client: create pages and append blocks."""

from __future__ import annotations

import logging
import time

import requests

from prmemory_store.base import NoteStoreError

logger = logging.getLogger(__name__)

NOTION_API_URL = "https://api.notion.com/v1"
NOTION_VERSION = "2022-06-28"

# Notion accepts at most 100 child blocks per request.
MAX_CHILDREN_PER_REQUEST = 100


def normalize_id(page_id: str) -> str:
    return page_id.replace("-", "")


def page_url(page_id: str) -> str:
    return f"https://notion.so/{normalize_id(page_id)}"


class NotionClient:
    _MAX_RETRIES = 3
    _MAX_BACKOFF_SECONDS = 30

    def __init__(self, api_key: str, timeout: int = 30, session: requests.Session | None = None):
        if not api_key:
            raise ValueError("NOTION_API_KEY is required.")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {api_key}",
                "Notion-Version": NOTION_VERSION,
                "Content-Type": "application/json",
            }
        )

    def _backoff_seconds(self, response: requests.Response, attempt: int) -> int:
        """Exponential backoff, honoring Retry-After when Notion sends it."""
        retry_after = response.headers.get("Retry-After")
        if retry_after:
            try:
                return min(self._MAX_BACKOFF_SECONDS, max(1, int(retry_after)))
            except ValueError:
                pass
        return min(self._MAX_BACKOFF_SECONDS, 2 ** (attempt - 1))

    def _request(self, method: str, path: str, payload: dict) -> dict:
        """Send one JSON request, retrying 429 and 5xx responses.

        Raises:
            NoteStoreError: on connection failure after retries, HTTP >= 400,
                or a non-JSON response body.
        """
        url = f"{NOTION_API_URL}/{path.lstrip('/')}"

        for attempt in range(1, self._MAX_RETRIES + 1):
            try:
                response = self._session.request(method, url, json=payload, timeout=self._timeout)
            except requests.RequestException as exc:
                if attempt == self._MAX_RETRIES:
                    raise NoteStoreError(f"Notion request failed after retries: {method} {url}") from exc
                time.sleep(min(self._MAX_BACKOFF_SECONDS, 2 ** (attempt - 1)))
                continue

            status = response.status_code
            if (status == 429 or 500 <= status <= 599) and attempt < self._MAX_RETRIES:
                delay = self._backoff_seconds(response, attempt)
                logger.warning("Notion %s %s returned %d, retrying in %ds", method, path, status, delay)
                time.sleep(delay)
                continue

            if status >= 400:
                raise NoteStoreError(f"Notion API request failed: {method} {url} returned {status} - {response.text}")

            try:
                return response.json()
            except ValueError as exc:
                raise NoteStoreError(f"Notion API returned invalid JSON: {method} {url}") from exc

        raise NoteStoreError(f"Notion request failed after retries: {method} {url}")

    def append_blocks(self, page_id: str, blocks: list[dict]) -> None:
        """Append blocks to the end of a page, in order, 100 per request."""
        block_id = normalize_id(page_id)
        for start in range(0, len(blocks), MAX_CHILDREN_PER_REQUEST):
            self._request(
                "PATCH",
                f"blocks/{block_id}/children",
                {"children": blocks[start : start + MAX_CHILDREN_PER_REQUEST]},
            )

    def create_page(
        self,
        parent_type: str,
        parent_id: str,
        title: str,
        blocks: list[dict],
        title_property: str = "Name",
    ) -> dict:
        """Create a page under a page or database and return ``{"id", "url"}``.

        For a database parent the title goes into ``title_property``; for a
        page parent it goes into the built-in ``title`` property.
        """
        clean_parent = normalize_id(parent_id)
        title_rich_text = [{"type": "text", "text": {"content": title, "link": None}}]
        if parent_type == "database":
            parent = {"database_id": clean_parent}
            properties = {title_property: {"title": title_rich_text}}
        else:
            parent = {"page_id": clean_parent}
            properties = {"title": {"title": title_rich_text}}

        page = self._request(
            "POST",
            "pages",
            {"parent": parent, "properties": properties, "children": blocks[:MAX_CHILDREN_PER_REQUEST]},
        )
        page_id = page["id"]
        if len(blocks) > MAX_CHILDREN_PER_REQUEST:
            self.append_blocks(page_id, blocks[MAX_CHILDREN_PER_REQUEST:])

        return {"id": page_id, "url": page.get("url") or page_url(page_id)}

    def close(self) -> None:
        self._session.close()
