"""Publish a directory of ``{stem}_summary.md`` files, one destination object per file."""

from __future__ import annotations

import logging
from pathlib import Path

from prmemory_store.base import BaseNoteStore
from prmemory_store.cache import SyncCache
from prmemory_store.files import list_summary_files
from prmemory_store.notion.client import page_url

logger = logging.getLogger(__name__)


def publish_summary_files(
    store: BaseNoteStore,
    cache: SyncCache,
    summaries_dir: str | Path,
    force: bool = False,
) -> list[dict]:
    """Publish every summary file whose stem is not cached yet.

    Returns one ``{"stem", "id", "url", "cached", "error"}`` dict per file.
    A file that fails to publish is reported and skipped; the cache is
    saved after each success and once more at the end.
    """
    if force:
        cache.clear()

    results = []
    try:
        for stem, path in list_summary_files(summaries_dir):
            cached_id = cache.get(stem)
            if cached_id:
                url = page_url(cached_id) if isinstance(cached_id, str) else None
                results.append({"stem": stem, "id": cached_id, "url": url, "cached": True, "error": None})
                continue

            try:
                page_id = store.publish(stem, path.read_text(encoding="utf-8"))
            except Exception as e:
                logger.error("Publishing %s failed: %s", stem, e)
                results.append({"stem": stem, "id": None, "url": None, "cached": False, "error": str(e)})
                continue

            cache.mark(stem, page_id)
            cache.save()
            url = getattr(store, "last_url", None) or (page_url(page_id) if isinstance(page_id, str) else None)
            results.append({"stem": stem, "id": page_id, "url": url, "cached": False, "error": None})
    finally:
        cache.save()

    return results
