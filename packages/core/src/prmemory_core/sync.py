"""End-to-end PR → summary → note store pipeline with an idempotence cache.

prmemory_core has no dependency on prmemory_store. The coordinator works
against three duck-typed collaborators supplied by the CLI:

  cache      ``stem in cache``, ``clear()``, ``mark(stem, marker)``, ``save()``
  publisher  ``publish(stem, markdown) -> marker``
  summarizer ``summarize(payload, instructions) -> markdown``

PRs are processed strictly one after another. A PR's cache entry is written
(and the cache saved) as soon as its publish succeeds, so an interrupted run
never republishes finished PRs on restart.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from rich.console import Console
from rich.markup import escape

from prmemory_core.errors import ConfigurationError
from prmemory_core.payload import build_llm_payload
from prmemory_core.providers.anthropic import AnthropicSummarizer
from prmemory_core.providers.gemini import GeminiSummarizer
from prmemory_core.providers.openai import OpenAISummarizer
from prmemory_core.stem import pr_to_stem

console = Console()
logger = logging.getLogger(__name__)

CACHED = "cached"
PROCESSED = "processed"
FAILED = "failed"


@dataclass
class PRResult:
    stem: str
    status: str  # CACHED | PROCESSED | FAILED
    marker: object = None
    error: str | None = None


@dataclass
class SyncSummary:
    """Result of run_sync: what was found, what was selected, what happened to each PR."""

    total: int
    results: list[PRResult] = field(default_factory=list)

    def _count(self, status: str) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def processed(self) -> int:
        return self._count(PROCESSED)

    @property
    def cached(self) -> int:
        return self._count(CACHED)

    @property
    def failed(self) -> int:
        return self._count(FAILED)


def get_summarizer(config: dict):
    model = config["model"]
    summary_model = config.get("summary_model")
    if model == "anthropic":
        if not config.get("anthropic_api_key"):
            raise ConfigurationError("ANTHROPIC_API_KEY environment variable is not set.")
        return AnthropicSummarizer(api_key=config["anthropic_api_key"], model=summary_model)
    if model == "openai":
        if not config.get("openai_api_key"):
            raise ConfigurationError("OPENAI_API_KEY environment variable is not set.")
        return OpenAISummarizer(api_key=config["openai_api_key"], model=summary_model)
    if model == "gemini":
        if not config.get("gemini_api_key"):
            raise ConfigurationError("GEMINI_API_KEY (or GOOGLE_API_KEY) environment variable is not set.")
        return GeminiSummarizer(api_key=config["gemini_api_key"], model=summary_model)
    raise ConfigurationError(f"Unknown model provider: {model!r}. Choose 'anthropic', 'openai' or 'gemini'.")


def run_sync(
    collector,
    summarizer,
    publisher,
    cache,
    instructions: str,
    force: bool = False,
    choose_limit: Callable[[int], int] | None = None,
    summary_writer: Callable[[str, str], object] | None = None,
) -> SyncSummary:
    """Summarize and publish every selected merged PR not already in the cache.

    ``choose_limit`` receives the number of merged PRs found and returns how
    many of the most recently updated to process (default: all).
    ``summary_writer(stem, markdown)``, when given, keeps a local copy of each
    summary before it is published.

    Authentication and collection errors propagate; nothing is cached or
    saved in that case. Any error while processing a single PR is logged,
    leaves no cache entry and the loop moves on. The cache is saved once
    more at the end regardless of per-PR failures.
    """
    collector.authenticate()

    console.print("Fetching merged PRs from GitHub...")
    records = collector.fetch_merged()
    total = len(records)
    console.print(f"Found {total} merged PR(s)")

    if force:
        cache.clear()

    limit = choose_limit(total) if choose_limit else total
    records = records[: max(0, min(limit, total))]
    console.print(f"Top {len(records)} PR(s) will be summarized (most recently updated first).")

    summary = SyncSummary(total=total)
    n = len(records)
    try:
        for i, record in enumerate(records, 1):
            stem = pr_to_stem(record)
            prefix = f"[{i}/{n}]"

            if stem in cache:
                console.print(f"{prefix} {escape(stem)} -> cached")
                summary.results.append(PRResult(stem=stem, status=CACHED))
                continue

            try:
                console.print(f"{prefix} {escape(record.repo_full_name)} #{record.number} - enriching...")
                enriched = collector.enrich(record)
                payload = build_llm_payload(enriched)
                markdown = summarizer.summarize(payload, instructions)
                if summary_writer is not None:
                    summary_writer(stem, markdown)
                marker = publisher.publish(stem, markdown)
            except Exception as e:
                logger.error("%s failed: %s", stem, e)
                console.print(f"[red]{prefix} {escape(stem)} FAILED: {escape(str(e))}[/red]")
                summary.results.append(PRResult(stem=stem, status=FAILED, error=str(e)))
                continue

            cache.mark(stem, marker)
            cache.save()
            console.print(f"{prefix} {escape(stem)} -> published")
            summary.results.append(PRResult(stem=stem, status=PROCESSED, marker=marker))
    finally:
        cache.save()

    return summary
