"""Shared summarizer flow; providers only supply the single model call.

    summarize(payload, instructions)
        → _build_prompt()        instructions followed by the fenced JSON payload
        → _call_with_retry()     up to MAX_RETRIES attempts, backoff 1s, 2s, ...
            → _call_api()        one request to the provider SDK

A summary that comes back empty is treated as a failure, the same as an
exception from the SDK, so the coordinator never caches a PR without text.
"""

from __future__ import annotations

import json
import logging
import time
from abc import ABC, abstractmethod

from prmemory_core.errors import SummarizerError

logger = logging.getLogger(__name__)


class BaseSummarizer(ABC):
    MODEL: str = ""
    MAX_RETRIES: int = 3
    MAX_TOKENS: int = 4096

    def __init__(self, model: str | None = None):
        self.model = model or self.MODEL

    @property
    def name(self) -> str:
        return self.__class__.__name__

    def summarize(self, payload: dict, instructions: str) -> str:
        """Return the markdown summary for one PR payload.

        Raises SummarizerError when every attempt fails or the model returns
        no text.
        """
        text = self._call_with_retry(self._build_prompt(payload, instructions))
        if not text or not text.strip():
            raise SummarizerError(f"{self.name} returned an empty summary.")
        return text.strip()

    @abstractmethod
    def _call_api(self, prompt: str) -> str:
        """Send ``prompt`` once and return the model's text. Raise on any failure."""

    def _call_with_retry(self, prompt: str) -> str:
        last_error: Exception | None = None
        for attempt in range(1, self.MAX_RETRIES + 1):
            try:
                return self._call_api(prompt)
            except Exception as e:
                last_error = e
                if attempt == self.MAX_RETRIES:
                    break
                delay = 2 ** (attempt - 1)
                logger.warning(
                    "%s summary request failed (%d/%d): %s; next attempt in %ds",
                    self.name,
                    attempt,
                    self.MAX_RETRIES,
                    e,
                    delay,
                )
                time.sleep(delay)

        logger.error("%s gave up after %d attempts: %s", self.name, self.MAX_RETRIES, last_error)
        raise SummarizerError(f"{self.name} API failed: {last_error}") from last_error

    def _build_prompt(self, payload: dict, instructions: str) -> str:
        return f"{instructions.rstrip()}\n\n```json\n{json.dumps(payload, indent=2)}\n```"
