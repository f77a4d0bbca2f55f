"""Abstract note-store interface.

A destination turns one PR summary into durable notes and returns a
completion marker for the sync cache. The sync coordinator depends on this
interface, not on a concrete backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class NoteStoreError(Exception):
    """Raised when the note store rejects a request or keeps failing."""


class BaseNoteStore(ABC):
    """Pluggable destination for PR summaries."""

    @abstractmethod
    def publish(self, stem: str, markdown: str) -> object:
        """Write one summary and return its cache marker.

        Must raise on failure; a returned marker is recorded as done.
        """

    @property
    def url(self) -> str | None:
        """Where the published notes can be viewed, if there is a single place."""
        return None

    def close(self) -> None:
        """Release any resources held by the store (sessions, file handles).

        Default is a no-op so callers can always call close() safely.
        """
