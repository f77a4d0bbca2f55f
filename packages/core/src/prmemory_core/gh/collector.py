"""Collect the authenticated user's merged pull requests and enrich them.

Search results are issue-shaped and can lag behind reality, so every hit is
resolved to its full pull request and re-checked for a merge timestamp.

Enrichment fans out three independent reads per PR (unified diff, changed
files, review comments). Each branch carries its own fallback: a failing
branch yields its empty value and the other two are unaffected.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, TypeVar

import requests

from prmemory_core.gh.issues import resolve_linked_issues
from prmemory_core.gh.pull_request import (
    DIFF_MEDIA_TYPE,
    get_authenticated_login,
    get_changed_files,
    get_client,
    get_review_comments,
    pull_api_url,
    search_merged,
    to_record,
)
from prmemory_core.models import EnrichedPullRequest, PullRequestRecord
from prmemory_core.stem import pr_to_stem
from prmemory_core.utils.refs import extract_linked_issues

logger = logging.getLogger(__name__)

T = TypeVar("T")

PAGE_SIZE = 30


def _fetch_or_default(label: str, stem: str, fetch: Callable[[], T], default: T) -> T:
    try:
        return fetch()
    except Exception as e:
        logger.warning("Could not fetch %s for %s: %s", label, stem, e)
        return default


class PullRequestCollector:
    """Reads merged PRs and their facets from GitHub.

    ``gh`` must be configured with ``per_page == page_size``; pagination
    stops on the first page shorter than ``page_size``. Use
    ``PullRequestCollector.from_token`` to get a matching client.
    """

    def __init__(
        self,
        gh,
        token: str,
        page_size: int = PAGE_SIZE,
        max_workers: int = 4,
        http_timeout: int = 30,
        session: requests.Session | None = None,
    ):
        self._gh = gh
        self._page_size = page_size
        self._max_workers = max_workers
        self._http_timeout = http_timeout
        self._session = session or requests.Session()
        self._session.headers.update({"Authorization": f"Bearer {token}", "Accept": DIFF_MEDIA_TYPE})
        # Full PR objects seen during fetch_merged, keyed by (repo, number),
        # so enrich() doesn't have to fetch them a second time.
        self._pulls: dict[tuple[str, int], object] = {}
        self.login: str | None = None

    @classmethod
    def from_token(cls, token: str, config: dict) -> PullRequestCollector:
        page_size = config.get("page_size", PAGE_SIZE)
        timeout = config.get("http_timeout", 30)
        return cls(
            get_client(token, per_page=page_size, timeout=timeout),
            token,
            page_size=page_size,
            max_workers=config.get("max_workers", 4),
            http_timeout=timeout,
        )

    # ------------------------------------------------------------------ #
    # Collection                                                           #
    # ------------------------------------------------------------------ #

    def authenticate(self) -> str:
        self.login = get_authenticated_login(self._gh)
        logger.info("Authenticated as %s", self.login)
        return self.login

    def fetch_merged(self) -> list[PullRequestRecord]:
        """Return merged PRs authored by the token's user, most recently updated first."""
        login = self.login or self.authenticate()
        results = search_merged(self._gh, login)

        records: list[PullRequestRecord] = []
        page = 0
        while True:
            logger.info("Searching merged PRs (page %d)...", page + 1)
            items = results.get_page(page)
            if not items:
                break

            for item in items:
                pull = self._resolve_hit(item)
                if pull is None or pull.merged_at is None:
                    continue
                record = to_record(pull)
                self._pulls[(record.repo_full_name, record.number)] = pull
                records.append(record)

            if len(items) < self._page_size:
                break
            page += 1

        return records

    def _resolve_hit(self, item):
        try:
            return item.as_pull_request()
        except Exception as e:
            logger.warning("Could not resolve search hit #%s (%s): %s", item.number, item.repository_url, e)
            return None

    # ------------------------------------------------------------------ #
    # Enrichment                                                           #
    # ------------------------------------------------------------------ #

    def get_diff_text(self, record: PullRequestRecord) -> str:
        response = self._session.get(pull_api_url(record), timeout=self._http_timeout)
        response.raise_for_status()
        return response.text

    def _get_pull(self, record: PullRequestRecord):
        key = (record.repo_full_name, record.number)
        if key not in self._pulls:
            self._pulls[key] = self._gh.get_repo(record.repo_full_name).get_pull(record.number)
        return self._pulls[key]

    def enrich(self, record: PullRequestRecord) -> EnrichedPullRequest:
        """Attach diff, changed files, review comments and linked issues to ``record``."""
        stem = pr_to_stem(record)
        pull = self._get_pull(record)

        with ThreadPoolExecutor(max_workers=3) as executor:
            diff_future = executor.submit(_fetch_or_default, "diff", stem, lambda: self.get_diff_text(record), None)
            files_future = executor.submit(_fetch_or_default, "changed files", stem, lambda: get_changed_files(pull), ())
            comments_future = executor.submit(
                _fetch_or_default, "review comments", stem, lambda: get_review_comments(pull), ()
            )
            diff = diff_future.result()
            files = files_future.result()
            comments = comments_future.result()

        refs = extract_linked_issues(record.body)
        if refs:
            logger.info("Fetching %d linked issue(s) for %s", len(refs), stem)
        linked = resolve_linked_issues(pull.base.repo, refs, self._max_workers)

        return EnrichedPullRequest(
            record=record,
            diff=diff,
            files=files,
            review_comments=comments,
            linked_issues=linked,
        )
