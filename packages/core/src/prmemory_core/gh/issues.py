"""Resolve ``#N`` references from a PR body to issue titles and bodies."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from prmemory_core.gh.pull_request import get_issue_stub
from prmemory_core.models import LinkedIssueStub

logger = logging.getLogger(__name__)


def _resolve_one(repo, number: int) -> LinkedIssueStub:
    try:
        return get_issue_stub(repo, number)
    except Exception as e:
        # Not found, no access, rate-limited, or a reference to another repo:
        # the reference stays in the payload with no title/body.
        logger.warning("Could not fetch issue #%d: %s", number, e)
        return LinkedIssueStub(number=number)


def resolve_linked_issues(repo, numbers: list[int], max_workers: int = 4) -> tuple[LinkedIssueStub, ...]:
    """Fetch every referenced issue concurrently; output order matches ``numbers``.

    Each distinct number is fetched once. Repeated references still produce
    one stub per occurrence, so the result is identical to fetching each
    occurrence separately.
    """
    if not numbers:
        return ()

    unique = list(dict.fromkeys(numbers))
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(unique)))) as executor:
        stubs = dict(zip(unique, executor.map(lambda n: _resolve_one(repo, n), unique)))

    return tuple(stubs[n] for n in numbers)
