"""Stable per-PR identity used as cache key, filename and display-title basis.

The stem must be derivable from PR state alone: the same repository, number
and merge date always produce the same string, on any machine, in any run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prmemory_core.models import PullRequestRecord

UNKNOWN = "unknown"


def make_stem(repo_full_name: str | None, number: int, merged_at: str | None) -> str:
    """Build ``{owner}_{repo}_PR{number}_{YYYY-MM-DD}``.

    A missing repository name or merge date is replaced by ``unknown`` in its
    slot rather than raising.
    """
    safe_repo = (repo_full_name or UNKNOWN).replace("/", "_")
    merged = merged_at[:10] if merged_at else UNKNOWN
    return f"{safe_repo}_PR{number}_{merged}"


def pr_to_stem(record: PullRequestRecord) -> str:
    return make_stem(record.repo_full_name, record.number, record.merged_at)

