"""Pull request data model.

Records are built once from GitHub API objects and never mutated afterwards,
so every downstream step (stem derivation, payload assembly, export) sees the
same snapshot of a pull request.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PullRequestRecord:
    """A merged pull request as returned by the GitHub API.

    ``merged_at`` is an ISO-8601 UTC timestamp. The collector never emits a
    record without one; the field stays optional so stem derivation can
    degrade instead of failing on hand-built records.
    """

    repo_full_name: str  # base repository, "owner/name"
    number: int
    title: str
    body: str | None
    created_at: str | None
    merged_at: str | None
    html_url: str | None = None
    api_url: str | None = None

    @property
    def owner(self) -> str:
        return self.repo_full_name.split("/", 1)[0] if self.repo_full_name else ""

    @property
    def repo(self) -> str:
        return self.repo_full_name.split("/", 1)[-1] if self.repo_full_name else ""


@dataclass(frozen=True)
class ChangedFile:
    """One entry of the PR's changed-file list."""

    filename: str
    status: str
    additions: int
    deletions: int
    patch: str | None = None


@dataclass(frozen=True)
class ReviewComment:
    """An inline review comment; ``diff_hunk`` is the diff context GitHub attaches to it."""

    path: str
    body: str
    diff_hunk: str | None = None


@dataclass(frozen=True)
class LinkedIssueStub:
    """An issue referenced from the PR body. Title and body are None when the lookup failed."""

    number: int
    title: str | None = None
    body: str | None = None


@dataclass(frozen=True)
class EnrichedPullRequest:
    """A PullRequestRecord plus its independently fetched facets.

    Each facet degrades to its empty value on fetch failure (``diff`` to None,
    the lists to empty) without affecting the others.
    """

    record: PullRequestRecord
    diff: str | None = None
    files: tuple[ChangedFile, ...] = field(default_factory=tuple)
    review_comments: tuple[ReviewComment, ...] = field(default_factory=tuple)
    linked_issues: tuple[LinkedIssueStub, ...] = field(default_factory=tuple)
