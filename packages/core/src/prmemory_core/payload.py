"""Assemble the summarizer input document for one enriched pull request.

Review comments on the same lines carry the same ``diff_hunk`` text, often
many times over. The payload stores each distinct hunk once in ``diffHunks``
and rewrites every comment to point at it by id, so the document grows with
the number of unique hunks rather than the number of comments.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prmemory_core.models import EnrichedPullRequest, ReviewComment


def build_hunk_table(comments: tuple[ReviewComment, ...] | list[ReviewComment]) -> tuple[dict[str, str], dict[str, str]]:
    """Assign ``hunk_N`` ids to distinct diff hunks in first-seen order.

    Returns ``(hunk_to_id, id_to_hunk)``. Comments without a hunk are ignored.
    """
    hunk_to_id: dict[str, str] = {}
    id_to_hunk: dict[str, str] = {}
    for comment in comments:
        hunk = comment.diff_hunk
        if not hunk or hunk in hunk_to_id:
            continue
        hunk_id = f"hunk_{len(hunk_to_id) + 1}"
        hunk_to_id[hunk] = hunk_id
        id_to_hunk[hunk_id] = hunk
    return hunk_to_id, id_to_hunk


def build_llm_payload(pr: EnrichedPullRequest) -> dict:
    """Return the JSON-serialisable document handed to the summarizer.

    Key names are camelCase because the summary prompt refers to them
    (``hunkRef``, ``diffHunks``). ``diffHunks`` is omitted entirely when no
    comment carried diff context.
    """
    record = pr.record

    linked_issues = [{"number": i.number, "title": i.title, "body": i.body} for i in pr.linked_issues]

    files_and_patches = [
        {
            "filename": f.filename,
            "status": f.status,
            "additions": f.additions,
            "deletions": f.deletions,
            "patch": f.patch or None,
        }
        for f in pr.files
    ]

    hunk_to_id, diff_hunks = build_hunk_table(pr.review_comments)

    comments = []
    for c in pr.review_comments:
        out = {"path": c.path, "body": c.body}
        if c.diff_hunk:
            out["hunkRef"] = hunk_to_id[c.diff_hunk]
        comments.append(out)

    payload = {
        "linkedIssues": linked_issues,
        "metadata": {
            "title": record.title,
            "body": record.body or "",
            "mergedAt": record.merged_at,
            "number": record.number,
            "htmlUrl": record.html_url,
        },
        "filesAndPatches": files_and_patches,
        "comments": comments,
    }
    if diff_hunks:
        payload["diffHunks"] = diff_hunks
    return payload
