from __future__ import annotations

import re

_ISSUE_REF_RE = re.compile(r"#(\d+)")


def extract_linked_issues(text: str | None) -> list[int]:
    """Return every ``#<digits>`` reference in ``text``, in order, duplicates included.

    No validation happens here: "#3" in "step #3" is returned like "Fixes #3".
    The issue resolver decides whether a reference points at a real issue.
    """
    if not text:
        return []
    return [int(m.group(1)) for m in _ISSUE_REF_RE.finditer(text)]
