"""Local file output: LLM payload exports and summary copies.

Writes go to a temporary sibling file that is then renamed over the target,
so a reader never sees a half-written file.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

SUMMARY_SUFFIX = "_summary.md"


def write_text_atomic(path: str | Path, text: str) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        f.write(text)
    os.replace(tmp, path)
    return path


def write_json_atomic(path: str | Path, data) -> Path:
    return write_text_atomic(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")


def write_payload(out_dir: str | Path, stem: str, payload: dict) -> Path:
    """Write the exact JSON document the summarizer receives to ``{stem}.json``."""
    return write_json_atomic(Path(out_dir) / f"{stem}.json", payload)


def write_summary(out_dir: str | Path, stem: str, markdown: str) -> Path:
    return write_text_atomic(Path(out_dir) / f"{stem}{SUMMARY_SUFFIX}", markdown)


def list_summary_files(summaries_dir: str | Path) -> list[tuple[str, Path]]:
    """Return ``(stem, path)`` for every ``*_summary.md`` in the directory, sorted by name."""
    directory = Path(summaries_dir)
    return [
        (p.name[: -len(SUMMARY_SUFFIX)], p)
        for p in sorted(directory.iterdir())
        if p.is_file() and p.name.endswith(SUMMARY_SUFFIX)
    ]
