"""Convert summary markdown to Notion block objects.

Only three line shapes are recognised, matching what the summary prompt asks
the model to produce:

  **Heading** or - **Heading**   → heading_2
  * item / ** item               → bulleted_list_item
  anything else that isn't blank → paragraph

Notion caps a single rich-text object at 2000 characters, so longer lines
are split across several text objects inside the same block.
"""

from __future__ import annotations

import re

RICH_TEXT_LIMIT = 2000

_HEADING_RE = re.compile(r"^(?:-\s*)?\*\*(.+?)\*\*\s*$")
_BULLET_RE = re.compile(r"^\*+\s*(.+)$")


def stem_to_title(stem: str) -> str:
    """Display title for a PR stem: underscores become " / ", then hyphens become spaces."""
    return stem.replace("_", " / ").replace("-", " ")


def rich_text(content: str, bold: bool = False) -> list[dict]:
    return [
        {
            "type": "text",
            "text": {"content": content[i : i + RICH_TEXT_LIMIT], "link": None},
            "annotations": {
                "bold": bold,
                "italic": False,
                "strikethrough": False,
                "underline": False,
                "code": False,
                "color": "default",
            },
        }
        for i in range(0, len(content), RICH_TEXT_LIMIT)
    ]


def text_block(block_type: str, content: str) -> dict:
    return {"object": "block", "type": block_type, block_type: {"rich_text": rich_text(content)}}


def divider_block() -> dict:
    return {"object": "block", "type": "divider", "divider": {}}


def markdown_to_blocks(markdown: str) -> list[dict]:
    blocks = []
    for line in markdown.splitlines():
        trimmed = line.strip()
        if not trimmed:
            continue

        heading = _HEADING_RE.match(trimmed)
        if heading:
            blocks.append(text_block("heading_2", heading.group(1)))
            continue

        bullet = _BULLET_RE.match(trimmed)
        if bullet:
            blocks.append(text_block("bulleted_list_item", bullet.group(1)))
            continue

        blocks.append(text_block("paragraph", trimmed))
    return blocks


def summary_section(stem: str, markdown: str) -> list[dict]:
    """Blocks appended to a shared page for one PR: title heading, summary, divider."""
    return [text_block("heading_2", stem_to_title(stem)), *markdown_to_blocks(markdown), divider_block()]
