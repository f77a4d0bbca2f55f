"""Tests for markdown → Notion block conversion."""

from prmemory_store.notion.blocks import (
    RICH_TEXT_LIMIT,
    markdown_to_blocks,
    rich_text,
    stem_to_title,
    summary_section,
)


def _text(block):
    return "".join(rt["text"]["content"] for rt in block[block["type"]]["rich_text"])


class TestMarkdownToBlocks:
    def test_heading_bullet_paragraph(self):
        blocks = markdown_to_blocks("**Problem**\n* bullet one\nplain text")
        assert [b["type"] for b in blocks] == ["heading_2", "bulleted_list_item", "paragraph"]
        assert [_text(b) for b in blocks] == ["Problem", "bullet one", "plain text"]

    def test_dashed_heading(self):
        [block] = markdown_to_blocks("- **Key changes**")
        assert block["type"] == "heading_2"
        assert _text(block) == "Key changes"

    def test_double_star_bullet(self):
        [block] = markdown_to_blocks("** nested item")
        assert block["type"] == "bulleted_list_item"
        assert _text(block) == "nested item"

    def test_blank_lines_skipped_and_lines_trimmed(self):
        blocks = markdown_to_blocks("\n\n   first   \n\n\t\nsecond\n")
        assert [_text(b) for b in blocks] == ["first", "second"]

    def test_empty_summary(self):
        assert markdown_to_blocks("") == []

    def test_block_shape(self):
        [block] = markdown_to_blocks("hello")
        assert block["object"] == "block"
        rt = block["paragraph"]["rich_text"][0]
        assert rt["type"] == "text"
        assert rt["annotations"]["bold"] is False

    def test_long_line_split_into_chunks(self):
        line = "x" * (RICH_TEXT_LIMIT * 2 + 5)
        [block] = markdown_to_blocks(line)
        chunks = block["paragraph"]["rich_text"]
        assert [len(c["text"]["content"]) for c in chunks] == [RICH_TEXT_LIMIT, RICH_TEXT_LIMIT, 5]
        assert _text(block) == line


class TestRichText:
    def test_exact_limit_is_one_chunk(self):
        assert len(rich_text("y" * RICH_TEXT_LIMIT)) == 1

    def test_bold_annotation(self):
        assert rich_text("z", bold=True)[0]["annotations"]["bold"] is True


class TestTitles:
    def test_stem_to_title(self):
        assert stem_to_title("acme_widgets_PR42_2024-03-05") == "acme / widgets / PR42 / 2024 03 05"

    def test_hyphenated_repo(self):
        assert stem_to_title("acme_my-repo_PR1_unknown") == "acme / my repo / PR1 / unknown"

    def test_summary_section_wraps_blocks(self):
        blocks = summary_section("acme_widgets_PR42_2024-03-05", "**Problem**\n* one")
        assert [b["type"] for b in blocks] == ["heading_2", "heading_2", "bulleted_list_item", "divider"]
        assert _text(blocks[0]) == "acme / widgets / PR42 / 2024 03 05"
        assert blocks[-1] == {"object": "block", "type": "divider", "divider": {}}
