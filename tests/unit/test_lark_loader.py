#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/test_lark_loader.py
"""Unit tests for loading Lark open-API block snapshots.

Tests cover:
- Accepted payload shapes (response envelope, bare list, JSON text, files)
- Lenient handling of malformed and unknown blocks
- Text element styles, mentions, equations and reminders
- Type-specific payloads (code, table, assets)
- Binding of deferred asset accessors

"""

import asyncio
import json

import pytest
from utils import FakeFetcher, raw_text_elements, sample_snapshot

from lark2md.blocks import (
    BlockType,
    Equation,
    ImageBlock,
    MentionDoc,
    MentionUser,
    TableBlock,
    TextRun,
    load_block_document,
    parse_block,
)
from lark2md.blocks.loader import parse_text_style
from lark2md.blocks.types import Mark
from lark2md.exceptions import MalformedFileError


def _text_block(elements):
    return {"block_id": "t", "block_type": 2, "text": {"elements": elements}}


@pytest.mark.unit
class TestPayloadShapes:
    """Tests for the accepted input shapes."""

    def test_response_envelope(self):
        """Test the open-API response form."""
        doc = load_block_document({"code": 0, "data": {"items": sample_snapshot()}})
        assert doc.root_id == "doxc1"
        assert "c4t" in doc

    def test_bare_list(self):
        """Test a bare list of block objects."""
        assert len(load_block_document(sample_snapshot())) == len(sample_snapshot())

    def test_json_text(self):
        """Test a JSON string."""
        doc = load_block_document(json.dumps(sample_snapshot()))
        assert doc.root.block_type is BlockType.PAGE

    def test_json_file(self, snapshot_file):
        """Test a path to a JSON file."""
        assert load_block_document(snapshot_file).root_id == "doxc1"

    def test_invalid_json(self):
        """Test text that is not JSON raises MalformedFileError."""
        with pytest.raises(MalformedFileError):
            load_block_document("{not json")

    def test_no_block_list(self):
        """Test a JSON object without a block list raises MalformedFileError."""
        with pytest.raises(MalformedFileError, match="list of blocks"):
            load_block_document({"data": {"page_token": "x"}})

    def test_explicit_root_id(self):
        """Test the root id can be given explicitly."""
        assert load_block_document(sample_snapshot(), root_id="h1").root.block_id == "h1"


@pytest.mark.unit
class TestLenientParsing:
    """Tests for lenient handling of odd blocks."""

    def test_block_without_id_skipped(self):
        """Test blocks without block_id are dropped."""
        doc = load_block_document([{"block_type": 2}, {"block_id": "p", "block_type": 1}])
        assert len(doc) == 1

    def test_non_object_entries_skipped(self):
        """Test list entries that are not objects are dropped."""
        doc = load_block_document(["junk", 3, {"block_id": "p", "block_type": 1}])
        assert len(doc) == 1

    def test_unknown_type_is_fallback(self):
        """Test unknown block_type numbers map to FALLBACK."""
        block = parse_block({"block_id": "x", "block_type": 777, "children": ["a"]})
        assert block.block_type is BlockType.FALLBACK
        assert block.children == ("a",)

    def test_missing_payload(self):
        """Test a block missing its payload gets absent values."""
        block = parse_block({"block_id": "t", "block_type": 2})
        assert block.elements == ()

    def test_non_string_children_dropped(self):
        """Test child lists keep only string ids."""
        block = parse_block({"block_id": "p", "block_type": 1, "children": ["a", 5, None, "b"]})
        assert block.children == ("a", "b")

    @pytest.mark.parametrize("children", [5, "abc", {"a": 1}, True])
    def test_mistyped_children_ignored(self, children):
        """Test a children field that is not a list yields no children."""
        doc = load_block_document([{"block_id": "p", "block_type": 1, "children": children}])
        assert doc["p"].children == ()

    def test_mistyped_table_fields_ignored(self):
        """Test non-list cells and merge_info are treated as absent."""
        raw = {
            "block_id": "t",
            "block_type": 31,
            "table": {"cells": "ab", "property": {"row_size": 1, "column_size": 2, "merge_info": 7}},
        }
        block = parse_block(raw)
        assert isinstance(block, TableBlock)
        assert block.cells == ()
        assert block.merge_info == ()
        assert block.row_size == 1


@pytest.mark.unit
class TestTextElements:
    """Tests for text element parsing."""

    def test_text_styles(self):
        """Test style flags become marks."""
        block = parse_block(
            _text_block(raw_text_elements(("x", {"bold": True, "italic": True, "inline_code": True, "underline": 1})))
        )
        (run,) = block.elements
        assert run.marks == frozenset({Mark.BOLD, Mark.ITALIC, Mark.INLINE_CODE})

    def test_link_is_decoded(self):
        """Test percent-encoded link targets are decoded."""
        marks, link, color = parse_text_style({"link": {"url": "https%3A%2F%2Fexample.com%2Fa%3Fb%3D1"}})
        assert link == "https://example.com/a?b=1"
        assert marks == frozenset()
        assert color is None

    def test_background_colour_is_highlight(self):
        """Test a positive background colour adds the highlight mark."""
        marks, _, color = parse_text_style({"background_color": 5})
        assert Mark.HIGHLIGHT in marks
        assert color == 5

    def test_zero_background_colour_ignored(self):
        """Test background colour 0 is not a highlight."""
        marks, _, color = parse_text_style({"background_color": 0})
        assert marks == frozenset()
        assert color is None

    def test_mentions_and_equation(self):
        """Test mention and equation elements."""
        elements = [
            {"mention_user": {"user_id": "ou_1", "name": "Ada"}},
            {"mention_doc": {"token": "doxc", "title": "Plan", "url": "https%3A%2F%2Fl.test%2Fdoxc", "obj_type": 22}},
            {"equation": {"content": "E=mc^2\n"}},
            {"file": {"file_token": "x"}},
        ]
        block = parse_block(_text_block(elements))
        assert block.elements == (
            MentionUser(user_id="ou_1", name="Ada"),
            MentionDoc(token="doxc", title="Plan", url="https://l.test/doxc", obj_type=22),
            Equation("E=mc^2"),
        )

    def test_reminder_becomes_date(self):
        """Test reminders become their date as plain text."""
        block = parse_block(_text_block([{"reminder": {"expire_time": "1700000000000"}}]))
        assert block.elements == (TextRun("2023-11-14"),)

    @pytest.mark.parametrize("expire_time", [10**30, -(10**30), "9" * 40])
    def test_out_of_range_reminder_skipped(self, expire_time):
        """Test reminders whose time cannot be represented are dropped."""
        block = parse_block(_text_block([{"reminder": {"expire_time": expire_time}}, {"text_run": {"content": "x"}}]))
        assert block.elements == (TextRun("x"),)


@pytest.mark.unit
class TestTypedPayloads:
    """Tests for type-specific payloads."""

    def test_heading_level(self):
        """Test headings read their payload key by level."""
        block = parse_block({"block_id": "h", "block_type": 5, "heading3": {"elements": raw_text_elements(("H", {}))}})
        assert block.level == 3
        assert block.elements == (TextRun("H"),)

    @pytest.mark.parametrize("code,expected", [(49, "python"), (1, ""), (9999, "")])
    def test_code_language(self, code, expected):
        """Test code language numbers map to fence info strings."""
        block = parse_block({"block_id": "c", "block_type": 14, "code": {"style": {"language": code}}})
        assert block.language == expected

    def test_code_without_language(self):
        """Test a missing language stays absent."""
        assert parse_block({"block_id": "c", "block_type": 14, "code": {}}).language is None

    def test_list_item_style(self):
        """Test ordered sequence and todo state."""
        ordered = parse_block({"block_id": "o", "block_type": 13, "ordered": {"style": {"sequence": "3"}}})
        todo = parse_block({"block_id": "d", "block_type": 17, "todo": {"style": {"done": True}}})
        assert ordered.sequence == "3"
        assert todo.done is True

    def test_table_payload(self):
        """Test table dimensions, cells and merge info."""
        raw = {
            "block_id": "t",
            "block_type": 31,
            "table": {
                "cells": ["a", "b"],
                "property": {
                    "row_size": 1,
                    "column_size": "2",
                    "merge_info": [{"row_span": 1, "col_span": 2}, {"row_span": 0, "col_span": 0}],
                    "header_row": True,
                },
            },
        }
        block = parse_block(raw)
        assert isinstance(block, TableBlock)
        assert (block.row_size, block.column_size) == (1, 2)
        assert block.cells == ("a", "b")
        assert [(m.row_span, m.col_span) for m in block.merge_info] == [(1, 2), (1, 1)]
        assert block.header_row

    def test_whiteboard_payload_key(self):
        """Test whiteboards read their token from the board payload."""
        block = parse_block({"block_id": "w", "block_type": 43, "board": {"token": "wbt"}})
        assert block.token == "wbt"

    def test_image_payload(self):
        """Test image token and dimensions."""
        block = parse_block(
            {"block_id": "i", "block_type": 27, "image": {"token": "it", "width": 10, "height": "20"}}
        )
        assert isinstance(block, ImageBlock)
        assert (block.token, block.width, block.height) == ("it", 10, 20)
        assert block.fetch_blob is None

    def test_iframe_url_decoded(self):
        """Test iframe urls are decoded."""
        block = parse_block(
            {"block_id": "f", "block_type": 26, "iframe": {"component": {"url": "https%3A%2F%2Fv.test%2F1"}}}
        )
        assert block.url == "https://v.test/1"


@pytest.mark.unit
class TestAccessorBinding:
    """Tests for binding fetcher methods into block accessors."""

    def test_accessors_call_fetcher(self):
        """Test the bound accessors forward the token and block type."""
        fetcher = FakeFetcher()
        doc = load_block_document(sample_snapshot(), fetcher=fetcher)
        block = doc["img1"]

        assert asyncio.run(block.fetch_blob()).startswith(b"\x89PNG")
        assert asyncio.run(block.fetch_sources()) == {"url": "https://cdn.example.com/imgtok"}
        assert fetcher.calls == [("blob", "imgtok", BlockType.IMAGE), ("sources", "imgtok", BlockType.IMAGE)]

    def test_loading_does_not_fetch(self):
        """Test accessors are not invoked while loading."""
        fetcher = FakeFetcher()
        load_block_document(sample_snapshot(), fetcher=fetcher)
        assert fetcher.calls == []

    def test_no_token_no_accessors(self):
        """Test asset blocks without a token get no accessors."""
        block = parse_block({"block_id": "i", "block_type": 27, "image": {}}, FakeFetcher())
        assert block.token is None
        assert block.fetch_sources is None
