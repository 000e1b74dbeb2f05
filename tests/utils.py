"""Test utilities for the lark2md test suite.

This module provides factories for Lark blocks (both typed ``Block``
objects and raw open-API dictionaries), a fake asset fetcher, and
temporary directory helpers.
"""

import shutil
import tempfile
from pathlib import Path
from typing import Any, Optional

from lark2md.blocks import (
    Block,
    BlockDocument,
    BlockType,
    CellMerge,
    ImageBlock,
    ListItemBlock,
    Mark,
    PageBlock,
    TableBlock,
    TextBlock,
    TextRun,
)
from lark2md.blocks.model import HeadingBlock

# Smallest valid PNG, used as a fake asset payload
MINIMAL_PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x04\x00\x00\x00\xb5\x1c\x0c\x02"
    b"\x00\x00\x00\x0bIDATx\xdac\xfc\xff\x1f\x00\x03\x03\x02\x00\xef\xa2\xa7[\x00\x00\x00\x00IEND\xaeB`\x82"
)


# =============================================================================
# Typed block factories
# =============================================================================


def run(text: str, *marks: Mark, link: Optional[str] = None, color: Optional[int] = None) -> TextRun:
    """Build a text run; passing ``color`` implies the highlight mark."""
    mark_set = set(marks)
    if color is not None:
        mark_set.add(Mark.HIGHLIGHT)
    return TextRun(text, frozenset(mark_set), link, color)


def page(*children: str, block_id: str = "page", title: str = "") -> PageBlock:
    """Build a PAGE block with the given child ids."""
    return PageBlock(block_id, children=tuple(children), title=(TextRun(title),) if title else ())


def text(block_id: str, *elements: Any, children: tuple[str, ...] = ()) -> TextBlock:
    """Build a TEXT block; plain strings become unstyled runs."""
    return TextBlock(block_id, children=children, elements=_elements(elements))


def heading(block_id: str, level: int, content: str) -> HeadingBlock:
    """Build a HEADING block of source level 1-9."""
    return HeadingBlock(block_id, block_type=BlockType(BlockType.HEADING1 + level - 1), elements=(TextRun(content),))


def bullet(block_id: str, content: str, children: tuple[str, ...] = ()) -> ListItemBlock:
    """Build a BULLET list item."""
    return ListItemBlock(block_id, block_type=BlockType.BULLET, children=children, elements=(TextRun(content),))


def ordered(block_id: str, content: str, sequence: str = "auto", children: tuple[str, ...] = ()) -> ListItemBlock:
    """Build an ORDERED list item."""
    return ListItemBlock(
        block_id, block_type=BlockType.ORDERED, children=children, elements=(TextRun(content),), sequence=sequence
    )


def todo(block_id: str, content: str, done: bool = False) -> ListItemBlock:
    """Build a TODO list item."""
    return ListItemBlock(block_id, block_type=BlockType.TODO, elements=(TextRun(content),), done=done)


def container(block_id: str, block_type: BlockType, *children: str) -> Block:
    """Build a payload-less block (GRID, QUOTE_CONTAINER, TABLE_CELL, ...)."""
    return Block(block_id, block_type=block_type, children=tuple(children))


def image(block_id: str, token: Optional[str] = "tok", **kwargs: Any) -> ImageBlock:
    """Build an IMAGE block."""
    return ImageBlock(block_id, token=token, **kwargs)


def table(
    block_id: str,
    cells: list[str],
    rows: Optional[int] = None,
    cols: Optional[int] = None,
    merges: Optional[list[CellMerge]] = None,
) -> TableBlock:
    """Build a TABLE block whose cells are TABLE_CELL ids."""
    return TableBlock(
        block_id,
        children=tuple(cells),
        cells=tuple(cells),
        row_size=rows,
        column_size=cols,
        merge_info=tuple(merges or ()),
    )


def table_cells(prefix: str, contents: list[str]) -> list[Block]:
    """Build TABLE_CELL blocks (``{prefix}{i}``) each holding one TEXT block."""
    blocks: list[Block] = []
    for i, content in enumerate(contents):
        cell_id = f"{prefix}{i}"
        blocks.append(container(cell_id, BlockType.TABLE_CELL, f"{cell_id}t"))
        blocks.append(text(f"{cell_id}t", content))
    return blocks


def document(*blocks: Block, root_id: Optional[str] = None) -> BlockDocument:
    """Index blocks into a ``BlockDocument``."""
    return BlockDocument(blocks, root_id=root_id)


def _elements(elements: tuple[Any, ...]) -> tuple[Any, ...]:
    return tuple(TextRun(e) if isinstance(e, str) else e for e in elements)


# =============================================================================
# Raw open-API payloads
# =============================================================================


def raw_text_elements(*runs: tuple[str, dict[str, Any]]) -> list[dict[str, Any]]:
    """Build raw ``elements`` from ``(content, text_element_style)`` pairs."""
    return [{"text_run": {"content": content, "text_element_style": style}} for content, style in runs]


def sample_snapshot() -> list[dict[str, Any]]:
    """A small document exercising most supported block types."""
    return [
        {
            "block_id": "doxc1",
            "block_type": 1,
            "children": ["h1", "p1", "b1", "b2", "o1", "code1", "img1", "tbl", "div", "sheet"],
            "page": {"elements": raw_text_elements(("Release Notes", {}))},
        },
        {"block_id": "h1", "block_type": 3, "parent_id": "doxc1",
         "heading1": {"elements": raw_text_elements(("Overview", {}))}},
        {
            "block_id": "p1",
            "block_type": 2,
            "parent_id": "doxc1",
            "text": {
                "elements": raw_text_elements(
                    ("Read the ", {}),
                    ("guide", {"bold": True, "link": {"url": "https%3A%2F%2Fexample.com%2Fguide"}}),
                    (" today", {}),
                )
            },
        },
        {"block_id": "b1", "block_type": 12, "parent_id": "doxc1",
         "bullet": {"elements": raw_text_elements(("alpha", {}))}},
        {"block_id": "b2", "block_type": 12, "parent_id": "doxc1",
         "bullet": {"elements": raw_text_elements(("beta", {"italic": True}))}},
        {"block_id": "o1", "block_type": 13, "parent_id": "doxc1",
         "ordered": {"elements": raw_text_elements(("first", {})), "style": {"sequence": "1"}}},
        {"block_id": "code1", "block_type": 14, "parent_id": "doxc1",
         "code": {"elements": raw_text_elements(("print('hi')", {})), "style": {"language": 49}}},
        {"block_id": "img1", "block_type": 27, "parent_id": "doxc1",
         "image": {"token": "imgtok", "width": 640, "height": 480}},
        {
            "block_id": "tbl",
            "block_type": 31,
            "parent_id": "doxc1",
            "children": ["c1", "c2", "c3", "c4"],
            "table": {"cells": ["c1", "c2", "c3", "c4"], "property": {"row_size": 2, "column_size": 2}},
        },
        {"block_id": "c1", "block_type": 32, "children": ["c1t"], "table_cell": {}},
        {"block_id": "c2", "block_type": 32, "children": ["c2t"], "table_cell": {}},
        {"block_id": "c3", "block_type": 32, "children": ["c3t"], "table_cell": {}},
        {"block_id": "c4", "block_type": 32, "children": ["c4t"], "table_cell": {}},
        {"block_id": "c1t", "block_type": 2, "text": {"elements": raw_text_elements(("Name", {}))}},
        {"block_id": "c2t", "block_type": 2, "text": {"elements": raw_text_elements(("Value", {}))}},
        {"block_id": "c3t", "block_type": 2, "text": {"elements": raw_text_elements(("a", {}))}},
        {"block_id": "c4t", "block_type": 2, "text": {"elements": raw_text_elements(("1", {}))}},
        {"block_id": "div", "block_type": 22, "parent_id": "doxc1", "divider": {}},
        {"block_id": "sheet", "block_type": 30, "parent_id": "doxc1", "sheet": {"token": "shtcn"}},
    ]


class FakeFetcher:
    """Asset fetcher recording every call; tokens in ``failing`` raise."""

    def __init__(self, failing: tuple[str, ...] = ()):
        self.failing = failing
        self.calls: list[tuple[str, str, BlockType]] = []

    async def fetch_sources(self, token: str, block_type: BlockType) -> dict[str, str]:
        self.calls.append(("sources", token, block_type))
        return {"url": f"https://cdn.example.com/{token}"}

    async def fetch_blob(self, token: str, block_type: BlockType) -> bytes:
        self.calls.append(("blob", token, block_type))
        if token in self.failing:
            raise ConnectionError(f"cannot download {token}")
        return MINIMAL_PNG_BYTES


# =============================================================================
# Filesystem helpers
# =============================================================================


def create_test_temp_dir() -> Path:
    """Create a temporary directory for test files."""
    return Path(tempfile.mkdtemp())


def cleanup_test_dir(temp_dir: Path) -> None:
    """Clean up test directory and files."""
    if temp_dir.exists():
        shutil.rmtree(temp_dir)
