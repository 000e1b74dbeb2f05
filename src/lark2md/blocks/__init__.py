#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/blocks/__init__.py
"""Lark docx block model.

This package describes the source side of a conversion: the block type
tags and capability sets, the inline element model, the typed block
variants with their id index, and a loader for open-API JSON snapshots.
"""

from lark2md.blocks.inline import Equation, InlineElement, MentionDoc, MentionUser, TextRun, plain_text
from lark2md.blocks.loader import AssetFetcher, load_block_document, parse_block
from lark2md.blocks.model import (
    AssetAccessor,
    AssetBlock,
    Block,
    BlockDocument,
    CalloutBlock,
    CellMerge,
    DiagramBlock,
    FileBlock,
    GridColumnBlock,
    HeadingBlock,
    IframeBlock,
    ImageBlock,
    IsvBlock,
    ListItemBlock,
    PageBlock,
    SourceCodeBlock,
    TableBlock,
    TextBlock,
    WhiteboardBlock,
)
from lark2md.blocks.types import (
    CONDITIONAL_TYPES,
    CONTAINER_TYPES,
    DEFERRED_ASSET_TYPES,
    INLINE_CONTENT_TYPES,
    UNSUPPORTED_TYPES,
    BlockType,
    Mark,
    has_deferred_asset,
    has_inline_content,
    is_container,
)

__all__ = [
    # Types and capabilities
    "BlockType",
    "Mark",
    "CONDITIONAL_TYPES",
    "CONTAINER_TYPES",
    "DEFERRED_ASSET_TYPES",
    "INLINE_CONTENT_TYPES",
    "UNSUPPORTED_TYPES",
    "is_container",
    "has_inline_content",
    "has_deferred_asset",
    # Inline elements
    "TextRun",
    "MentionUser",
    "MentionDoc",
    "Equation",
    "InlineElement",
    "plain_text",
    # Blocks
    "AssetAccessor",
    "Block",
    "PageBlock",
    "TextBlock",
    "HeadingBlock",
    "ListItemBlock",
    "SourceCodeBlock",
    "CalloutBlock",
    "CellMerge",
    "TableBlock",
    "GridColumnBlock",
    "AssetBlock",
    "ImageBlock",
    "FileBlock",
    "WhiteboardBlock",
    "DiagramBlock",
    "IframeBlock",
    "IsvBlock",
    "BlockDocument",
    # Loading
    "AssetFetcher",
    "load_block_document",
    "parse_block",
]
