#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/blocks/types.py
"""Block type tags and capability sets.

``BlockType`` values are the ``block_type`` numbers of the Lark docx open
API. Behaviour is keyed off a small closed set of capabilities rather than a
class hierarchy: whether a block owns child blocks, whether it carries inline
runs, and whether it refers to a deferred binary asset.
"""

from __future__ import annotations

from enum import Enum, IntEnum


class BlockType(IntEnum):
    """Lark docx block type tags."""

    PAGE = 1
    TEXT = 2
    HEADING1 = 3
    HEADING2 = 4
    HEADING3 = 5
    HEADING4 = 6
    HEADING5 = 7
    HEADING6 = 8
    HEADING7 = 9
    HEADING8 = 10
    HEADING9 = 11
    BULLET = 12
    ORDERED = 13
    CODE = 14
    QUOTE = 15
    TODO = 17
    BITABLE = 18
    CALLOUT = 19
    CHAT_CARD = 20
    DIAGRAM = 21
    DIVIDER = 22
    FILE = 23
    GRID = 24
    GRID_COLUMN = 25
    IFRAME = 26
    IMAGE = 27
    ISV = 28
    MINDNOTE = 29
    SHEET = 30
    TABLE = 31
    TABLE_CELL = 32
    VIEW = 33
    QUOTE_CONTAINER = 34
    WHITEBOARD = 43
    SOURCE_SYNCED = 48
    REFERENCE_SYNCED = 49
    FALLBACK = 999

    @classmethod
    def from_value(cls, value: object) -> "BlockType":
        """Return the tag for a raw ``block_type`` value, FALLBACK if unknown."""
        try:
            return cls(int(value))  # type: ignore[call-overload]
        except (TypeError, ValueError):
            return cls.FALLBACK

    @property
    def heading_level(self) -> int | None:
        """Source heading level 1-9 for HEADING tags, None otherwise."""
        if BlockType.HEADING1 <= self <= BlockType.HEADING9:
            return int(self) - int(BlockType.HEADING1) + 1
        return None


class Mark(Enum):
    """Style marks that can decorate an inline text run."""

    BOLD = "bold"
    ITALIC = "italic"
    STRIKETHROUGH = "strikethrough"
    UNDERLINE = "underline"
    INLINE_CODE = "inline_code"
    HIGHLIGHT = "highlight"


# Innermost first. The link target always wraps the result.
MARK_WRAP_ORDER: tuple[Mark, ...] = (
    Mark.INLINE_CODE,
    Mark.ITALIC,
    Mark.BOLD,
    Mark.STRIKETHROUGH,
    Mark.UNDERLINE,
    Mark.HIGHLIGHT,
)

HEADING_TYPES: frozenset[BlockType] = frozenset(BlockType(v) for v in range(BlockType.HEADING1, BlockType.HEADING9 + 1))

LIST_ITEM_TYPES: frozenset[BlockType] = frozenset({BlockType.BULLET, BlockType.ORDERED, BlockType.TODO})

# Types that never produce a node; their children are not visited.
UNSUPPORTED_TYPES: frozenset[BlockType] = frozenset(
    {BlockType.BITABLE, BlockType.CHAT_CARD, BlockType.MINDNOTE, BlockType.SHEET, BlockType.FALLBACK}
)

# Types whose support depends on a LarkOptions flag, keyed to that flag.
CONDITIONAL_TYPES: dict[BlockType, str] = {
    BlockType.WHITEBOARD: "whiteboard",
    BlockType.DIAGRAM: "diagram",
    BlockType.FILE: "file",
}

# Layout-only containers with no markdown meaning of their own.
LAYOUT_TYPES: frozenset[BlockType] = frozenset(
    {
        BlockType.GRID,
        BlockType.GRID_COLUMN,
        BlockType.VIEW,
        BlockType.SOURCE_SYNCED,
        BlockType.REFERENCE_SYNCED,
    }
)

# Capability: owns child blocks that are transformed as its content.
CONTAINER_TYPES: frozenset[BlockType] = frozenset(
    {
        BlockType.PAGE,
        BlockType.CALLOUT,
        BlockType.QUOTE_CONTAINER,
        BlockType.TABLE,
        BlockType.TABLE_CELL,
    }
    | LAYOUT_TYPES
    | LIST_ITEM_TYPES
)

# Capability: carries a sequence of inline elements.
INLINE_CONTENT_TYPES: frozenset[BlockType] = frozenset(
    {BlockType.PAGE, BlockType.TEXT, BlockType.CODE, BlockType.QUOTE} | HEADING_TYPES | LIST_ITEM_TYPES
)

# Capability: refers to a binary asset fetched later by the caller.
DEFERRED_ASSET_TYPES: frozenset[BlockType] = frozenset(
    {BlockType.IMAGE, BlockType.FILE, BlockType.WHITEBOARD, BlockType.DIAGRAM}
)


def is_container(block_type: BlockType) -> bool:
    """Return True if blocks of this type own child content."""
    return block_type in CONTAINER_TYPES


def has_inline_content(block_type: BlockType) -> bool:
    """Return True if blocks of this type carry inline runs."""
    return block_type in INLINE_CONTENT_TYPES


def has_deferred_asset(block_type: BlockType) -> bool:
    """Return True if blocks of this type refer to a deferred asset."""
    return block_type in DEFERRED_ASSET_TYPES
