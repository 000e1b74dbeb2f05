#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/blocks/model.py
"""Block variants and the document-wide block index.

Blocks are immutable snapshots. A block lists its children by id only; the
``BlockDocument`` owns the id index through which children are resolved.
Every payload field has an "absent" default (``None`` or empty), so a block
missing data is still constructible and is treated as malformed by the
transformer rather than failing here.

Deferred asset accessors (``fetch_sources``/``fetch_blob``) are zero-argument
callables returning awaitables. They are stored as-is and never called by
this package outside :mod:`lark2md.assets`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Iterator, Mapping, Optional

from lark2md.blocks.inline import InlineElement
from lark2md.blocks.types import BlockType
from lark2md.exceptions import InvalidRootError

logger = logging.getLogger(__name__)

AssetAccessor = Callable[[], Awaitable[Any]]


@dataclass(frozen=True)
class Block:
    """Base block: identity, type tag and child references.

    Used directly for variants without a payload (DIVIDER, TABLE_CELL,
    QUOTE_CONTAINER, layout containers and unsupported types).

    Parameters
    ----------
    block_id : str
        Document-unique block id
    block_type : BlockType
        Type tag
    children : tuple of str
        Ordered child block ids
    parent_id : str or None
        Id of the parent block

    """

    block_id: str
    block_type: BlockType = BlockType.FALLBACK
    children: tuple[str, ...] = ()
    parent_id: Optional[str] = None


@dataclass(frozen=True)
class PageBlock(Block):
    """The document root; carries the page title."""

    block_type: BlockType = BlockType.PAGE
    title: tuple[InlineElement, ...] = ()


@dataclass(frozen=True)
class TextBlock(Block):
    """A paragraph (TEXT) or single-block quote (QUOTE)."""

    block_type: BlockType = BlockType.TEXT
    elements: tuple[InlineElement, ...] = ()


@dataclass(frozen=True)
class HeadingBlock(TextBlock):
    """A HEADING1..HEADING9 block."""

    block_type: BlockType = BlockType.HEADING1

    @property
    def level(self) -> int:
        """Source heading level, 1 to 9."""
        return self.block_type.heading_level or 1


@dataclass(frozen=True)
class ListItemBlock(TextBlock):
    """A BULLET, ORDERED or TODO list item.

    Parameters
    ----------
    sequence : str or None
        ORDERED only: ``"auto"`` to continue numbering, or a number string
    done : bool or None
        TODO only: whether the item is checked

    """

    block_type: BlockType = BlockType.BULLET
    sequence: Optional[str] = None
    done: Optional[bool] = None


@dataclass(frozen=True)
class SourceCodeBlock(TextBlock):
    """A CODE block; ``language`` is a fence info string, empty for plain text."""

    block_type: BlockType = BlockType.CODE
    language: Optional[str] = None
    wrap: bool = False


@dataclass(frozen=True)
class CalloutBlock(Block):
    """A CALLOUT container with an optional emoji marker."""

    block_type: BlockType = BlockType.CALLOUT
    emoji_id: Optional[str] = None
    background_color: Optional[int] = None


@dataclass(frozen=True)
class CellMerge:
    """Row/column span of one table cell."""

    row_span: int = 1
    col_span: int = 1


@dataclass(frozen=True)
class TableBlock(Block):
    """A TABLE block.

    Parameters
    ----------
    row_size, column_size : int or None
        Declared grid dimensions
    cells : tuple of str
        TABLE_CELL block ids in row-major order
    merge_info : tuple of CellMerge
        Spans parallel to ``cells``
    header_row, header_column : bool
        Whether the first row/column is styled as a header

    """

    block_type: BlockType = BlockType.TABLE
    row_size: Optional[int] = None
    column_size: Optional[int] = None
    cells: tuple[str, ...] = ()
    merge_info: tuple[CellMerge, ...] = ()
    header_row: bool = False
    header_column: bool = False


@dataclass(frozen=True)
class GridColumnBlock(Block):
    """A GRID_COLUMN container with its width share in percent."""

    block_type: BlockType = BlockType.GRID_COLUMN
    width_ratio: Optional[int] = None


@dataclass(frozen=True)
class AssetBlock(Block):
    """Common payload of blocks backed by a deferred binary asset.

    The accessors are excluded from equality so two snapshots of the same
    document compare equal.

    """

    token: Optional[str] = None
    name: Optional[str] = None
    fetch_sources: Optional[AssetAccessor] = field(default=None, compare=False, repr=False)
    fetch_blob: Optional[AssetAccessor] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class ImageBlock(AssetBlock):
    """An IMAGE block; ``width``/``height`` are display pixels."""

    block_type: BlockType = BlockType.IMAGE
    width: Optional[int] = None
    height: Optional[int] = None
    caption: Optional[str] = None


@dataclass(frozen=True)
class FileBlock(AssetBlock):
    """A FILE attachment block."""

    block_type: BlockType = BlockType.FILE
    view_type: Optional[int] = None


@dataclass(frozen=True)
class WhiteboardBlock(AssetBlock):
    """A WHITEBOARD block; ``fetch_blob`` yields its rendered thumbnail."""

    block_type: BlockType = BlockType.WHITEBOARD


@dataclass(frozen=True)
class DiagramBlock(AssetBlock):
    """A DIAGRAM block; ``diagram_type`` 1 is a flowchart, 2 a UML diagram."""

    block_type: BlockType = BlockType.DIAGRAM
    diagram_type: Optional[int] = None


@dataclass(frozen=True)
class IframeBlock(Block):
    """An embedded web page."""

    block_type: BlockType = BlockType.IFRAME
    url: Optional[str] = None
    iframe_type: Optional[int] = None


@dataclass(frozen=True)
class IsvBlock(Block):
    """A third-party widget (TextDrawing, Timeline, ...).

    Parameters
    ----------
    component_id : str or None
        Instance id of the widget
    component_type_id : str or None
        Widget kind, see ``lark2md.constants.ISV_COMPONENT_NAMES``
    source : str or None
        Diagram source for TextDrawing widgets, when available

    """

    block_type: BlockType = BlockType.ISV
    component_id: Optional[str] = None
    component_type_id: Optional[str] = None
    source: Optional[str] = None


class BlockDocument:
    """Id-indexed snapshot of every block in one document.

    Parameters
    ----------
    blocks : iterable of Block or mapping of str to Block
        The blocks; a later block with a duplicate id replaces the earlier one
    root_id : str, optional
        Id of the root block. When omitted, the first PAGE block is used.

    Examples
    --------
    >>> doc = BlockDocument([PageBlock("p", children=("t",)), TextBlock("t")])
    >>> doc.root.block_id
    'p'

    """

    def __init__(self, blocks: Iterable[Block] | Mapping[str, Block], root_id: Optional[str] = None):
        """Index blocks by id and record the root id."""
        values = blocks.values() if isinstance(blocks, Mapping) else blocks
        self._blocks: dict[str, Block] = {}
        for block in values:
            if block.block_id in self._blocks:
                logger.debug(f"Duplicate block id {block.block_id!r}; keeping the later block")
            self._blocks[block.block_id] = block

        if root_id is None:
            root_id = next((b.block_id for b in self._blocks.values() if b.block_type == BlockType.PAGE), None)
        self.root_id = root_id

    @property
    def root(self) -> Block:
        """The root block.

        Raises
        ------
        InvalidRootError
            If no root id is known or it is not in the index

        """
        if self.root_id is None or self.root_id not in self._blocks:
            raise InvalidRootError(self.root_id, message=f"Root block {self.root_id!r} is not in the snapshot")
        return self._blocks[self.root_id]

    def get(self, block_id: str) -> Optional[Block]:
        """Return the block with ``block_id`` or None."""
        return self._blocks.get(block_id)

    def __getitem__(self, block_id: str) -> Block:
        return self._blocks[block_id]

    def __contains__(self, block_id: object) -> bool:
        return block_id in self._blocks

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator[Block]:
        return iter(self._blocks.values())

    def __repr__(self) -> str:
        return f"BlockDocument(root_id={self.root_id!r}, blocks={len(self._blocks)})"
