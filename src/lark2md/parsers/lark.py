#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/parsers/lark.py
"""Lark docx block tree to AST converter.

This module walks a ``BlockDocument`` from its PAGE root and builds the
lark2md Markdown AST. Every ``BlockType`` has exactly one rule in
``_BLOCK_RULES``; each rule returns an ordered list of nodes which the
parent concatenates, so layout containers disappear by returning their
children.

Images and (optionally) files, whiteboards and diagrams are not fetched.
Their deferred accessors are wrapped in an ``AssetRef`` which is attached to
the produced node and collected in the ``TransformResult``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from lark2md.assets import FileRef, ImageRef
from lark2md.ast import (
    Attachment,
    BlockQuote,
    Code,
    CodeBlock,
    Document,
    Grid,
    GridColumn,
    Heading,
    Image,
    LineBreak,
    Link,
    List,
    ListItem,
    Node,
    Paragraph,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
)
from lark2md.blocks import (
    Block,
    BlockDocument,
    BlockType,
    CalloutBlock,
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
    load_block_document,
    plain_text,
)
from lark2md.blocks.types import CONDITIONAL_TYPES, LIST_ITEM_TYPES, UNSUPPORTED_TYPES
from lark2md.constants import DIAGRAM_KINDS, IFRAME_KINDS, ISV_COMPONENT_NAMES, ISV_TEXT_DRAWING, ORDERED_SEQUENCE_AUTO
from lark2md.exceptions import CyclicBlockReferenceError, InvalidRootError, InvariantViolationError
from lark2md.options.lark import LarkOptions
from lark2md.parsers._lark_inline import compose_inline
from lark2md.parsers.base import BaseParser
from lark2md.utils.io_utils import InputSource
from lark2md.utils.metadata import DocumentMetadata

logger = logging.getLogger(__name__)


@dataclass
class TransformResult:
    """Output of one transformation.

    Parameters
    ----------
    root : Document
        The AST root
    images : list of ImageRef
        Image references in traversal order, one per source block
    files : list of FileRef
        File references in traversal order, one per source block

    """

    root: Document
    images: list[ImageRef] = field(default_factory=list)
    files: list[FileRef] = field(default_factory=list)


@dataclass
class _TraversalState:
    """Accumulator owned by a single ``transform`` call."""

    document: BlockDocument
    images: list[ImageRef] = field(default_factory=list)
    files: list[FileRef] = field(default_factory=list)
    emitted: set[str] = field(default_factory=set)
    path: list[str] = field(default_factory=list)

    def parent(self) -> Optional[Block]:
        """Return the parent of the block currently being transformed."""
        if len(self.path) < 2:
            return None
        return self.document.get(self.path[-2])


@dataclass
class _ListRun:
    """An open list being extended by consecutive sibling items."""

    kind: BlockType
    node: List
    next_number: int


def _parse_sequence(sequence: Optional[str]) -> Optional[int]:
    """Return an explicit ordered-list number, or None for "auto"/invalid."""
    if sequence is None or sequence == ORDERED_SEQUENCE_AUTO:
        return None
    try:
        number = int(sequence)
    except (TypeError, ValueError):
        return None
    return number if number >= 0 else None


def _list_item_prefix(list_node: List, index: int, item: ListItem) -> str:
    if item.task_status is not None:
        return "[x] " if item.task_status == "checked" else "[ ] "
    if list_node.ordered:
        return f"{list_node.start + index}. "
    return "- "


def _flatten_to_inline(nodes: list[Node]) -> list[Node]:
    """Flatten block nodes into inline content joined by hard line breaks.

    Used for table cells, whose Markdown representation is a single line.
    """
    lines: list[list[Node]] = []

    for node in nodes:
        if isinstance(node, (Paragraph, Heading)):
            lines.append(list(node.content))
        elif isinstance(node, CodeBlock):
            lines.extend([Code(content=line)] for line in node.content.split("\n") if line)
        elif isinstance(node, List):
            for index, item in enumerate(node.items):
                prefix: list[Node] = [Text(content=_list_item_prefix(node, index, item))]
                lines.append(prefix + _flatten_to_inline(item.children))
        elif isinstance(node, (BlockQuote, GridColumn)):
            lines.append(_flatten_to_inline(node.children))
        elif isinstance(node, Grid):
            lines.append(_flatten_to_inline(list(node.columns)))
        elif isinstance(node, Table):
            rows = ([node.header] if node.header else []) + list(node.rows)
            for row in rows:
                line: list[Node] = []
                for i, cell in enumerate(row.cells):
                    if i:
                        line.append(Text(content=" | "))
                    line.extend(cell.content)
                lines.append(line)
        elif isinstance(node, ThematicBreak):
            continue
        else:
            lines.append([node])

    result: list[Node] = []
    for line in lines:
        if not line:
            continue
        if result:
            result.append(LineBreak(soft=False))
        result.extend(line)
    return result


def _child_ids(block: Block) -> tuple[str, ...]:
    if isinstance(block, TableBlock) and block.cells:
        return block.cells
    return block.children


def _find_cycle(document: BlockDocument, start_id: str, path: list[str]) -> Optional[list[str]]:
    """Search the subtree under ``start_id`` for a reference back onto the path.

    Iterative, so subtrees below ``max_depth`` can be checked without
    recursing into them.

    Returns
    -------
    list of str or None
        The id path ending in the repeated id, or None when the subtree is acyclic

    """
    walk = [*path, start_id]
    active = set(walk)
    done: set[str] = set()
    stack = [iter(_child_ids(document[start_id]))]

    while stack:
        child_id = next(stack[-1], None)
        if child_id is None:
            stack.pop()
            finished = walk.pop()
            active.discard(finished)
            done.add(finished)
            continue
        if child_id in active:
            return [*walk, child_id]
        child = document.get(child_id)
        if child is None or child_id in done:
            continue
        walk.append(child_id)
        active.add(child_id)
        stack.append(iter(_child_ids(child)))
    return None


class LarkToAstConverter(BaseParser):
    """Convert a Lark docx block tree into a Markdown AST.

    Parameters
    ----------
    options : LarkOptions or None, default = None
        Transformation options; defaults are used when None

    Examples
    --------
    >>> converter = LarkToAstConverter(LarkOptions(whiteboard=True))
    >>> result = converter.transform(load_block_document("doc.json"))  # doctest: +SKIP
    >>> [ref.token for ref in result.images]  # doctest: +SKIP
    ['t1', 'wb1']

    """

    def __init__(self, options: LarkOptions | None = None):
        """Initialize the converter with validated options."""
        BaseParser._validate_options_type(options, LarkOptions, "lark")
        options = options or LarkOptions()
        super().__init__(options)
        self.options: LarkOptions = options

    def transform(self, document: BlockDocument) -> TransformResult:
        """Transform a block snapshot into an AST and its asset references.

        Parameters
        ----------
        document : BlockDocument
            Snapshot whose root is a PAGE block

        Returns
        -------
        TransformResult
            The AST root plus image and file references in traversal order

        Raises
        ------
        InvalidRootError
            If the snapshot has no root, or the root is not a PAGE block
        CyclicBlockReferenceError
            If a block is reachable from itself
        InvariantViolationError
            If the nesting exhausts the interpreter stack

        """
        root = document.root
        if root.block_type != BlockType.PAGE:
            raise InvalidRootError(root.block_id, root.block_type.name)

        state = _TraversalState(document=document)
        try:
            children = self._transform_block(root.block_id, state, 0)
        except RecursionError as e:
            raise InvariantViolationError(
                f"Block nesting under {root.block_id!r} is too deep to transform",
                block_id=root.block_id,
                original_error=e,
            ) from e

        metadata = self.extract_metadata(document)
        metadata.image_count = len(state.images)
        metadata.file_count = len(state.files)

        logger.debug(
            f"Transformed document {root.block_id}: {len(children)} top-level nodes, "
            f"{len(state.images)} images, {len(state.files)} files"
        )
        return TransformResult(
            root=Document(children=children, metadata=metadata.to_dict()),
            images=state.images,
            files=state.files,
        )

    def parse(self, input_data: Union[BlockDocument, InputSource, list[dict[str, Any]]]) -> Document:
        """Load (if needed) and transform a snapshot, returning only the AST.

        Parameters
        ----------
        input_data : BlockDocument, path, JSON text, bytes, stream or list of block dicts
            Anything accepted by :func:`lark2md.blocks.load_block_document`

        """
        document = input_data if isinstance(input_data, BlockDocument) else load_block_document(input_data)
        return self.transform(document).root

    def extract_metadata(self, document: BlockDocument) -> DocumentMetadata:
        """Extract the page title and document id from the root block."""
        try:
            root = document.root
        except InvalidRootError:
            return DocumentMetadata()

        title = plain_text(root.title).strip() if isinstance(root, PageBlock) else ""
        return DocumentMetadata(title=title or None, document_id=root.block_id)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def _transform_block(self, block_id: str, state: _TraversalState, depth: int) -> list[Node]:
        """Transform one block by id, guarding against cycles and shared references."""
        if block_id in state.path:
            raise CyclicBlockReferenceError([*state.path, block_id])

        block = state.document.get(block_id)
        if block is None:
            logger.debug(f"Child block {block_id!r} is not in the snapshot; skipping")
            return []
        if block_id in state.emitted:
            logger.warning(f"Block {block_id!r} is referenced more than once; keeping the first occurrence")
            return []
        if depth > self.options.max_depth:
            cycle = _find_cycle(state.document, block_id, state.path)
            if cycle is not None:
                raise CyclicBlockReferenceError(cycle)
            logger.warning(f"Block {block_id!r} exceeds max_depth={self.options.max_depth}; dropping subtree")
            return []

        state.emitted.add(block_id)

        flag = CONDITIONAL_TYPES.get(block.block_type)
        if flag is not None and not getattr(self.options, flag):
            logger.debug(f"Skipping {block.block_type.name} block {block_id!r}: '{flag}' is disabled")
            return []

        rule = getattr(self, _BLOCK_RULES[block.block_type])
        state.path.append(block_id)
        try:
            return rule(block, state, depth)
        finally:
            state.path.pop()

    def _transform_children(self, block: Block, state: _TraversalState, depth: int) -> list[Node]:
        """Transform child blocks in order, grouping consecutive list items into lists."""
        nodes: list[Node] = []
        run: Optional[_ListRun] = None

        for child_id in block.children:
            child = state.document.get(child_id)
            produced = self._transform_block(child_id, state, depth + 1)

            if (
                isinstance(child, ListItemBlock)
                and child.block_type in LIST_ITEM_TYPES
                and len(produced) == 1
                and isinstance(produced[0], ListItem)
            ):
                run = self._extend_list(nodes, run, child, produced[0])
                continue

            # Siblings that produce nothing do not interrupt an open list.
            if produced:
                run = None
                nodes.extend(produced)

        return nodes

    def _extend_list(
        self, nodes: list[Node], run: Optional[_ListRun], block: ListItemBlock, item: ListItem
    ) -> _ListRun:
        """Append ``item`` to the open list or start a new one."""
        kind = block.block_type
        number = _parse_sequence(block.sequence) if kind == BlockType.ORDERED else None

        if run is not None and run.kind == kind and (number is None or number == run.next_number):
            run.node.items.append(item)
            run.next_number += 1
            return run

        start = number if number is not None else 1
        list_node = List(ordered=kind == BlockType.ORDERED, items=[item], start=start if kind == BlockType.ORDERED else 1)
        nodes.append(list_node)
        return _ListRun(kind=kind, node=list_node, next_number=start + 1)

    def _inline(self, block: Block) -> list[Node]:
        elements = block.elements if isinstance(block, TextBlock) else ()
        return compose_inline(elements, highlight=self.options.highlight)

    # ------------------------------------------------------------------
    # Block rules
    # ------------------------------------------------------------------

    def _rule_unsupported(self, block: Block, state: _TraversalState, depth: int) -> list[Node]:
        logger.debug(f"Omitting unsupported {block.block_type.name} block {block.block_id!r}")
        return []

    def _rule_splice(self, block: Block, state: _TraversalState, depth: int) -> list[Node]:
        """Layout-only containers: the children take the block's place."""
        return self._transform_children(block, state, depth)

    def _rule_text(self, block: Block, state: _TraversalState, depth: int) -> list[Node]:
        content = self._inline(block)
        nodes: list[Node] = [Paragraph(content=content)] if content else []
        return nodes + self._transform_children(block, state, depth)

    def _rule_heading(self, block: Block, state: _TraversalState, depth: int) -> list[Node]:
        content = self._inline(block)
        level = block.level if isinstance(block, HeadingBlock) else block.block_type.heading_level or 1
        nodes: list[Node] = []
        if content:
            # Lark heading levels 7-9 have no Markdown counterpart.
            nodes.append(Heading(level=level, content=content) if level <= 6 else Paragraph(content=content))
        return nodes + self._transform_children(block, state, depth)

    def _rule_list_item(self, block: Block, state: _TraversalState, depth: int) -> list[Node]:
        content = self._inline(block)
        children: list[Node] = [Paragraph(content=content)] if content else []
        children.extend(self._transform_children(block, state, depth))

        task_status = None
        if block.block_type == BlockType.TODO:
            done = block.done if isinstance(block, ListItemBlock) else False
            task_status = "checked" if done else "unchecked"
        return [ListItem(children=children, task_status=task_status)]

    def _rule_code(self, block: Block, state: _TraversalState, depth: int) -> list[Node]:
        text = plain_text(block.elements) if isinstance(block, TextBlock) else ""
        language = block.language if isinstance(block, SourceCodeBlock) else None
        return [CodeBlock(content=text, language=language or None)] + self._transform_children(block, state, depth)

    def _rule_quote(self, block: Block, state: _TraversalState, depth: int) -> list[Node]:
        content = self._inline(block)
        children: list[Node] = [Paragraph(content=content)] if content else []
        children.extend(self._transform_children(block, state, depth))
        return [BlockQuote(children=children)] if children else []

    def _rule_quote_container(self, block: Block, state: _TraversalState, depth: int) -> list[Node]:
        children = self._transform_children(block, state, depth)
        return [BlockQuote(children=children)] if children else []

    def _rule_callout(self, block: Block, state: _TraversalState, depth: int) -> list[Node]:
        children = self._transform_children(block, state, depth)
        if not children:
            return []
        metadata: dict[str, Any] = {"callout": True}
        if isinstance(block, CalloutBlock) and block.emoji_id:
            metadata["emoji_id"] = block.emoji_id
        return [BlockQuote(children=children, metadata=metadata)]

    def _rule_divider(self, block: Block, state: _TraversalState, depth: int) -> list[Node]:
        return [ThematicBreak()]

    def _rule_grid(self, block: Block, state: _TraversalState, depth: int) -> list[Node]:
        children = self._transform_children(block, state, depth)
        if self.options.flat_grid:
            return children

        columns: list[GridColumn] = []
        for child in children:
            if isinstance(child, GridColumn):
                columns.append(child)
            else:
                logger.debug(f"Grid {block.block_id!r} has a non-column child; wrapping it in a column")
                columns.append(GridColumn(children=[child]))
        return [Grid(columns=columns)] if columns else []

    def _rule_grid_column(self, block: Block, state: _TraversalState, depth: int) -> list[Node]:
        children = self._transform_children(block, state, depth)
        parent = state.parent()
        if self.options.flat_grid or parent is None or parent.block_type != BlockType.GRID:
            return children
        width_ratio = block.width_ratio if isinstance(block, GridColumnBlock) else None
        return [GridColumn(children=children, width_ratio=width_ratio)]

    def _rule_table(self, block: Block, state: _TraversalState, depth: int) -> list[Node]:
        if not isinstance(block, TableBlock):
            return []

        cell_ids = list(block.cells or block.children)
        count = len(cell_ids)
        rows, cols = block.row_size or 0, block.column_size or 0
        if rows and not cols:
            cols = math.ceil(count / rows)
        elif cols and not rows:
            rows = math.ceil(count / cols)
        if rows <= 0 or cols <= 0:
            logger.warning(f"Table {block.block_id!r} has no usable dimensions; omitting it")
            return []
        if count != rows * cols:
            logger.warning(
                f"Table {block.block_id!r} declares {rows}x{cols} cells but lists {count}; padding/truncating"
            )
            # Only the last partial row is padded, whatever the declared size.
            cols = min(cols, max(count, 1))
            rows = max(1, min(rows, math.ceil(count / cols)))

        table_rows: list[TableRow] = []
        for r in range(rows):
            cells: list[TableCell] = []
            for c in range(cols):
                index = r * cols + c
                content: list[Node] = []
                metadata: dict[str, Any] = {}
                if index < count:
                    content = _flatten_to_inline(self._transform_block(cell_ids[index], state, depth + 1))
                if index < len(block.merge_info):
                    merge = block.merge_info[index]
                    if merge.row_span > 1 or merge.col_span > 1:
                        metadata = {"row_span": merge.row_span, "col_span": merge.col_span}
                cells.append(TableCell(content=content, metadata=metadata))
            table_rows.append(TableRow(cells=cells, is_header=r == 0))

        metadata = {"header_row": block.header_row, "header_column": block.header_column}
        return [Table(header=table_rows[0], rows=table_rows[1:], alignments=[None] * cols, metadata=metadata)]

    def _rule_image(self, block: Block, state: _TraversalState, depth: int) -> list[Node]:
        nodes: list[Node] = []
        if isinstance(block, ImageBlock) and block.token:
            ref = ImageRef(
                block_id=block.block_id,
                token=block.token,
                name=block.name or "",
                kind="image",
                fetch_sources=block.fetch_sources,
                fetch_blob=block.fetch_blob,
            )
            state.images.append(ref)
            image = Image(
                alt_text=block.caption or block.name or "",
                width=block.width,
                height=block.height,
                data=ref,
            )
            nodes.append(Paragraph(content=[image]))
        else:
            logger.debug(f"Image block {block.block_id!r} has no token; omitting it")
        return nodes + self._transform_children(block, state, depth)

    def _rule_file(self, block: Block, state: _TraversalState, depth: int) -> list[Node]:
        if not isinstance(block, FileBlock) or not block.token:
            logger.debug(f"File block {block.block_id!r} has no token; omitting it")
            return []
        ref = FileRef(
            block_id=block.block_id,
            token=block.token,
            name=block.name or "",
            fetch_sources=block.fetch_sources,
            fetch_blob=block.fetch_blob,
        )
        state.files.append(ref)
        return [Paragraph(content=[Attachment(name=block.name or block.token, data=ref)])]

    def _rule_whiteboard(self, block: Block, state: _TraversalState, depth: int) -> list[Node]:
        if not isinstance(block, WhiteboardBlock) or not block.token:
            logger.debug(f"Whiteboard block {block.block_id!r} has no token; omitting it")
            return []
        ref = ImageRef(
            block_id=block.block_id,
            token=block.token,
            name=block.name or "",
            kind="whiteboard",
            fetch_sources=block.fetch_sources,
            fetch_blob=block.fetch_blob,
        )
        state.images.append(ref)
        return [Paragraph(content=[Image(alt_text="whiteboard", data=ref, metadata={"whiteboard": True})])]

    def _rule_diagram(self, block: Block, state: _TraversalState, depth: int) -> list[Node]:
        if not isinstance(block, DiagramBlock):
            return []
        kind = DIAGRAM_KINDS.get(block.diagram_type or 0, "diagram")
        if block.token and block.fetch_blob is not None:
            ref = ImageRef(
                block_id=block.block_id,
                token=block.token,
                name=block.name or "",
                kind="diagram",
                fetch_sources=block.fetch_sources,
                fetch_blob=block.fetch_blob,
            )
            state.images.append(ref)
            return [Paragraph(content=[Image(alt_text=kind, data=ref, metadata={"diagram": kind})])]
        return [Paragraph(content=[Text(content=f"[{kind}]")], metadata={"placeholder": "diagram"})]

    def _rule_iframe(self, block: Block, state: _TraversalState, depth: int) -> list[Node]:
        if not isinstance(block, IframeBlock) or not block.url:
            logger.debug(f"Iframe block {block.block_id!r} has no url; omitting it")
            return []
        kind = IFRAME_KINDS.get(block.iframe_type or 0)
        link = Link(
            url=block.url,
            content=[Text(content=kind or block.url)],
            metadata={"embed": "iframe", "iframe_type": kind},
        )
        return [Paragraph(content=[link])]

    def _rule_isv(self, block: Block, state: _TraversalState, depth: int) -> list[Node]:
        if not isinstance(block, IsvBlock):
            return []
        if block.component_type_id == ISV_TEXT_DRAWING and block.source:
            return [CodeBlock(content=block.source, language="mermaid")]
        name = ISV_COMPONENT_NAMES.get(block.component_type_id or "", "widget")
        return [Paragraph(content=[Text(content=f"[{name}]")], metadata={"placeholder": "isv"})]


# One rule per block type. The check below fails at import time if a new tag is added without a rule.
_BLOCK_RULES: dict[BlockType, str] = {
    BlockType.PAGE: "_rule_splice",
    BlockType.TEXT: "_rule_text",
    **{BlockType(value): "_rule_heading" for value in range(BlockType.HEADING1, BlockType.HEADING9 + 1)},
    BlockType.BULLET: "_rule_list_item",
    BlockType.ORDERED: "_rule_list_item",
    BlockType.TODO: "_rule_list_item",
    BlockType.CODE: "_rule_code",
    BlockType.QUOTE: "_rule_quote",
    BlockType.CALLOUT: "_rule_callout",
    BlockType.DIAGRAM: "_rule_diagram",
    BlockType.DIVIDER: "_rule_divider",
    BlockType.FILE: "_rule_file",
    BlockType.GRID: "_rule_grid",
    BlockType.GRID_COLUMN: "_rule_grid_column",
    BlockType.IFRAME: "_rule_iframe",
    BlockType.IMAGE: "_rule_image",
    BlockType.ISV: "_rule_isv",
    BlockType.TABLE: "_rule_table",
    BlockType.TABLE_CELL: "_rule_splice",
    BlockType.VIEW: "_rule_splice",
    BlockType.QUOTE_CONTAINER: "_rule_quote_container",
    BlockType.WHITEBOARD: "_rule_whiteboard",
    BlockType.SOURCE_SYNCED: "_rule_splice",
    BlockType.REFERENCE_SYNCED: "_rule_splice",
    **{block_type: "_rule_unsupported" for block_type in UNSUPPORTED_TYPES},
}

_missing_rules = set(BlockType) - set(_BLOCK_RULES)
_unknown_rules = {name for name in _BLOCK_RULES.values() if not callable(getattr(LarkToAstConverter, name, None))}
if _missing_rules or _unknown_rules:
    raise RuntimeError(
        f"Block dispatch table is incomplete: missing={sorted(t.name for t in _missing_rules)}, "
        f"unknown rules={sorted(_unknown_rules)}"
    )


def transform(document: BlockDocument, options: LarkOptions | None = None) -> TransformResult:
    """Transform a block snapshot with the given options.

    Convenience wrapper around ``LarkToAstConverter(options).transform``.
    """
    return LarkToAstConverter(options).transform(document)


__all__ = ["LarkToAstConverter", "TransformResult", "transform"]
