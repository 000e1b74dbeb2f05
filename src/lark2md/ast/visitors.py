#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/ast/visitors.py
"""Visitor pattern implementation for AST traversal.

``NodeVisitor`` is the base for renderers and other tree walkers.
``ValidationVisitor`` checks the structural grammar the Markdown renderer
relies on: inline nodes only inside inline containers, block nodes only in
block containers, rows only in tables, cells only in rows, items only in
lists and columns only in grids.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from lark2md.ast.nodes import (
    Attachment,
    BlockQuote,
    Code,
    CodeBlock,
    Document,
    Emphasis,
    Grid,
    GridColumn,
    Heading,
    Highlight,
    Image,
    LineBreak,
    Link,
    List,
    ListItem,
    MathInline,
    Node,
    Paragraph,
    Strikethrough,
    Strong,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
    Underline,
)
from lark2md.constants import DANGEROUS_SCHEMES


class NodeVisitor(ABC):
    """Abstract base class for AST node visitors.

    Subclasses implement one ``visit_*`` method per node type.

    Examples
    --------
    Count the text nodes in a document:

        >>> class TextCounter(NodeVisitor):
        ...     def __init__(self):
        ...         self.count = 0
        ...     def generic_visit(self, node):
        ...         self.count += isinstance(node, Text)
        ...         for child in get_node_children(node):
        ...             child.accept(self)

    """

    @abstractmethod
    def visit_document(self, node: Document) -> Any:
        """Visit a Document node."""

    @abstractmethod
    def visit_heading(self, node: Heading) -> Any:
        """Visit a Heading node."""

    @abstractmethod
    def visit_paragraph(self, node: Paragraph) -> Any:
        """Visit a Paragraph node."""

    @abstractmethod
    def visit_code_block(self, node: CodeBlock) -> Any:
        """Visit a CodeBlock node."""

    @abstractmethod
    def visit_block_quote(self, node: BlockQuote) -> Any:
        """Visit a BlockQuote node."""

    @abstractmethod
    def visit_list(self, node: List) -> Any:
        """Visit a List node."""

    @abstractmethod
    def visit_list_item(self, node: ListItem) -> Any:
        """Visit a ListItem node."""

    @abstractmethod
    def visit_table(self, node: Table) -> Any:
        """Visit a Table node."""

    @abstractmethod
    def visit_table_row(self, node: TableRow) -> Any:
        """Visit a TableRow node."""

    @abstractmethod
    def visit_table_cell(self, node: TableCell) -> Any:
        """Visit a TableCell node."""

    @abstractmethod
    def visit_thematic_break(self, node: ThematicBreak) -> Any:
        """Visit a ThematicBreak node."""

    @abstractmethod
    def visit_grid(self, node: Grid) -> Any:
        """Visit a Grid node."""

    @abstractmethod
    def visit_grid_column(self, node: GridColumn) -> Any:
        """Visit a GridColumn node."""

    @abstractmethod
    def visit_text(self, node: Text) -> Any:
        """Visit a Text node."""

    @abstractmethod
    def visit_emphasis(self, node: Emphasis) -> Any:
        """Visit an Emphasis node."""

    @abstractmethod
    def visit_strong(self, node: Strong) -> Any:
        """Visit a Strong node."""

    @abstractmethod
    def visit_strikethrough(self, node: Strikethrough) -> Any:
        """Visit a Strikethrough node."""

    @abstractmethod
    def visit_underline(self, node: Underline) -> Any:
        """Visit an Underline node."""

    @abstractmethod
    def visit_highlight(self, node: Highlight) -> Any:
        """Visit a Highlight node."""

    @abstractmethod
    def visit_code(self, node: Code) -> Any:
        """Visit a Code node."""

    @abstractmethod
    def visit_link(self, node: Link) -> Any:
        """Visit a Link node."""

    @abstractmethod
    def visit_image(self, node: Image) -> Any:
        """Visit an Image node."""

    @abstractmethod
    def visit_attachment(self, node: Attachment) -> Any:
        """Visit an Attachment node."""

    @abstractmethod
    def visit_math_inline(self, node: MathInline) -> Any:
        """Visit a MathInline node."""

    @abstractmethod
    def visit_line_break(self, node: LineBreak) -> Any:
        """Visit a LineBreak node."""

    def generic_visit(self, node: Node) -> Any:
        """Fallback visitor for unhandled node types; does nothing."""
        return None


class ValidationVisitor(NodeVisitor):
    """Visitor that validates AST structure.

    Parameters
    ----------
    strict : bool, default = True
        Raise ``ValueError`` on the first problem. When False, problems are
        only collected in ``errors``.

    Examples
    --------
        >>> validator = ValidationVisitor(strict=False)
        >>> result.root.accept(validator)
        >>> validator.errors
        []

    """

    INLINE_NODES = frozenset(
        {
            Text,
            Emphasis,
            Strong,
            Strikethrough,
            Underline,
            Highlight,
            Code,
            Link,
            Image,
            Attachment,
            MathInline,
            LineBreak,
        }
    )

    # Nodes allowed as direct children of Document, BlockQuote, ListItem and GridColumn.
    BLOCK_NODES = frozenset(
        {
            Heading,
            Paragraph,
            CodeBlock,
            BlockQuote,
            List,
            Table,
            ThematicBreak,
            Grid,
        }
    )

    def __init__(self, strict: bool = True):
        """Initialize the validator."""
        self.strict = strict
        self.errors: list[str] = []

    def _add_error(self, message: str) -> None:
        self.errors.append(message)
        if self.strict:
            raise ValueError(message)

    def _validate_children_are_inline(self, children: list[Node], context: str) -> None:
        for i, child in enumerate(children):
            if type(child) not in self.INLINE_NODES:
                self._add_error(f"{context} can only contain inline nodes, but child {i} is {type(child).__name__}")

    def _validate_children_are_blocks(self, children: list[Node], context: str) -> None:
        for i, child in enumerate(children):
            if type(child) not in self.BLOCK_NODES:
                self._add_error(f"{context} can only contain block nodes, but child {i} is {type(child).__name__}")

    def _validate_url_scheme(self, url: str, context: str) -> None:
        url_lower = url.strip().lower()
        for scheme in DANGEROUS_SCHEMES:
            if url_lower.startswith(scheme):
                self._add_error(f"{context} URL uses dangerous scheme '{scheme}': {url[:50]}")
                return

    def _visit_blocks(self, children: list[Node], context: str) -> None:
        self._validate_children_are_blocks(children, context)
        for child in children:
            child.accept(self)

    def _visit_inlines(self, children: list[Node], context: str) -> None:
        self._validate_children_are_inline(children, context)
        for child in children:
            child.accept(self)

    def visit_document(self, node: Document) -> None:
        """Validate a Document node."""
        self._visit_blocks(node.children, "Document")

    def visit_heading(self, node: Heading) -> None:
        """Validate a Heading node."""
        if not 1 <= node.level <= 6:
            self._add_error(f"Invalid heading level: {node.level}")
        self._visit_inlines(node.content, "Heading")

    def visit_paragraph(self, node: Paragraph) -> None:
        """Validate a Paragraph node."""
        self._visit_inlines(node.content, "Paragraph")

    def visit_code_block(self, node: CodeBlock) -> None:
        """Validate a CodeBlock node."""
        if not isinstance(node.content, str):
            self._add_error(f"CodeBlock content must be a string, got {type(node.content).__name__}")

    def visit_block_quote(self, node: BlockQuote) -> None:
        """Validate a BlockQuote node."""
        self._visit_blocks(node.children, "BlockQuote")

    def visit_list(self, node: List) -> None:
        """Validate a List node."""
        if node.ordered and node.start < 0:
            self._add_error(f"Ordered list start must be >= 0, got {node.start}")
        if not node.items:
            self._add_error("List must have at least one item")
        for i, item in enumerate(node.items):
            if not isinstance(item, ListItem):
                self._add_error(f"List item {i} is {type(item).__name__}, expected ListItem")
                continue
            item.accept(self)

    def visit_list_item(self, node: ListItem) -> None:
        """Validate a ListItem node."""
        self._visit_blocks(node.children, "ListItem")

    def visit_table(self, node: Table) -> None:
        """Validate a Table node."""
        rows = ([node.header] if node.header else []) + list(node.rows)
        for i, row in enumerate(rows):
            if not isinstance(row, TableRow):
                self._add_error(f"Table row {i} is {type(row).__name__}, expected TableRow")
                return

        if rows:
            expected_cols = len(rows[0].cells)
            for i, row in enumerate(rows[1:], start=1):
                if len(row.cells) != expected_cols:
                    self._add_error(f"Table row {i} has {len(row.cells)} cells, expected {expected_cols}")
            if node.alignments and len(node.alignments) != expected_cols:
                self._add_error(f"Table has {len(node.alignments)} alignments but {expected_cols} columns")

        for row in rows:
            row.accept(self)

    def visit_table_row(self, node: TableRow) -> None:
        """Validate a TableRow node."""
        for i, cell in enumerate(node.cells):
            if not isinstance(cell, TableCell):
                self._add_error(f"TableRow cell {i} is {type(cell).__name__}, expected TableCell")
                continue
            cell.accept(self)

    def visit_table_cell(self, node: TableCell) -> None:
        """Validate a TableCell node."""
        self._visit_inlines(node.content, "TableCell")

    def visit_thematic_break(self, node: ThematicBreak) -> None:
        """Validate a ThematicBreak node."""
        pass

    def visit_grid(self, node: Grid) -> None:
        """Validate a Grid node."""
        for i, column in enumerate(node.columns):
            if not isinstance(column, GridColumn):
                self._add_error(f"Grid column {i} is {type(column).__name__}, expected GridColumn")
                continue
            column.accept(self)

    def visit_grid_column(self, node: GridColumn) -> None:
        """Validate a GridColumn node."""
        self._visit_blocks(node.children, "GridColumn")

    def visit_text(self, node: Text) -> None:
        """Validate a Text node."""
        pass

    def visit_emphasis(self, node: Emphasis) -> None:
        """Validate an Emphasis node."""
        self._visit_inlines(node.content, "Emphasis")

    def visit_strong(self, node: Strong) -> None:
        """Validate a Strong node."""
        self._visit_inlines(node.content, "Strong")

    def visit_strikethrough(self, node: Strikethrough) -> None:
        """Validate a Strikethrough node."""
        self._visit_inlines(node.content, "Strikethrough")

    def visit_underline(self, node: Underline) -> None:
        """Validate an Underline node."""
        self._visit_inlines(node.content, "Underline")

    def visit_highlight(self, node: Highlight) -> None:
        """Validate a Highlight node."""
        self._visit_inlines(node.content, "Highlight")

    def visit_code(self, node: Code) -> None:
        """Validate a Code node."""
        pass

    def visit_link(self, node: Link) -> None:
        """Validate a Link node."""
        if not node.url:
            self._add_error("Link url must be non-empty")
        else:
            self._validate_url_scheme(node.url, "Link")
        self._visit_inlines(node.content, "Link")

    def visit_image(self, node: Image) -> None:
        """Validate an Image node; it needs a URL or a deferred asset."""
        if not node.url and node.data is None:
            self._add_error("Image needs a url or deferred asset data")
        if node.url:
            self._validate_url_scheme(node.url, "Image")

    def visit_attachment(self, node: Attachment) -> None:
        """Validate an Attachment node; it needs a URL or a deferred asset."""
        if not node.url and node.data is None:
            self._add_error("Attachment needs a url or deferred asset data")

    def visit_math_inline(self, node: MathInline) -> None:
        """Validate a MathInline node."""
        if not node.content:
            self._add_error("MathInline content must be non-empty")

    def visit_line_break(self, node: LineBreak) -> None:
        """Validate a LineBreak node."""
        pass
