#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/ast/nodes.py
"""AST node classes for the Markdown output tree.

This module defines the node types produced by the Lark transformer and
consumed by the Markdown renderer. Each node is a dataclass that supports the
visitor pattern through ``accept``.

Node Hierarchy
--------------
Block-level nodes:
    - Document, Heading, Paragraph, CodeBlock, BlockQuote
    - List, ListItem, Table, TableRow, TableCell
    - ThematicBreak, Grid, GridColumn

Inline nodes:
    - Text, Emphasis, Strong, Code, Link, Image, LineBreak
    - Strikethrough, Underline, Highlight, MathInline, Attachment

Extension data
--------------
``Image.data`` and ``Attachment.data`` carry the deferred asset reference
(:class:`lark2md.assets.AssetRef`) for the block that produced them; the
reference holds the original fetch accessors, never invoked here. Rendering
hints for links and inline code live in ``metadata``. No node refers back to
a source block.

"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Literal, Optional

if TYPE_CHECKING:
    from lark2md.assets import AssetRef

Alignment = Literal["left", "center", "right"]


class Node(ABC):
    """Base class for all AST nodes.

    Parameters
    ----------
    metadata : dict, default = empty dict
        Arbitrary metadata associated with this node

    """

    metadata: dict[str, Any]

    @abstractmethod
    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this node.

        Parameters
        ----------
        visitor : Any
            A visitor object with visit_* methods

        Returns
        -------
        Any
            Result from the visitor's processing

        """
        pass


# ============================================================================
# Block-level Nodes
# ============================================================================


@dataclass
class Document(Node):
    """Root document node containing all other nodes.

    Parameters
    ----------
    children : list of Node, default = empty list
        Block-level nodes in the document
    metadata : dict, default = empty dict
        Document-level metadata (``title``, ``document_id``...)

    """

    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_document``."""
        return visitor.visit_document(self)


@dataclass
class Heading(Node):
    """Heading node (h1-h6).

    Parameters
    ----------
    level : int
        Heading level, 1 to 6
    content : list of Node, default = empty list
        Inline nodes representing heading text
    metadata : dict, default = empty dict
        Heading metadata

    Raises
    ------
    ValueError
        If ``level`` is outside 1-6

    """

    level: int
    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate heading level is between 1 and 6."""
        if not 1 <= self.level <= 6:
            raise ValueError(f"Heading level must be 1-6, got {self.level}")

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_heading``."""
        return visitor.visit_heading(self)


@dataclass
class Paragraph(Node):
    """Paragraph node containing inline content."""

    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_paragraph``."""
        return visitor.visit_paragraph(self)


@dataclass
class CodeBlock(Node):
    """Fenced code block.

    Parameters
    ----------
    content : str
        Code content, not parsed as markdown
    language : str or None, default = None
        Info string for syntax highlighting
    metadata : dict, default = empty dict
        Code block metadata

    """

    content: str
    language: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_code_block``."""
        return visitor.visit_code_block(self)


@dataclass
class BlockQuote(Node):
    """Block quote containing other block elements.

    Lark callouts also map here; their emoji id is kept in ``metadata``.

    """

    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_block_quote``."""
        return visitor.visit_block_quote(self)


@dataclass
class List(Node):
    """Ordered or unordered list.

    Parameters
    ----------
    ordered : bool
        True for ordered lists, False for unordered
    items : list of ListItem, default = empty list
        List items
    start : int, default = 1
        Starting number for ordered lists
    tight : bool, default = True
        Whether list is tight (no blank lines between items)
    metadata : dict, default = empty dict
        List metadata

    """

    ordered: bool
    items: list[ListItem] = field(default_factory=list)
    start: int = 1
    tight: bool = True
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_list``."""
        return visitor.visit_list(self)


@dataclass
class ListItem(Node):
    """List item containing block content.

    Parameters
    ----------
    children : list of Node, default = empty list
        Block-level nodes in the item; the first is usually a Paragraph
    task_status : {'checked', 'unchecked'} or None, default = None
        Set for to-do items
    metadata : dict, default = empty dict
        List item metadata

    """

    children: list[Node] = field(default_factory=list)
    task_status: Optional[Literal["checked", "unchecked"]] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_list_item``."""
        return visitor.visit_list_item(self)


@dataclass
class Table(Node):
    """Table with an optional header row.

    Parameters
    ----------
    rows : list of TableRow, default = empty list
        Body rows
    header : TableRow or None, default = None
        Header row
    alignments : list, default = empty list
        Column alignments ('left', 'center', 'right', or None)
    metadata : dict, default = empty dict
        Table metadata

    """

    rows: list[TableRow] = field(default_factory=list)
    header: Optional[TableRow] = None
    alignments: list[Alignment | None] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_table``."""
        return visitor.visit_table(self)


@dataclass
class TableRow(Node):
    """Table row containing cells."""

    cells: list[TableCell] = field(default_factory=list)
    is_header: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_table_row``."""
        return visitor.visit_table_row(self)


@dataclass
class TableCell(Node):
    """Table cell holding inline content.

    Parameters
    ----------
    content : list of Node, default = empty list
        Inline content of the cell
    alignment : {'left', 'center', 'right'} or None, default = None
        Cell alignment
    metadata : dict, default = empty dict
        Cell metadata; Lark merge spans are kept as ``row_span``/``col_span``

    """

    content: list[Node] = field(default_factory=list)
    alignment: Alignment | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_table_cell``."""
        return visitor.visit_table_cell(self)


@dataclass
class ThematicBreak(Node):
    """Thematic break (horizontal rule)."""

    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_thematic_break``."""
        return visitor.visit_thematic_break(self)


@dataclass
class Grid(Node):
    """Multi-column layout container.

    Markdown has no column layout; renderers emit the columns one after
    another. Produced only when grid flattening is disabled.

    Parameters
    ----------
    columns : list of GridColumn, default = empty list
        Columns in left-to-right order
    metadata : dict, default = empty dict
        Grid metadata

    """

    columns: list[GridColumn] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_grid``."""
        return visitor.visit_grid(self)


@dataclass
class GridColumn(Node):
    """One column of a Grid.

    Parameters
    ----------
    children : list of Node, default = empty list
        Block-level content of the column
    width_ratio : int or None, default = None
        Share of the grid width in percent
    metadata : dict, default = empty dict
        Column metadata

    """

    children: list[Node] = field(default_factory=list)
    width_ratio: Optional[int] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_grid_column``."""
        return visitor.visit_grid_column(self)


# ============================================================================
# Inline Nodes
# ============================================================================


@dataclass
class Text(Node):
    """Plain text content."""

    content: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_text``."""
        return visitor.visit_text(self)


@dataclass
class Emphasis(Node):
    """Emphasis (italic) wrapping inline content."""

    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_emphasis``."""
        return visitor.visit_emphasis(self)


@dataclass
class Strong(Node):
    """Strong emphasis (bold) wrapping inline content."""

    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_strong``."""
        return visitor.visit_strong(self)


@dataclass
class Strikethrough(Node):
    """Strikethrough (GFM ``delete``) wrapping inline content."""

    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_strikethrough``."""
        return visitor.visit_strikethrough(self)


@dataclass
class Underline(Node):
    """Underlined inline content."""

    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_underline``."""
        return visitor.visit_underline(self)


@dataclass
class Highlight(Node):
    """Highlighted (background-coloured) inline content.

    Parameters
    ----------
    content : list of Node, default = empty list
        Highlighted inline nodes
    color : str or None, default = None
        Colour name such as ``"light-yellow"``
    metadata : dict, default = empty dict
        Highlight metadata

    """

    content: list[Node] = field(default_factory=list)
    color: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_highlight``."""
        return visitor.visit_highlight(self)


@dataclass
class Code(Node):
    """Inline code span."""

    content: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_code``."""
        return visitor.visit_code(self)


@dataclass
class Link(Node):
    """Hyperlink wrapping inline content.

    Parameters
    ----------
    url : str
        Link target
    content : list of Node, default = empty list
        Inline link text
    title : str or None, default = None
        Optional link title
    metadata : dict, default = empty dict
        Rendering hints, e.g. ``{"mention": "doc", "token": ...}`` for
        document mentions or ``{"embed": "iframe"}`` for embedded pages

    """

    url: str
    content: list[Node] = field(default_factory=list)
    title: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_link``."""
        return visitor.visit_link(self)


@dataclass
class Image(Node):
    """Image backed by a deferred asset.

    Parameters
    ----------
    url : str, default = ''
        Image URL; empty until the caller binds a stored location
    alt_text : str, default = ''
        Alternative text
    title : str or None, default = None
        Optional image title
    width, height : int or None, default = None
        Display size in pixels
    data : AssetRef or None, default = None
        Deferred asset reference with the original fetch accessors
    metadata : dict, default = empty dict
        Image metadata

    """

    url: str = ""
    alt_text: str = ""
    title: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    data: Optional[AssetRef] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_image``."""
        return visitor.visit_image(self)


@dataclass
class Attachment(Node):
    """Inline file attachment backed by a deferred asset.

    Parameters
    ----------
    name : str
        File name shown as the link text
    url : str, default = ''
        Download location; empty until the caller binds one
    data : AssetRef or None, default = None
        Deferred asset reference with the original fetch accessors
    metadata : dict, default = empty dict
        Attachment metadata

    """

    name: str
    url: str = ""
    data: Optional[AssetRef] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_attachment``."""
        return visitor.visit_attachment(self)


@dataclass
class MathInline(Node):
    """Inline LaTeX math, without delimiters."""

    content: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_math_inline``."""
        return visitor.visit_math_inline(self)


@dataclass
class LineBreak(Node):
    """Line break.

    Parameters
    ----------
    soft : bool, default = False
        True for soft breaks, False for hard breaks

    """

    soft: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_line_break``."""
        return visitor.visit_line_break(self)


_CHILDREN_NODES = (Document, BlockQuote, ListItem, GridColumn)
_CONTENT_NODES = (
    Heading,
    Paragraph,
    Emphasis,
    Strong,
    Strikethrough,
    Underline,
    Highlight,
    Link,
    TableCell,
)


def get_node_children(node: Node) -> list[Node]:
    """Get all child nodes from a node.

    Parameters
    ----------
    node : Node
        The node to get children from

    Returns
    -------
    list of Node
        Child nodes; empty for leaf nodes

    Examples
    --------
    >>> heading = Heading(level=1, content=[Text("Hello"), Strong(content=[Text("world")])])
    >>> len(get_node_children(heading))
    2

    """
    if isinstance(node, _CHILDREN_NODES):
        return list(node.children)
    if isinstance(node, _CONTENT_NODES):
        return list(node.content)
    if isinstance(node, List):
        return list(node.items)
    if isinstance(node, Table):
        children: list[Node] = [node.header] if node.header else []
        children.extend(node.rows)
        return children
    if isinstance(node, TableRow):
        return list(node.cells)
    if isinstance(node, Grid):
        return list(node.columns)
    return []


def replace_node_children(node: Node, new_children: list[Node]) -> Node:
    """Create a copy of a node with replaced children.

    For a Table, the first row with ``is_header=True`` becomes the header and
    all other rows become body rows.

    Raises
    ------
    ValueError
        If the node is a leaf, or children are of the wrong kind

    """
    if isinstance(node, _CHILDREN_NODES):
        return replace(node, children=new_children)
    if isinstance(node, _CONTENT_NODES):
        return replace(node, content=new_children)
    if isinstance(node, List):
        if not all(isinstance(child, ListItem) for child in new_children):
            raise ValueError("List children must all be ListItem nodes")
        return replace(node, items=new_children)
    if isinstance(node, Table):
        if not all(isinstance(child, TableRow) for child in new_children):
            raise ValueError("Table children must all be TableRow nodes")
        rows = [child for child in new_children if isinstance(child, TableRow)]
        header = next((row for row in rows if row.is_header), None)
        return replace(node, header=header, rows=[row for row in rows if row is not header])
    if isinstance(node, TableRow):
        if not all(isinstance(child, TableCell) for child in new_children):
            raise ValueError("TableRow children must all be TableCell nodes")
        return replace(node, cells=new_children)
    if isinstance(node, Grid):
        if not all(isinstance(child, GridColumn) for child in new_children):
            raise ValueError("Grid children must all be GridColumn nodes")
        return replace(node, columns=new_children)
    raise ValueError(f"{type(node).__name__} does not have children")
