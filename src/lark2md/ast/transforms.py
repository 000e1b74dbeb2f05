#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/ast/transforms.py
"""AST transformation utilities.

Examples
--------
Bind stored URLs to the images of a transformation result:

    >>> binder = AssetUrlBinder({"img_1": "https://cdn.example.com/a.png"})
    >>> bound = transform_nodes(result.root, binder)

Collect every image:

    >>> images = extract_nodes(result.root, Image)

"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Mapping, Type

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
    get_node_children,
    replace_node_children,
)
from lark2md.ast.visitors import NodeVisitor


class NodeTransformer(NodeVisitor):
    """Base class for transforming AST nodes.

    Subclasses override ``visit_*`` methods to return modified nodes, or None
    to remove a node. Every node is rebuilt, so the input tree is never
    mutated. Deferred asset references (``Image.data``/``Attachment.data``)
    are carried over by identity.

    Examples
    --------
    >>> class UppercaseTransformer(NodeTransformer):
    ...     def visit_text(self, node):
    ...         return Text(content=node.content.upper())
    >>> new_doc = UppercaseTransformer().transform(doc)

    """

    def transform(self, node: Node) -> Node | None:
        """Transform an AST node, returning None to remove it."""
        return node.accept(self)

    def _transform_children(self, children: list[Node]) -> list[Node]:
        result = []
        for child in children:
            transformed = self.transform(child)
            if transformed is not None:
                result.append(transformed)
        return result

    def _generic_transform(self, node: Node) -> Node:
        """Rebuild ``node`` with transformed children and a copied metadata dict."""
        children = get_node_children(node)
        copied = replace(node, metadata=dict(node.metadata))
        if not children:
            return copied
        return replace_node_children(copied, self._transform_children(children))

    def visit_document(self, node: Document) -> Document:
        """Transform a Document node."""
        return self._generic_transform(node)  # type: ignore[return-value]

    def visit_heading(self, node: Heading) -> Heading:
        """Transform a Heading node."""
        return self._generic_transform(node)  # type: ignore[return-value]

    def visit_paragraph(self, node: Paragraph) -> Paragraph:
        """Transform a Paragraph node."""
        return self._generic_transform(node)  # type: ignore[return-value]

    def visit_code_block(self, node: CodeBlock) -> CodeBlock:
        """Transform a CodeBlock node."""
        return self._generic_transform(node)  # type: ignore[return-value]

    def visit_block_quote(self, node: BlockQuote) -> BlockQuote:
        """Transform a BlockQuote node."""
        return self._generic_transform(node)  # type: ignore[return-value]

    def visit_list(self, node: List) -> List:
        """Transform a List node."""
        return self._generic_transform(node)  # type: ignore[return-value]

    def visit_list_item(self, node: ListItem) -> ListItem:
        """Transform a ListItem node."""
        return self._generic_transform(node)  # type: ignore[return-value]

    def visit_table(self, node: Table) -> Table:
        """Transform a Table node."""
        return replace(
            node,
            header=self.transform(node.header) if node.header else None,  # type: ignore[arg-type]
            rows=self._transform_children(node.rows),  # type: ignore[arg-type]
            alignments=list(node.alignments),
            metadata=dict(node.metadata),
        )

    def visit_table_row(self, node: TableRow) -> TableRow:
        """Transform a TableRow node."""
        return self._generic_transform(node)  # type: ignore[return-value]

    def visit_table_cell(self, node: TableCell) -> TableCell:
        """Transform a TableCell node."""
        return self._generic_transform(node)  # type: ignore[return-value]

    def visit_thematic_break(self, node: ThematicBreak) -> ThematicBreak:
        """Transform a ThematicBreak node."""
        return self._generic_transform(node)  # type: ignore[return-value]

    def visit_grid(self, node: Grid) -> Grid:
        """Transform a Grid node."""
        return self._generic_transform(node)  # type: ignore[return-value]

    def visit_grid_column(self, node: GridColumn) -> GridColumn:
        """Transform a GridColumn node."""
        return self._generic_transform(node)  # type: ignore[return-value]

    def visit_text(self, node: Text) -> Text:
        """Transform a Text node."""
        return self._generic_transform(node)  # type: ignore[return-value]

    def visit_emphasis(self, node: Emphasis) -> Emphasis:
        """Transform an Emphasis node."""
        return self._generic_transform(node)  # type: ignore[return-value]

    def visit_strong(self, node: Strong) -> Strong:
        """Transform a Strong node."""
        return self._generic_transform(node)  # type: ignore[return-value]

    def visit_strikethrough(self, node: Strikethrough) -> Strikethrough:
        """Transform a Strikethrough node."""
        return self._generic_transform(node)  # type: ignore[return-value]

    def visit_underline(self, node: Underline) -> Underline:
        """Transform an Underline node."""
        return self._generic_transform(node)  # type: ignore[return-value]

    def visit_highlight(self, node: Highlight) -> Highlight:
        """Transform a Highlight node."""
        return self._generic_transform(node)  # type: ignore[return-value]

    def visit_code(self, node: Code) -> Code:
        """Transform a Code node."""
        return self._generic_transform(node)  # type: ignore[return-value]

    def visit_link(self, node: Link) -> Link:
        """Transform a Link node."""
        return self._generic_transform(node)  # type: ignore[return-value]

    def visit_image(self, node: Image) -> Image:
        """Transform an Image node."""
        return self._generic_transform(node)  # type: ignore[return-value]

    def visit_attachment(self, node: Attachment) -> Attachment:
        """Transform an Attachment node."""
        return self._generic_transform(node)  # type: ignore[return-value]

    def visit_math_inline(self, node: MathInline) -> MathInline:
        """Transform a MathInline node."""
        return self._generic_transform(node)  # type: ignore[return-value]

    def visit_line_break(self, node: LineBreak) -> LineBreak:
        """Transform a LineBreak node."""
        return self._generic_transform(node)  # type: ignore[return-value]


class NodeCollector(NodeVisitor):
    """Visitor that collects nodes matching a condition, in document order.

    Parameters
    ----------
    predicate : callable or None, default = None
        Function that takes a node and returns True to collect it

    """

    def __init__(self, predicate: Callable[[Node], bool] | None = None):
        """Initialize the collector with an optional predicate function."""
        self.predicate = predicate or (lambda n: True)
        self.collected: list[Node] = []

    def _generic_visit(self, node: Node) -> None:
        if self.predicate(node):
            self.collected.append(node)
        for child in get_node_children(node):
            child.accept(self)

    visit_document = _generic_visit
    visit_heading = _generic_visit
    visit_paragraph = _generic_visit
    visit_code_block = _generic_visit
    visit_block_quote = _generic_visit
    visit_list = _generic_visit
    visit_list_item = _generic_visit
    visit_table = _generic_visit
    visit_table_row = _generic_visit
    visit_table_cell = _generic_visit
    visit_thematic_break = _generic_visit
    visit_grid = _generic_visit
    visit_grid_column = _generic_visit
    visit_text = _generic_visit
    visit_emphasis = _generic_visit
    visit_strong = _generic_visit
    visit_strikethrough = _generic_visit
    visit_underline = _generic_visit
    visit_highlight = _generic_visit
    visit_code = _generic_visit
    visit_link = _generic_visit
    visit_image = _generic_visit
    visit_attachment = _generic_visit
    visit_math_inline = _generic_visit
    visit_line_break = _generic_visit


class AssetUrlBinder(NodeTransformer):
    """Transformer that fills in URLs of deferred images and attachments.

    Parameters
    ----------
    urls : mapping of str to str
        Stored location per source block id, e.g. from
        :func:`lark2md.assets.url_map`
    keep_unbound : bool, default = True
        When False, images and attachments without a URL after binding are
        removed from the tree

    Notes
    -----
    Nodes are matched on ``node.data.block_id``. The ``data`` reference is kept
    so the bound tree can still be traced back to its source blocks.

    """

    def __init__(self, urls: Mapping[str, str], keep_unbound: bool = True):
        """Initialize the binder with a block-id to URL mapping."""
        self.urls = dict(urls)
        self.keep_unbound = keep_unbound

    def _bound_url(self, node: Image | Attachment) -> str:
        if node.data is not None and node.data.block_id in self.urls:
            return self.urls[node.data.block_id]
        return node.url

    def visit_image(self, node: Image) -> Image | None:  # type: ignore[override]
        """Bind the stored URL of an image."""
        url = self._bound_url(node)
        if not url and not self.keep_unbound:
            return None
        return replace(node, url=url, metadata=dict(node.metadata))

    def visit_attachment(self, node: Attachment) -> Attachment | None:  # type: ignore[override]
        """Bind the stored URL of an attachment."""
        url = self._bound_url(node)
        if not url and not self.keep_unbound:
            return None
        return replace(node, url=url, metadata=dict(node.metadata))


def extract_nodes(doc: Document, node_type: Type[Node] | None = None) -> list[Node]:
    """Extract all nodes of a specific type from a document.

    Parameters
    ----------
    doc : Document
        Document to extract from
    node_type : type or None, default = None
        Node type to extract (None for all nodes)

    Returns
    -------
    list of Node
        All matching nodes in document order

    """
    predicate = (lambda n: isinstance(n, node_type)) if node_type else None
    collector = NodeCollector(predicate=predicate)
    doc.accept(collector)
    return collector.collected


def transform_nodes(doc: Document, transformer: NodeTransformer) -> Document:
    """Apply a transformation visitor to a document."""
    return transformer.transform(doc)  # type: ignore[return-value]
