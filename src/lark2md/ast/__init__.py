#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/ast/__init__.py
"""Markdown Abstract Syntax Tree (AST) module.

The transformer produces these nodes; the renderer consumes them. The
module consists of:

- nodes: AST node classes representing document structure
- visitors: the visitor base class and a structural validator
- transforms: tree rewriting utilities, including asset URL binding
- serialization: plain-data conversion for comparison and debugging
- utils: text extraction

Examples
--------
    >>> from lark2md.ast import Document, Heading, Text
    >>> from lark2md.renderers.markdown import MarkdownRenderer
    >>> doc = Document(children=[Heading(level=1, content=[Text(content="Title")])])
    >>> MarkdownRenderer().render_to_string(doc)
    '# Title'

"""

from __future__ import annotations

from lark2md.ast.nodes import (
    Alignment,
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
from lark2md.ast.serialization import ast_to_dict, ast_to_json
from lark2md.ast.transforms import AssetUrlBinder, NodeCollector, NodeTransformer, extract_nodes, transform_nodes
from lark2md.ast.utils import extract_text
from lark2md.ast.visitors import NodeVisitor, ValidationVisitor

__all__ = [
    # Nodes
    "Node",
    "Alignment",
    "Document",
    "Heading",
    "Paragraph",
    "CodeBlock",
    "BlockQuote",
    "List",
    "ListItem",
    "Table",
    "TableRow",
    "TableCell",
    "ThematicBreak",
    "Grid",
    "GridColumn",
    "Text",
    "Emphasis",
    "Strong",
    "Strikethrough",
    "Underline",
    "Highlight",
    "Code",
    "Link",
    "Image",
    "Attachment",
    "MathInline",
    "LineBreak",
    "get_node_children",
    "replace_node_children",
    # Visitors and transforms
    "NodeVisitor",
    "ValidationVisitor",
    "NodeTransformer",
    "NodeCollector",
    "AssetUrlBinder",
    "extract_nodes",
    "transform_nodes",
    # Serialization and utilities
    "ast_to_dict",
    "ast_to_json",
    "extract_text",
]
