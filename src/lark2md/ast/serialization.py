#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/ast/serialization.py
"""Plain-data serialization of AST nodes.

``ast_to_dict`` turns a tree into nested dicts and lists that compare by
value, which makes it the natural tool for checking that two
transformations of the same snapshot agree. Deferred asset references are
reduced to their identifying fields; the fetch accessors are never
serialized.

Examples
--------
    >>> ast_to_dict(Text(content="Hello"))
    {'node_type': 'Text', 'content': 'Hello', 'metadata': {}}

"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Optional

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

if TYPE_CHECKING:
    from lark2md.assets import AssetRef


def _with_metadata(result: dict[str, Any], node: Node) -> dict[str, Any]:
    result["metadata"] = dict(node.metadata)
    return result


def _serialize_asset_ref(ref: Optional[AssetRef]) -> Optional[dict[str, Any]]:
    if ref is None:
        return None
    return {"block_id": ref.block_id, "token": ref.token, "name": ref.name, "kind": ref.kind}


def _serialize_children_node(node: Node, node_type: str) -> dict[str, Any]:
    return _with_metadata(
        {"node_type": node_type, "children": [ast_to_dict(child) for child in node.children]},  # type: ignore[attr-defined]
        node,
    )


def _serialize_inline_content_node(node: Node, node_type: str) -> dict[str, Any]:
    return _with_metadata(
        {"node_type": node_type, "content": [ast_to_dict(child) for child in node.content]},  # type: ignore[attr-defined]
        node,
    )


def _serialize_text_content_node(node: Node, node_type: str) -> dict[str, Any]:
    return _with_metadata({"node_type": node_type, "content": node.content}, node)  # type: ignore[attr-defined]


def _serialize_heading(node: Heading) -> dict[str, Any]:
    result = _serialize_inline_content_node(node, "Heading")
    result["level"] = node.level
    return result


def _serialize_code_block(node: CodeBlock) -> dict[str, Any]:
    return _with_metadata({"node_type": "CodeBlock", "content": node.content, "language": node.language}, node)


def _serialize_list(node: List) -> dict[str, Any]:
    result: dict[str, Any] = {
        "node_type": "List",
        "ordered": node.ordered,
        "start": node.start,
        "tight": node.tight,
        "items": [ast_to_dict(item) for item in node.items],
    }
    return _with_metadata(result, node)


def _serialize_list_item(node: ListItem) -> dict[str, Any]:
    result = _serialize_children_node(node, "ListItem")
    result["task_status"] = node.task_status
    return result


def _serialize_table(node: Table) -> dict[str, Any]:
    result: dict[str, Any] = {
        "node_type": "Table",
        "header": ast_to_dict(node.header) if node.header else None,
        "rows": [ast_to_dict(row) for row in node.rows],
        "alignments": list(node.alignments),
    }
    return _with_metadata(result, node)


def _serialize_table_row(node: TableRow) -> dict[str, Any]:
    result: dict[str, Any] = {
        "node_type": "TableRow",
        "is_header": node.is_header,
        "cells": [ast_to_dict(cell) for cell in node.cells],
    }
    return _with_metadata(result, node)


def _serialize_table_cell(node: TableCell) -> dict[str, Any]:
    result = _serialize_inline_content_node(node, "TableCell")
    result["alignment"] = node.alignment
    return result


def _serialize_grid(node: Grid) -> dict[str, Any]:
    return _with_metadata({"node_type": "Grid", "columns": [ast_to_dict(col) for col in node.columns]}, node)


def _serialize_grid_column(node: GridColumn) -> dict[str, Any]:
    result = _serialize_children_node(node, "GridColumn")
    result["width_ratio"] = node.width_ratio
    return result


def _serialize_highlight(node: Highlight) -> dict[str, Any]:
    result = _serialize_inline_content_node(node, "Highlight")
    result["color"] = node.color
    return result


def _serialize_link(node: Link) -> dict[str, Any]:
    result = _serialize_inline_content_node(node, "Link")
    result["url"] = node.url
    result["title"] = node.title
    return result


def _serialize_image(node: Image) -> dict[str, Any]:
    result: dict[str, Any] = {
        "node_type": "Image",
        "url": node.url,
        "alt_text": node.alt_text,
        "title": node.title,
        "width": node.width,
        "height": node.height,
        "data": _serialize_asset_ref(node.data),
    }
    return _with_metadata(result, node)


def _serialize_attachment(node: Attachment) -> dict[str, Any]:
    result: dict[str, Any] = {
        "node_type": "Attachment",
        "name": node.name,
        "url": node.url,
        "data": _serialize_asset_ref(node.data),
    }
    return _with_metadata(result, node)


# Dispatch table mapping node types to their serialization functions
_SERIALIZATION_DISPATCH: dict[type, Any] = {
    Document: lambda n: _serialize_children_node(n, "Document"),
    BlockQuote: lambda n: _serialize_children_node(n, "BlockQuote"),
    Heading: _serialize_heading,
    Paragraph: lambda n: _serialize_inline_content_node(n, "Paragraph"),
    CodeBlock: _serialize_code_block,
    List: _serialize_list,
    ListItem: _serialize_list_item,
    Table: _serialize_table,
    TableRow: _serialize_table_row,
    TableCell: _serialize_table_cell,
    ThematicBreak: lambda n: _with_metadata({"node_type": "ThematicBreak"}, n),
    Grid: _serialize_grid,
    GridColumn: _serialize_grid_column,
    Text: lambda n: _serialize_text_content_node(n, "Text"),
    Emphasis: lambda n: _serialize_inline_content_node(n, "Emphasis"),
    Strong: lambda n: _serialize_inline_content_node(n, "Strong"),
    Strikethrough: lambda n: _serialize_inline_content_node(n, "Strikethrough"),
    Underline: lambda n: _serialize_inline_content_node(n, "Underline"),
    Highlight: _serialize_highlight,
    Code: lambda n: _serialize_text_content_node(n, "Code"),
    Link: _serialize_link,
    Image: _serialize_image,
    Attachment: _serialize_attachment,
    MathInline: lambda n: _serialize_text_content_node(n, "MathInline"),
    LineBreak: lambda n: _with_metadata({"node_type": "LineBreak", "soft": n.soft}, n),
}


def ast_to_dict(node: Node) -> dict[str, Any]:
    """Convert an AST node to a dictionary representation.

    Raises
    ------
    ValueError
        If the node type has no serializer

    """
    node_class = type(node)
    serializer = _SERIALIZATION_DISPATCH.get(node_class)
    if serializer:
        return serializer(node)

    raise ValueError(f"Unknown node type for serialization: {node_class.__name__}")


def ast_to_json(node: Node, indent: int | None = None) -> str:
    """Serialize an AST node to a JSON string.

    Metadata values that are not JSON-native are written with ``str``.
    """
    return json.dumps(ast_to_dict(node), indent=indent, ensure_ascii=False, default=str)
