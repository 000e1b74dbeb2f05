#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/ast/utils.py
"""Utility functions for working with AST nodes.

Examples
--------
    >>> heading = Heading(level=1, content=[Text(content="Hello "), Emphasis(content=[Text(content="world")])])
    >>> extract_text(heading, joiner="")
    'Hello world'

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Union

from lark2md.ast.nodes import Code, Image, MathInline, Text, get_node_children

if TYPE_CHECKING:
    from lark2md.ast.nodes import Node


def extract_text(node_or_nodes: Union[Node, list[Node]], joiner: str = " ") -> str:
    """Extract plain text from a node or list of nodes.

    Text, inline code and inline math contribute their content; images
    contribute their alt text. The joiner is applied between sibling parts
    at every nesting level.

    Parameters
    ----------
    node_or_nodes : Node or list of Node
        A single node or list of nodes to extract text from
    joiner : str, default = " "
        String used to join text parts

    Returns
    -------
    str
        Concatenated text content

    """
    if isinstance(node_or_nodes, list):
        parts = [extract_text(node, joiner) for node in node_or_nodes]
        return joiner.join(part for part in parts if part)

    node = node_or_nodes
    if isinstance(node, (Text, Code, MathInline)):
        return node.content
    if isinstance(node, Image):
        return node.alt_text

    return extract_text(get_node_children(node), joiner)
