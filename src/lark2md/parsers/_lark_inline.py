#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/parsers/_lark_inline.py
"""Inline composition for Lark text elements.

Converts the inline elements of a text-bearing block into AST inline nodes.
Adjacent text runs sharing the same style and link are merged before
wrapping, so the Lark editor's habit of splitting runs does not leak into
the output. Marks are applied in ``MARK_WRAP_ORDER`` (inline code innermost)
and a link always wraps the styled content.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from lark2md.ast import (
    Code,
    Emphasis,
    Highlight,
    LineBreak,
    Link,
    MathInline,
    Node,
    Strikethrough,
    Strong,
    Text,
    Underline,
)
from lark2md.blocks.inline import Equation, InlineElement, MentionDoc, MentionUser, TextRun
from lark2md.blocks.types import MARK_WRAP_ORDER, Mark
from lark2md.constants import HIGHLIGHT_COLORS

logger = logging.getLogger(__name__)

StyleKey = tuple[frozenset[Mark], Optional[int]]

_MARK_WRAPPERS = {
    Mark.ITALIC: Emphasis,
    Mark.BOLD: Strong,
    Mark.STRIKETHROUGH: Strikethrough,
    Mark.UNDERLINE: Underline,
}


def _effective_style(run: TextRun, highlight: bool) -> StyleKey:
    """Return the marks and highlight colour that will actually be rendered.

    With ``highlight`` off the highlight mark is removed before anything
    else looks at the run, so it cannot split or reorder other marks.
    """
    marks = run.marks if highlight else run.marks - {Mark.HIGHLIGHT}
    color = run.highlight_color if Mark.HIGHLIGHT in marks else None
    return frozenset(marks), color


def _wrap_marks(text: str, style: StyleKey) -> Node:
    marks, color = style
    node: Node = Code(content=text) if Mark.INLINE_CODE in marks else Text(content=text)

    for mark in MARK_WRAP_ORDER:
        if mark not in marks or mark is Mark.INLINE_CODE:
            continue
        if mark is Mark.HIGHLIGHT:
            node = Highlight(content=[node], color=HIGHLIGHT_COLORS.get(color) if color is not None else None)
        else:
            node = _MARK_WRAPPERS[mark](content=[node])
    return node


def _styled_nodes(text: str, style: StyleKey) -> list[Node]:
    """Wrap ``text`` in its marks, turning embedded newlines into hard breaks."""
    nodes: list[Node] = []
    parts = text.split("\n")
    for i, part in enumerate(parts):
        if part:
            nodes.append(_wrap_marks(part, style))
        if i < len(parts) - 1:
            nodes.append(LineBreak(soft=False))
    return nodes


def _element_node(element: InlineElement) -> Optional[Node]:
    """Build the node for a non-run inline element."""
    if isinstance(element, MentionUser):
        name = element.name or element.user_id
        return Text(content=f"@{name}") if name else None

    if isinstance(element, MentionDoc):
        label = element.title or element.url or element.token
        if not label:
            return None
        if not element.url:
            return Text(content=label)
        return Link(
            url=element.url,
            content=[Text(content=label)],
            metadata={"mention": "doc", "token": element.token, "obj_type": element.obj_type},
        )

    if isinstance(element, Equation):
        content = element.content.strip()
        return MathInline(content=content) if content else None

    logger.debug(f"Skipping unknown inline element {type(element).__name__}")
    return None


def compose_inline(elements: Sequence[InlineElement], *, highlight: bool = False) -> list[Node]:
    """Convert Lark inline elements into AST inline nodes.

    Parameters
    ----------
    elements : sequence of InlineElement
        Elements of one text-bearing block
    highlight : bool, default False
        Keep highlight marks as ``Highlight`` nodes

    Returns
    -------
    list of Node
        Inline nodes in source order. Empty runs produce nothing.

    Examples
    --------
    >>> compose_inline([TextRun("hi", frozenset({Mark.BOLD}))])
    [Strong(content=[Text(content='hi', metadata={})], metadata={})]

    """
    result: list[Node] = []
    group: list[Node] = []
    group_link: Optional[str] = None
    buffer: list[str] = []
    buffer_style: Optional[StyleKey] = None

    def flush_buffer() -> None:
        if buffer and buffer_style is not None:
            group.extend(_styled_nodes("".join(buffer), buffer_style))
        buffer.clear()

    def flush_group() -> None:
        flush_buffer()
        if not group:
            return
        if group_link:
            result.append(Link(url=group_link, content=list(group)))
        else:
            result.extend(group)
        group.clear()

    for element in elements:
        if isinstance(element, TextRun):
            if not element.text:
                continue
            link = element.link or None
            style = _effective_style(element, highlight)
            if link != group_link:
                flush_group()
                group_link = link
            elif style != buffer_style:
                flush_buffer()
            buffer_style = style
            buffer.append(element.text)
            continue

        node = _element_node(element)
        if node is None:
            continue
        flush_group()
        group_link = None
        buffer_style = None
        result.append(node)

    flush_group()
    return result
