#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/blocks/inline.py
"""Inline element model for Lark text-bearing blocks.

Lark stores the text of a block as a list of elements. Each element is one
of a styled text run, a user mention, a document mention or an inline
equation. Elements are immutable values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from lark2md.blocks.types import Mark


@dataclass(frozen=True)
class TextRun:
    """A run of text sharing one set of style marks.

    Parameters
    ----------
    text : str
        Run content; may contain newlines
    marks : frozenset of Mark
        Style marks applied to the whole run
    link : str or None
        Decoded link target when the run is hyperlinked
    highlight_color : int or None
        Lark background colour index; set whenever ``Mark.HIGHLIGHT`` is

    """

    text: str = ""
    marks: frozenset[Mark] = field(default_factory=frozenset)
    link: Optional[str] = None
    highlight_color: Optional[int] = None

    def has(self, mark: Mark) -> bool:
        """Return True if the run carries ``mark``."""
        return mark in self.marks


@dataclass(frozen=True)
class MentionUser:
    """An @-mention of a workspace member."""

    user_id: str = ""
    name: str = ""


@dataclass(frozen=True)
class MentionDoc:
    """A mention of another Lark document, rendered as a link.

    Parameters
    ----------
    token : str
        Token of the mentioned document
    title : str
        Display title
    url : str
        Decoded address of the mentioned document
    obj_type : int or None
        Lark object type of the mentioned document (docx, sheet, ...)

    """

    token: str = ""
    title: str = ""
    url: str = ""
    obj_type: Optional[int] = None


@dataclass(frozen=True)
class Equation:
    """Inline LaTeX equation."""

    content: str = ""


InlineElement = Union[TextRun, MentionUser, MentionDoc, Equation]


def plain_text(elements: tuple[InlineElement, ...] | list[InlineElement]) -> str:
    """Concatenate the visible text of inline elements, ignoring marks.

    Examples
    --------
    >>> plain_text([TextRun("Hello "), MentionUser(name="Ada")])
    'Hello @Ada'

    """
    parts: list[str] = []
    for element in elements:
        if isinstance(element, TextRun):
            parts.append(element.text)
        elif isinstance(element, MentionUser):
            parts.append(f"@{element.name or element.user_id}")
        elif isinstance(element, MentionDoc):
            parts.append(element.title or element.url)
        elif isinstance(element, Equation):
            parts.append(element.content)
    return "".join(parts)
