#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/options/markdown.py
"""Configuration options for Markdown rendering."""

from __future__ import annotations

from dataclasses import dataclass, field

from lark2md.constants import (
    DEFAULT_BULLET_SYMBOLS,
    DEFAULT_EMPHASIS_SYMBOL,
    DEFAULT_ESCAPE_SPECIAL,
    DEFAULT_FLAVOR,
    DEFAULT_HIGHLIGHT_MODE,
    DEFAULT_INCLUDE_METADATA_FRONTMATTER,
    DEFAULT_LIST_INDENT_WIDTH,
    DEFAULT_METADATA_FORMAT,
    DEFAULT_UNDERLINE_MODE,
    EmphasisSymbol,
    FlavorType,
    HighlightMode,
    MetadataFormatType,
    UnderlineMode,
)
from lark2md.options.base import BaseRendererOptions


@dataclass(frozen=True)
class MarkdownRendererOptions(BaseRendererOptions):
    """Markdown rendering options.

    Parameters
    ----------
    flavor : {"gfm", "commonmark"}, default "gfm"
        Markdown dialect to target. CommonMark renders tables and
        strikethrough as inline HTML.
    escape_special : bool, default True
        Escape Markdown control characters in text content.
    emphasis_symbol : {"*", "_"}, default "*"
        Symbol used for emphasis and strong emphasis.
    bullet_symbols : str, default "-*+"
        Bullet characters cycled through by nesting level.
    list_indent_width : int, default 4
        Spaces per nesting level for list continuation lines.
    underline_mode : {"html", "markdown", "ignore"}, default "html"
        ``<u>`` tags, ``__text__``, or plain text.
    highlight_mode : {"html", "markdown", "ignore"}, default "html"
        ``<mark>`` tags, ``==text==``, or plain text.
    metadata_frontmatter : bool, default False
        Prepend document metadata (page title, ids) as front matter.
    metadata_format : {"yaml", "toml", "json"}, default "yaml"
        Front matter serialization format.

    """

    flavor: FlavorType = field(
        default=DEFAULT_FLAVOR,
        metadata={"help": "Markdown flavor/dialect to use for output", "choices": ["gfm", "commonmark"],
                  "importance": "core"},
    )
    escape_special: bool = field(
        default=DEFAULT_ESCAPE_SPECIAL,
        metadata={
            "help": "Escape special Markdown characters (e.g. asterisks) in text content",
            "cli_name": "no-escape-special",
            "importance": "core",
        },
    )
    emphasis_symbol: EmphasisSymbol = field(
        default=DEFAULT_EMPHASIS_SYMBOL,
        metadata={"help": "Symbol to use for emphasis/italic formatting", "choices": ["*", "_"], "importance": "core"},
    )
    bullet_symbols: str = field(
        default=DEFAULT_BULLET_SYMBOLS,
        metadata={"help": "Characters to cycle through for nested bullet lists", "importance": "advanced"},
    )
    list_indent_width: int = field(
        default=DEFAULT_LIST_INDENT_WIDTH,
        metadata={"help": "Spaces per level of list indentation", "type": int, "importance": "advanced"},
    )
    underline_mode: UnderlineMode = field(
        default=DEFAULT_UNDERLINE_MODE,
        metadata={"help": "How to handle underlined text", "choices": ["html", "markdown", "ignore"],
                  "importance": "advanced"},
    )
    highlight_mode: HighlightMode = field(
        default=DEFAULT_HIGHLIGHT_MODE,
        metadata={"help": "How to handle highlighted text", "choices": ["html", "markdown", "ignore"],
                  "importance": "advanced"},
    )
    metadata_frontmatter: bool = field(
        default=DEFAULT_INCLUDE_METADATA_FRONTMATTER,
        metadata={"help": "Render document metadata as front matter", "importance": "core"},
    )
    metadata_format: MetadataFormatType = field(
        default=DEFAULT_METADATA_FORMAT,
        metadata={"help": "Format for metadata front matter: yaml, toml, or json",
                  "choices": ["yaml", "toml", "json"], "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate option values.

        Raises
        ------
        ValueError
            If a value is outside its allowed set or range.

        """
        super().__post_init__()

        if self.flavor not in ("gfm", "commonmark"):
            raise ValueError(f"flavor must be 'gfm' or 'commonmark', got {self.flavor!r}")
        if self.emphasis_symbol not in ("*", "_"):
            raise ValueError(f"emphasis_symbol must be '*' or '_', got {self.emphasis_symbol!r}")
        if not self.bullet_symbols:
            raise ValueError("bullet_symbols must contain at least one character")
        if self.list_indent_width < 1:
            raise ValueError(f"list_indent_width must be positive, got {self.list_indent_width}")
        for name in ("underline_mode", "highlight_mode"):
            if getattr(self, name) not in ("html", "markdown", "ignore"):
                raise ValueError(f"{name} must be one of html, markdown, ignore, got {getattr(self, name)!r}")
        if self.metadata_format not in ("yaml", "toml", "json"):
            raise ValueError(f"metadata_format must be yaml, toml or json, got {self.metadata_format!r}")
