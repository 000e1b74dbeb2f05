#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/options/__init__.py
"""Configuration options for Lark transformation and Markdown rendering."""

from lark2md.options.base import BaseParserOptions, BaseRendererOptions, CloneFrozenMixin
from lark2md.options.lark import LarkOptions
from lark2md.options.markdown import MarkdownRendererOptions

__all__ = [
    "BaseParserOptions",
    "BaseRendererOptions",
    "CloneFrozenMixin",
    "LarkOptions",
    "MarkdownRendererOptions",
]
