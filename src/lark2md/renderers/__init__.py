#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/renderers/__init__.py
"""Renderers turning a lark2md AST into output text."""

from lark2md.renderers.base import BaseRenderer, InlineContentMixin
from lark2md.renderers.markdown import MarkdownRenderer

__all__ = ["BaseRenderer", "InlineContentMixin", "MarkdownRenderer"]
