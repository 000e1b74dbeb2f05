#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/parsers/__init__.py
"""Converters from source document models to the lark2md AST."""

from lark2md.parsers.base import BaseParser
from lark2md.parsers.lark import LarkToAstConverter, TransformResult, transform

__all__ = ["BaseParser", "LarkToAstConverter", "TransformResult", "transform"]
