#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/__init__.py
"""lark2md - convert Lark (Feishu) docx block trees to Markdown.

A Lark document is a flat list of typed blocks linked by id. lark2md walks
that tree from its PAGE root and builds a Markdown AST, collecting
references to images and files without downloading them. The AST can then
be rendered to GitHub Flavored Markdown or CommonMark.

Pipeline
--------
1. ``load_block_document`` maps a JSON snapshot to typed blocks
2. ``transform`` builds the AST plus deferred asset references
3. ``resolve_assets`` (optional, async) invokes the asset accessors
4. ``MarkdownRenderer`` turns the AST into text

Examples
--------
One-shot conversion of a saved snapshot:

    >>> from lark2md import to_markdown
    >>> markdown = to_markdown("blocks.json")  # doctest: +SKIP

Keeping the asset references:

    >>> from lark2md import LarkOptions, load_block_document, transform
    >>> result = transform(load_block_document("blocks.json"), LarkOptions(whiteboard=True))  # doctest: +SKIP
    >>> [ref.token for ref in result.images]  # doctest: +SKIP

"""

from __future__ import annotations

import logging
from importlib.metadata import PackageNotFoundError, version
from typing import Any, Mapping, Optional, Union

from lark2md.assets import AssetRef, FileRef, ImageRef, ResolvedAsset, resolve_assets, url_map
from lark2md.ast import AssetUrlBinder, Document
from lark2md.blocks import AssetFetcher, BlockDocument, BlockType, load_block_document
from lark2md.exceptions import (
    CyclicBlockReferenceError,
    InvalidOptionsError,
    InvalidRootError,
    InvariantViolationError,
    Lark2MdError,
    MalformedFileError,
    OutputWriteError,
    ParsingError,
    RenderingError,
    ValidationError,
)
from lark2md.options import LarkOptions, MarkdownRendererOptions
from lark2md.parsers import LarkToAstConverter, TransformResult, transform
from lark2md.renderers import MarkdownRenderer
from lark2md.utils.io_utils import InputSource

try:
    __version__ = version("lark2md")
except PackageNotFoundError:
    __version__ = "0.0.0"

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def to_markdown(
    source: Union[BlockDocument, InputSource, list[dict[str, Any]]],
    options: Optional[LarkOptions] = None,
    renderer_options: Optional[MarkdownRendererOptions] = None,
    *,
    asset_urls: Optional[Mapping[str, str]] = None,
    fetcher: Optional[AssetFetcher] = None,
) -> str:
    """Convert a Lark block snapshot to Markdown text.

    Parameters
    ----------
    source : BlockDocument, path, JSON text, bytes, stream or list of block dicts
        The snapshot to convert
    options : LarkOptions, optional
        Transformation options
    renderer_options : MarkdownRendererOptions, optional
        Markdown rendering options
    asset_urls : mapping of str to str, optional
        ``{block_id: url}`` for assets the caller has already stored. Images
        and attachments without an entry keep their asset token as target.
    fetcher : AssetFetcher, optional
        Bound into the asset accessors when ``source`` has to be loaded

    Returns
    -------
    str
        The rendered Markdown

    Raises
    ------
    MalformedFileError
        If the snapshot cannot be read
    InvariantViolationError
        If the block tree has no PAGE root or contains a cycle
    InvalidOptionsError
        If an options object of the wrong class is passed

    """
    document = source if isinstance(source, BlockDocument) else load_block_document(source, fetcher=fetcher)
    result = LarkToAstConverter(options).transform(document)

    root: Document = result.root
    if asset_urls:
        root = AssetUrlBinder(asset_urls).transform(root)

    return MarkdownRenderer(renderer_options).render_to_string(root)


__all__ = [
    "__version__",
    # Conversion
    "to_markdown",
    "transform",
    "load_block_document",
    "LarkToAstConverter",
    "TransformResult",
    "MarkdownRenderer",
    # Options
    "LarkOptions",
    "MarkdownRendererOptions",
    # Source model
    "AssetFetcher",
    "BlockDocument",
    "BlockType",
    # Assets
    "AssetRef",
    "ImageRef",
    "FileRef",
    "ResolvedAsset",
    "resolve_assets",
    "url_map",
    "AssetUrlBinder",
    # Errors
    "Lark2MdError",
    "ValidationError",
    "InvalidOptionsError",
    "ParsingError",
    "MalformedFileError",
    "InvariantViolationError",
    "InvalidRootError",
    "CyclicBlockReferenceError",
    "RenderingError",
    "OutputWriteError",
]
