#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/renderers/base.py
"""Base classes for AST renderers.

A renderer turns a lark2md ``Document`` into an output format. Text
renderers implement ``render_to_string``; ``render`` then writes that text
to a path or stream.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO, Any, Dict, Mapping, Union

from lark2md.ast import Document
from lark2md.ast.nodes import Node
from lark2md.exceptions import InvalidOptionsError, OutputWriteError
from lark2md.options.base import BaseRendererOptions
from lark2md.utils.io_utils import write_content
from lark2md.utils.metadata import DocumentMetadata, MetadataRenderPolicy, prepare_metadata_for_render

logger = logging.getLogger(__name__)


class BaseRenderer(ABC):
    """Abstract base class for all AST renderers.

    Parameters
    ----------
    options : BaseRendererOptions or None, default = None
        Format-specific rendering options

    """

    def __init__(self, options: BaseRendererOptions | None = None):
        """Initialize the renderer with optional configuration."""
        self.options = options
        self.metadata_policy: MetadataRenderPolicy = options.metadata_policy if options else MetadataRenderPolicy()

    @abstractmethod
    def render(self, doc: Document, output: Union[str, Path, IO[bytes], IO[str]]) -> None:
        """Render the AST to a file path or file-like object.

        Raises
        ------
        OutputWriteError
            If the output cannot be written

        """
        pass

    def render_to_string(self, doc: Document) -> str:
        """Render the AST to a string.

        Raises
        ------
        NotImplementedError
            If the renderer does not support string output

        """
        raise NotImplementedError(f"{self.__class__.__name__} does not support rendering to a string.")

    def _prepare_metadata(self, metadata: Union[Mapping[str, Any], DocumentMetadata, None]) -> Dict[str, Any]:
        """Normalize and filter metadata according to the renderer policy."""
        return prepare_metadata_for_render(metadata, self.metadata_policy)

    @staticmethod
    def _validate_options_type(options: BaseRendererOptions | None, expected_type: type, renderer_name: str) -> None:
        """Validate that options are of the correct type for this renderer.

        Raises
        ------
        InvalidOptionsError
            If options are not None and not an instance of expected_type

        """
        if options is not None and not isinstance(options, expected_type):
            raise InvalidOptionsError(
                converter_name=renderer_name,
                expected_type=expected_type,
                received_type=type(options),
            )

    @staticmethod
    def write_text_output(text: str, output: Union[str, Path, IO[bytes], IO[str]]) -> None:
        """Write text output to a file path or stream.

        Raises
        ------
        OutputWriteError
            If the destination cannot be written
        TypeError
            If the output type is not supported

        Examples
        --------
            >>> from io import StringIO
            >>> buffer = StringIO()
            >>> BaseRenderer.write_text_output("# Hello", buffer)
            >>> buffer.getvalue()
            '# Hello'

        """
        try:
            write_content(text, output)
        except OSError as e:
            target = str(output) if isinstance(output, (str, Path)) else repr(output)
            logger.error(f"Could not write output to {target}: {e}")
            raise OutputWriteError(target, original_error=e) from e


class InlineContentMixin:
    """Mixin providing inline content rendering for text-based renderers.

    The implementing class must have an ``_output`` list and visitor methods
    that append to it.
    """

    _output: list[str]

    def _render_inline_content(self, content: list[Node]) -> str:
        """Render a list of inline nodes to text by temporarily capturing output."""
        saved_output = self._output
        self._output = []

        for node in content:
            node.accept(self)

        result = "".join(self._output)
        self._output = saved_output
        return result
