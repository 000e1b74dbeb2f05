#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/parsers/base.py
"""Base classes for source-to-AST converters.

A converter turns a source document model into the lark2md AST. Concrete
converters validate their options type on construction, build the tree in
``parse`` and report source metadata through ``extract_metadata``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from lark2md.ast import Document
from lark2md.exceptions import InvalidOptionsError
from lark2md.options.base import BaseParserOptions
from lark2md.utils.metadata import DocumentMetadata

logger = logging.getLogger(__name__)


class BaseParser(ABC):
    """Abstract base class for converters producing a ``Document`` AST.

    Parameters
    ----------
    options : BaseParserOptions or None, default = None
        Source-specific options

    Examples
    --------
        >>> class EmptyParser(BaseParser):
        ...     def parse(self, input_data):
        ...         return Document(children=[])
        ...     def extract_metadata(self, document):
        ...         return DocumentMetadata()

    """

    def __init__(self, options: BaseParserOptions | None = None):
        """Initialize the parser with optional configuration."""
        self.options: BaseParserOptions | None = options

    @staticmethod
    def _validate_options_type(options: BaseParserOptions | None, expected_type: type, parser_name: str) -> None:
        """Validate that options are of the correct type for this parser.

        Raises
        ------
        InvalidOptionsError
            If options are not None and not an instance of expected_type

        """
        if options is not None and not isinstance(options, expected_type):
            raise InvalidOptionsError(
                converter_name=parser_name,
                expected_type=expected_type,
                received_type=type(options),
            )

    @abstractmethod
    def parse(self, input_data: Any) -> Document:
        """Convert the source document into an AST ``Document``.

        Raises
        ------
        InvariantViolationError
            If the source document is structurally unusable

        """
        raise NotImplementedError

    @abstractmethod
    def extract_metadata(self, document: Any) -> DocumentMetadata:
        """Extract metadata from the source document.

        Implementations return an empty ``DocumentMetadata`` when nothing is
        available rather than raising.
        """
        raise NotImplementedError
