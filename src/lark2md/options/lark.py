#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/options/lark.py
"""Configuration options for transforming Lark block trees.

This module defines the options that gate conditionally supported block
types and control structural flattening.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from lark2md.constants import (
    DEFAULT_DIAGRAM,
    DEFAULT_FILE,
    DEFAULT_FLAT_GRID,
    DEFAULT_HIGHLIGHT,
    DEFAULT_MAX_BLOCK_DEPTH,
    DEFAULT_WHITEBOARD,
    MAX_BLOCK_DEPTH_LIMIT,
)
from lark2md.options.base import BaseParserOptions


@dataclass(frozen=True)
class LarkOptions(BaseParserOptions):
    """Configuration options for Lark block tree transformation.

    Parameters
    ----------
    whiteboard : bool, default False
        Emit WHITEBOARD blocks as image nodes backed by their deferred
        thumbnail accessor. When False they produce no node.
    diagram : bool, default False
        Emit DIAGRAM blocks as an image (when a snapshot accessor is present)
        or a placeholder paragraph. When False they produce no node.
    file : bool, default False
        Emit FILE blocks as attachment nodes and collect file references.
        When False they produce no node and no reference.
    highlight : bool, default False
        Preserve highlight-colour marks as ``Highlight`` nodes. When False
        the mark is treated as if it had never been on the run.
    flat_grid : bool, default True
        Splice GRID/GRID_COLUMN children into the enclosing sequence. When
        False, grids are kept as ``Grid``/``GridColumn`` containers.
    max_depth : int, default 256
        Maximum block nesting depth followed. Deeper subtrees are dropped
        with a warning. At most 256.

    Examples
    --------
    Keep whiteboards and highlights:
        >>> options = LarkOptions(whiteboard=True, highlight=True)

    """

    whiteboard: bool = field(
        default=DEFAULT_WHITEBOARD,
        metadata={"help": "Render whiteboards as images", "importance": "core"},
    )
    diagram: bool = field(
        default=DEFAULT_DIAGRAM,
        metadata={"help": "Render diagram blocks (snapshot image or placeholder)", "importance": "core"},
    )
    file: bool = field(
        default=DEFAULT_FILE,
        metadata={"help": "Render file attachments and collect file references", "importance": "core"},
    )
    highlight: bool = field(
        default=DEFAULT_HIGHLIGHT,
        metadata={"help": "Preserve text highlight colours", "importance": "core"},
    )
    flat_grid: bool = field(
        default=DEFAULT_FLAT_GRID,
        metadata={
            "help": "Splice grid column content into the document instead of keeping grid containers",
            "cli_name": "no-flat-grid",
            "importance": "core",
        },
    )
    max_depth: int = field(
        default=DEFAULT_MAX_BLOCK_DEPTH,
        metadata={"help": "Maximum block nesting depth to follow", "type": int, "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate option values.

        Raises
        ------
        ValueError
            If a flag is not a bool or ``max_depth`` is not an integer in
            1..MAX_BLOCK_DEPTH_LIMIT.

        """
        super().__post_init__()

        for name in ("whiteboard", "diagram", "file", "highlight", "flat_grid"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise ValueError(f"{name} must be a bool, got {type(value).__name__}")

        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int) or self.max_depth < 1:
            raise ValueError(f"max_depth must be a positive integer, got {self.max_depth!r}")
        if self.max_depth > MAX_BLOCK_DEPTH_LIMIT:
            raise ValueError(f"max_depth must be at most {MAX_BLOCK_DEPTH_LIMIT}, got {self.max_depth}")
