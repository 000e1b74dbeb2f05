#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/utils/flavors.py
"""Markdown flavor definitions and capabilities.

A flavor tells the renderer which extended constructs the target dialect
understands. Lark documents lean on tables, task lists and strikethrough, so
the flavor decides whether those render natively or fall back to HTML/plain
text.

Supported Flavors
-----------------
- GFM (GitHub Flavored Markdown): CommonMark plus tables, task lists,
  strikethrough and ``$`` math
- CommonMark: the strict specification with no extensions

"""

from __future__ import annotations

from abc import ABC, abstractmethod

from lark2md.constants import FlavorType


class MarkdownFlavor(ABC):
    """Abstract base class for markdown flavors."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable flavor name."""

    @abstractmethod
    def supports_tables(self) -> bool:
        """Check if this flavor supports pipe tables.

        Returns
        -------
        bool
            True if pipe tables are supported

        """

    @abstractmethod
    def supports_task_lists(self) -> bool:
        """Check if this flavor supports ``[ ]`` / ``[x]`` list items."""

    @abstractmethod
    def supports_strikethrough(self) -> bool:
        """Check if this flavor supports ``~~strikethrough~~``."""

    @abstractmethod
    def supports_math(self) -> bool:
        """Check if this flavor supports ``$...$`` inline math."""


class CommonMarkFlavor(MarkdownFlavor):
    """Strict CommonMark specification flavor.

    Features outside the specification are rendered as inline HTML
    (tables, strikethrough) or plain text (task markers, math).

    References
    ----------
    CommonMark Spec: https://spec.commonmark.org/

    """

    @property
    def name(self) -> str:
        """Return 'CommonMark'."""
        return "CommonMark"

    def supports_tables(self) -> bool:
        """Tables are not in the CommonMark spec."""
        return False

    def supports_task_lists(self) -> bool:
        """Task lists are not in the CommonMark spec."""
        return False

    def supports_strikethrough(self) -> bool:
        """Strikethrough is not in the CommonMark spec."""
        return False

    def supports_math(self) -> bool:
        """Math is not in the CommonMark spec."""
        return False


class GFMFlavor(MarkdownFlavor):
    """GitHub Flavored Markdown (GFM) flavor.

    References
    ----------
    GFM Spec: https://github.github.com/gfm/

    """

    @property
    def name(self) -> str:
        """Return 'GFM'."""
        return "GFM"

    def supports_tables(self) -> bool:
        """GFM supports pipe tables."""
        return True

    def supports_task_lists(self) -> bool:
        """GFM supports task lists."""
        return True

    def supports_strikethrough(self) -> bool:
        """GFM supports strikethrough with tildes."""
        return True

    def supports_math(self) -> bool:
        """GitHub renders ``$...$`` math."""
        return True


_FLAVORS: dict[str, type[MarkdownFlavor]] = {
    "gfm": GFMFlavor,
    "commonmark": CommonMarkFlavor,
}


def get_flavor(flavor: FlavorType | str) -> MarkdownFlavor:
    """Return a flavor instance for a flavor name.

    Parameters
    ----------
    flavor : {"gfm", "commonmark"}
        Flavor name, case-insensitive

    Returns
    -------
    MarkdownFlavor
        The flavor instance

    Raises
    ------
    ValueError
        If the flavor name is unknown

    """
    try:
        return _FLAVORS[flavor.lower()]()
    except KeyError:
        raise ValueError(f"Unknown markdown flavor: {flavor!r}. Expected one of: {', '.join(_FLAVORS)}") from None
