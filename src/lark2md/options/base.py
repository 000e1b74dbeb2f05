#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/options/base.py
"""Base classes for parser and renderer options.

Options are frozen dataclasses: one instance is resolved per conversion call
and never mutated. Use ``create_updated`` to derive a modified copy.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, fields, replace
from typing import Any

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from lark2md.utils.metadata import MetadataRenderPolicy


@dataclass(frozen=True)
class CloneFrozenMixin:
    """Mixin providing frozen dataclass cloning capabilities."""

    def create_updated(self, **kwargs: Any) -> Self:
        """Create a new instance with updated field values.

        Parameters
        ----------
        **kwargs : Any
            Field names and their new values

        Returns
        -------
        Self
            New instance with specified fields updated

        Raises
        ------
        TypeError
            If a keyword does not name a field of this options class

        """
        return replace(self, **kwargs)

    @classmethod
    def from_mapping(cls, values: dict[str, Any] | None) -> Self:
        """Build options from a mapping, ignoring unrecognized keys.

        Absent keys take their documented defaults.

        """
        if not values:
            return cls()
        known = {f.name for f in fields(cls) if f.init}
        return cls(**{key: value for key, value in values.items() if key in known})


@dataclass(frozen=True)
class BaseParserOptions(CloneFrozenMixin):
    """Base class for all parser options.

    Notes
    -----
    Subclasses define source-specific options as frozen dataclass fields and
    validate them in ``__post_init__``.

    """

    def __post_init__(self) -> None:
        """Validate field values; the base class has nothing to check."""
        pass


@dataclass(frozen=True)
class BaseRendererOptions(CloneFrozenMixin):
    """Base class for all renderer options.

    Parameters
    ----------
    metadata_policy : MetadataRenderPolicy
        Policy controlling which metadata fields reach the front matter

    """

    metadata_policy: MetadataRenderPolicy = field(
        default_factory=MetadataRenderPolicy,
        metadata={
            "help": "Metadata rendering policy controlling which fields appear in output",
            "importance": "advanced",
        },
    )

    def __post_init__(self) -> None:
        """Validate field values; the base class has nothing to check."""
        pass
