#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/utils/metadata.py
"""Document metadata and front matter formatting.

The transformer records what it knows about a Lark document (the page title,
the root block id, counts of discovered assets) in ``Document.metadata``.
This module filters that mapping and serializes it as YAML (PyYAML), TOML
(tomli_w) or JSON front matter for the Markdown renderer.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import tomli_w
import yaml

from lark2md.constants import MetadataFormatType

# Fields rendered first, in this order; anything else follows alphabetically.
FIELD_OUTPUT_ORDER: tuple[str, ...] = (
    "title",
    "document_id",
    "url",
    "source",
    "image_count",
    "file_count",
)

# Transformer bookkeeping that never reaches front matter unless requested.
INTERNAL_METADATA_FIELDS: tuple[str, ...] = ("block_id", "token")


@dataclass(frozen=True)
class MetadataRenderPolicy:
    """Configuration describing which metadata fields reach the output.

    Parameters
    ----------
    include_fields : tuple of str
        Fields always rendered when present, including internal ones
    exclude_fields : tuple of str
        Fields never rendered
    include_custom_fields : bool
        Whether fields outside ``FIELD_OUTPUT_ORDER`` are rendered
    field_aliases : dict of str to str
        Output key renames applied after filtering

    """

    include_fields: Tuple[str, ...] = field(default_factory=tuple)
    exclude_fields: Tuple[str, ...] = field(default_factory=tuple)
    include_custom_fields: bool = True
    field_aliases: Dict[str, str] = field(default_factory=dict)


DEFAULT_METADATA_RENDER_POLICY = MetadataRenderPolicy()


def _value_is_meaningful(value: Any) -> bool:
    """Return True if the metadata value should be rendered."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, set, dict)):
        return bool(value)
    return True


@dataclass
class DocumentMetadata:
    """Container for Lark document metadata.

    Parameters
    ----------
    title : str | None
        Plain-text page title
    document_id : str | None
        Id of the PAGE block (the Lark document id)
    url : str | None
        Address of the document in the Lark web client
    image_count : int | None
        Number of image references discovered during transformation
    file_count : int | None
        Number of file references discovered during transformation
    custom : dict[str, Any]
        Any additional fields

    """

    title: Optional[str] = None
    document_id: Optional[str] = None
    url: Optional[str] = None
    image_count: Optional[int] = None
    file_count: Optional[int] = None
    custom: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert metadata to a dictionary, excluding unset values.

        Returns
        -------
        dict
            Dictionary containing only populated metadata fields

        """
        result: Dict[str, Any] = {}
        if self.title:
            result["title"] = self.title
        if self.document_id:
            result["document_id"] = self.document_id
        if self.url:
            result["url"] = self.url
        if self.image_count is not None:
            result["image_count"] = self.image_count
        if self.file_count is not None:
            result["file_count"] = self.file_count
        for key, value in self.custom.items():
            if value is not None:
                result[key] = value
        return result


def prepare_metadata_for_render(
    metadata: Union[DocumentMetadata, Mapping[str, Any], None], policy: MetadataRenderPolicy | None = None
) -> Dict[str, Any]:
    """Return metadata filtered and ordered according to the policy."""
    if not metadata:
        return {}

    policy = policy or DEFAULT_METADATA_RENDER_POLICY
    metadata_dict = metadata.to_dict() if isinstance(metadata, DocumentMetadata) else dict(metadata)

    include_fields = set(policy.include_fields)
    exclude_fields = set(policy.exclude_fields)
    output: Dict[str, Any] = {}

    def add_field(field_name: str) -> None:
        if field_name in exclude_fields:
            return
        value = metadata_dict.get(field_name)
        if not _value_is_meaningful(value):
            return
        output[policy.field_aliases.get(field_name, field_name)] = value

    for field_name in FIELD_OUTPUT_ORDER:
        add_field(field_name)

    for field_name in sorted(metadata_dict):
        if field_name in FIELD_OUTPUT_ORDER:
            continue
        if field_name in include_fields:
            add_field(field_name)
        elif policy.include_custom_fields and field_name not in INTERNAL_METADATA_FIELDS:
            add_field(field_name)

    return output


def format_yaml_frontmatter(
    metadata: Union[DocumentMetadata, Mapping[str, Any]], policy: MetadataRenderPolicy | None = None
) -> str:
    """Format metadata as YAML front matter.

    Parameters
    ----------
    metadata : DocumentMetadata or dict
        Metadata to format
    policy : MetadataRenderPolicy or None, optional
        Filtering policy describing which metadata fields to include

    Returns
    -------
    str
        YAML front matter with ``---`` delimiters, or an empty string

    Examples
    --------
    >>> print(format_yaml_frontmatter({"title": "Weekly sync"}))
    ---
    title: Weekly sync
    ---

    """
    data = prepare_metadata_for_render(metadata, policy)
    if not data:
        return ""

    yaml_content = yaml.safe_dump(data, sort_keys=False, default_flow_style=False, allow_unicode=True)
    if not yaml_content.endswith("\n"):
        yaml_content += "\n"
    return f"---\n{yaml_content}---\n\n"


def format_toml_frontmatter(
    metadata: Union[DocumentMetadata, Mapping[str, Any]], policy: MetadataRenderPolicy | None = None
) -> str:
    """Format metadata as TOML front matter delimited by ``+++``."""
    data = prepare_metadata_for_render(metadata, policy)
    if not data:
        return ""

    toml_content = tomli_w.dumps(data)
    if not toml_content.endswith("\n"):
        toml_content += "\n"
    return f"+++\n{toml_content}+++\n\n"


def format_json_frontmatter(
    metadata: Union[DocumentMetadata, Mapping[str, Any]], policy: MetadataRenderPolicy | None = None
) -> str:
    """Format metadata as a fenced JSON block."""
    data = prepare_metadata_for_render(metadata, policy)
    if not data:
        return ""

    json_content = json.dumps(data, indent=2, ensure_ascii=False)
    return f"```json\n{json_content}\n```\n\n"


def format_frontmatter(
    metadata: Union[DocumentMetadata, Mapping[str, Any], None],
    metadata_format: MetadataFormatType = "yaml",
    policy: MetadataRenderPolicy | None = None,
) -> str:
    """Format metadata as front matter in the requested format.

    Raises
    ------
    ValueError
        If ``metadata_format`` is not one of yaml, toml or json

    """
    if not metadata:
        return ""
    if metadata_format == "yaml":
        return format_yaml_frontmatter(metadata, policy)
    if metadata_format == "toml":
        return format_toml_frontmatter(metadata, policy)
    if metadata_format == "json":
        return format_json_frontmatter(metadata, policy)
    raise ValueError(f"Unsupported metadata format: {metadata_format!r}")
