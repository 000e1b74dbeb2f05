#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/blocks/loader.py
"""Load Lark docx block snapshots from open-API JSON.

The Lark "list document blocks" endpoint returns a flat list of block
objects, each with a ``block_type`` number and a payload stored under a
type-specific key (``text``, ``heading2``, ``table``, ``board``...). This
module maps those objects onto the typed variants in
:mod:`lark2md.blocks.model`.

Loading is lenient: absent or mistyped payload fields become "absent"
values and unknown type numbers become ``FALLBACK``. Only input that is not
JSON, or holds no block list at all, is rejected.
"""

from __future__ import annotations

import functools
import json
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Iterable, Mapping, Optional, Protocol, Union
from urllib.parse import unquote

from lark2md.blocks.inline import Equation, InlineElement, MentionDoc, MentionUser, TextRun
from lark2md.blocks.model import (
    AssetAccessor,
    AssetBlock,
    Block,
    BlockDocument,
    CalloutBlock,
    CellMerge,
    DiagramBlock,
    FileBlock,
    GridColumnBlock,
    HeadingBlock,
    IframeBlock,
    ImageBlock,
    IsvBlock,
    ListItemBlock,
    PageBlock,
    SourceCodeBlock,
    TableBlock,
    TextBlock,
    WhiteboardBlock,
)
from lark2md.blocks.types import HEADING_TYPES, LIST_ITEM_TYPES, BlockType, Mark
from lark2md.constants import CODE_LANGUAGES
from lark2md.exceptions import MalformedFileError
from lark2md.utils.io_utils import InputSource, read_text_source

logger = logging.getLogger(__name__)

# Payload key for each block type, as used by the open API.
PAYLOAD_KEYS: dict[BlockType, str] = {
    BlockType.PAGE: "page",
    BlockType.TEXT: "text",
    BlockType.BULLET: "bullet",
    BlockType.ORDERED: "ordered",
    BlockType.CODE: "code",
    BlockType.QUOTE: "quote",
    BlockType.TODO: "todo",
    BlockType.CALLOUT: "callout",
    BlockType.DIAGRAM: "diagram",
    BlockType.FILE: "file",
    BlockType.GRID_COLUMN: "grid_column",
    BlockType.IFRAME: "iframe",
    BlockType.IMAGE: "image",
    BlockType.ISV: "isv",
    BlockType.TABLE: "table",
    BlockType.WHITEBOARD: "board",
    **{t: f"heading{t.heading_level}" for t in HEADING_TYPES},
}

_STYLE_MARKS: tuple[tuple[str, Mark], ...] = (
    ("bold", Mark.BOLD),
    ("italic", Mark.ITALIC),
    ("strikethrough", Mark.STRIKETHROUGH),
    ("underline", Mark.UNDERLINE),
    ("inline_code", Mark.INLINE_CODE),
)


class AssetFetcher(Protocol):
    """Document-access collaborator that can download Lark assets.

    Both methods are coroutines. The loader binds them, with the asset token
    and block type, into the zero-argument accessors stored on blocks.
    """

    def fetch_sources(self, token: str, block_type: BlockType) -> Awaitable[Any]:
        """Return source descriptors (download URLs, mime type) for an asset."""
        ...

    def fetch_blob(self, token: str, block_type: BlockType) -> Awaitable[bytes]:
        """Return the binary payload of an asset."""
        ...


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value)
    return None


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _decode_url(url: Any) -> Optional[str]:
    """Percent-decode a Lark link target; the API stores them encoded."""
    if not isinstance(url, str) or not url.strip():
        return None
    return unquote(url.strip())


def parse_text_style(style: Mapping[str, Any]) -> tuple[frozenset[Mark], Optional[str], Optional[int]]:
    """Extract marks, link target and highlight colour from ``text_element_style``.

    Parameters
    ----------
    style : mapping
        The ``text_element_style`` object of an element

    Returns
    -------
    tuple
        ``(marks, link, highlight_color)``

    """
    marks = {mark for key, mark in _STYLE_MARKS if style.get(key) is True}
    highlight_color = _as_int(style.get("background_color"))
    if highlight_color is not None and highlight_color > 0:
        marks.add(Mark.HIGHLIGHT)
    else:
        highlight_color = None
    link = _decode_url(_as_dict(style.get("link")).get("url"))
    return frozenset(marks), link, highlight_color


def parse_elements(raw_elements: Any) -> tuple[InlineElement, ...]:
    """Convert a list of raw Lark text elements into inline elements.

    Unknown element kinds are skipped.
    """
    if not isinstance(raw_elements, list):
        return ()

    elements: list[InlineElement] = []
    for raw in raw_elements:
        if not isinstance(raw, dict):
            continue
        if "text_run" in raw:
            run = _as_dict(raw["text_run"])
            marks, link, color = parse_text_style(_as_dict(run.get("text_element_style")))
            elements.append(TextRun(_as_str(run.get("content")) or "", marks, link, color))
        elif "mention_user" in raw:
            mention = _as_dict(raw["mention_user"])
            elements.append(
                MentionUser(user_id=_as_str(mention.get("user_id")) or "", name=_as_str(mention.get("name")) or "")
            )
        elif "mention_doc" in raw:
            mention = _as_dict(raw["mention_doc"])
            elements.append(
                MentionDoc(
                    token=_as_str(mention.get("token")) or "",
                    title=_as_str(mention.get("title")) or "",
                    url=_decode_url(mention.get("url")) or "",
                    obj_type=_as_int(mention.get("obj_type")),
                )
            )
        elif "equation" in raw:
            equation = _as_dict(raw["equation"])
            elements.append(Equation((_as_str(equation.get("content")) or "").strip()))
        elif "reminder" in raw:
            reminder = _as_dict(raw["reminder"])
            expire_ms = _as_int(reminder.get("expire_time"))
            if expire_ms is None:
                continue
            try:
                when = datetime.fromtimestamp(expire_ms / 1000, tz=timezone.utc)
            except (OverflowError, OSError, ValueError):
                logger.debug(f"Skipping reminder with out-of-range expire_time {expire_ms}")
                continue
            elements.append(TextRun(when.strftime("%Y-%m-%d")))
        else:
            logger.debug(f"Skipping unsupported inline element: {sorted(raw)}")
    return tuple(elements)


def _bind_accessors(
    fetcher: Optional[AssetFetcher], token: Optional[str], block_type: BlockType
) -> tuple[Optional[AssetAccessor], Optional[AssetAccessor]]:
    if fetcher is None or not token:
        return None, None
    return (
        functools.partial(fetcher.fetch_sources, token, block_type),
        functools.partial(fetcher.fetch_blob, token, block_type),
    )


def _parse_table(common: dict[str, Any], payload: dict[str, Any]) -> TableBlock:
    prop = _as_dict(payload.get("property"))
    cells = tuple(c for c in _as_list(payload.get("cells")) if isinstance(c, str))
    merges = tuple(
        CellMerge(
            row_span=max(_as_int(_as_dict(m).get("row_span")) or 1, 1),
            col_span=max(_as_int(_as_dict(m).get("col_span")) or 1, 1),
        )
        for m in _as_list(prop.get("merge_info"))
    )
    return TableBlock(
        **common,
        row_size=_as_int(prop.get("row_size")),
        column_size=_as_int(prop.get("column_size")),
        cells=cells,
        merge_info=merges,
        header_row=prop.get("header_row") is True,
        header_column=prop.get("header_column") is True,
    )


def _parse_asset(
    common: dict[str, Any], payload: dict[str, Any], block_type: BlockType, fetcher: Optional[AssetFetcher]
) -> AssetBlock:
    token = _as_str(payload.get("token")) or None
    fetch_sources, fetch_blob = _bind_accessors(fetcher, token, block_type)
    asset_fields = dict(
        common, token=token, name=_as_str(payload.get("name")), fetch_sources=fetch_sources, fetch_blob=fetch_blob
    )

    if block_type == BlockType.IMAGE:
        caption = _as_dict(payload.get("caption")).get("content")
        return ImageBlock(
            **asset_fields,
            width=_as_int(payload.get("width")),
            height=_as_int(payload.get("height")),
            caption=_as_str(caption) or None,
        )
    if block_type == BlockType.FILE:
        return FileBlock(**asset_fields, view_type=_as_int(payload.get("view_type")))
    if block_type == BlockType.WHITEBOARD:
        return WhiteboardBlock(**asset_fields)
    return DiagramBlock(**asset_fields, diagram_type=_as_int(payload.get("diagram_type")))


def parse_block(raw: Mapping[str, Any], fetcher: Optional[AssetFetcher] = None) -> Optional[Block]:
    """Convert one raw open-API block object into a typed block.

    Parameters
    ----------
    raw : mapping
        Block object with ``block_id``, ``block_type`` and a payload
    fetcher : AssetFetcher, optional
        Source of deferred accessors for asset blocks

    Returns
    -------
    Block or None
        The typed block, or None when the object has no usable ``block_id``

    """
    block_id = _as_str(raw.get("block_id"))
    if not block_id:
        logger.warning("Skipping block without block_id")
        return None

    block_type = BlockType.from_value(raw.get("block_type"))
    if block_type == BlockType.FALLBACK and raw.get("block_type") != BlockType.FALLBACK:
        logger.debug(f"Unknown block_type {raw.get('block_type')!r} for block {block_id}")

    common: dict[str, Any] = {
        "block_id": block_id,
        "block_type": block_type,
        "children": tuple(c for c in _as_list(raw.get("children")) if isinstance(c, str)),
        "parent_id": _as_str(raw.get("parent_id")) or None,
    }
    payload = _as_dict(raw.get(PAYLOAD_KEYS.get(block_type, ""), {}))
    style = _as_dict(payload.get("style"))

    if block_type == BlockType.PAGE:
        return PageBlock(**common, title=parse_elements(payload.get("elements")))
    if block_type in (BlockType.TEXT, BlockType.QUOTE):
        return TextBlock(**common, elements=parse_elements(payload.get("elements")))
    if block_type in HEADING_TYPES:
        return HeadingBlock(**common, elements=parse_elements(payload.get("elements")))
    if block_type in LIST_ITEM_TYPES:
        done = style.get("done")
        return ListItemBlock(
            **common,
            elements=parse_elements(payload.get("elements")),
            sequence=_as_str(style.get("sequence")),
            done=done if isinstance(done, bool) else None,
        )
    if block_type == BlockType.CODE:
        language_code = _as_int(style.get("language"))
        return SourceCodeBlock(
            **common,
            elements=parse_elements(payload.get("elements")),
            language=CODE_LANGUAGES.get(language_code, "") if language_code is not None else None,
            wrap=style.get("wrap") is True,
        )
    if block_type == BlockType.CALLOUT:
        return CalloutBlock(
            **common,
            emoji_id=_as_str(payload.get("emoji_id")),
            background_color=_as_int(payload.get("background_color")),
        )
    if block_type == BlockType.TABLE:
        return _parse_table(common, payload)
    if block_type == BlockType.GRID_COLUMN:
        return GridColumnBlock(**common, width_ratio=_as_int(payload.get("width_ratio")))
    if block_type in (BlockType.IMAGE, BlockType.FILE, BlockType.WHITEBOARD, BlockType.DIAGRAM):
        return _parse_asset(common, payload, block_type, fetcher)
    if block_type == BlockType.IFRAME:
        component = _as_dict(payload.get("component"))
        return IframeBlock(
            **common, url=_decode_url(component.get("url")), iframe_type=_as_int(component.get("iframe_type"))
        )
    if block_type == BlockType.ISV:
        return IsvBlock(
            **common,
            component_id=_as_str(payload.get("component_id")),
            component_type_id=_as_str(payload.get("component_type_id")),
            source=next((v for v in (payload.get("source"), payload.get("data")) if isinstance(v, str) and v), None),
        )
    return Block(**common)


def _extract_items(data: Any) -> list[Any]:
    """Find the block list in a decoded JSON payload."""
    if isinstance(data, (list, tuple)):
        return list(data)
    if isinstance(data, dict):
        if isinstance(data.get("data"), dict):
            return _extract_items(data["data"])
        for key in ("items", "blocks"):
            if isinstance(data.get(key), list):
                return data[key]
    raise MalformedFileError("JSON payload does not contain a list of blocks")


def load_block_document(
    source: Union[InputSource, Iterable[Mapping[str, Any]], Mapping[str, Any]],
    *,
    fetcher: Optional[AssetFetcher] = None,
    root_id: Optional[str] = None,
) -> BlockDocument:
    """Load a block snapshot into a ``BlockDocument``.

    Parameters
    ----------
    source : path, JSON text, bytes, stream, list of dicts or dict
        A JSON block list, an open-API response (``{"data": {"items": [...]}}``)
        or an already-decoded equivalent
    fetcher : AssetFetcher, optional
        Binds deferred accessors on IMAGE, FILE, WHITEBOARD and DIAGRAM blocks
    root_id : str, optional
        Root block id; defaults to the first PAGE block

    Returns
    -------
    BlockDocument
        The indexed snapshot

    Raises
    ------
    MalformedFileError
        If the input cannot be read or decoded, or holds no block list

    Examples
    --------
    >>> doc = load_block_document('[{"block_id": "p", "block_type": 1}]')
    >>> doc.root.block_type
    <BlockType.PAGE: 1>

    """
    data: Any
    if isinstance(source, (list, tuple, dict)):
        data = source
    else:
        try:
            text = read_text_source(source)  # type: ignore[arg-type]
        except (OSError, UnicodeDecodeError, TypeError) as e:
            raise MalformedFileError(f"Could not read block snapshot: {e}", original_error=e) from e
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedFileError(f"Block snapshot is not valid JSON: {e}", original_error=e) from e

    blocks: list[Block] = []
    for raw in _extract_items(data):
        if not isinstance(raw, Mapping):
            logger.warning(f"Skipping non-object block entry of type {type(raw).__name__}")
            continue
        block = parse_block(raw, fetcher)
        if block is not None:
            blocks.append(block)

    logger.debug(f"Loaded {len(blocks)} blocks")
    return BlockDocument(blocks, root_id=root_id)


__all__ = [
    "AssetFetcher",
    "PAYLOAD_KEYS",
    "load_block_document",
    "parse_block",
    "parse_elements",
    "parse_text_style",
]
