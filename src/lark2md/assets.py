#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/assets.py
"""Deferred asset references and a bounded resolver for them.

The transformer never downloads anything. For every IMAGE (and, when
enabled, FILE, WHITEBOARD or DIAGRAM) block it records an ``AssetRef``
holding the block's unmodified ``fetch_sources``/``fetch_blob`` accessors.
The same ref object is attached to the produced AST node as its ``data``
and appended to the ``images`` or ``files`` collection of the result.

Resolving those refs is the caller's job. ``resolve_assets`` is a
convenience for callers that want bounded concurrency and a per-asset
timeout; failures are captured per asset instead of raised.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence

from lark2md.blocks.model import AssetAccessor
from lark2md.constants import DEFAULT_ASSET_FETCH_TIMEOUT, DEFAULT_MAX_CONCURRENT_FETCHES, AssetFetchKind
from lark2md.exceptions import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssetRef:
    """Reference to a binary asset discovered during transformation.

    Parameters
    ----------
    block_id : str
        Id of the source block
    token : str
        Lark asset token
    name : str
        File name or display name; may be empty
    kind : str
        Source block kind: "image", "file", "whiteboard" or "diagram"
    fetch_sources : callable or None
        The block's source-descriptor accessor, unmodified
    fetch_blob : callable or None
        The block's binary payload accessor, unmodified

    Notes
    -----
    Accessors are excluded from equality and hashing, so refs produced by two
    transformations of the same snapshot compare equal.

    """

    block_id: str
    token: str
    name: str = ""
    kind: str = "image"
    fetch_sources: Optional[AssetAccessor] = field(default=None, compare=False, repr=False)
    fetch_blob: Optional[AssetAccessor] = field(default=None, compare=False, repr=False)

    def accessor(self, kind: AssetFetchKind = "blob") -> Optional[AssetAccessor]:
        """Return the accessor for ``kind`` ("blob" or "sources")."""
        return self.fetch_blob if kind == "blob" else self.fetch_sources


@dataclass(frozen=True)
class ImageRef(AssetRef):
    """An image-like asset (IMAGE, WHITEBOARD thumbnail, DIAGRAM snapshot)."""


@dataclass(frozen=True)
class FileRef(AssetRef):
    """A file attachment asset."""

    kind: str = "file"


@dataclass
class ResolvedAsset:
    """Outcome of invoking one asset accessor.

    Exactly one of ``value`` and ``error`` is meaningful: ``error`` is None on
    success.
    """

    ref: AssetRef
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        """True when the accessor completed without error."""
        return self.error is None


async def _resolve_one(
    ref: AssetRef,
    kind: AssetFetchKind,
    semaphore: asyncio.Semaphore,
    timeout: Optional[float],
) -> ResolvedAsset:
    accessor = ref.accessor(kind)
    if accessor is None:
        return ResolvedAsset(ref, error=LookupError(f"Asset {ref.token!r} has no {kind} accessor"))

    async with semaphore:
        try:
            if timeout is None:
                value = await accessor()
            else:
                value = await asyncio.wait_for(accessor(), timeout=timeout)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Failed to fetch {ref.kind} {ref.token!r} (block {ref.block_id}): {e}")
            return ResolvedAsset(ref, error=e)

    logger.debug(f"Fetched {ref.kind} {ref.token!r}")
    return ResolvedAsset(ref, value=value)


async def resolve_assets(
    refs: Iterable[AssetRef],
    *,
    kind: AssetFetchKind = "blob",
    max_concurrent: int = DEFAULT_MAX_CONCURRENT_FETCHES,
    timeout: Optional[float] = DEFAULT_ASSET_FETCH_TIMEOUT,
) -> list[ResolvedAsset]:
    """Invoke each ref's accessor once, with bounded concurrency.

    Parameters
    ----------
    refs : iterable of AssetRef
        References as returned in ``TransformResult.images``/``files``
    kind : {"blob", "sources"}, default "blob"
        Which accessor to invoke
    max_concurrent : int, default 4
        Maximum number of accessors awaited at the same time
    timeout : float or None, default None
        Per-asset timeout in seconds

    Returns
    -------
    list of ResolvedAsset
        One result per ref, in input order

    Raises
    ------
    ValidationError
        If ``max_concurrent`` is not positive or ``kind`` is unknown

    Examples
    --------
    >>> results = asyncio.run(resolve_assets(result.images, max_concurrent=2))  # doctest: +SKIP

    """
    if max_concurrent < 1:
        raise ValidationError(
            f"max_concurrent must be positive, got {max_concurrent}",
            parameter_name="max_concurrent",
            parameter_value=max_concurrent,
        )
    if kind not in ("blob", "sources"):
        raise ValidationError(f"Unknown accessor kind: {kind!r}", parameter_name="kind", parameter_value=kind)

    semaphore = asyncio.Semaphore(max_concurrent)
    ref_list = list(refs)
    return list(await asyncio.gather(*(_resolve_one(ref, kind, semaphore, timeout) for ref in ref_list)))


def url_map(resolved: Sequence[ResolvedAsset], urls: Sequence[Optional[str]]) -> dict[str, str]:
    """Pair resolved assets with the URLs the caller stored them under.

    Entries whose URL is None or whose fetch failed are left out. The result
    feeds :class:`lark2md.ast.transforms.AssetUrlBinder`.

    Raises
    ------
    ValidationError
        If the two sequences differ in length

    """
    if len(resolved) != len(urls):
        raise ValidationError(
            f"Got {len(resolved)} resolved assets but {len(urls)} urls", parameter_name="urls", parameter_value=urls
        )
    return {item.ref.block_id: url for item, url in zip(resolved, urls) if item.ok and url}


__all__ = ["AssetRef", "ImageRef", "FileRef", "ResolvedAsset", "resolve_assets", "url_map"]
