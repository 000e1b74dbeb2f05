#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/test_lark_assets.py
"""Unit tests for asset references and the bounded asset resolver."""

import asyncio

import pytest

from lark2md.assets import AssetRef, FileRef, ImageRef, ResolvedAsset, resolve_assets, url_map
from lark2md.exceptions import ValidationError


def _ref(token: str, accessor=None, **kwargs) -> ImageRef:
    return ImageRef(block_id=f"b_{token}", token=token, fetch_blob=accessor, **kwargs)


def _returning(value, delay: float = 0.0):
    async def accessor():
        if delay:
            await asyncio.sleep(delay)
        return value

    return accessor


def _failing(error: Exception):
    async def accessor():
        raise error

    return accessor


@pytest.mark.unit
class TestAssetRef:
    """Tests for AssetRef values."""

    def test_kinds(self):
        """Test default kinds of the ref subclasses."""
        assert ImageRef(block_id="b", token="t").kind == "image"
        assert FileRef(block_id="b", token="t").kind == "file"

    def test_accessors_ignored_in_equality(self):
        """Test refs with different accessors compare equal."""
        assert _ref("t", _returning(1)) == _ref("t")
        assert hash(_ref("t", _returning(1))) == hash(_ref("t"))

    def test_accessor_selection(self):
        """Test accessor() picks blob or sources."""
        blob, sources = _returning(b""), _returning({})
        ref = AssetRef(block_id="b", token="t", fetch_blob=blob, fetch_sources=sources)
        assert ref.accessor() is blob
        assert ref.accessor("sources") is sources


@pytest.mark.unit
class TestResolveAssets:
    """Tests for resolve_assets."""

    def test_results_in_input_order(self):
        """Test results follow input order regardless of completion order."""
        refs = [_ref("slow", _returning(b"1", 0.05)), _ref("fast", _returning(b"2"))]
        results = asyncio.run(resolve_assets(refs))
        assert [r.value for r in results] == [b"1", b"2"]
        assert all(r.ok for r in results)

    def test_failure_is_captured(self):
        """Test a failing accessor produces an error result, not an exception."""
        refs = [_ref("bad", _failing(ConnectionError("down"))), _ref("good", _returning(b"x"))]
        bad, good = asyncio.run(resolve_assets(refs))
        assert not bad.ok
        assert isinstance(bad.error, ConnectionError)
        assert good.value == b"x"

    def test_missing_accessor(self):
        """Test a ref without the requested accessor yields LookupError."""
        (result,) = asyncio.run(resolve_assets([_ref("t")]))
        assert isinstance(result.error, LookupError)

    def test_sources_kind(self):
        """Test the sources accessor can be requested."""
        ref = AssetRef(block_id="b", token="t", fetch_sources=_returning({"url": "u"}))
        (result,) = asyncio.run(resolve_assets([ref], kind="sources"))
        assert result.value == {"url": "u"}

    def test_concurrency_bound(self):
        """Test no more than max_concurrent accessors run at once."""
        active = 0
        peak = 0

        async def accessor():
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1
            return b""

        refs = [_ref(str(i), accessor) for i in range(8)]
        results = asyncio.run(resolve_assets(refs, max_concurrent=2))
        assert len(results) == 8
        assert peak == 2

    def test_timeout(self):
        """Test an accessor exceeding the timeout fails with TimeoutError."""
        (result,) = asyncio.run(resolve_assets([_ref("t", _returning(b"", 1.0))], timeout=0.01))
        assert isinstance(result.error, asyncio.TimeoutError)

    def test_empty_input(self):
        """Test resolving nothing returns an empty list."""
        assert asyncio.run(resolve_assets([])) == []

    @pytest.mark.parametrize("max_concurrent", [0, -1])
    def test_invalid_concurrency(self, max_concurrent):
        """Test a non-positive bound is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(resolve_assets([], max_concurrent=max_concurrent))
        assert exc_info.value.parameter_name == "max_concurrent"

    def test_invalid_kind(self):
        """Test an unknown accessor kind is rejected."""
        with pytest.raises(ValidationError):
            asyncio.run(resolve_assets([], kind="thumbnail"))  # type: ignore[arg-type]


@pytest.mark.unit
class TestUrlMap:
    """Tests for url_map."""

    def test_pairs_successful_results(self):
        """Test failed fetches and missing urls are left out."""
        resolved = [
            ResolvedAsset(_ref("a"), value=b""),
            ResolvedAsset(_ref("b"), error=RuntimeError("x")),
            ResolvedAsset(_ref("c"), value=b""),
        ]
        assert url_map(resolved, ["https://s/a", "https://s/b", None]) == {"b_a": "https://s/a"}

    def test_length_mismatch(self):
        """Test sequences of different length are rejected."""
        with pytest.raises(ValidationError):
            url_map([ResolvedAsset(_ref("a"))], [])
