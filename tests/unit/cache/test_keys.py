"""Tests for cache key builders."""

from __future__ import annotations

import pytest

from eraframe.cache.keys import CacheKeys
from eraframe.core.types import ResolverMode

# ============================================================================
# Resolution Key Tests
# ============================================================================


class TestResolutionKeys:
    """Tests for resolution cache keys."""

    def test_key_format(self):
        """Keys should be prefixed and carry the mode."""
        key = CacheKeys.resolution("Walkman", 1979, ResolverMode.FAST)

        prefix, kind, mode, digest = key.split(":")
        assert (prefix, kind, mode) == ("eraframe", "resolve", "fast")
        assert len(digest) == 16

    @pytest.mark.parametrize(
        "query",
        ["Walkman", "walkman", "  WALKMAN  ", "Walkman\n"],
    )
    def test_normalized_query(self, query: str):
        """Case and surrounding whitespace should not change the key."""
        assert CacheKeys.resolution(query, 1979, "fast") == CacheKeys.resolution(
            "walkman", 1979, ResolverMode.FAST
        )

    def test_year_distinguishes(self):
        assert CacheKeys.resolution("Walkman", 1979, "fast") != CacheKeys.resolution(
            "Walkman", 1985, "fast"
        )
        assert CacheKeys.resolution("Walkman", None, "fast") != CacheKeys.resolution(
            "Walkman", 1979, "fast"
        )

    def test_mode_distinguishes(self):
        assert CacheKeys.resolution("Walkman", 1979, "fast") != CacheKeys.resolution(
            "Walkman", 1979, "full"
        )

    def test_invalid_mode(self):
        with pytest.raises(ValueError):
            CacheKeys.resolution("Walkman", 1979, "thorough")
