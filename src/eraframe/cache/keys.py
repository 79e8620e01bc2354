"""Cache key builders for consistent key formatting."""

import hashlib

from eraframe.core.normalization import normalize_query
from eraframe.core.types import ResolverMode


class CacheKeys:
    """Cache key builders for consistent key formatting."""

    PREFIX = "eraframe"

    @classmethod
    def resolution(
        cls,
        query: str,
        year_hint: int | None,
        mode: ResolverMode | str,
    ) -> str:
        """Key for a resolved image, by normalized query, year and mode."""
        # Hash the query for consistent key length
        hash_input = f"{normalize_query(query)}:{year_hint if year_hint is not None else ''}"
        hash_value = hashlib.md5(hash_input.encode()).hexdigest()[:16]
        return f"{cls.PREFIX}:resolve:{ResolverMode(mode).value}:{hash_value}"

