"""Resolution layer: turning text queries into image URLs."""

from eraframe.resolution.base import AbstractProvider, ProviderConfig
from eraframe.resolution.normalizer import CandidateNormalizer
from eraframe.resolution.registry import ProviderRegistry
from eraframe.resolution.resolver import ImageResolver, ResolverConfig, rank_link

__all__ = [
    # Base
    "AbstractProvider",
    "ProviderConfig",
    # Resolver
    "CandidateNormalizer",
    "ImageResolver",
    "ResolverConfig",
    "rank_link",
    # Registry
    "ProviderRegistry",
]
