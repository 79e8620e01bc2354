"""Repository implementations."""

from .exclusion import ExclusionRepository

__all__ = ["ExclusionRepository"]
