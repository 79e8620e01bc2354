"""Database models."""

from .exclusion import ImageExclusionModel

__all__ = ["ImageExclusionModel"]
