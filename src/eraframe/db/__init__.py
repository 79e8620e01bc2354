"""Database layer."""

from .base import Base
from .models import ImageExclusionModel
from .repositories import ExclusionRepository
from .session import DatabaseManager

__all__ = [
    "Base",
    "DatabaseManager",
    "ExclusionRepository",
    "ImageExclusionModel",
]
