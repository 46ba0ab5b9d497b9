"""Data extractors for source stores."""

from .base import BaseExtractor
from .mongo_extractor import MongoExtractor

__all__ = [
    "BaseExtractor",
    "MongoExtractor",
]
