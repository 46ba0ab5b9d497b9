"""Data loaders for destination stores."""

from .base import BaseLoader
from .mongo_loader import MongoLoader
from .sql_loader import SQLLoader

__all__ = [
    "BaseLoader",
    "MongoLoader",
    "SQLLoader",
]
