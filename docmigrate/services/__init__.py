"""Service layer for the migration application."""

from .transformer import TransformEngine

__all__ = [
    "TransformEngine",
]
