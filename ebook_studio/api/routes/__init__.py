"""API route modules."""

from . import ai, books, export, health

__all__ = ["ai", "books", "export", "health"]
