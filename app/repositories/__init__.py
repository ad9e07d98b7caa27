"""
Repository layer for database operations
"""

from app.repositories.pantry_repository import PantryRepository

__all__ = [
    "PantryRepository",
]
