"""Application database adapters.

Contents:
- app_db: asyncpg pool for the application database
- memory: dict-backed store implementing the same repositories
"""

from .app_db import AppDatabase
from .memory import InMemoryStore

__all__ = ["AppDatabase", "InMemoryStore"]
