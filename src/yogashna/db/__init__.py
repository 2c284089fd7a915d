"""Database module for SQLite persistence.

Provides:
- Database connection management
- Schema initialization
- Repository functions for users, catalog, enrollments and Abhyasa cycles
- Per-user key-value state
"""

from yogashna.db.database import get_db, init_db

__all__ = ["get_db", "init_db"]
