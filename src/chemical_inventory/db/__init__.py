"""Database utilities."""

from __future__ import annotations

from chemical_inventory.db.engine import create_db_engine, get_engine, init_db, session_scope, transaction

__all__ = ["create_db_engine", "get_engine", "init_db", "session_scope", "transaction"]
