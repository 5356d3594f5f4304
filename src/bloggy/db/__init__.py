"""Database engine, sessions and schema management."""

from .session import Base, SessionLocal, build_engine, create_tables, drop_tables, get_db

__all__ = ["Base", "SessionLocal", "build_engine", "create_tables", "drop_tables", "get_db"]
