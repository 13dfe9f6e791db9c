# src/commung/db/__init__.py
"""Database engine, sessions and shared column types."""

from .session import Base, SessionLocal, engine, get_db

__all__ = ["Base", "SessionLocal", "engine", "get_db"]
