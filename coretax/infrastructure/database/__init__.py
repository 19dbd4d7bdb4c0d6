"""Async PostgreSQL access: declarative base, sessions and the generic repository."""

from coretax.infrastructure.database.base import Base, BaseModel
from coretax.infrastructure.database.dependencies import DatabaseSession, get_db
from coretax.infrastructure.database.repository import BaseRepository, Page
from coretax.infrastructure.database.session import (
    close_database,
    get_async_session,
    get_engine,
    get_session_factory,
)

__all__ = [
    "Base",
    "BaseModel",
    "BaseRepository",
    "DatabaseSession",
    "Page",
    "close_database",
    "get_async_session",
    "get_db",
    "get_engine",
    "get_session_factory",
]
