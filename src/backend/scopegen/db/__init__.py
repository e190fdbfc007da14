"""Database module."""

from scopegen.db.models import Base, Intake, ScopeDoc, ScopeDocStatus
from scopegen.db.session import async_session_maker, create_tables, engine, get_db

__all__ = [
    "Base",
    "Intake",
    "ScopeDoc",
    "ScopeDocStatus",
    "get_db",
    "engine",
    "async_session_maker",
    "create_tables",
]
