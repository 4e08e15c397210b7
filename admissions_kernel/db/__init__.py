"""Database layer: engine lifecycle, declarative base and column types."""

from admissions_kernel.db.base import Base, TrackedBase, UTCDateTime, UUIDString
from admissions_kernel.db.engine import create_tables, get_engine, get_session, session_scope

__all__ = [
    "Base",
    "TrackedBase",
    "UTCDateTime",
    "UUIDString",
    "create_tables",
    "get_engine",
    "get_session",
    "session_scope",
]
