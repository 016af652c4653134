from tooling_kernel.db.base import Base, TrackedBase, UTCDateTime, UUIDString
from tooling_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from tooling_kernel.db.repository import BaseRepository

__all__ = [
    "Base",
    "BaseRepository",
    "TrackedBase",
    "UTCDateTime",
    "UUIDString",
    "create_tables",
    "drop_tables",
    "get_engine",
    "get_session",
    "get_session_factory",
    "init_engine_from_url",
    "reset_engine",
    "session_scope",
]
