"""Database layer - engine, base classes, and immutability enforcement."""

from payroll_kernel.db.base import Base, TimestampedBase, UUIDString
from payroll_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session_factory,
    init_engine_from_url,
    session_scope,
    shares_single_connection,
)

__all__ = [
    "Base",
    "TimestampedBase",
    "UUIDString",
    "create_tables",
    "get_engine",
    "get_session_factory",
    "init_engine_from_url",
    "session_scope",
    "shares_single_connection",
]
