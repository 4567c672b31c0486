"""Database layer - engine, session scope and declarative base."""

from billing_kernel.db.base import Base
from billing_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
    session_scope,
)

__all__ = [
    "Base",
    "create_tables",
    "get_engine",
    "get_session_factory",
    "init_engine_from_url",
    "reset_engine",
    "session_scope",
]
