"""Database infrastructure"""
from .connection import (
    dispose_engine,
    get_engine,
    get_session,
    get_session_maker,
    init_db,
    set_engine,
)

__all__ = [
    "dispose_engine",
    "get_engine",
    "get_session",
    "get_session_maker",
    "init_db",
    "set_engine",
]
