"""
Database Module
"""
from .connection import init_database, close_database, get_db, get_db_dependency, build_engine
from .models import Base

__all__ = [
    "init_database",
    "close_database",
    "get_db",
    "get_db_dependency",
    "build_engine",
    "Base",
]
