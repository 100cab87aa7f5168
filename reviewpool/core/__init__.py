"""
Review Pool - Core Package
==========================

Core business logic, models, and schemas.
"""

from reviewpool.core.config import settings
from reviewpool.core.database import Base, get_session_factory

__all__ = ["Base", "get_session_factory", "settings"]
