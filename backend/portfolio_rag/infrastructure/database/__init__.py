from .base import Base
from .schema import init_schema
from .session import create_engine, create_session_factory, get_db_session
from .models import ContentChunkModel

__all__ = [
    "Base",
    "init_schema",
    "create_engine",
    "create_session_factory",
    "get_db_session",
    "ContentChunkModel",
]
