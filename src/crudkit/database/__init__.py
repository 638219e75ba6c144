from .base import Base
from .session import build_engine, get_engine, get_session_maker, get_async_session

__all__ = ["Base", "build_engine", "get_engine", "get_session_maker", "get_async_session"]
