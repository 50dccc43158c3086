from .base import Base
from .models import UserToken
from .session import SessionLocal, build_engine, engine, get_database_url, get_engine

__all__ = ["Base", "SessionLocal", "UserToken", "build_engine", "engine", "get_database_url", "get_engine"]
