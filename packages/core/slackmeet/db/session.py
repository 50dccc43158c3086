from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import sessionmaker

from ..config import DEFAULT_DATABASE_URL


def get_database_url() -> str:
    return os.getenv("DATABASE_URL", "").strip() or DEFAULT_DATABASE_URL


def _ensure_sqlite_directory(database_url: str) -> None:
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite" or not url.database or url.database == ":memory:":
        return
    Path(url.database).parent.mkdir(parents=True, exist_ok=True)


def build_engine(database_url: str) -> Engine:
    _ensure_sqlite_directory(database_url)
    connect_args: dict[str, Any] = {}
    if database_url.startswith("sqlite"):
        # background units share the engine across threads
        connect_args["check_same_thread"] = False
    return create_engine(database_url, future=True, pool_pre_ping=True, connect_args=connect_args)


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return build_engine(get_database_url())


@lru_cache(maxsize=1)
def _get_sessionmaker() -> sessionmaker:
    return sessionmaker(bind=get_engine(), autoflush=False, autocommit=False, expire_on_commit=False, future=True)


class _LazyEngine:
    def __getattr__(self, name: str) -> Any:
        return getattr(get_engine(), name)


class _LazySessionLocal:
    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return _get_sessionmaker()(*args, **kwargs)


engine = _LazyEngine()
SessionLocal = _LazySessionLocal()
