from __future__ import annotations

from slackmeet.db import Base, SessionLocal, engine

__all__ = ["Base", "SessionLocal", "engine"]
