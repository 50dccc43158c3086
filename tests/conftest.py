from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("APP_ENV", "test")

ROOT = Path(__file__).resolve().parents[1]
CORE_SRC = ROOT / "packages" / "core"
for p in (ROOT, CORE_SRC):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

from slackmeet.db import Base  # noqa: E402
from slackmeet.token_store import TokenStore  # noqa: E402


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    engine.dispose()


@pytest.fixture
def token_store(session_factory) -> TokenStore:
    return TokenStore(session_factory)


class FakeRemote:
    """One MockTransport standing in for Google's token and Meet endpoints and Slack response URLs."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.slack_posts: list[tuple[str, dict]] = []
        self.meet_status = 200
        self.meet_json: object = {
            "name": "spaces/abc123",
            "meetingUri": "https://meet.google.com/abc-defg-hij",
            "meetingCode": "abc-defg-hij",
        }
        self.token_status = 200
        self.token_json: object = {
            "access_token": "ya29.access",
            "refresh_token": "1//refresh",
            "expires_in": 3600,
            "token_type": "Bearer",
        }
        self.meet_error: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "oauth2.googleapis.com":
            return httpx.Response(self.token_status, json=self.token_json)
        if request.url.host == "meet.googleapis.com":
            if self.meet_error is not None:
                raise self.meet_error
            return httpx.Response(self.meet_status, json=self.meet_json)
        if request.url.host == "hooks.slack.com":
            self.slack_posts.append((str(request.url), json.loads(request.content)))
            return httpx.Response(200, text="ok")
        return httpx.Response(404)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))

    def calls_to(self, host: str) -> list[httpx.Request]:
        return [request for request in self.requests if request.url.host == host]


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()
