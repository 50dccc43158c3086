from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from .db.models import UserToken
from .errors import TokenRefreshError
from .interfaces import OAuthClient

EXPIRY_MARGIN = timedelta(minutes=5)


def _as_utc(value: datetime) -> datetime:
    # sqlite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class PendingCallback:
    user_id: str
    team_id: str
    url: str
    stored_at: datetime


class PendingCallbackStore:
    """In-process slot holding one Slack response_url per user until OAuth completes."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, PendingCallback] = {}

    def put(self, *, user_id: str, team_id: str, url: str) -> None:
        entry = PendingCallback(user_id=user_id, team_id=team_id, url=url, stored_at=datetime.now(timezone.utc))
        with self._lock:
            self._entries[user_id] = entry

    def take(self, user_id: str) -> PendingCallback | None:
        with self._lock:
            return self._entries.pop(user_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class TokenStore:
    """Per-user Google OAuth tokens plus the pending Slack callback slot.

    Rows are not locked: two commands racing for the same user resolve as
    last write wins.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        pending_callbacks: PendingCallbackStore | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._pending = pending_callbacks or PendingCallbackStore()

    def find_by_user(self, user_id: str) -> UserToken | None:
        with self._session_factory() as session:
            return session.scalar(select(UserToken).where(UserToken.slack_user_id == user_id))

    def upsert(
        self,
        *,
        user_id: str,
        team_id: str,
        access_token: str,
        refresh_token: str | None = None,
        expires_at: datetime | None,
    ) -> UserToken:
        with self._session_factory() as session:
            token = session.scalar(select(UserToken).where(UserToken.slack_user_id == user_id))
            if token is None:
                token = UserToken(
                    slack_user_id=user_id,
                    slack_team_id=team_id,
                    google_access_token=access_token,
                    google_refresh_token=refresh_token,
                    google_token_expiry=expires_at,
                )
                session.add(token)
            else:
                token.slack_team_id = team_id
                token.google_access_token = access_token
                token.google_refresh_token = refresh_token or token.google_refresh_token
                token.google_token_expiry = expires_at
            session.commit()
            session.refresh(token)
            return token

    def update_access_token(self, *, user_id: str, access_token: str, expires_at: datetime | None) -> UserToken | None:
        with self._session_factory() as session:
            token = session.scalar(select(UserToken).where(UserToken.slack_user_id == user_id))
            if token is None:
                return None
            token.google_access_token = access_token
            token.google_token_expiry = expires_at
            session.commit()
            session.refresh(token)
            return token

    def delete_for_user(self, user_id: str) -> int:
        with self._session_factory() as session:
            result = session.execute(delete(UserToken).where(UserToken.slack_user_id == user_id))
            session.commit()
            return result.rowcount or 0

    def is_expiring_soon(self, user_id: str, *, now: datetime | None = None) -> bool:
        token = self.find_by_user(user_id)
        if token is None or token.google_token_expiry is None:
            return False
        current = now or datetime.now(timezone.utc)
        return _as_utc(token.google_token_expiry) < current + EXPIRY_MARGIN

    def refresh_if_needed(self, user_id: str, *, oauth_client: OAuthClient, now: datetime | None = None) -> str:
        token = self.find_by_user(user_id)
        if token is None:
            raise TokenRefreshError(f"No stored token for user {user_id}")
        current = now or datetime.now(timezone.utc)
        if not self.is_expiring_soon(user_id, now=current):
            return token.google_access_token
        if not token.google_refresh_token:
            raise TokenRefreshError("No refresh token stored")

        refreshed = oauth_client.refresh_access_token(refresh_token=token.google_refresh_token)
        self.update_access_token(
            user_id=user_id,
            access_token=refreshed.access_token,
            expires_at=current + timedelta(seconds=refreshed.expires_in),
        )
        return refreshed.access_token

    def store_pending_callback(self, *, user_id: str, team_id: str, url: str) -> None:
        self._pending.put(user_id=user_id, team_id=team_id, url=url)

    def take_pending_callback(self, user_id: str) -> str | None:
        entry = self._pending.take(user_id)
        return entry.url if entry else None
