from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from slackmeet import messages
from slackmeet.interfaces import OAuthClient, Responder
from slackmeet.oauth_state import OAuthState, decode_state
from slackmeet.token_store import TokenStore

from apps.worker.analytics import GoogleAnalyticsClient

logger = logging.getLogger(__name__)


class GoogleAuthHandler:
    """Completes the Google consent round trip started from a Slack command."""

    def __init__(
        self,
        *,
        oauth_client: OAuthClient,
        token_store: TokenStore,
        responder: Responder,
        analytics: GoogleAnalyticsClient | None = None,
    ) -> None:
        self._oauth_client = oauth_client
        self._token_store = token_store
        self._responder = responder
        self._analytics = analytics

    def handle_callback(self, *, code: str, state: str, redirect_uri: str) -> OAuthState:
        state_data = decode_state(state)
        result = self._oauth_client.exchange_code(code=code, redirect_uri=redirect_uri)

        self._token_store.upsert(
            user_id=state_data.user_id,
            team_id=state_data.team_id,
            access_token=result.access_token,
            refresh_token=result.refresh_token,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=result.expires_in),
        )
        logger.info("Stored Google tokens", extra={"user_id": state_data.user_id})

        response_url = self._token_store.take_pending_callback(state_data.user_id)
        if response_url:
            self._responder.post_to_response_url(response_url=response_url, payload=messages.auth_completed())

        if self._analytics is not None:
            self._analytics.track_auth_completed(user_id=state_data.user_id, team_id=state_data.team_id)
        return state_data
