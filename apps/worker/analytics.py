from __future__ import annotations

import hashlib
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

GA4_ENDPOINT = "https://www.google-analytics.com/mp/collect"


class GoogleAnalyticsClient:
    """Best-effort GA4 Measurement Protocol events keyed by an anonymous client id."""

    def __init__(
        self,
        *,
        measurement_id: str | None,
        api_secret: str | None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._measurement_id = measurement_id or ""
        self._api_secret = api_secret or ""
        self._http_client = http_client or httpx.Client(timeout=5.0)
        self.enabled = bool(self._measurement_id and self._api_secret)
        if self.enabled:
            logger.info("Google Analytics tracking enabled", extra={"measurement_id": self._measurement_id})
        else:
            logger.info("Google Analytics tracking disabled", extra={"reason": "GA_MEASUREMENT_ID or GA_API_SECRET not set"})

    def track_meet_command_used(self, *, has_title: bool, user_id: str, team_id: str) -> None:
        self._send_event(
            {"name": "meet_command_used", "params": {"has_custom_title": has_title}},
            user_id=user_id,
            team_id=team_id,
        )

    def track_auth_completed(self, *, user_id: str, team_id: str) -> None:
        self._send_event(
            {"name": "oauth_completed", "params": {"auth_provider": "google"}},
            user_id=user_id,
            team_id=team_id,
        )

    @staticmethod
    def client_id(user_id: str, team_id: str) -> str:
        return hashlib.md5(f"{user_id}:{team_id}".encode("utf-8")).hexdigest()

    def _send_event(self, event: dict[str, Any], *, user_id: str, team_id: str) -> None:
        if not self.enabled:
            logger.debug("GA tracking skipped - disabled", extra={"event": event["name"]})
            return

        payload = {"client_id": self.client_id(user_id, team_id), "events": [event]}
        try:
            response = self._http_client.post(
                GA4_ENDPOINT,
                params={"measurement_id": self._measurement_id, "api_secret": self._api_secret},
                json=payload,
            )
        except httpx.HTTPError as exc:
            logger.error("GA4 tracking error", extra={"error": f"{type(exc).__name__}: {exc}"})
            return

        if response.is_success:
            logger.debug("GA4 event sent", extra={"event": event["name"]})
        else:
            logger.warning("GA4 event failed", extra={"status": response.status_code, "event": event["name"]})
