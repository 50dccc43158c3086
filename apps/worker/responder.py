from __future__ import annotations

import logging
from typing import Any

import httpx

from slackmeet.messages import Message, to_payload

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(10.0, connect=5.0)


class SlackResponder:
    """Delivers messages to Slack's one-time ``response_url``. Failures are logged, never retried."""

    def __init__(self, *, http_client: httpx.Client | None = None) -> None:
        self._http_client = http_client or httpx.Client(timeout=DEFAULT_TIMEOUT)

    def post_to_response_url(self, *, response_url: str, payload: Message | dict[str, Any]) -> bool:
        try:
            response = self._http_client.post(
                response_url,
                json=to_payload(payload),
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as exc:
            logger.error(
                "Error posting to Slack",
                extra={"error": f"{type(exc).__name__}: {exc}", "response_url": response_url},
            )
            return False

        if 200 <= response.status_code < 300:
            logger.info("Posted to Slack", extra={"response_url": response_url, "status": response.status_code})
            return True

        logger.error(
            "Failed to post to Slack",
            extra={"response_url": response_url, "status": response.status_code, "body": response.text[:200]},
        )
        return False
