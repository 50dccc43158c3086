"""The ``/meet`` slash command.

``handle`` is the synchronous phase and must return before Slack's 3 second
deadline. Everything that talks to Google runs in ``process_meeting_creation``
on the task runner, and reports back only through the command's
``response_url``.
"""

from __future__ import annotations

import logging
import traceback
from collections.abc import Mapping
from urllib.parse import urlencode

from slackmeet import messages
from slackmeet.db.models import UserToken
from slackmeet.errors import GoogleApiError, TokenRefreshError
from slackmeet.interfaces import OAuthClient, Responder, TaskRunner
from slackmeet.oauth_state import encode_state
from slackmeet.token_store import TokenStore

from apps.worker.analytics import GoogleAnalyticsClient
from apps.worker.meet_client import MeetingCreator

logger = logging.getLogger(__name__)

AUTH_START_PATH = "/auth/google"


def build_auth_url(user_id: str, team_id: str, base_url: str) -> str:
    state = encode_state(user_id, team_id)
    return f"{base_url.rstrip('/')}{AUTH_START_PATH}?{urlencode({'state': state})}"


class MeetCommandHandler:
    def __init__(
        self,
        *,
        token_store: TokenStore,
        meeting_creator: MeetingCreator,
        responder: Responder,
        oauth_client: OAuthClient,
        task_runner: TaskRunner,
        analytics: GoogleAnalyticsClient | None = None,
    ) -> None:
        self._token_store = token_store
        self._meeting_creator = meeting_creator
        self._responder = responder
        self._oauth_client = oauth_client
        self._task_runner = task_runner
        self._analytics = analytics

    def handle(self, params: Mapping[str, str], *, base_url: str) -> messages.Message:
        user_id = params.get("user_id", "")
        team_id = params.get("team_id", "")
        response_url = params.get("response_url", "")
        meeting_name = params.get("text")

        token = self._token_store.find_by_user(user_id)
        if token is None:
            logger.info("Google auth required", extra={"user_id": user_id})
            return self._auth_required(user_id, team_id, response_url, base_url)

        self._task_runner.dispatch(self.process_meeting_creation, token, meeting_name, response_url, base_url)
        return messages.acknowledgment()

    def _auth_required(self, user_id: str, team_id: str, response_url: str, base_url: str) -> messages.AuthRequired:
        # Shared by first-time auth and the re-auth path after a dead token.
        self._token_store.store_pending_callback(user_id=user_id, team_id=team_id, url=response_url)
        return messages.auth_required(build_auth_url(user_id, team_id, base_url))

    def _reauthenticate(self, token: UserToken, response_url: str, base_url: str) -> messages.Message:
        deleted = self._token_store.delete_for_user(token.slack_user_id)
        logger.info("Deleted invalid Google token", extra={"user_id": token.slack_user_id, "deleted": deleted})
        return self._auth_required(token.slack_user_id, token.slack_team_id, response_url, base_url)

    def process_meeting_creation(
        self,
        token: UserToken,
        meeting_name: str | None,
        response_url: str,
        base_url: str,
    ) -> bool:
        user_id = token.slack_user_id
        try:
            access_token = self._token_store.refresh_if_needed(user_id, oauth_client=self._oauth_client)
            result = self._meeting_creator.create(access_token=access_token, meeting_name=meeting_name)

            # A pending callback left over from an earlier auth cycle is no longer owed.
            self._token_store.take_pending_callback(user_id)

            message: messages.Message = messages.meeting_created(
                meeting_name=result.meeting_name,
                meeting_uri=result.meeting_uri,
            )
            delivered = self._responder.post_to_response_url(response_url=response_url, payload=message)

            if self._analytics is not None:
                self._analytics.track_meet_command_used(
                    has_title=bool(meeting_name and meeting_name.strip()),
                    user_id=user_id,
                    team_id=token.slack_team_id,
                )
            logger.info("Meeting created", extra={"meeting_code": result.meeting_code, "user_id": user_id})
            return delivered
        except TokenRefreshError as exc:
            logger.warning("Token refresh failed", extra={"user_id": user_id, "error": str(exc)})
            message = self._reauthenticate(token, response_url, base_url)
        except GoogleApiError as exc:
            logger.error("Google API error", extra={"error": str(exc), "status_code": exc.status_code})
            if exc.is_auth_error:
                logger.warning("Token invalid or revoked", extra={"user_id": user_id})
                message = self._reauthenticate(token, response_url, base_url)
            else:
                message = messages.error(messages.CREATE_FAILED_TEXT)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Unexpected error",
                extra={
                    "error": f"{type(exc).__name__}: {exc}",
                    "backtrace": "".join(traceback.format_tb(exc.__traceback__)[:5]),
                },
            )
            message = messages.error(messages.UNEXPECTED_ERROR_TEXT)

        return self._responder.post_to_response_url(response_url=response_url, payload=message)
