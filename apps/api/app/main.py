from __future__ import annotations

import html
import logging
from datetime import datetime, timezone
from urllib.parse import parse_qs, urlencode

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from slackmeet import messages, request_verifier
from slackmeet.config import MeetingConfig, Settings
from slackmeet.errors import ConfigurationError, GoogleApiError, VerificationError
from slackmeet.interfaces import OAuthClient, Responder, TaskRunner
from slackmeet.log import setup_logging
from slackmeet.token_store import TokenStore

from apps.worker.analytics import GoogleAnalyticsClient
from apps.worker.meet_client import GoogleMeetClient, MeetingCreator
from apps.worker.responder import SlackResponder
from apps.worker.task_runner import ThreadTaskRunner

from .db import Base, SessionLocal, engine
from .google_auth import GoogleAuthHandler
from .meet_command import MeetCommandHandler
from .oauth.google_oauth import GoogleOAuthClient

logger = logging.getLogger(__name__)

CALLBACK_PATH = "/auth/google/callback"

_PAGE = """<!doctype html>
<html><head><meta charset="utf-8"><title>{title}</title></head>
<body style="font-family: sans-serif; text-align: center; padding-top: 4em;">
<h1>{title}</h1><p>{body}</p></body></html>"""


def _base_url(settings: Settings, request: Request) -> str:
    if settings.app_url:
        return settings.app_url
    return str(request.base_url).rstrip("/")


def _error_redirect(reason: str) -> RedirectResponse:
    return RedirectResponse(f"/auth/error?{urlencode({'reason': reason})}", status_code=302)


def _form_params(raw_body: bytes) -> dict[str, str]:
    parsed = parse_qs(raw_body.decode("utf-8", errors="replace"), keep_blank_values=True)
    return {key: values[0] for key, values in parsed.items() if values}


def create_app(
    settings: Settings | None = None,
    *,
    meeting_config: MeetingConfig | None = None,
    token_store: TokenStore | None = None,
    oauth_client: OAuthClient | None = None,
    meeting_creator: MeetingCreator | None = None,
    responder: Responder | None = None,
    task_runner: TaskRunner | None = None,
    analytics: GoogleAnalyticsClient | None = None,
) -> FastAPI:
    """Build the API. Raises ``ConfigurationError`` when settings are incomplete.

    Serve with ``uvicorn --factory apps.api.app.main:create_app``.
    """
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level, settings.app_env)

    if token_store is None:
        Base.metadata.create_all(bind=engine)
        token_store = TokenStore(SessionLocal)
    oauth_client = oauth_client or GoogleOAuthClient(
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
    )
    if meeting_creator is None:
        meeting_creator = MeetingCreator(
            meet_client=GoogleMeetClient(),
            config=meeting_config or MeetingConfig.load(),
        )
    responder = responder or SlackResponder()
    task_runner = task_runner or ThreadTaskRunner()
    analytics = analytics or GoogleAnalyticsClient(
        measurement_id=settings.ga_measurement_id,
        api_secret=settings.ga_api_secret,
    )

    command_handler = MeetCommandHandler(
        token_store=token_store,
        meeting_creator=meeting_creator,
        responder=responder,
        oauth_client=oauth_client,
        task_runner=task_runner,
        analytics=analytics,
    )
    auth_handler = GoogleAuthHandler(
        oauth_client=oauth_client,
        token_store=token_store,
        responder=responder,
        analytics=analytics,
    )

    app = FastAPI(title="slack-meet")
    app.state.settings = settings
    app.state.command_handler = command_handler
    app.state.auth_handler = auth_handler

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.post("/slack/commands")
    async def slack_command(request: Request) -> JSONResponse:
        raw_body = await request.body()
        try:
            request_verifier.verify(
                raw_body,
                request.headers.get(request_verifier.TIMESTAMP_HEADER),
                request.headers.get(request_verifier.SIGNATURE_HEADER),
                settings.slack_signing_secret,
            )
        except VerificationError as exc:
            logger.warning("Slack verification failed", extra={"error": str(exc)})
            raise HTTPException(status_code=403, detail=str(exc)) from exc

        params = _form_params(raw_body)
        message = await run_in_threadpool(command_handler.handle, params, base_url=_base_url(settings, request))
        return JSONResponse(messages.to_payload(message))

    @app.get("/auth/google")
    def auth_google(request: Request, state: str | None = Query(None)) -> RedirectResponse:
        if not state:
            raise HTTPException(status_code=400, detail="state_required")
        redirect_uri = f"{_base_url(settings, request)}{CALLBACK_PATH}"
        return RedirectResponse(oauth_client.authorization_url(state=state, redirect_uri=redirect_uri), status_code=302)

    @app.get(CALLBACK_PATH)
    def auth_google_callback(
        request: Request,
        code: str | None = Query(None),
        state: str | None = Query(None),
        error: str | None = Query(None),
    ) -> RedirectResponse:
        if error:
            logger.warning("Google OAuth returned an error", extra={"error": error})
            if error == "access_denied":
                return _error_redirect("You declined access to your Google account.")
            return _error_redirect(f"Google returned an error: {error}")
        if not code or not state:
            return _error_redirect("Missing authorization code or state.")

        redirect_uri = f"{_base_url(settings, request)}{CALLBACK_PATH}"
        try:
            auth_handler.handle_callback(code=code, state=state, redirect_uri=redirect_uri)
        except ConfigurationError:
            logger.warning("Invalid OAuth state")
            return _error_redirect("Invalid state parameter. Please run /meet again.")
        except GoogleApiError as exc:
            logger.error("OAuth code exchange failed", extra={"error": str(exc), "status_code": exc.status_code})
            return _error_redirect("Could not connect your Google account. Please try again.")

        return RedirectResponse("/auth/success", status_code=302)

    @app.get("/auth/success", response_class=HTMLResponse)
    def auth_success() -> str:
        return _PAGE.format(
            title="Google account connected",
            body="You can close this window and return to Slack.",
        )

    @app.get("/auth/error", response_class=HTMLResponse)
    def auth_error(reason: str = Query("Something went wrong.")) -> str:
        return _PAGE.format(title="Authorization failed", body=html.escape(reason))

    return app
