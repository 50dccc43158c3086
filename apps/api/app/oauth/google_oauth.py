from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

import httpx

from slackmeet.errors import ConfigurationError, GoogleApiError, TokenRefreshError
from slackmeet.interfaces import TokenResponse

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
MEET_SCOPE = "https://www.googleapis.com/auth/meetings.space.created"


class GoogleOAuthClient:
    def __init__(
        self,
        *,
        client_id: str,
        client_secret: str,
        redirect_uri: str | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self._http_client = http_client or httpx.Client(timeout=15.0)

    def authorization_url(self, *, state: str, redirect_uri: str | None = None) -> str:
        callback = redirect_uri or self.redirect_uri
        if not callback:
            raise ConfigurationError("redirect_uri is required")
        params = {
            "client_id": self.client_id,
            "redirect_uri": callback,
            "response_type": "code",
            "scope": MEET_SCOPE,
            # offline + consent makes Google reissue a refresh token on every re-auth
            "access_type": "offline",
            "prompt": "consent",
            "state": state,
        }
        return f"{GOOGLE_AUTHORIZE_URL}?{urlencode(params)}"

    def exchange_code(self, *, code: str, redirect_uri: str) -> TokenResponse:
        payload = {
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": redirect_uri,
            "grant_type": "authorization_code",
        }
        response = self._token_request(payload)
        return _parse_token_response(response)

    def refresh_access_token(self, *, refresh_token: str) -> TokenResponse:
        payload = {
            "refresh_token": refresh_token,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "grant_type": "refresh_token",
        }
        response = self._token_request(payload)

        if response.status_code == 400:
            error_data = _json_or_none(response)
            if error_data is None:
                raise GoogleApiError("Invalid response from Google", status_code=response.status_code)
            if error_data.get("error") == "invalid_grant":
                raise TokenRefreshError("Refresh token is invalid or revoked")

        return _parse_token_response(response)

    def _token_request(self, payload: dict[str, str]) -> httpx.Response:
        headers = {"Content-Type": "application/x-www-form-urlencoded", "Accept": "application/json"}
        try:
            return self._http_client.post(GOOGLE_TOKEN_URL, data=payload, headers=headers)
        except httpx.RequestError as exc:
            raise GoogleApiError(f"Token request failed: network_error={exc.__class__.__name__}") from exc


def _json_or_none(response: httpx.Response) -> dict[str, Any] | None:
    try:
        parsed = response.json()
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def _parse_token_response(response: httpx.Response) -> TokenResponse:
    if response.status_code != 200:
        message = f"Token request failed: {response.status_code}"
        error_data = _json_or_none(response)
        error_code = None
        if error_data is not None:
            error_code = error_data.get("error") if isinstance(error_data.get("error"), str) else None
            detail = error_data.get("error_description") or error_code
            if detail:
                message = f"{message} - {detail}"
        raise GoogleApiError(message, status_code=response.status_code, error_code=error_code)

    data = _json_or_none(response)
    if data is None:
        raise GoogleApiError("Invalid response from Google", status_code=response.status_code)

    access_token = data.get("access_token")
    expires_in = data.get("expires_in")
    refresh_token = data.get("refresh_token")
    if not isinstance(access_token, str) or not isinstance(expires_in, (int, float)):
        raise GoogleApiError("Invalid response from Google", status_code=response.status_code)

    return TokenResponse(
        access_token=access_token,
        expires_in=int(expires_in),
        refresh_token=refresh_token if isinstance(refresh_token, str) else None,
    )
