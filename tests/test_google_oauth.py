from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from apps.api.app.oauth.google_oauth import GOOGLE_TOKEN_URL, MEET_SCOPE, GoogleOAuthClient
from slackmeet.errors import GoogleApiError, TokenRefreshError

REDIRECT_URI = "http://localhost:9292/auth/google/callback"


def _client(handler=None) -> GoogleOAuthClient:
    transport = httpx.MockTransport(handler or (lambda request: httpx.Response(404)))
    return GoogleOAuthClient(
        client_id="test_client_id.apps.googleusercontent.com",
        client_secret="test_client_secret",
        redirect_uri=REDIRECT_URI,
        http_client=httpx.Client(transport=transport),
    )


def _form(request: httpx.Request) -> dict[str, str]:
    return {key: values[0] for key, values in parse_qs(request.content.decode("utf-8")).items()}


def test_authorization_url_has_offline_consent_params() -> None:
    url = _client().authorization_url(state="encoded_user_data")
    params = {key: values[0] for key, values in parse_qs(urlparse(url).query).items()}

    assert url.startswith("https://accounts.google.com/o/oauth2/v2/auth?")
    assert params == {
        "client_id": "test_client_id.apps.googleusercontent.com",
        "redirect_uri": REDIRECT_URI,
        "response_type": "code",
        "scope": MEET_SCOPE,
        "access_type": "offline",
        "prompt": "consent",
        "state": "encoded_user_data",
    }


def test_authorization_url_prefers_explicit_redirect_uri() -> None:
    url = _client().authorization_url(state="s", redirect_uri="https://meet.example/auth/google/callback")
    assert parse_qs(urlparse(url).query)["redirect_uri"] == ["https://meet.example/auth/google/callback"]


def test_exchange_code_returns_tokens() -> None:
    seen: list[dict[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == GOOGLE_TOKEN_URL
        seen.append(_form(request))
        return httpx.Response(
            200,
            json={"access_token": "ya29.test_access", "refresh_token": "1//test_refresh", "expires_in": 3600},
        )

    result = _client(handler).exchange_code(code="test_code", redirect_uri=REDIRECT_URI)

    assert result.access_token == "ya29.test_access"
    assert result.refresh_token == "1//test_refresh"
    assert result.expires_in == 3600
    assert seen[0]["grant_type"] == "authorization_code"
    assert seen[0]["code"] == "test_code"
    assert seen[0]["redirect_uri"] == REDIRECT_URI


def test_exchange_code_raises_with_provider_description() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "invalid_grant", "error_description": "Bad Request"})

    with pytest.raises(GoogleApiError) as exc_info:
        _client(handler).exchange_code(code="bad_code", redirect_uri=REDIRECT_URI)

    assert "Token request failed: 400 - Bad Request" in str(exc_info.value)
    assert exc_info.value.status_code == 400


def test_exchange_code_non_json_error_keeps_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="upstream unavailable")

    with pytest.raises(GoogleApiError) as exc_info:
        _client(handler).exchange_code(code="c", redirect_uri=REDIRECT_URI)

    assert str(exc_info.value) == "Token request failed: 503"
    assert exc_info.value.status_code == 503


def test_refresh_access_token_returns_new_token_without_refresh_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert _form(request)["grant_type"] == "refresh_token"
        assert _form(request)["refresh_token"] == "1//test_refresh"
        return httpx.Response(200, json={"access_token": "ya29.new_token", "expires_in": 3599, "token_type": "Bearer"})

    result = _client(handler).refresh_access_token(refresh_token="1//test_refresh")

    assert result.access_token == "ya29.new_token"
    assert result.expires_in == 3599
    assert result.refresh_token is None


def test_refresh_invalid_grant_raises_token_refresh_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={"error": "invalid_grant", "error_description": "Token has been expired or revoked."},
        )

    with pytest.raises(TokenRefreshError, match="invalid or revoked"):
        _client(handler).refresh_access_token(refresh_token="1//bad_refresh")


def test_refresh_other_400_is_generic_api_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "invalid_client"})

    with pytest.raises(GoogleApiError) as exc_info:
        _client(handler).refresh_access_token(refresh_token="r")

    assert not isinstance(exc_info.value, TokenRefreshError)
    assert exc_info.value.status_code == 400
    assert exc_info.value.error_code == "invalid_client"


def test_refresh_malformed_400_is_api_error_with_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, text="<html>nope</html>")

    with pytest.raises(GoogleApiError) as exc_info:
        _client(handler).refresh_access_token(refresh_token="r")

    assert str(exc_info.value) == "Invalid response from Google"
    assert exc_info.value.status_code == 400


def test_network_error_becomes_api_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(GoogleApiError) as exc_info:
        _client(handler).refresh_access_token(refresh_token="r")

    assert exc_info.value.status_code is None
