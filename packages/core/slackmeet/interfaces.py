from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable, Protocol


@dataclass(frozen=True)
class TokenResponse:
    access_token: str
    expires_in: int
    refresh_token: str | None = None


class OAuthClient(Protocol):
    def authorization_url(self, *, state: str, redirect_uri: str | None = None) -> str: ...

    def exchange_code(self, *, code: str, redirect_uri: str) -> TokenResponse: ...

    def refresh_access_token(self, *, refresh_token: str) -> TokenResponse: ...


class TaskRunner(Protocol):
    def dispatch(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future: ...


class Responder(Protocol):
    def post_to_response_url(self, *, response_url: str, payload: Any) -> bool: ...
