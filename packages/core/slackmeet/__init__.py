"""Shared domain package for the slack-meet API and background worker."""

from .config import MeetingConfig, Settings
from .db import Base, UserToken
from .errors import ConfigurationError, GoogleApiError, SlackMeetError, TokenRefreshError, VerificationError
from .interfaces import OAuthClient, Responder, TaskRunner, TokenResponse
from .oauth_state import OAuthState, decode_state, encode_state
from .token_store import PendingCallbackStore, TokenStore

__all__ = [
    "Base",
    "ConfigurationError",
    "GoogleApiError",
    "MeetingConfig",
    "OAuthClient",
    "OAuthState",
    "PendingCallbackStore",
    "Responder",
    "Settings",
    "SlackMeetError",
    "TaskRunner",
    "TokenRefreshError",
    "TokenResponse",
    "TokenStore",
    "UserToken",
    "VerificationError",
    "decode_state",
    "encode_state",
]
