from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass

from .errors import ConfigurationError


@dataclass(frozen=True)
class OAuthState:
    user_id: str
    team_id: str


def encode_state(user_id: str, team_id: str) -> str:
    # Plain base64url JSON; integrity relies on TLS and the short OAuth window.
    data = json.dumps({"slack_user_id": user_id, "slack_team_id": team_id}, separators=(",", ":"))
    return base64.urlsafe_b64encode(data.encode("utf-8")).decode("ascii")


def decode_state(state: str) -> OAuthState:
    try:
        padded = state + "=" * (-len(state) % 4)
        data = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise ConfigurationError("Invalid state parameter") from exc

    if not isinstance(data, dict):
        raise ConfigurationError("Invalid state parameter")
    user_id = data.get("slack_user_id")
    team_id = data.get("slack_team_id")
    if not isinstance(user_id, str) or not isinstance(team_id, str) or not user_id:
        raise ConfigurationError("Invalid state parameter")
    return OAuthState(user_id=user_id, team_id=team_id)
