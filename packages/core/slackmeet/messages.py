"""Slack message payloads sent back to the user.

Each outbound message is one of a closed set of variants. Builders are pure
functions so payload shapes can be tested without any HTTP.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

DEFAULT_MEETING_NAME = "New Meeting"

ACK_TEXT = "⏳ Creating meeting..."
AUTH_REQUIRED_TEXT = "🔐 Click below to authorize this app to create *Google Meet* links on your behalf."
AUTH_BUTTON_TEXT = "Connect Google Account"
AUTH_COMPLETED_TEXT = "✅ Google account connected! Run `/meet` again to create a meeting."
CREATE_FAILED_TEXT = "❌ Failed to create meeting. Please try again."
UNEXPECTED_ERROR_TEXT = "❌ Something went wrong. Please try again."


@dataclass(frozen=True)
class Acknowledgment:
    text: str = ACK_TEXT

    def to_payload(self) -> dict[str, Any]:
        return {"response_type": "ephemeral", "text": self.text}


@dataclass(frozen=True)
class AuthRequired:
    auth_url: str
    text: str = AUTH_REQUIRED_TEXT

    def to_payload(self) -> dict[str, Any]:
        return {
            "response_type": "ephemeral",
            "text": self.text,
            "blocks": [
                {"type": "section", "text": {"type": "mrkdwn", "text": self.text}},
                {
                    "type": "actions",
                    "elements": [
                        {
                            "type": "button",
                            "text": {"type": "plain_text", "text": AUTH_BUTTON_TEXT, "emoji": True},
                            "url": self.auth_url,
                            "style": "primary",
                        }
                    ],
                },
            ],
        }


@dataclass(frozen=True)
class MeetingCreated:
    meeting_name: str
    meeting_uri: str

    @property
    def text(self) -> str:
        if self.meeting_name == DEFAULT_MEETING_NAME:
            return f":google-meet: {self.meeting_uri}"
        return f":google-meet: *{self.meeting_name}* {self.meeting_uri}"

    def to_payload(self) -> dict[str, Any]:
        return {
            "response_type": "in_channel",
            "replace_original": True,
            "text": self.text,
            "blocks": [{"type": "section", "text": {"type": "mrkdwn", "text": self.text}}],
        }


@dataclass(frozen=True)
class AuthCompleted:
    text: str = AUTH_COMPLETED_TEXT

    def to_payload(self) -> dict[str, Any]:
        return {"response_type": "ephemeral", "text": self.text}


@dataclass(frozen=True)
class ErrorMessage:
    text: str

    def to_payload(self) -> dict[str, Any]:
        return {"response_type": "ephemeral", "text": self.text}


Message = Union[Acknowledgment, AuthRequired, MeetingCreated, AuthCompleted, ErrorMessage]


def acknowledgment() -> Acknowledgment:
    return Acknowledgment()


def auth_required(auth_url: str) -> AuthRequired:
    return AuthRequired(auth_url=auth_url)


def meeting_created(*, meeting_name: str, meeting_uri: str) -> MeetingCreated:
    return MeetingCreated(meeting_name=meeting_name, meeting_uri=meeting_uri)


def auth_completed() -> AuthCompleted:
    return AuthCompleted()


def error(text: str) -> ErrorMessage:
    return ErrorMessage(text=text)


def to_payload(message: Message | dict[str, Any]) -> dict[str, Any]:
    if isinstance(message, dict):
        return message
    return message.to_payload()
