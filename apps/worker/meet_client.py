from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from slackmeet.config import MeetingConfig
from slackmeet.errors import GoogleApiError
from slackmeet.messages import DEFAULT_MEETING_NAME

MEET_SPACES_URL = "https://meet.googleapis.com/v2/spaces"


@dataclass(frozen=True)
class MeetingSpace:
    meeting_uri: str
    meeting_code: str | None
    space_name: str | None


@dataclass(frozen=True)
class CreatedMeeting:
    meeting_name: str
    meeting_uri: str
    meeting_code: str | None
    space_name: str | None


def build_space_body(config: MeetingConfig) -> dict[str, Any]:
    body: dict[str, Any] = {"config": {"accessType": config.access_type, "moderation": config.moderation}}

    artifact_config: dict[str, Any] = {}
    if config.auto_transcribe:
        artifact_config["transcriptionConfig"] = {"autoTranscriptionGeneration": "ON"}
    if config.auto_record:
        artifact_config["recordingConfig"] = {"autoRecordingGeneration": "ON"}
    if config.smart_notes:
        artifact_config["smartNotesConfig"] = {"autoSmartNotesGeneration": "ON"}
    if artifact_config:
        body["artifactConfig"] = artifact_config
    return body


class GoogleMeetClient:
    def __init__(self, *, base_url: str = MEET_SPACES_URL, http_client: httpx.Client | None = None) -> None:
        self._url = base_url
        self._http_client = http_client or httpx.Client(timeout=15.0)

    def create_space(self, *, access_token: str, config: MeetingConfig) -> MeetingSpace:
        try:
            response = self._http_client.post(
                self._url,
                headers={"Authorization": f"Bearer {access_token}", "Content-Type": "application/json"},
                json=build_space_body(config),
            )
        except httpx.RequestError as exc:
            raise GoogleApiError(f"Failed to create meeting: network_error={exc.__class__.__name__}") from exc

        if response.status_code != 200:
            message = f"Failed to create meeting: {response.status_code}"
            try:
                payload = response.json()
            except ValueError:
                payload = None
            error = payload.get("error") if isinstance(payload, dict) else None
            if isinstance(error, dict) and error.get("message"):
                message = f"{message} - {error['message']}"
            raise GoogleApiError(message, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            raise GoogleApiError("Invalid response from Google Meet API", status_code=response.status_code) from exc
        if not isinstance(data, dict) or not isinstance(data.get("meetingUri"), str):
            raise GoogleApiError("Invalid response from Google Meet API", status_code=response.status_code)

        return MeetingSpace(
            meeting_uri=data["meetingUri"],
            meeting_code=data.get("meetingCode"),
            space_name=data.get("name"),
        )


def sanitize_meeting_name(name: str | None) -> str:
    if name is None or not name.strip():
        return DEFAULT_MEETING_NAME
    return name.strip()


class MeetingCreator:
    def __init__(self, *, meet_client: GoogleMeetClient, config: MeetingConfig) -> None:
        self._meet_client = meet_client
        self._config = config

    def create(self, *, access_token: str, meeting_name: str | None = None) -> CreatedMeeting:
        name = sanitize_meeting_name(meeting_name)
        space = self._meet_client.create_space(access_token=access_token, config=self._config)
        return CreatedMeeting(
            meeting_name=name,
            meeting_uri=space.meeting_uri,
            meeting_code=space.meeting_code,
            space_name=space.space_name,
        )
