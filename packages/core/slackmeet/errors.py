from __future__ import annotations


class SlackMeetError(RuntimeError):
    pass


class VerificationError(SlackMeetError):
    """Inbound Slack request failed signature or timestamp checks."""


class ConfigurationError(SlackMeetError):
    pass


class TokenRefreshError(SlackMeetError):
    """The stored refresh token is permanently invalid and must be discarded."""


class GoogleApiError(SlackMeetError):
    def __init__(self, message: str, *, status_code: int | None = None, error_code: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code

    @property
    def is_auth_error(self) -> bool:
        return self.status_code == 401
