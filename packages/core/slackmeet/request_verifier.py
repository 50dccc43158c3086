from __future__ import annotations

import hashlib
import hmac
import time

from .errors import VerificationError

TIMESTAMP_HEADER = "X-Slack-Request-Timestamp"
SIGNATURE_HEADER = "X-Slack-Signature"
SIGNATURE_VERSION = "v0"
MAX_REQUEST_AGE = 5 * 60


def _as_bytes(value: bytes | str) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return value


def compute_signature(raw_body: bytes | str, timestamp: str, signing_secret: str) -> str:
    basestring = f"{SIGNATURE_VERSION}:{timestamp}:".encode("utf-8") + _as_bytes(raw_body)
    digest = hmac.new(signing_secret.encode("utf-8"), basestring, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_VERSION}={digest}"


def verify_timestamp(timestamp: str, *, now: float | None = None) -> None:
    try:
        request_time = int(timestamp)
    except (TypeError, ValueError) as exc:
        raise VerificationError("Invalid timestamp header") from exc
    current = time.time() if now is None else now
    if abs(current - request_time) > MAX_REQUEST_AGE:
        raise VerificationError("Request timestamp too old")


def verify_signature(raw_body: bytes | str, timestamp: str, signature: str, signing_secret: str) -> None:
    expected = compute_signature(raw_body, timestamp, signing_secret)
    if not hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8")):
        raise VerificationError("Invalid signature")


def verify(
    raw_body: bytes | str,
    timestamp: str | None,
    signature: str | None,
    signing_secret: str,
    *,
    now: float | None = None,
) -> None:
    """Reject a Slack request unless it is fresh and signed with ``signing_secret``.

    ``raw_body`` must be the exact bytes Slack sent; re-encoding a parsed form
    changes the signature.
    """
    if not timestamp:
        raise VerificationError("Missing timestamp header")
    if not signature:
        raise VerificationError("Missing signature header")

    verify_timestamp(timestamp, now=now)
    verify_signature(raw_body, timestamp, signature, signing_secret)
