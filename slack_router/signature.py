"""Slack request signature verification — constant-time HMAC-SHA256.

Slack signs every request with the app's signing secret:

    X-Slack-Request-Timestamp: <unix seconds>
    X-Slack-Signature:         v0=<hex(HMAC-SHA256(secret, "v0:<ts>:<raw body>"))>

Security contract:
- Comparison uses hmac.compare_digest() (constant-time, no timing attacks)
- Timestamp tolerance: 300s (5 min) in either direction to bound replays
- Stale timestamps are rejected before the MAC is even computed
- Anything unparseable is MALFORMED_HEADER, never VERIFIED (fail-closed)
"""

from __future__ import annotations

import hashlib
import hmac
import time
from collections.abc import Mapping, MutableMapping
from enum import Enum

HEADER_SIGNATURE = "X-Slack-Signature"
HEADER_TIMESTAMP = "X-Slack-Request-Timestamp"

VERSION = "v0"

# Replay window (seconds)
TIMESTAMP_TOLERANCE = 300


class Verification(str, Enum):
    """Outcome of verifying one signed request."""

    VERIFIED = "verified"
    INVALID_SIGNATURE = "invalid_signature"
    STALE_TIMESTAMP = "stale_timestamp"
    MALFORMED_HEADER = "malformed_header"

    @property
    def ok(self) -> bool:
        return self is Verification.VERIFIED


def _as_bytes(value: str | bytes) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return value


def compute_signature(secret: str | bytes, timestamp: int, body: bytes) -> bytes:
    """Return the raw HMAC-SHA256 digest Slack expects for *body* at *timestamp*."""
    base = f"{VERSION}:{timestamp}:".encode("utf-8") + body
    return hmac.new(_as_bytes(secret), base, hashlib.sha256).digest()


def format_signature(digest: bytes) -> str:
    """Format a raw digest as an X-Slack-Signature header value."""
    return f"{VERSION}={digest.hex()}"


def _parse_signature(signature: str | None) -> bytes | None:
    if not signature:
        return None
    version, sep, encoded = signature.partition("=")
    if not sep or version != VERSION or not encoded:
        return None
    try:
        return bytes.fromhex(encoded)
    except ValueError:
        return None


def verify(
    secret: str | bytes,
    timestamp: int,
    body: bytes,
    signature: str | None,
    now: float | None = None,
) -> Verification:
    """Verify a Slack request signature.

    Args:
        secret: Signing secret shared with Slack
        timestamp: Request timestamp (unix seconds)
        body: Raw, undecoded request body
        signature: Value of the X-Slack-Signature header
        now: Verification time (defaults to time.time())

    Returns:
        Verification.VERIFIED only if the tag parses, the timestamp is within
        the replay window and the MAC matches.
    """
    supplied = _parse_signature(signature)
    if supplied is None:
        return Verification.MALFORMED_HEADER

    if now is None:
        now = time.time()
    if abs(now - timestamp) > TIMESTAMP_TOLERANCE:
        return Verification.STALE_TIMESTAMP

    expected = compute_signature(secret, timestamp, body)
    if not hmac.compare_digest(expected, supplied):
        return Verification.INVALID_SIGNATURE
    return Verification.VERIFIED


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is not None:
        return value
    # Plain dicts are case-sensitive; Starlette's Headers is not.
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


def verify_request(
    secret: str | bytes,
    headers: Mapping[str, str],
    body: bytes,
    now: float | None = None,
) -> Verification:
    """Verify a request from its headers and raw body.

    A missing header or a timestamp that is not plain decimal digits is
    MALFORMED_HEADER.
    """
    timestamp_str = _header(headers, HEADER_TIMESTAMP)
    signature = _header(headers, HEADER_SIGNATURE)
    if not timestamp_str or not signature:
        return Verification.MALFORMED_HEADER

    # Plain ASCII digits, as sent by Slack
    if not (timestamp_str.isascii() and timestamp_str.isdigit()):
        return Verification.MALFORMED_HEADER

    return verify(secret, int(timestamp_str), body, signature, now=now)


def add_signature(
    headers: MutableMapping[str, str],
    secret: str | bytes,
    body: bytes,
    now: float | None = None,
) -> None:
    """Sign *body* and set both Slack signature headers on *headers*.

    Mirrors what Slack does before delivering a request; useful for tests
    and local tooling that need requests the router will accept.
    """
    timestamp = int(time.time() if now is None else now)
    headers[HEADER_TIMESTAMP] = str(timestamp)
    headers[HEADER_SIGNATURE] = format_signature(compute_signature(secret, timestamp, body))
