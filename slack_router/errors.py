"""Error taxonomy for the Slack request router.

Contract:
- ConfigurationError is raised at router construction, never per request
- MalformedBodyError -> 400, the payload could not be decoded
- HttpError lets a handler pick the response status explicitly
- Any other exception raised by a handler -> 500
- "Not interested" is not an exception: it is Outcome.NOT_INTERESTED
  (see slack_router.routing), returned by handlers and recovered by dispatch
"""

from __future__ import annotations


class RouterError(Exception):
    """Base class for errors raised by slack_router."""


class ConfigurationError(RouterError, ValueError):
    """Raised when a router is constructed with conflicting or missing options."""


class MalformedBodyError(RouterError):
    """Raised when a verified request body cannot be decoded into a payload."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Malformed request body: {reason}")


class HttpError(RouterError):
    """Raised by a handler to respond with a specific HTTP status code."""

    def __init__(self, status_code: int, message: str = ""):
        self.status_code = status_code
        self.message = message or f"HTTP {status_code}"
        super().__init__(self.message)
