"""Events API payloads.

Slack wraps every event in an envelope:

    {"type": "event_callback", "team_id": ..., "event_id": ..., "event": {...}}

The inner ``event`` is decoded into the model registered for its ``type``
(MessageEvent, AppMentionEvent) or into the generic Event.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

# Envelope types
EVENT_CALLBACK = "event_callback"
URL_VERIFICATION = "url_verification"
APP_RATE_LIMITED = "app_rate_limited"

# Inner event types with dedicated models
MESSAGE = "message"
APP_MENTION = "app_mention"


class Event(BaseModel):
    """Any inner event. Fields not listed here are kept as extras."""

    model_config = ConfigDict(extra="allow", frozen=True)

    type: str
    event_ts: str | None = None
    # A string ID on message events, an object on team_join or channel_created
    user: Any = None
    channel: Any = None


class MessageEvent(Event):
    """A ``message`` event (including subtypes such as bot_message)."""

    user: str | None = None
    channel: str | None = None
    text: str = ""
    ts: str | None = None
    thread_ts: str | None = None
    subtype: str | None = None
    bot_id: str | None = None
    channel_type: str | None = None


class AppMentionEvent(Event):
    """An ``app_mention`` event."""

    user: str | None = None
    channel: str | None = None
    text: str = ""
    ts: str | None = None
    thread_ts: str | None = None


EVENT_MODELS: dict[str, type[Event]] = {
    MESSAGE: MessageEvent,
    APP_MENTION: AppMentionEvent,
}


def parse_event(data: dict[str, Any]) -> Event:
    """Validate a raw inner event into its registered model."""
    model = EVENT_MODELS.get(data.get("type", ""), Event)
    return model.model_validate(data)


class EventCallback(BaseModel):
    """Outer Events API envelope."""

    model_config = ConfigDict(extra="allow", frozen=True)

    type: str
    token: str | None = None
    team_id: str | None = None
    api_app_id: str | None = None
    event_id: str | None = None
    event_time: int | None = None
    challenge: str | None = None
    event: Event | None = None

    @field_validator("event", mode="before")
    @classmethod
    def _decode_event(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return parse_event(value)
        return value
