"""Router for Events API requests.

- url_verification: echo the challenge (after signature verification)
- event_callback:   dispatch the inner event to registered handlers
- anything else:    acknowledged with 200, not dispatched
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from pydantic import ValidationError

from slack_router.errors import MalformedBodyError
from slack_router.events.models import (
    APP_MENTION,
    EVENT_CALLBACK,
    MESSAGE,
    URL_VERIFICATION,
    Event,
    EventCallback,
)
from slack_router.events.predicates import EventType
from slack_router.router import BaseRouter, RouterResponse
from slack_router.routing import Handler, Predicate

logger = logging.getLogger(__name__)


def parse_event_callback(body: bytes) -> EventCallback:
    """Decode a JSON Events API body.

    Raises:
        MalformedBodyError: If the body is not a valid envelope, or an
            event_callback envelope carries no valid inner event
    """
    try:
        envelope = EventCallback.model_validate_json(body)
    except ValidationError as e:
        raise MalformedBodyError("invalid_payload") from e

    if envelope.type == EVENT_CALLBACK and envelope.event is None:
        raise MalformedBodyError("missing_event")
    if envelope.type == URL_VERIFICATION and not envelope.challenge:
        raise MalformedBodyError("missing_challenge")
    return envelope


class EventRouter(BaseRouter):
    """Dispatches inner events by type, then by predicates.

    Example::

        router = EventRouter(signing_secret=secret)

        @router.on_message(TextRegexp(r"\\bdeploy\\b"))
        def deploy(event: MessageEvent) -> None:
            ...
    """

    kind = "event"

    def decode(self, body: bytes) -> EventCallback:
        return parse_event_callback(body)

    def respond_early(self, payload: EventCallback) -> RouterResponse | None:
        if payload.type == URL_VERIFICATION:
            logger.info("Answered url_verification challenge")
            return RouterResponse(200, payload.challenge, media_type="text/plain")
        return None

    def routable(self, payload: EventCallback) -> Event | None:
        if payload.type != EVENT_CALLBACK:
            logger.info("Ignoring %s envelope", payload.type)
            return None
        return payload.event

    def register_event(
        self, event_type: str, handler: Handler, *predicates: Predicate
    ) -> Handler:
        """Register *handler* for events of *event_type* matching *predicates*."""
        return self.register(handler, EventType(event_type), *predicates)

    def on_event(
        self, event_type: str, *predicates: Predicate
    ) -> Callable[[Handler], Handler]:
        """Decorator form of register_event()."""

        def decorator(handler: Handler) -> Handler:
            return self.register_event(event_type, handler, *predicates)

        return decorator

    def on_message(self, *predicates: Predicate) -> Callable[[Handler], Handler]:
        return self.on_event(MESSAGE, *predicates)

    def on_app_mention(self, *predicates: Predicate) -> Callable[[Handler], Handler]:
        return self.on_event(APP_MENTION, *predicates)
