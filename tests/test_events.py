"""Tests for Events API decoding, predicates and EventRouter.

Tests:
- parse_event_callback(): envelope + typed inner event
- EventType / TextRegexp predicates
- EventRouter: url_verification, per-type routing, non-callback envelopes
"""

from __future__ import annotations

import json
import re
from unittest.mock import MagicMock

import pytest

from slack_router.errors import MalformedBodyError
from slack_router.events.models import (
    APP_RATE_LIMITED,
    AppMentionEvent,
    Event,
    MessageEvent,
)
from slack_router.events.predicates import EventType, TextRegexp
from slack_router.events.router import EventRouter, parse_event_callback
from slack_router.routing import NOT_INTERESTED
from tests.conftest import SIGNING_SECRET, signed_headers


def _envelope(event: dict) -> bytes:
    return json.dumps(
        {
            "type": "event_callback",
            "token": "XXYYZZ",
            "team_id": "T123ABC456",
            "api_app_id": "A123ABC456",
            "event_id": "Ev123ABC456",
            "event_time": 1515449522,
            "event": event,
        }
    ).encode()


def _message(text: str = "hello world", **extra) -> dict:
    return {"type": "message", "channel": "C123", "user": "U123", "text": text, "ts": "1.2", **extra}


def _json_headers(body: bytes) -> dict[str, str]:
    return signed_headers(body, content_type="application/json")


@pytest.fixture()
def inner():
    return MagicMock(return_value=None)


# ── Decoding ──────────────────────────────────────────────────────────────


class TestParseEventCallback:
    """JSON body -> EventCallback with a typed inner event."""

    def test_message_event(self):
        envelope = parse_event_callback(_envelope(_message("hi")))
        assert envelope.team_id == "T123ABC456"
        assert isinstance(envelope.event, MessageEvent)
        assert envelope.event.text == "hi"

    def test_app_mention_event(self):
        envelope = parse_event_callback(
            _envelope({"type": "app_mention", "text": "<@U0LAN0Z89> is it everything?"})
        )
        assert isinstance(envelope.event, AppMentionEvent)

    def test_unknown_event_type_is_generic(self):
        envelope = parse_event_callback(_envelope({"type": "reaction_added", "reaction": "tada"}))
        assert type(envelope.event) is Event
        assert envelope.event.model_extra["reaction"] == "tada"

    def test_object_valued_user_and_channel(self):
        team_join = parse_event_callback(
            _envelope({"type": "team_join", "user": {"id": "U1", "name": "spengler"}})
        )
        assert type(team_join.event) is Event
        assert team_join.event.user == {"id": "U1", "name": "spengler"}

        created = parse_event_callback(
            _envelope({"type": "channel_created", "channel": {"id": "C1", "name": "fun"}})
        )
        assert created.event.channel["name"] == "fun"

    def test_message_user_must_be_an_id(self):
        with pytest.raises(MalformedBodyError):
            parse_event_callback(_envelope(_message(user={"id": "U1"})))

    def test_url_verification(self):
        body = json.dumps({"type": "url_verification", "challenge": "3eZbrw1a", "token": "t"})
        envelope = parse_event_callback(body.encode())
        assert envelope.challenge == "3eZbrw1a"

    @pytest.mark.parametrize(
        ("body", "reason"),
        [
            (b"not json", "invalid_payload"),
            (b"{}", "invalid_payload"),
            (b'{"type": "event_callback"}', "missing_event"),
            (b'{"type": "event_callback", "event": {"text": "no type"}}', "invalid_payload"),
            (b'{"type": "event_callback", "event": {"type": "message", "text": 5}}', "invalid_payload"),
            (b'{"type": "url_verification"}', "missing_challenge"),
        ],
    )
    def test_malformed(self, body, reason):
        with pytest.raises(MalformedBodyError) as exc_info:
            parse_event_callback(body)
        assert exc_info.value.reason == reason


# ── Predicates ────────────────────────────────────────────────────────────


class TestEventTypePredicate:
    def test_matching_type(self, inner):
        assert EventType("message").wrap(inner)(MessageEvent(type="message")) is None
        inner.assert_called_once()

    def test_other_type(self, inner):
        h = EventType("message").wrap(inner)
        assert h(AppMentionEvent(type="app_mention")) is NOT_INTERESTED
        inner.assert_not_called()


class TestTextRegexpPredicate:
    """TextRegexp matches anywhere in the event text."""

    def test_match_anywhere(self, inner):
        h = TextRegexp(r"deploy").wrap(inner)
        assert h(MessageEvent(type="message", text="please deploy now")) is None
        inner.assert_called_once()

    def test_no_match(self, inner):
        h = TextRegexp(r"deploy").wrap(inner)
        assert h(MessageEvent(type="message", text="hello")) is NOT_INTERESTED
        inner.assert_not_called()

    def test_empty_text_never_matches(self, inner):
        h = TextRegexp(r".*").wrap(inner)
        assert h(MessageEvent(type="message", text="")) is NOT_INTERESTED
        inner.assert_not_called()

    def test_event_without_text(self, inner):
        h = TextRegexp(r".*").wrap(inner)
        assert h(Event(type="reaction_added")) is NOT_INTERESTED

    def test_compiled_pattern(self, inner):
        h = TextRegexp(re.compile(r"^HELLO", re.IGNORECASE)).wrap(inner)
        assert h(AppMentionEvent(type="app_mention", text="hello bot")) is None


# ── Router ────────────────────────────────────────────────────────────────


class TestEventRouter:
    """EventRouter routes inner events by type, then by predicates."""

    def test_url_verification_echoes_challenge(self):
        router = EventRouter(signing_secret=SIGNING_SECRET)
        body = json.dumps({"type": "url_verification", "challenge": "3eZbrw1a"}).encode()

        resp = router.handle(_json_headers(body), body)

        assert resp.status_code == 200
        assert resp.content == "3eZbrw1a"
        assert resp.media_type == "text/plain"

    def test_url_verification_requires_signature(self):
        router = EventRouter(signing_secret=SIGNING_SECRET)
        body = json.dumps({"type": "url_verification", "challenge": "3eZbrw1a"}).encode()
        assert router.handle({}, body).status_code == 401

    def test_routes_by_event_type(self):
        router = EventRouter(signing_secret=SIGNING_SECRET)
        on_mention = MagicMock(return_value=None)
        on_message = MagicMock(return_value=None)
        router.on_app_mention()(on_mention)
        router.on_message()(on_message)

        body = _envelope(_message())
        resp = router.handle(_json_headers(body), body)

        assert resp.status_code == 200
        on_mention.assert_not_called()
        on_message.assert_called_once()
        assert isinstance(on_message.call_args[0][0], MessageEvent)

    def test_type_checked_before_predicates(self):
        router = EventRouter(signing_secret=SIGNING_SECRET)
        text_test = MagicMock(return_value=True)

        class Spy:
            def wrap(self, handler):
                def guarded(event):
                    if not text_test(event):
                        return NOT_INTERESTED
                    return handler(event)

                return guarded

        router.register_event("app_mention", MagicMock(return_value=None), Spy())
        body = _envelope(_message())
        router.handle(_json_headers(body), body)

        text_test.assert_not_called()

    def test_text_regexp_routing(self):
        router = EventRouter(signing_secret=SIGNING_SECRET, verbose_response=True)
        deploy = MagicMock(return_value=None)
        greet = MagicMock(return_value=None)
        router.on_message(TextRegexp(r"\bdeploy\b"))(deploy)
        router.on_message(TextRegexp(r"\bhello\b"))(greet)

        body = _envelope(_message("hello there"))
        resp = router.handle(_json_headers(body), body)

        deploy.assert_not_called()
        greet.assert_called_once()
        assert resp.content == {"ok": True, "outcome": "handled"}

    def test_unmatched_event_returns_200(self):
        router = EventRouter(signing_secret=SIGNING_SECRET, verbose_response=True)
        router.on_message(TextRegexp("deploy"))(MagicMock())

        body = _envelope({"type": "reaction_added", "reaction": "tada"})
        resp = router.handle(_json_headers(body), body)

        assert resp.status_code == 200
        assert resp.content == {"ok": True, "outcome": "not_interested"}

    def test_object_user_event_dispatched(self):
        router = EventRouter(signing_secret=SIGNING_SECRET)
        handler = MagicMock(return_value=None)
        router.on_event("team_join")(handler)

        body = _envelope({"type": "team_join", "user": {"id": "U1"}})
        resp = router.handle(_json_headers(body), body)

        assert resp.status_code == 200
        handler.assert_called_once()
        assert handler.call_args[0][0].user == {"id": "U1"}

    def test_non_callback_envelope_not_dispatched(self):
        router = EventRouter(signing_secret=SIGNING_SECRET)
        handler = MagicMock(return_value=None)
        router.register(handler)

        body = json.dumps({"type": APP_RATE_LIMITED, "minute_rate_limited": 1518467820}).encode()
        resp = router.handle(_json_headers(body), body)

        assert resp.status_code == 200
        handler.assert_not_called()

    def test_generic_registration_sees_every_event(self):
        router = EventRouter(insecure_skip_verification=True)
        handler = MagicMock(return_value=None)
        router.register(handler)

        body = _envelope({"type": "reaction_added"})
        router.handle({}, body)

        handler.assert_called_once()

    def test_on_event_decorator_returns_function(self):
        router = EventRouter(insecure_skip_verification=True)

        @router.on_event("reaction_added")
        def reacted(event):
            return None

        assert reacted(Event(type="anything")) is None
