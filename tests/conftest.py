"""Shared fixtures for the slack_router test suite."""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import urlencode

import pytest

from slack_router.signature import add_signature

SIGNING_SECRET = "THE_TOKEN"

SHORTCUT_PAYLOAD: dict[str, Any] = {
    "type": "shortcut",
    "token": "XXXXXXXXXXXXX",
    "action_ts": "1581106241.371594",
    "team": {"id": "TXXXXXXXX", "domain": "shortcuts-test"},
    "user": {"id": "UXXXXXXXXX", "username": "aman", "team_id": "TXXXXXXXX"},
    "callback_id": "shortcut_create_task",
    "trigger_id": "944799105734.773906753841.38b5894552bdd4a780554ee59d1f3638",
}


def form_body(payload: dict[str, Any]) -> bytes:
    """Encode *payload* the way Slack posts interactive requests."""
    return urlencode({"payload": json.dumps(payload)}).encode("utf-8")


def signed_headers(
    body: bytes,
    secret: str = SIGNING_SECRET,
    now: float | None = None,
    content_type: str = "application/x-www-form-urlencoded",
) -> dict[str, str]:
    """Headers of a request Slack would send for *body*."""
    headers = {"Content-Type": content_type}
    add_signature(headers, secret, body, now=now)
    return headers


@pytest.fixture()
def shortcut_payload() -> dict[str, Any]:
    return dict(SHORTCUT_PAYLOAD)


@pytest.fixture()
def shortcut_body(shortcut_payload: dict[str, Any]) -> bytes:
    return form_body(shortcut_payload)


@pytest.fixture(autouse=True)
def _clean_router_env(monkeypatch):
    """Keep host SLACK_* variables out of RouterSettings."""
    for name in (
        "SLACK_SIGNING_SECRET",
        "SLACK_ROUTER_INSECURE_SKIP_VERIFICATION",
        "SLACK_ROUTER_VERBOSE_RESPONSE",
        "SLACK_ROUTER_INTERACTIONS_PATH",
        "SLACK_ROUTER_EVENTS_PATH",
    ):
        monkeypatch.delenv(name, raising=False)
