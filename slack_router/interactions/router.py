"""Router for interactive requests (buttons, shortcuts, modals).

Slack posts these as application/x-www-form-urlencoded with a single
``payload`` field containing the JSON callback. The signature covers the
whole form-encoded body, not the extracted JSON.
"""

from __future__ import annotations

from urllib.parse import parse_qs

from pydantic import ValidationError

from slack_router.errors import MalformedBodyError
from slack_router.interactions.models import InteractionCallback
from slack_router.router import BaseRouter


def parse_interaction(body: bytes) -> InteractionCallback:
    """Decode a form-encoded interactive request body.

    Raises:
        MalformedBodyError: If the body is not UTF-8, has no ``payload``
            field, or the payload is not a valid interaction callback
    """
    try:
        form = parse_qs(body.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise MalformedBodyError("body_not_utf8") from e

    values = form.get("payload")
    if not values:
        raise MalformedBodyError("missing_payload")

    try:
        return InteractionCallback.model_validate_json(values[0])
    except ValidationError as e:
        raise MalformedBodyError("invalid_payload") from e


class InteractionRouter(BaseRouter):
    """Dispatches InteractionCallback payloads to predicate-guarded handlers.

    Example::

        router = InteractionRouter(signing_secret=os.environ["SLACK_SIGNING_SECRET"])

        @router.on(Type(BLOCK_ACTIONS), BlockAction("approval", "approve"))
        def approve(callback: InteractionCallback) -> None:
            ...
    """

    kind = "interaction"

    def decode(self, body: bytes) -> InteractionCallback:
        return parse_interaction(body)
