"""Predicates over InteractionCallback payloads."""

from __future__ import annotations

from dataclasses import dataclass

from slack_router.interactions.models import InteractionCallback
from slack_router.routing import Handler, guard


@dataclass(frozen=True)
class Type:
    """True iff the callback's ``type`` equals *interaction_type*."""

    interaction_type: str

    def test(self, callback: InteractionCallback) -> bool:
        return callback.type == self.interaction_type

    def wrap(self, handler: Handler) -> Handler:
        return guard(self.test, handler)


@dataclass(frozen=True)
class BlockAction:
    """True iff some entry of ``actions`` has both the given block_id and action_id."""

    block_id: str
    action_id: str

    def test(self, callback: InteractionCallback) -> bool:
        return any(
            action.block_id == self.block_id and action.action_id == self.action_id
            for action in callback.actions
        )

    def wrap(self, handler: Handler) -> Handler:
        return guard(self.test, handler)


@dataclass(frozen=True)
class CallbackID:
    """True iff the callback's ``callback_id`` equals *callback_id*."""

    callback_id: str

    def test(self, callback: InteractionCallback) -> bool:
        return callback.callback_id == self.callback_id

    def wrap(self, handler: Handler) -> Handler:
        return guard(self.test, handler)
