"""Interaction payloads (block actions, shortcuts, view submissions).

Only the fields needed for routing are typed; everything else Slack sends
is kept as extra attributes on the model.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Interaction types Slack currently sends
BLOCK_ACTIONS = "block_actions"
INTERACTIVE_MESSAGE = "interactive_message"
MESSAGE_ACTION = "message_action"
SHORTCUT = "shortcut"
VIEW_CLOSED = "view_closed"
VIEW_SUBMISSION = "view_submission"


class BlockAction(BaseModel):
    """One element of a block_actions payload's ``actions`` list."""

    model_config = ConfigDict(extra="allow", frozen=True)

    block_id: str = ""
    action_id: str = ""
    type: str = ""
    value: str | None = None
    action_ts: str | None = None


class InteractionCallback(BaseModel):
    """Decoded ``payload`` form field of an interactive request."""

    model_config = ConfigDict(extra="allow", frozen=True)

    type: str
    callback_id: str = ""
    trigger_id: str = ""
    action_ts: str | None = None
    token: str | None = None
    team: dict[str, Any] | None = None
    user: dict[str, Any] | None = None
    channel: dict[str, Any] | None = None
    actions: list[BlockAction] = Field(default_factory=list)
    view: dict[str, Any] | None = None
