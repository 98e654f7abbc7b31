"""Predicates over inner Events API events."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from slack_router.routing import Handler, guard


@dataclass(frozen=True)
class EventType:
    """True iff the event's ``type`` equals *event_type*."""

    event_type: str

    def test(self, event: Any) -> bool:
        return getattr(event, "type", None) == self.event_type

    def wrap(self, handler: Handler) -> Handler:
        return guard(self.test, handler)


@dataclass(frozen=True)
class TextRegexp:
    """True iff *pattern* matches anywhere in the event's ``text``.

    Works for any event carrying text (message, app_mention). Empty or
    missing text never matches.
    """

    pattern: re.Pattern[str] | str
    _regex: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        regex = self.pattern if isinstance(self.pattern, re.Pattern) else re.compile(self.pattern)
        object.__setattr__(self, "_regex", regex)

    def test(self, event: Any) -> bool:
        text = getattr(event, "text", None)
        if not text:
            return False
        return self._regex.search(text) is not None

    def wrap(self, handler: Handler) -> Handler:
        return guard(self.test, handler)
