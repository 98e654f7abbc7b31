"""Predicate composition and short-circuiting dispatch.

A handler is any callable taking a decoded payload. It returns:
- Outcome.NOT_INTERESTED        -> decline, let the next handler try
- None or any other value       -> the payload was processed (terminal)
and raises on real failures (terminal, propagated to the router).

A predicate wraps a handler into a more general one:

>>> guarded = CallbackID("create_task").wrap(create_task)
>>> guarded(payload)      # NOT_INTERESTED unless payload.callback_id matches

Wrapping nests: ``p1.wrap(p2.wrap(h))`` evaluates p1 first and never
evaluates p2 when p1 is false.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    """Result of offering a payload to a handler."""

    HANDLED = "handled"
    NOT_INTERESTED = "not_interested"


NOT_INTERESTED = Outcome.NOT_INTERESTED

Handler = Callable[[Any], "Outcome | None"]


@runtime_checkable
class Predicate(Protocol):
    """A reusable test over a payload, applied by wrapping a handler."""

    def wrap(self, handler: Handler) -> Handler:
        """Return a handler that calls *handler* only if the test holds."""
        ...


def guard(test: Callable[[Any], bool], handler: Handler) -> Handler:
    """Return a handler that runs *handler* iff ``test(payload)`` is true."""

    def guarded(payload: Any) -> Outcome | None:
        if not test(payload):
            return NOT_INTERESTED
        return handler(payload)

    guarded.__name__ = getattr(handler, "__name__", "guarded")
    return guarded


@dataclass(frozen=True)
class FuncPredicate:
    """Predicate backed by an arbitrary ``Callable[[payload], bool]``."""

    test: Callable[[Any], bool]

    def wrap(self, handler: Handler) -> Handler:
        return guard(self.test, handler)


def predicate(test: Callable[[Any], bool]) -> FuncPredicate:
    """Turn a plain boolean function into a Predicate.

    Usage::

        @router.on(predicate(lambda cb: (cb.user or {}).get("id") == "U123"))
        def handle(cb): ...
    """
    return FuncPredicate(test)


def build(handler: Handler, *predicates: Predicate) -> Handler:
    """Decorate *handler* with *predicates*, evaluated left to right.

    ``build(h, p1, p2)`` is ``p1.wrap(p2.wrap(h))``: the first predicate
    listed is the outermost wrapper. Folding ``wrap`` over the list in order
    would do the opposite and evaluate the last predicate first.
    """
    for pred in reversed(predicates):
        handler = pred.wrap(handler)
    return handler


def _normalize(result: Any) -> Outcome:
    # Anything but an explicit decline counts as handled
    if isinstance(result, str) and result == Outcome.NOT_INTERESTED:
        return Outcome.NOT_INTERESTED
    return Outcome.HANDLED


def dispatch(payload: Any, handlers: Iterable[Handler]) -> Outcome:
    """Offer *payload* to each handler in order until one does not decline.

    Handlers run sequentially; an exception stops dispatch and propagates.
    Returns NOT_INTERESTED if every handler declined (or there were none).
    """
    for handler in handlers:
        outcome = _normalize(handler(payload))
        if outcome is not Outcome.NOT_INTERESTED:
            return outcome
    return Outcome.NOT_INTERESTED


@dataclass
class HandlerChain:
    """Append-only, ordered list of predicate-guarded handlers.

    Built at configuration time; read-only while serving.
    """

    _handlers: list[Handler] = field(default_factory=list)
    fallback: Handler | None = None

    def register(self, handler: Handler, *predicates: Predicate) -> Handler:
        """Append *handler* guarded by *predicates*. Returns the guarded handler."""
        guarded = build(handler, *predicates)
        self._handlers.append(guarded)
        logger.debug(
            "Registered handler %s (%d predicate(s), position %d)",
            getattr(handler, "__name__", repr(handler)),
            len(predicates),
            len(self._handlers) - 1,
        )
        return guarded

    def __len__(self) -> int:
        return len(self._handlers)

    def dispatch(self, payload: Any) -> Outcome:
        """Dispatch to registrations, then to the fallback if all declined."""
        outcome = dispatch(payload, self._handlers)
        if outcome is Outcome.NOT_INTERESTED and self.fallback is not None:
            outcome = _normalize(self.fallback(payload))
        return outcome
