"""Router base: signature check, decode, dispatch and HTTP status mapping.

Request flow (one request, synchronous):
1. Verify the Slack signature (skipped only in explicit insecure mode)
2. Decode the raw body into a payload (subclass-specific)
3. Dispatch the payload through the registered predicate chains
4. Map the outcome to a response

Status contract:
- 401 for any signature failure (bad MAC, stale timestamp, malformed headers)
- 400 for a body that cannot be decoded
- 200 for handled AND for "no handler interested" (don't leak the routing
  table; Slack retries on non-2xx)
- 500 for handler failures, or the status carried by an HttpError
- Error details are only included with verbose_response=True
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool
from starlette.responses import Response

from slack_router.errors import ConfigurationError, HttpError, MalformedBodyError
from slack_router.routing import Handler, HandlerChain, Outcome, Predicate
from slack_router.signature import Verification, verify_request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouterResponse:
    """Framework-neutral response produced by BaseRouter.handle()."""

    status_code: int
    content: Any = None
    media_type: str = "application/json"

    def to_response(self) -> Response:
        if self.content is None:
            return Response(status_code=self.status_code)
        if self.media_type == "application/json":
            return JSONResponse(self.content, status_code=self.status_code)
        return PlainTextResponse(str(self.content), status_code=self.status_code)


class BaseRouter:
    """Common machinery for Slack request routers.

    Exactly one of *signing_secret* or ``insecure_skip_verification=True``
    must be given; anything else raises ConfigurationError.
    """

    kind = "base"

    def __init__(
        self,
        signing_secret: str | bytes | None = None,
        *,
        insecure_skip_verification: bool = False,
        verbose_response: bool = False,
    ):
        if signing_secret and insecure_skip_verification:
            raise ConfigurationError(
                "signing_secret and insecure_skip_verification are mutually exclusive"
            )
        if not signing_secret and not insecure_skip_verification:
            raise ConfigurationError(
                "signing_secret is required (pass insecure_skip_verification=True "
                "to disable signature verification)"
            )

        if isinstance(signing_secret, str):
            signing_secret = signing_secret.encode("utf-8")
        self._signing_secret: bytes | None = signing_secret
        self._insecure = insecure_skip_verification
        self.verbose_response = verbose_response
        self._chain = HandlerChain()

        if insecure_skip_verification:
            logger.warning("%s router: signature verification is DISABLED", self.kind)

    # -- registration (configuration time only) ----------------------------

    def register(self, handler: Handler, *predicates: Predicate) -> Handler:
        """Register *handler*, guarded by *predicates* (evaluated left to right)."""
        self._chain.register(handler, *predicates)
        return handler

    def on(self, *predicates: Predicate) -> Callable[[Handler], Handler]:
        """Decorator form of register()."""

        def decorator(handler: Handler) -> Handler:
            return self.register(handler, *predicates)

        return decorator

    def set_fallback(self, handler: Handler | None) -> None:
        """Set a handler that runs only when every registration declined."""
        self._chain.fallback = handler

    # -- request handling ---------------------------------------------------

    def verify(
        self, headers: Mapping[str, str], body: bytes, now: float | None = None
    ) -> Verification:
        if self._insecure:
            return Verification.VERIFIED
        return verify_request(self._signing_secret, headers, body, now=now)

    def decode(self, body: bytes) -> Any:
        """Decode a verified body into a payload. Raises MalformedBodyError."""
        raise NotImplementedError

    def respond_early(self, payload: Any) -> RouterResponse | None:
        """Answer a payload without dispatching it (e.g. protocol handshakes)."""
        return None

    def routable(self, payload: Any) -> Any | None:
        """Return the object handlers receive, or None to skip dispatch."""
        return payload

    def handle(
        self, headers: Mapping[str, str], body: bytes, now: float | None = None
    ) -> RouterResponse:
        """Run one request through verify -> decode -> dispatch -> respond."""
        verification = self.verify(headers, body, now=now)
        if not verification.ok:
            logger.warning("Rejected %s request: %s", self.kind, verification.value)
            return self._error(401, "unauthorized", verification.value)

        try:
            payload = self.decode(body)
        except MalformedBodyError as e:
            logger.warning("Malformed %s request: %s", self.kind, e.reason)
            return self._error(400, "bad_request", e.reason)

        early = self.respond_early(payload)
        if early is not None:
            return early

        target = self.routable(payload)
        if target is None:
            outcome = Outcome.NOT_INTERESTED
        else:
            try:
                outcome = self._chain.dispatch(target)
            except HttpError as e:
                logger.warning("Handler responded with HTTP %d: %s", e.status_code, e.message)
                return self._error(e.status_code, "error", e.message)
            except Exception as e:
                logger.exception("Handler failed for %s request", self.kind)
                return self._error(500, "internal_error", str(e))

        if outcome is Outcome.NOT_INTERESTED:
            logger.info("No handler interested in %s request", self.kind)

        if self.verbose_response:
            return RouterResponse(200, {"ok": True, "outcome": outcome.value})
        return RouterResponse(200)

    def _error(self, status_code: int, code: str, detail: str) -> RouterResponse:
        content: dict[str, Any] = {"status": code}
        if self.verbose_response:
            content["detail"] = detail
        return RouterResponse(status_code, content)

    # -- HTTP binding ---------------------------------------------------------

    def register_routes(self, app: FastAPI | APIRouter, path: str) -> None:
        """Register a POST endpoint at *path* that serves this router.

        Handlers may block; handle() runs in the thread pool so a slow
        handler never stalls the event loop.
        """

        @app.post(path, include_in_schema=False)
        async def slack_endpoint(request: Request) -> Response:
            body = await request.body()
            result = await run_in_threadpool(self.handle, request.headers, body)
            return result.to_response()

        logger.info("%s router mounted at POST %s", self.kind, path)
