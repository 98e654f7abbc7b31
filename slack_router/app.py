"""FastAPI application factory.

Mounts an InteractionRouter and an EventRouter and a public health check.
Routers not passed in are built from RouterSettings and exposed on
``app.state`` so handlers can be registered before serving:

    app = create_app()
    app.state.events.on_message(TextRegexp("hello"))(say_hello)
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from slack_router.events.router import EventRouter
from slack_router.interactions.router import InteractionRouter
from slack_router.settings import RouterSettings

logger = logging.getLogger(__name__)


def create_app(
    interactions: InteractionRouter | None = None,
    events: EventRouter | None = None,
    settings: RouterSettings | None = None,
) -> FastAPI:
    """Create the webhook receiver app.

    Raises:
        ConfigurationError: If a router has to be built from *settings* and
            they specify neither or both authentication modes
    """
    if settings is None:
        settings = RouterSettings()
    if interactions is None:
        interactions = InteractionRouter(**settings.router_kwargs())
    if events is None:
        events = EventRouter(**settings.router_kwargs())

    app = FastAPI(title="slack-router", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.settings = settings
    app.state.interactions = interactions
    app.state.events = events

    @app.get("/health")
    async def health():
        """Liveness check (public)."""
        return {"status": "ok"}

    interactions.register_routes(app, settings.interactions_path)
    events.register_routes(app, settings.events_path)

    return app
