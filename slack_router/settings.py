"""Router settings from environment variables.

Secrets are read from the environment only; they are never logged.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_INTERACTIONS_PATH = "/slack/interactions"
DEFAULT_EVENTS_PATH = "/slack/events"


class RouterSettings(BaseSettings):
    """Environment-driven configuration shared by the routers and the app factory.

    SLACK_SIGNING_SECRET                      signing secret
    SLACK_ROUTER_INSECURE_SKIP_VERIFICATION   true/1/yes/on disables verification
    SLACK_ROUTER_VERBOSE_RESPONSE             true/1/yes/on enables diagnostics
    SLACK_ROUTER_INTERACTIONS_PATH            default /slack/interactions
    SLACK_ROUTER_EVENTS_PATH                  default /slack/events
    """

    signing_secret: str = Field(default="", validation_alias="SLACK_SIGNING_SECRET", repr=False)
    insecure_skip_verification: bool = False
    verbose_response: bool = False
    interactions_path: str = DEFAULT_INTERACTIONS_PATH
    events_path: str = DEFAULT_EVENTS_PATH

    model_config = SettingsConfigDict(
        env_prefix="SLACK_ROUTER_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    def router_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for InteractionRouter / EventRouter."""
        return {
            "signing_secret": self.signing_secret or None,
            "insecure_skip_verification": self.insecure_skip_verification,
            "verbose_response": self.verbose_response,
        }
