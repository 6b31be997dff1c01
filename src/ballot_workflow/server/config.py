"""Configuration for the REST server."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from ballot_workflow.config import BallotSettings


class ServerSettings(BallotSettings):
    """Ballot settings plus the HTTP-facing knobs.

    The caller identity is asserted by whatever sits in front of the server
    (gateway, reverse proxy) through a request header.
    """

    caller_header: str = Field(
        default="X-Ballot-Caller",
        validation_alias="BALLOT_CALLER_HEADER",
        description="Request header carrying the authenticated caller identity",
    )

    # Dev-friendly CORS. Override via BALLOT_CORS_ORIGINS=...
    cors_origins: str = Field(
        default="http://localhost:5173,http://127.0.0.1:5173",
        validation_alias="BALLOT_CORS_ORIGINS",
        description="Comma-separated list of allowed CORS origins.",
    )

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    def parsed_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
