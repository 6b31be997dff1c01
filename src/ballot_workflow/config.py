"""Configuration for the ballot hosts (CLI and REST server).

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

The engine itself takes its administrator as a constructor argument; only the
hosts read settings.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BallotSettings(BaseSettings):
    """Settings for a local ballot.

    Environment variables:
    - BALLOT_ADMINISTRATOR  (required)
    - LOG_LEVEL             (optional)
    - BALLOT_STATE_PATH     (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `BallotSettings(_env_file=path_to_env)`.
    """

    # Empty default so `BallotSettings()` type-checks; validation below rejects it.
    administrator: str = Field(
        default="",
        validation_alias="BALLOT_ADMINISTRATOR",
        description="Identity allowed to register voters, advance phases and tally",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    state_path: Path = Field(
        default=Path("ballot_state/ballot.json"),
        validation_alias="BALLOT_STATE_PATH",
        description="Path where the ballot snapshot is persisted",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _require_administrator(self) -> BallotSettings:
        self.administrator = self.administrator.strip()
        if not self.administrator:
            raise ValueError("BALLOT_ADMINISTRATOR is required")
        return self
