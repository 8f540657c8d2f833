"""Settings for the health-check engine and its HTTP route.

All defaults live here. Values are loaded from environment variables
(and an optional ``.env`` file) by Pydantic Settings.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from healthtree.core.config.enums import LogFormat


class Settings(BaseSettings):
    """Process-wide settings.

    Attributes:
    ----------
        PROJECT_NAME (str): Title of the FastAPI application.
        HEALTH_CHECK_TIMEOUT (float): Default per-check timeout, in seconds.
        HEALTH_MAX_CONCURRENCY (int): Upper bound on leaf procedures running at once
            for a single engine.
        HEALTH_ABANDON_GRACE (float, optional): Seconds a timed-out coroutine check may
            keep running before it is cancelled. Unset never cancels.
        HEALTH_ROUTE_PREFIX (str): Where the health router is mounted.
        LOG_LEVEL (str): Root log level.
        LOG_FORMAT (LogFormat): ``text`` or ``json`` log lines.

    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        extra="ignore",
    )

    PROJECT_NAME: str = "healthtree"

    HEALTH_CHECK_TIMEOUT: float = Field(1.0, description="Default per-check timeout (seconds)")
    HEALTH_MAX_CONCURRENCY: int = Field(64, description="Max leaf procedures in flight")
    HEALTH_ABANDON_GRACE: Optional[float] = Field(
        None, description="Grace period before abandoned checks are cancelled (seconds)"
    )
    HEALTH_ROUTE_PREFIX: str = "/health"

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: LogFormat = LogFormat.TEXT

    @field_validator("HEALTH_CHECK_TIMEOUT")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Reject zero and negative timeouts."""
        if v <= 0:
            raise ValueError("HEALTH_CHECK_TIMEOUT must be greater than zero")
        return v

    @field_validator("HEALTH_ABANDON_GRACE")
    @classmethod
    def validate_grace(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("HEALTH_ABANDON_GRACE must be greater than zero when set")
        return v

    @field_validator("HEALTH_MAX_CONCURRENCY")
    @classmethod
    def validate_concurrency(cls, v: int) -> int:
        """At least one procedure must be allowed to run."""
        if v < 1:
            raise ValueError("HEALTH_MAX_CONCURRENCY must be at least 1")
        return v

    @field_validator("HEALTH_ROUTE_PREFIX")
    @classmethod
    def normalize_prefix(cls, v: str) -> str:
        """Ensure a single leading slash and no trailing slash."""
        stripped = v.strip("/")
        if not stripped:
            raise ValueError("HEALTH_ROUTE_PREFIX must not be the site root")
        return "/" + stripped

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        """Upper-case the level name so ``debug`` works too."""
        return v.upper()
