# elementquery/utils/config.py
from __future__ import annotations

import functools
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from elementquery.core.poller import RetryPolicy


# ---------- Enums ----------

class BrowserType(str, Enum):
    chromium = "chromium"
    firefox = "firefox"
    webkit = "webkit"


class PollStrategy(str, Enum):
    immediate = "immediate"
    deadline = "deadline"
    max_attempts = "max_attempts"
    deadline_min_attempts = "deadline_min_attempts"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# ---------- Settings ----------

class Settings(BaseSettings):
    """
    Central configuration for elementquery.

    Values load in this order of precedence:
      1) Environment variables
      2) .env file in project root
      3) Defaults below

    Settings are only read when a session is created; the resulting default
    poller is fixed for the lifetime of that session.
    """

    # ---- Polling defaults ----
    POLL_STRATEGY: PollStrategy = Field(default=PollStrategy.immediate, description="Default retry policy kind")
    POLL_TIMEOUT_MS: int = Field(default=20000, ge=0)
    POLL_INTERVAL_MS: int = Field(default=500, ge=0)
    POLL_MAX_TRIES: int = Field(default=10, ge=1)
    POLL_MIN_TRIES: int = Field(default=0, ge=0)
    WAIT_IGNORE_ERRORS: bool = Field(default=True, description="Treat remote errors as 'not yet' while waiting")

    # ---- Browser configuration ----
    HEADLESS: bool = Field(default=True, description="Run the browser headless")
    BROWSER_TYPE: BrowserType = Field(default=BrowserType.chromium, description="Playwright browser")
    VIEWPORT_WIDTH: int = Field(default=1366, ge=320, le=7680)
    VIEWPORT_HEIGHT: int = Field(default=768, ge=320, le=4320)
    SLOW_MO: int = Field(default=0, ge=0, description="Slow down actions (ms) for debugging")
    USER_AGENT: Optional[str] = Field(default=None)
    PAGE_LOAD_TIMEOUT: int = Field(default=60000, ge=1000)

    # ---- Logging ----
    LOG_LEVEL: LogLevel = Field(default=LogLevel.INFO)
    LOG_TO_FILE: bool = Field(default=False)
    LOG_FILE: Path = Field(default=Path("./elementquery.log"))
    COLORIZED_OUTPUT: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("LOG_FILE", mode="before")
    @classmethod
    def _coerce_to_path(cls, v):
        if isinstance(v, Path):
            return v
        return Path(str(v)) if v is not None else v

    @field_validator("LOG_FILE", mode="after")
    @classmethod
    def _absolutize_log_file(cls, v: Path):
        return v if v.is_absolute() else Path.cwd() / v

    def default_poller(self) -> RetryPolicy:
        """Build the RetryPolicy described by the POLL_* settings."""
        # local import to avoid circulars (poller -> timing -> logger -> config)
        from elementquery.core.poller import Deadline, DeadlineWithMinAttempts, Immediate, MaxAttempts

        if self.POLL_STRATEGY == PollStrategy.deadline:
            return Deadline(timeout_ms=self.POLL_TIMEOUT_MS, interval_ms=self.POLL_INTERVAL_MS)
        if self.POLL_STRATEGY == PollStrategy.max_attempts:
            return MaxAttempts(max_tries=self.POLL_MAX_TRIES, interval_ms=self.POLL_INTERVAL_MS)
        if self.POLL_STRATEGY == PollStrategy.deadline_min_attempts:
            return DeadlineWithMinAttempts(
                timeout_ms=self.POLL_TIMEOUT_MS,
                interval_ms=self.POLL_INTERVAL_MS,
                min_tries=self.POLL_MIN_TRIES,
            )
        return Immediate()

    # Convenience: Playwright launch options dict
    def playwright_launch_kwargs(self) -> dict:
        return {
            "headless": self.HEADLESS,
            "slow_mo": self.SLOW_MO,
        }

    # Convenience: Playwright new_context kwargs
    def playwright_context_kwargs(self) -> dict:
        viewport = {"width": self.VIEWPORT_WIDTH, "height": self.VIEWPORT_HEIGHT}
        ctx = {"viewport": viewport}
        if self.USER_AGENT:
            ctx["user_agent"] = self.USER_AGENT
        return ctx


# --------- Public accessor (memoized) ---------

@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Load and cache settings once per process.
    Call `get_settings.cache_clear()` if you need to reload after changing env.
    """
    return Settings()
