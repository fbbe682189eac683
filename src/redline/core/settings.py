"""Runtime configuration and logging for redline.

Values come from real environment variables first, then from any of the
``.env`` files found in the working directory. Only the outer layers read
them (storage, sharing, the API and the CLI); the parser, exporter, marker
engine and diff take everything they need as arguments.

Call `load_settings()` for the current values. It is cached, so code that
changes ``os.environ`` (tests, mostly) must call `load_settings.cache_clear()`.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class Settings(BaseSettings):
    """redline configuration.

    Attributes
    ----------
    environment : EnvName
        Deployment flag reported by ``/health``; `REDLINE_ENV`.
    log_level : LogLevelName
        Level applied to every logger from `get_logger`; `LOG_LEVEL`.
    plan_dir : str
        Where plans, annotation files, snapshots and versions are written.
        A leading ``~`` is expanded. `REDLINE_PLAN_DIR`.
    share_base_url : str
        Prefix for share URLs; `REDLINE_SHARE_URL`.
    host, port :
        Bind address for the HTTP API; `REDLINE_HOST` / `REDLINE_PORT`.
    modify_threshold : float
        Default similarity at which a removed and an added block of the same
        type are reported as one modified block; `REDLINE_MODIFY_THRESHOLD`.
    """

    environment: EnvName = Field(default="dev", alias="REDLINE_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")
    plan_dir: str = Field(default="~/.redline/plans", alias="REDLINE_PLAN_DIR")
    share_base_url: str = Field(default="https://share.redline.dev", alias="REDLINE_SHARE_URL")
    host: str = Field(default="127.0.0.1", alias="REDLINE_HOST")
    port: int = Field(default=19432, ge=0, le=65535, alias="REDLINE_PORT")
    modify_threshold: float = Field(default=0.5, ge=0.0, le=1.0, alias="REDLINE_MODIFY_THRESHOLD")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.dev", ".env.test", ".env.prod"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def numeric_log_level(self) -> int:
        return int(getattr(logging, self.log_level, logging.INFO))


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Build the settings once per process (until the cache is cleared)."""
    os.environ.setdefault("REDLINE_ENV", "dev")
    return Settings()


def get_logger(name: str = "redline") -> logging.Logger:
    """Return a logger with one stream handler at the configured level.

    The level is re-read on every call, so loggers fetched after a
    `load_settings.cache_clear()` follow the new ``LOG_LEVEL``.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        stream = logging.StreamHandler()
        stream.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(stream)
    logger.setLevel(load_settings().numeric_log_level)
    logger.propagate = False
    return logger
