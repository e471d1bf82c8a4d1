import math
import os
from dataclasses import dataclass

from .errors import ConfigError
from .logging import check_format, resolve_level


@dataclass(frozen=True)
class Config:
    rest_url: str
    api_key: str
    request_timeout_seconds: float | None = None
    log_format: str = "text"
    log_level: str = "INFO"
    firebase_api_key: str | None = None

    @property
    def rest_base(self) -> str:
        """PostgREST root under which the `sessions` and `profiles` tables live."""
        return f"{self.rest_url.rstrip('/')}/rest/v1"

    @classmethod
    def from_env(cls) -> "Config":
        rest_url = os.environ.get("FITLOG_REST_URL")
        if not rest_url:
            raise ConfigError("FITLOG_REST_URL must be set")
        api_key = os.environ.get("FITLOG_API_KEY")
        if not api_key:
            raise ConfigError("FITLOG_API_KEY must be set")

        log_format = check_format(os.environ.get("FITLOG_LOG_FORMAT", "text").strip().lower())
        log_level = os.environ.get("FITLOG_LOG_LEVEL", "INFO").strip().upper()
        resolve_level(log_level)

        return cls(
            rest_url=rest_url,
            api_key=api_key,
            request_timeout_seconds=_timeout(os.environ.get("FITLOG_REQUEST_TIMEOUT", "")),
            log_format=log_format,
            log_level=log_level,
            firebase_api_key=os.environ.get("FITLOG_FIREBASE_API_KEY") or None,
        )


def _timeout(raw: str) -> float | None:
    raw = raw.strip()
    if not raw:
        return None
    try:
        seconds = float(raw)
    except ValueError:
        raise ConfigError("FITLOG_REQUEST_TIMEOUT must be a number") from None
    if not math.isfinite(seconds) or seconds <= 0:
        raise ConfigError("FITLOG_REQUEST_TIMEOUT must be a positive number")
    return seconds
