"""Config – PipelineSettings."""
from __future__ import annotations

import dataclasses
import logging

from cart_events.config.settings.base import Settings
from cart_events.config.validation import InvalidSettingValueError

_STORE_BACKENDS = ("memory", "sqlalchemy")
_CACHE_BACKENDS = ("memory", "redis")


@dataclasses.dataclass
class PipelineSettings(Settings):
    """Settings for the event pipeline, read from ``CART_EVENTS_*`` variables."""

    _prefix: dataclasses.ClassVar[str] = "CART_EVENTS"

    log_level: str = "INFO"
    log_json: bool = True

    consumer_timeout_seconds: float | None = None

    audit_enabled: bool = True
    audit_append_attempts: int = 3

    cache_enabled: bool = True
    cache_default_ttl_seconds: float = 300.0
    cache_backend: str = "memory"
    redis_url: str = "redis://localhost:6379/0"

    event_store_backend: str = "memory"
    database_url: str = "sqlite+aiosqlite:///./cart_events.db"

    def _validate(self) -> None:
        if logging.getLevelName(self.log_level.upper()) == f"Level {self.log_level.upper()}":
            raise InvalidSettingValueError("log_level", self.log_level, "unknown log level")
        if self.consumer_timeout_seconds is not None and self.consumer_timeout_seconds <= 0:
            raise InvalidSettingValueError(
                "consumer_timeout_seconds", self.consumer_timeout_seconds, "must be positive"
            )
        if self.audit_append_attempts < 1:
            raise InvalidSettingValueError(
                "audit_append_attempts", self.audit_append_attempts, "must be >= 1"
            )
        if self.cache_default_ttl_seconds <= 0:
            raise InvalidSettingValueError(
                "cache_default_ttl_seconds", self.cache_default_ttl_seconds, "must be positive"
            )
        if self.cache_backend not in _CACHE_BACKENDS:
            raise InvalidSettingValueError(
                "cache_backend", self.cache_backend, f"expected one of {_CACHE_BACKENDS}"
            )
        if self.event_store_backend not in _STORE_BACKENDS:
            raise InvalidSettingValueError(
                "event_store_backend", self.event_store_backend, f"expected one of {_STORE_BACKENDS}"
            )


__all__ = ["PipelineSettings"]
