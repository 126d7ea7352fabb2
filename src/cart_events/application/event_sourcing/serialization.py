"""Application event sourcing – payload serialisation."""

from __future__ import annotations

import abc
import dataclasses
import enum
import json
import uuid
from collections.abc import Mapping
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any

from cart_events.kernel.ddd.domain_event import DomainEvent
from cart_events.kernel.errors import SerializationError


def _default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, Mapping):
        return dict(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class EventSerializer(abc.ABC):
    """Port: turn payload dicts into the stored byte representation and back."""

    @abc.abstractmethod
    def encode(self, data: dict[str, Any]) -> bytes: ...

    @abc.abstractmethod
    def decode(self, raw: bytes) -> dict[str, Any]: ...

    def encode_event(self, event: DomainEvent) -> bytes:
        """Encode a whole domain event, identity and timestamp included."""
        return self.encode(
            {
                "event_id": event.event_id,
                "event_type": event.event_type,
                "occurred_on": event.occurred_on,
                **event.payload(),
            }
        )


class JsonEventSerializer(EventSerializer):
    """UTF-8 JSON codec.

    ``Decimal`` is written as a string to keep money exact, datetimes as ISO
    8601 and ``timedelta`` as seconds.
    """

    def encode(self, data: dict[str, Any]) -> bytes:
        try:
            return json.dumps(data, default=_default, sort_keys=True).encode()
        except (TypeError, ValueError) as exc:
            raise SerializationError(
                f"Cannot encode payload: {exc}",
                payload_type=type(data).__name__,
                cause=exc,
            ) from exc

    def decode(self, raw: bytes) -> dict[str, Any]:
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise SerializationError(f"Cannot decode payload: {exc}", cause=exc) from exc
        if not isinstance(data, dict):
            raise SerializationError(
                "Decoded payload is not an object",
                payload_type=type(data).__name__,
            )
        return data


__all__ = ["EventSerializer", "JsonEventSerializer"]
