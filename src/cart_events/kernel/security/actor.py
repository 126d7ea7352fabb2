"""Kernel security – ActorMetadata."""
from __future__ import annotations

import dataclasses
from typing import Any


@dataclasses.dataclass(frozen=True)
class ActorMetadata:
    """Who performed an operation, and from where.

    Writes performed outside a request (jobs, startup seeding) are attributed
    to :meth:`system`.
    """

    user_id: str = "system"
    user_name: str = "System"
    ip_address: str = "localhost"
    user_agent: str = "unknown"

    @classmethod
    def system(cls) -> "ActorMetadata":
        return cls()

    @classmethod
    def anonymous(cls, ip_address: str = "unknown", user_agent: str = "") -> "ActorMetadata":
        return cls(
            user_id="anonymous",
            user_name="Anonymous User",
            ip_address=ip_address,
            user_agent=user_agent,
        )

    def to_dict(self) -> dict[str, str]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ActorMetadata":
        default = cls()
        return cls(
            user_id=str(data.get("user_id") or default.user_id),
            user_name=str(data.get("user_name") or default.user_name),
            ip_address=str(data.get("ip_address") or default.ip_address),
            user_agent=str(data.get("user_agent") or default.user_agent),
        )


__all__ = ["ActorMetadata"]
