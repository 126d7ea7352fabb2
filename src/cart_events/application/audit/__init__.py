"""Application audit – domain-event → event-store bridge."""

from cart_events.application.audit.bridge import AuditBridgeConsumer
from cart_events.application.audit.context import (
    AuditContext,
    AuditContextProvider,
    RequestAuditContextProvider,
    StaticAuditContextProvider,
)
from cart_events.application.audit.translations import (
    GENERIC_AUDIT_TYPE,
    AuditTranslation,
    aggregate_id_for,
    entity_of,
    translate,
)

__all__ = [
    "GENERIC_AUDIT_TYPE",
    "AuditBridgeConsumer",
    "AuditContext",
    "AuditContextProvider",
    "AuditTranslation",
    "RequestAuditContextProvider",
    "StaticAuditContextProvider",
    "aggregate_id_for",
    "entity_of",
    "translate",
]
