"""SQLAlchemy adapter – session factory and durable event store."""
from cart_events.adapters.sqlalchemy.event_store import SQLAlchemyEventStore, events_table
from cart_events.adapters.sqlalchemy.session import SqlAlchemySessionFactory

__all__ = ["SQLAlchemyEventStore", "SqlAlchemySessionFactory", "events_table"]
