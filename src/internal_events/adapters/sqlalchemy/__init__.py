"""SQLAlchemy adapter – outbox table, store, session factory, unit of work."""
from internal_events.adapters.sqlalchemy.models import OutboxBase, OutboxEventModel
from internal_events.adapters.sqlalchemy.outbox import SqlAlchemyOutboxStore, outbox_store_factory
from internal_events.adapters.sqlalchemy.session import SqlAlchemySessionFactory
from internal_events.adapters.sqlalchemy.uow import SqlAlchemyUnitOfWork

__all__ = [
    "OutboxBase",
    "OutboxEventModel",
    "SqlAlchemyOutboxStore",
    "SqlAlchemySessionFactory",
    "SqlAlchemyUnitOfWork",
    "outbox_store_factory",
]
