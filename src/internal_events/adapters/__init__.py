"""Adapters – Redis Streams broker and SQLAlchemy outbox store."""
