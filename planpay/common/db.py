"""Database bootstrap helpers shared by the payment and notification stores."""

from sqlalchemy import JSON, create_engine
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from planpay.common.config import settings


# Single SQLAlchemy engine per process.
engine = create_engine(settings.postgres_dsn, pool_pre_ping=True)
# `expire_on_commit=False` keeps ORM objects readable after commit in handlers.
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

# JSONB on PostgreSQL, plain JSON on other dialects (SQLite in tests).
JsonDocument = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Declarative base for SQLAlchemy models."""

    pass


def create_tables(bind=None) -> None:
    """Create every table registered on `Base` that does not exist yet."""

    # Registers the model classes on Base.metadata.
    import planpay.services.notification.models  # noqa: F401
    import planpay.services.payment.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
