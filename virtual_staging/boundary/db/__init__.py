"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Async connection management
  - UserModel, CreditAccountModel, CreditTransactionModel, SessionModel,
    GenerationModel, JobModel: Domain entities

Dependencies: sqlalchemy, virtual_staging.configs
System role: Database adapter providing persistent storage for users, credits,
sessions, generations and jobs.
"""

from virtual_staging.boundary.db.base import Base, TimestampMixin, UUIDMixin, utcnow
from virtual_staging.boundary.db.connection import (
    create_session_factory,
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from virtual_staging.boundary.db.models import (
    CreditAccountModel,
    CreditTransactionModel,
    GenerationModel,
    JobModel,
    SessionModel,
    UserModel,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "utcnow",
    "create_session_factory",
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    "UserModel",
    "CreditAccountModel",
    "CreditTransactionModel",
    "SessionModel",
    "GenerationModel",
    "JobModel",
]
