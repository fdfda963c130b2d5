"""
Database models package.

Exports:
  - UserModel: User ORM model
  - CreditAccountModel, CreditTransactionModel, TransactionKind: Credit ledger
  - SessionModel, RoomStateChoice: Staging session
  - GenerationModel, GenerationType, GenerationStatus: Generation history
  - JobModel, JobStatus, JobType: Generation jobs

Dependencies: sqlalchemy, virtual_staging.boundary.db.base
System role: Database model definitions for domain entities
"""

from virtual_staging.boundary.db.models.user_model import UserModel
from virtual_staging.boundary.db.models.credit_model import (
    CreditAccountModel,
    CreditTransactionModel,
    TransactionKind,
)
from virtual_staging.boundary.db.models.session_model import RoomStateChoice, SessionModel
from virtual_staging.boundary.db.models.generation_model import (
    GenerationModel,
    GenerationStatus,
    GenerationType,
)
from virtual_staging.boundary.db.models.job_model import JobModel, JobStatus, JobType

__all__ = [
    "UserModel",
    "CreditAccountModel",
    "CreditTransactionModel",
    "TransactionKind",
    "SessionModel",
    "RoomStateChoice",
    "GenerationModel",
    "GenerationStatus",
    "GenerationType",
    "JobModel",
    "JobStatus",
    "JobType",
]
