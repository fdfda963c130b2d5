"""
CRUD operations package.

Exports:
  - BaseCRUD: Generic CRUD base class
  - UserCRUD, CreditAccountCRUD, CreditTransactionCRUD, SessionCRUD,
    GenerationCRUD, JobCRUD: Model-specific CRUD classes
  - user_crud, credit_account_crud, credit_transaction_crud, session_crud,
    generation_crud, job_crud: Singleton instances

Dependencies: sqlalchemy, virtual_staging.boundary.db.models
System role: Database access layer for all domain entities
"""

from virtual_staging.boundary.db.CRUD.base_crud import BaseCRUD
from virtual_staging.boundary.db.CRUD.user_crud import UserCRUD, user_crud
from virtual_staging.boundary.db.CRUD.credit_crud import (
    CreditAccountCRUD,
    CreditTransactionCRUD,
    credit_account_crud,
    credit_transaction_crud,
)
from virtual_staging.boundary.db.CRUD.session_crud import SessionCRUD, session_crud
from virtual_staging.boundary.db.CRUD.generation_crud import GenerationCRUD, generation_crud
from virtual_staging.boundary.db.CRUD.job_crud import JobCRUD, job_crud

__all__ = [
    "BaseCRUD",
    "UserCRUD",
    "CreditAccountCRUD",
    "CreditTransactionCRUD",
    "SessionCRUD",
    "GenerationCRUD",
    "JobCRUD",
    "user_crud",
    "credit_account_crud",
    "credit_transaction_crud",
    "session_crud",
    "generation_crud",
    "job_crud",
]
