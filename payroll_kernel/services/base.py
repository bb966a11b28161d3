"""
BaseService -- abstract base for flush-only kernel services.

Concrete services receive a SQLAlchemy ``Session`` that they use via
``session.flush()`` -- never ``session.commit()``.  The caller
(PayrollService, or a test harness) owns commit/rollback, which is what lets
a ledger write and a balance update share one atomic unit.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from payroll_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for flush-only services.

    Guarantees:
        - The service never calls ``session.commit()`` or
          ``session.rollback()``.
    """

    def __init__(self, session: Session):
        self.session = session
