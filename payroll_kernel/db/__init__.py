"""Database plumbing: declarative base, engine, transaction scope."""

from payroll_kernel.db.base import Base
from payroll_kernel.db.engine import LedgerDatabase, build_engine

__all__ = ["Base", "LedgerDatabase", "build_engine"]
