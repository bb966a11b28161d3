"""
Module: payroll_kernel.models.employee
Responsibility: ORM persistence for positions (salary grades) and the
    employees who draw a monthly salary against the company balance.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Every employee references exactly one position.
    - withdrawn / last_month are written only by the salary withdrawal, in
      the same transaction as the company balance decrement.
    - secret_id is never part of any DTO or API response.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_kernel.db.base import Base, IdentityKey


class Position(Base):
    """A job position and its monthly salary."""

    __tablename__ = "position"

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    salary: Mapped[Decimal] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return f"<Position {self.id} {self.name!r} salary={self.salary}>"


class Employee(Base):
    """
    An employee entitled to one salary withdrawal per calendar month.

    Contract:
        ``withdrawn`` is never reset by the system.  Whether the employee
        may withdraw again is decided by comparing the calendar month of
        ``last_month`` with the current month (see domain/eligibility.py).
    """

    __tablename__ = "employee"

    __table_args__ = (
        Index("idx_employee_position", "position_id"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    secret_id: Mapped[str] = mapped_column(String(255), nullable=False)

    withdrawn: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    # Timestamp of the most recent withdrawal; NULL until the first one
    last_month: Mapped[datetime | None] = mapped_column(nullable=True)

    position_id: Mapped[int] = mapped_column(
        IdentityKey,
        ForeignKey("position.id"),
        nullable=False,
    )

    position: Mapped[Position] = relationship(lazy="joined", innerjoin=True)

    def __repr__(self) -> str:
        return f"<Employee {self.id} {self.name!r}>"
