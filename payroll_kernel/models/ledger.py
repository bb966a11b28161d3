"""
Module: payroll_kernel.models.ledger
Responsibility: ORM persistence for ledger entries: company balance top-ups
    and deductions.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - amount > 0 (CHECK constraint); direction is given by the table, never
      by the sign.
    - Rows are append-only.  ORM listeners in db/immutability.py reject any
      UPDATE or DELETE.

Failure modes:
    - IntegrityError on a non-positive amount that bypassed service validation.
    - ImmutabilityViolationError on any attempt to modify a flushed row.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import Base


class TopUpRecord(Base):
    """A credit to the company balance."""

    __tablename__ = "top_up"

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_top_up_amount_positive"),
        Index("idx_top_up_transaction", "transaction"),
    )

    amount: Mapped[Decimal] = mapped_column(nullable=False)

    # Column keeps the historical name "transaction"
    transaction_at: Mapped[datetime] = mapped_column(
        "transaction",
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<TopUpRecord {self.id} amount={self.amount}>"


class DeductionRecord(Base):
    """A debit from the company balance."""

    __tablename__ = "deduction"

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_deduction_amount_positive"),
        Index("idx_deduction_transaction", "transaction"),
    )

    amount: Mapped[Decimal] = mapped_column(nullable=False)

    transaction_at: Mapped[datetime] = mapped_column(
        "transaction",
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<DeductionRecord {self.id} amount={self.amount}>"
