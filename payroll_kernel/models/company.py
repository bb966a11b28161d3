"""
Module: payroll_kernel.models.company
Responsibility: ORM persistence for the organization's single balance account.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Exactly one row, with id == COMPANY_ID, exists once the database has
      been initialized.
    - balance == opening balance + sum(top_up) - sum(deduction)
      - sum(withdrawn salaries).  The balance is only ever changed by a
      relative ``UPDATE ... SET balance = balance +/- :amount`` issued in the
      same transaction as the matching ledger write.
"""

from decimal import Decimal

from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import Base

COMPANY_ID = 1


class Company(Base):
    """Singleton company balance."""

    __tablename__ = "company"

    balance: Mapped[Decimal] = mapped_column(
        nullable=False,
        default=Decimal("0"),
    )

    def __repr__(self) -> str:
        return f"<Company {self.id} balance={self.balance}>"
