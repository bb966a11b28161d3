"""
Ledger selector - balance and ledger entry queries.

Also exposes the ledger totals so callers can check the balance against the
log: for a company created with opening balance B and no withdrawals,
``balance == B + total_top_ups() - total_deductions()``.
"""

from decimal import Decimal

from sqlalchemy import func, select

from payroll_kernel.domain.dtos import LedgerEntryInfo, LedgerOperation
from payroll_kernel.exceptions import CompanyNotFoundError
from payroll_kernel.models.company import COMPANY_ID, Company
from payroll_kernel.models.ledger import DeductionRecord, TopUpRecord
from payroll_kernel.selectors.base import BaseSelector


class LedgerSelector(BaseSelector[Company]):
    """Read-only view of the company balance and its ledger."""

    def get_balance(self) -> Decimal:
        """
        Raises:
            CompanyNotFoundError: The company row was never created.
        """
        balance = self.session.execute(
            select(Company.balance).where(Company.id == COMPANY_ID)
        ).scalar_one_or_none()
        if balance is None:
            raise CompanyNotFoundError(COMPANY_ID)
        return balance

    def total_top_ups(self) -> Decimal:
        total = self.session.execute(select(func.sum(TopUpRecord.amount))).scalar()
        return Decimal(total) if total is not None else Decimal("0")

    def total_deductions(self) -> Decimal:
        total = self.session.execute(
            select(func.sum(DeductionRecord.amount))
        ).scalar()
        return Decimal(total) if total is not None else Decimal("0")

    def list_top_ups(self, limit: int | None = None) -> list[LedgerEntryInfo]:
        """Top-up records, oldest first."""
        stmt = select(TopUpRecord).order_by(TopUpRecord.id)
        if limit is not None:
            stmt = stmt.limit(limit)
        return [
            LedgerEntryInfo(
                id=r.id,
                operation=LedgerOperation.TOP_UP,
                amount=r.amount,
                transaction_at=r.transaction_at,
            )
            for r in self.session.execute(stmt).scalars()
        ]

    def list_deductions(self, limit: int | None = None) -> list[LedgerEntryInfo]:
        """Deduction records, oldest first."""
        stmt = select(DeductionRecord).order_by(DeductionRecord.id)
        if limit is not None:
            stmt = stmt.limit(limit)
        return [
            LedgerEntryInfo(
                id=r.id,
                operation=LedgerOperation.DEDUCT,
                amount=r.amount,
                transaction_at=r.transaction_at,
            )
            for r in self.session.execute(stmt).scalars()
        ]
