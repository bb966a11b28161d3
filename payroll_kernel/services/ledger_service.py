"""
Ledger service - writes ledger entries and moves the company balance.

The LedgerService is responsible for:
- Appending top-up and deduction records
- Applying relative balance changes to the company row

It does NOT:
- Validate amounts (PayrollService does, before any write)
- Commit or roll back (the caller's transaction scope does)
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, update

from payroll_kernel.exceptions import CompanyNotFoundError
from payroll_kernel.logging_config import get_logger
from payroll_kernel.models.company import COMPANY_ID, Company
from payroll_kernel.models.ledger import DeductionRecord, TopUpRecord
from payroll_kernel.services.base import BaseService

logger = get_logger("services.ledger")


class LedgerService(BaseService[Company]):
    """Flush-only writer for the company ledger."""

    def record_top_up(self, amount: Decimal, at: datetime) -> TopUpRecord:
        record = TopUpRecord(amount=amount, transaction_at=at)
        self.session.add(record)
        self.session.flush()
        logger.debug("top_up_recorded", extra={"record_id": record.id, "amount": amount})
        return record

    def record_deduction(self, amount: Decimal, at: datetime) -> DeductionRecord:
        record = DeductionRecord(amount=amount, transaction_at=at)
        self.session.add(record)
        self.session.flush()
        logger.debug(
            "deduction_recorded", extra={"record_id": record.id, "amount": amount}
        )
        return record

    def apply_balance_delta(self, delta: Decimal) -> Decimal:
        """
        Add ``delta`` (may be negative) to the company balance.

        Issued as ``UPDATE company SET balance = balance + :delta`` so the
        read-modify-write happens inside the database and concurrent callers
        cannot lose each other's updates.

        Returns:
            The balance after the change, as seen by this transaction.

        Raises:
            CompanyNotFoundError: The company row does not exist.
        """
        result = self.session.execute(
            update(Company)
            .where(Company.id == COMPANY_ID)
            .values(balance=Company.balance + delta)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise CompanyNotFoundError(COMPANY_ID)

        return self.session.execute(
            select(Company.balance).where(Company.id == COMPANY_ID)
        ).scalar_one()
