"""ORM models for the payroll ledger."""

from payroll_kernel.models.company import COMPANY_ID, Company
from payroll_kernel.models.employee import Employee, Position
from payroll_kernel.models.ledger import DeductionRecord, TopUpRecord

__all__ = [
    "COMPANY_ID",
    "Company",
    "DeductionRecord",
    "Employee",
    "Position",
    "TopUpRecord",
]
