"""
Payroll Kernel

A transactional company ledger with:
- Atomic top-ups and deductions (ledger entry + balance change)
- Monthly salary withdrawals with shared-secret authentication
- Append-only ledger records
"""

__version__ = "0.1.0"
