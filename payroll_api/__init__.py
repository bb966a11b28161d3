"""HTTP gateway for the payroll ledger."""

from payroll_api.app import create_app

__all__ = ["create_app"]
