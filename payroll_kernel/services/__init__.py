"""Kernel services: flush-only writers and the transaction-owning PayrollService."""
