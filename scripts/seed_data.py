#!/usr/bin/env python3
"""
Seed the database with a company balance, positions and employees.

Creates the schema if needed, sets up the company row with the opening
balance, and adds a few positions and employees (skipped if any employee
already exists).  Intended for local development only.

Usage:
    python3 scripts/seed_data.py [--database-url URL] [--opening-balance 1000]
"""

import argparse
import sys
from decimal import Decimal

from sqlalchemy import func, select

from payroll_config import load_settings
from payroll_config.loader import parse_decimal
from payroll_kernel.db.engine import LedgerDatabase
from payroll_kernel.logging_config import configure_logging
from payroll_kernel.models.employee import Employee, Position

POSITIONS = [
    ("Engineer", Decimal("300.00")),
    ("Manager", Decimal("450.00")),
    ("Intern", Decimal("120.00")),
]

EMPLOYEES = [
    ("Ayu Lestari", "Engineer", "secret-ayu"),
    ("Budi Santoso", "Manager", "secret-budi"),
    ("Citra Dewi", "Intern", "secret-citra"),
]


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--database-url", help="Overrides settings/DATABASE_URL")
    parser.add_argument("--opening-balance", default="1000.00")
    args = parser.parse_args()

    settings = load_settings()
    configure_logging(level=settings.log_level)
    url = args.database_url or settings.database.url

    database = LedgerDatabase.from_url(url)
    try:
        database.create_tables(
            opening_balance=parse_decimal(args.opening_balance, "--opening-balance")
        )

        with database.session_scope("seed employees") as session:
            existing = session.execute(select(func.count(Employee.id))).scalar_one()
            if existing:
                print(f"{existing} employee(s) already present, nothing to seed")
                return 0

            positions = {}
            for name, salary in POSITIONS:
                position = Position(name=name, salary=salary)
                session.add(position)
                positions[name] = position
            session.flush()

            for name, position_name, secret in EMPLOYEES:
                session.add(
                    Employee(
                        name=name,
                        secret_id=secret,
                        position_id=positions[position_name].id,
                    )
                )
    finally:
        database.dispose()

    print(f"Seeded {len(POSITIONS)} positions and {len(EMPLOYEES)} employees")
    return 0


if __name__ == "__main__":
    sys.exit(main())
