"""
Command line entrypoint.

Usage:
    python -m payroll_api serve [--config FILE] [--host HOST] [--port PORT]
    python -m payroll_api init-db [--config FILE] [--opening-balance AMOUNT]
"""

import argparse
import sys

from payroll_config import load_settings
from payroll_config.loader import parse_decimal
from payroll_kernel.db.engine import LedgerDatabase
from payroll_kernel.exceptions import PayrollKernelError
from payroll_kernel.logging_config import configure_logging, get_logger

logger = get_logger("cli")


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    from payroll_api.app import create_app

    settings = load_settings(args.config)
    app = create_app(settings)
    uvicorn.run(
        app,
        host=args.host or settings.server.host,
        port=args.port or settings.server.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def _init_db(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    configure_logging(level=settings.log_level)
    opening = settings.opening_balance
    if args.opening_balance is not None:
        opening = parse_decimal(args.opening_balance, "--opening-balance")

    database = LedgerDatabase.from_url(
        settings.database.url, **settings.database.engine_options()
    )
    try:
        database.create_tables(opening_balance=opening)
    finally:
        database.dispose()
    print(f"Database initialized ({database.dialect}), opening balance {opening}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payroll-ledger",
        description="Company balance and salary withdrawal service",
    )
    parser.add_argument("--config", help="YAML settings file")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", help="Bind address (default from settings)")
    serve.add_argument("--port", type=int, help="Port (default from settings)")
    serve.set_defaults(handler=_serve)

    init_db = sub.add_parser("init-db", help="Create tables and the company row")
    init_db.add_argument(
        "--opening-balance",
        help="Balance for a newly created company row (default from settings)",
    )
    init_db.set_defaults(handler=_init_db)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.handler(args)
    except PayrollKernelError as exc:
        logger.error("command_failed", exc_info=exc, extra={"command": args.command})
        print(f"Error [{exc.code}]: {exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
