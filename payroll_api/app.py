"""
Application factory for the payroll HTTP API.

``create_app()`` wires one LedgerDatabase and one PayrollService into a
FastAPI app.  Tests pass their own ``database`` and ``clock``; the server
entrypoint passes only settings and lets the factory build the engine.
"""

import time
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request

from payroll_api.errors import register_exception_handlers
from payroll_api.routes import router
from payroll_config import ServiceSettings, load_settings
from payroll_kernel import __version__
from payroll_kernel.db.engine import LedgerDatabase
from payroll_kernel.db.immutability import register_immutability_listeners
from payroll_kernel.domain.clock import Clock
from payroll_kernel.logging_config import LogContext, configure_logging, get_logger
from payroll_kernel.services.payroll_service import PayrollService

logger = get_logger("api.app")

REQUEST_ID_HEADER = "X-Request-ID"


def create_app(
    settings: ServiceSettings | None = None,
    *,
    database: LedgerDatabase | None = None,
    clock: Clock | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Service settings; loaded from the environment if omitted.
        database: Existing LedgerDatabase.  When omitted one is built from
            ``settings.database`` and disposed on shutdown.
        clock: Clock for the PayrollService (system clock if omitted).
    """
    owns_database = database is None
    if database is None:
        settings = settings or load_settings()
        configure_logging(level=settings.log_level)
        database = LedgerDatabase.from_url(
            settings.database.url, **settings.database.engine_options()
        )
    register_immutability_listeners()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("service_started", extra={"dialect": database.dialect})
        yield
        if owns_database:
            database.dispose()
        logger.info("service_stopped")

    app = FastAPI(title="Payroll Ledger", version=__version__, lifespan=lifespan)
    app.state.payroll_service = PayrollService(database, clock)

    @app.middleware("http")
    async def bind_request_context(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        start = time.monotonic()
        with LogContext.bind(request_id=request_id):
            response = await call_next(request)
            logger.info(
                "request_completed",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": round((time.monotonic() - start) * 1000, 2),
                },
            )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    register_exception_handlers(app)
    app.include_router(router)
    return app
