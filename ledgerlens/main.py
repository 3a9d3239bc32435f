import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .core import errors
from .db.memory import InMemoryLedgerRepository
from .db.repository import LedgerRepository
from .routers import balance, budgets, currencies, dashboard, health, investments, rates
from .services.rates.cache_service import CentralRateCacheService
from .services.refresh import RefreshCoordinator

logger = logging.getLogger("ledgerlens.app")


def create_app(
    settings_override: Settings | None = None,
    repository: LedgerRepository | None = None,
    rate_service: CentralRateCacheService | None = None,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment. Falls back to cached get_settings().
    repository: ledger source; defaults to the JSON file named by
    settings.ledger_data_file, or an empty in-memory ledger.
    """
    settings = settings_override or get_settings()
    init_logging(debug=settings.debug)

    if repository is None:
        if settings.ledger_data_file is not None:
            repository = InMemoryLedgerRepository.from_file(settings.ledger_data_file)
        else:
            logger.info("no ledger_data_file configured; starting with an empty ledger")
            repository = InMemoryLedgerRepository()
    rate_service = rate_service or CentralRateCacheService(settings)

    app = FastAPI(
        title=settings.app_name, debug=settings.debug, version=settings.version
    )
    app.state.settings = settings
    app.state.repository = repository
    app.state.rates = rate_service
    app.state.coordinator = RefreshCoordinator(
        repository,
        rate_service,
        preferred_currency=settings.preferred_currency,
        warn_pct=settings.budget_warn_pct,
        danger_pct=settings.budget_danger_pct,
    )

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(budgets.router)
    app.include_router(investments.router)
    app.include_router(balance.router)
    app.include_router(dashboard.router)
    app.include_router(rates.router)
    app.include_router(currencies.router)

    @app.get("/")
    async def root():
        return {"message": "Ledgerlens valuation API", "version": settings.version}

    return app


app = create_app()
