import random

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core import errors
from .core.config import Settings, get_settings
from .core.logging import init_logging, request_context_middleware
from .routers import sessions, tokens
from .services.catalog import TokenCatalogService
from .services.decimal_engine import DecimalEngine
from .services.feeds import make_price_feed
from .services.session import SessionRegistry
from .services.transactions import TransactionSimulator


def create_app(
    settings_override: Settings | None = None, rng: random.Random | None = None
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., static catalog, no transaction delay). Falls
    back to cached get_settings().
    """
    settings = settings_override or get_settings()
    if settings_override is not None:
        settings.init_post_load()
    # Initialize logging early
    init_logging(debug=settings.debug)

    app = FastAPI(title=settings.app_name, debug=settings.debug, version=settings.version)

    # Shared services; sessions get their own engine state on top of these
    feed = make_price_feed(
        settings.catalog_source,
        url=str(settings.prices_url),
        timeout=settings.http_timeout_seconds,
        retries=settings.http_retries,
    )
    app.state.settings = settings
    app.state.decimal_engine = DecimalEngine(settings.decimal_config())
    app.state.catalog_service = TokenCatalogService(
        feed,
        icon_base_url=settings.token_icons_base_url,
        ttl_seconds=settings.catalog_ttl_seconds,
    )
    app.state.simulator = TransactionSimulator(
        delay_min=settings.tx_delay_min_seconds,
        delay_max=settings.tx_delay_max_seconds,
        failure_rate=settings.tx_failure_rate,
        rng=rng,
    )
    app.state.sessions = SessionRegistry()

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.not_found_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(errors.UnknownToken, errors.lookup_error_handler)
    app.add_exception_handler(errors.UnknownSession, errors.lookup_error_handler)
    app.add_exception_handler(errors.ConfirmationNotReady, errors.not_ready_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(tokens.router)
    app.include_router(sessions.router)

    @app.get("/")
    async def root():
        return {"message": "Token Swap API", "version": settings.version}

    return app


app = create_app()
