from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from oauth_verifier.api import identity_router, system_router
from oauth_verifier.app.exceptions import register_exception_handlers
from oauth_verifier.app.logging_config import configure_logging
from oauth_verifier.app.metrics import instrument_metrics
from oauth_verifier.middleware.request_id import RequestIDMiddleware
from oauth_verifier.settings import get_settings


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Identity token verification and provider code exchange",
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        debug=settings.server.debug,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins(),
        allow_credentials=False,
        allow_methods=settings.cors.methods(),
        allow_headers=settings.cors.headers(),
    )

    # Routers
    app.include_router(system_router)
    app.include_router(identity_router)

    # Middleware
    app.add_middleware(RequestIDMiddleware)

    # Exceptions, logging, metrics
    register_exception_handlers(app)
    configure_logging(settings.logging.as_json, settings.server.log_level)
    instrument_metrics(app)

    return app
