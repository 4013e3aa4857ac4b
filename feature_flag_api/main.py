"""
Feature Flag API
Main application entry point
"""

import argparse
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, List, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from feature_flag_api.api.routes import features, health, metrics
from feature_flag_api.config import Settings
from feature_flag_api.core.errors import (
    FlagAlreadyExistsError,
    FlagNotFoundError,
    FlagValidationError,
    StoreError,
)
from feature_flag_api.feature_flags.service import FeatureService
from feature_flag_api.middleware.metrics import MetricsMiddleware
from feature_flag_api.middleware.request_logger import RequestLoggingMiddleware
from feature_flag_api.storage.base import FlagStore
from feature_flag_api.storage.factory import create_store
from feature_flag_api.utils.logger import log_error, setup_logging

logger = logging.getLogger("feature_flag_api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager"""

    logger.info("Starting Feature Flag API")
    owns_store = False

    # A service injected by create_app is kept as is
    if getattr(app.state, "feature_service", None) is None:
        settings: Settings = app.state.settings
        app.state.feature_service = FeatureService(create_store(settings.storage))
        owns_store = True

    try:
        yield
    finally:
        logger.info("Shutting down Feature Flag API")
        if owns_store:
            app.state.feature_service.store.close()
            app.state.feature_service = None


def message_response(status_code: int, status: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": status, "message": message}
    )


def create_app(settings: Optional[Settings] = None, store: Optional[FlagStore] = None) -> FastAPI:
    """Create and configure FastAPI application

    When a store is given the feature service is created right away,
    otherwise the store described by the settings is opened at startup.
    """

    settings = settings or Settings()

    app = FastAPI(
        title="Feature Flag API",
        description="Feature flags with user, group and percentage based access",
        version="1.0.0",
        debug=settings.debug,
        docs_url=None if settings.is_production() else "/docs",
        redoc_url=None if settings.is_production() else "/redoc",
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.feature_service = FeatureService(store) if store is not None else None

    app.add_middleware(GZipMiddleware, minimum_size=1000)
    if settings.metrics.enabled:
        app.add_middleware(MetricsMiddleware)
    if settings.logging.access_log:
        app.add_middleware(RequestLoggingMiddleware)

    app.include_router(features.router, prefix="/features", tags=["features"])
    app.include_router(health.router, prefix="/health", tags=["health"])
    if settings.metrics.enabled:
        app.include_router(metrics.router, prefix="/metrics", tags=["metrics"])

    @app.exception_handler(FlagNotFoundError)
    async def not_found_handler(request: Request, exc: FlagNotFoundError):
        return message_response(404, "feature_not_found", "The feature was not found")

    @app.exception_handler(FlagAlreadyExistsError)
    async def already_exists_handler(request: Request, exc: FlagAlreadyExistsError):
        return message_response(400, "invalid_feature", str(exc))

    @app.exception_handler(FlagValidationError)
    async def validation_handler(request: Request, exc: FlagValidationError):
        return message_response(400, "invalid_feature", exc.message)

    @app.exception_handler(RequestValidationError)
    async def unprocessable_handler(request: Request, exc: RequestValidationError):
        return message_response(422, "invalid_json", "Cannot decode the given JSON payload")

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        log_error(logger, exc, {"path": request.url.path})
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "detail": str(exc)}
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Global exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "detail": str(exc)}
        )

    return app


def setup_tracing(app: FastAPI, settings: Settings):
    """Setup distributed tracing"""
    if not settings.tracing.enabled:
        return

    provider = TracerProvider(
        resource=Resource.create({"service.name": settings.tracing.service_name})
    )
    provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.tracing.otlp_endpoint))
    )
    trace.set_tracer_provider(provider)

    FastAPIInstrumentor.instrument_app(app)

    logger.info("Distributed tracing configured")


def parse_address(address: str, default_host: str = "0.0.0.0"):
    """Split a ``host:port`` listen address, an empty host means all interfaces"""

    host, sep, port = address.rpartition(":")
    if not sep:
        raise ValueError(f"Invalid listen address: {address!r}")
    return host or default_host, int(port)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Feature Flag API server")
    parser.add_argument("-a", "--address", help="address to listen, e.g. :8080")
    parser.add_argument("-d", "--database", help="location of the database file")
    return parser.parse_args(argv)


def load_settings(args: argparse.Namespace) -> Settings:
    """Settings from the environment, overridden by command line flags"""

    settings = Settings()

    if args.address:
        settings.server.host, settings.server.port = parse_address(args.address)
    if args.database:
        settings.storage.path = args.database

    return settings


async def main(argv: Optional[List[str]] = None):
    """Main application entry point"""

    settings = load_settings(parse_args(argv))

    setup_logging(
        level=settings.logging.level,
        format_type=settings.logging.format,
        log_file=settings.logging.file
    )

    app = create_app(settings)
    setup_tracing(app, settings)

    config = uvicorn.Config(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.logging.level.lower(),
        access_log=False,
    )
    server = uvicorn.Server(config)

    logger.info(f"Starting Feature Flag API on {settings.server.host}:{settings.server.port}")

    try:
        await server.serve()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
