"""Process entrypoint for the Fieldlog HTTP API."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.concurrency import run_in_threadpool

from packages.fieldlog_core.runtime import FieldlogRuntime, build_runtime
from packages.fieldlog_shared.config import FieldlogSettings, load_settings
from packages.fieldlog_shared.http import (
    add_cors,
    create_app,
    install_error_handlers,
    run_app,
)
from packages.fieldlog_shared.logging import configure_logging, get_logger
from services.state.inspection_authority.api import register_routes

_LOGGER = get_logger(__name__)

APP_TITLE = "Fieldlog Inspection API"
APP_VERSION = "0.1.0"


def create_application(runtime: FieldlogRuntime) -> FastAPI:
    """Build the FastAPI app over one runtime; shutdown releases the runtime."""

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        _LOGGER.info("fieldlog HTTP runtime started")
        try:
            yield
        finally:
            await run_in_threadpool(runtime.shutdown)

    app = create_app(title=APP_TITLE, version=APP_VERSION, lifespan=lifespan)
    http = runtime.settings.http
    add_cors(
        app,
        allow_origins=http.cors_allow_origins,
        allow_origin_regex=http.cors_allow_origin_regex,
        allow_credentials=http.cors_allow_credentials,
    )
    install_error_handlers(app)
    register_routes(
        app,
        service=runtime.service,
        registry=runtime.registry,
        settings=runtime.service_settings,
    )
    return app


def serve(settings: FieldlogSettings) -> None:
    """Configure logging, build the runtime and block serving HTTP."""
    configure_logging(
        level=settings.logging.level,
        json_output=settings.logging.json_output,
        service=settings.logging.service,
        environment=settings.logging.environment,
    )
    runtime = build_runtime(settings)
    app = create_application(runtime)
    _LOGGER.info(
        "starting fieldlog HTTP listener",
        extra={"host": settings.http.host, "port": settings.http.port},
    )
    run_app(
        app,
        host=settings.http.host,
        port=settings.http.port,
        log_level=settings.logging.level.lower(),
    )


def main() -> None:
    """Load settings from the environment and serve."""
    serve(load_settings())


if __name__ == "__main__":
    main()
