"""FastAPI and uvicorn helpers shared by Fieldlog HTTP adapters."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from packages.fieldlog_shared.errors import ErrorDetail, codes, validation_error


def create_app(
    *,
    title: str = "fieldlog",
    version: str = "0.0.0",
    lifespan: Any = None,
) -> FastAPI:
    """Create a FastAPI app with project defaults."""
    return FastAPI(title=title, version=version, lifespan=lifespan)


def add_cors(
    app: FastAPI,
    *,
    allow_origins: Sequence[str],
    allow_origin_regex: str | None = None,
    allow_credentials: bool = True,
) -> None:
    """Allow browser clients from the configured origins."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(allow_origins),
        allow_origin_regex=allow_origin_regex,
        allow_credentials=allow_credentials,
        allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
        allow_headers=["*"],
    )


def run_app(
    app: FastAPI,
    *,
    host: str = "127.0.0.1",
    port: int = 3000,
    log_level: str = "info",
) -> None:
    """Run one FastAPI app through uvicorn."""
    uvicorn.run(app, host=host, port=port, log_level=log_level, log_config=None)


def error_response(*, status_code: int, errors: Sequence[ErrorDetail]) -> JSONResponse:
    """Render shared error details as the standard failure body."""
    return JSONResponse(
        status_code=status_code,
        content={"ok": False, "errors": [error.to_json() for error in errors]},
    )


def install_error_handlers(app: FastAPI) -> None:
    """Render request validation failures as 400 responses with error details."""

    async def _on_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        del request
        return error_response(
            status_code=400,
            errors=[_validation_detail(item) for item in exc.errors()],
        )

    app.add_exception_handler(RequestValidationError, _on_validation_error)


def _validation_detail(item: dict[str, Any]) -> ErrorDetail:
    """Convert one pydantic error entry into a validation ``ErrorDetail``."""
    location = ".".join(str(part) for part in item.get("loc", ()) if part != "body")
    return validation_error(
        str(item.get("msg", "invalid value")),
        code=codes.INVALID_ARGUMENT,
        metadata={"field": location} if location else {},
    )
