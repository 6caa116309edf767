"""Public shared HTTP API for Fieldlog packages."""

from .server import (
    add_cors,
    create_app,
    error_response,
    install_error_handlers,
    run_app,
)

__all__ = [
    "add_cors",
    "create_app",
    "error_response",
    "install_error_handlers",
    "run_app",
]
