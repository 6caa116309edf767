"""Invocation logging for public service API methods.

Decorated methods emit one structured record when called and one when they
return or raise, so every service entrypoint has the same log shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
from time import perf_counter
from typing import Any, Callable, Mapping

from . import fields
from .context import log_context


@dataclass(frozen=True)
class InvocationContext:
    """Structured metadata describing one public API invocation."""

    component_id: str
    api_name: str
    references: Mapping[str, str]


def public_api_logged(
    *,
    logger: Any,
    component_id: str,
    api_name: str | None = None,
    id_fields: tuple[str, ...] = (),
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorate one public API method with invocation/completion logging.

    ``id_fields`` names keyword arguments whose values are copied into the
    log context (for example ``inspection_id``).
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        method_name = api_name or func.__name__

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            invocation = InvocationContext(
                component_id=component_id,
                api_name=method_name,
                references={
                    name: str(kwargs[name])
                    for name in id_fields
                    if kwargs.get(name) not in (None, "")
                },
            )
            with log_context(_invocation_log_context(invocation)):
                logger.debug("Public API invocation")

            started = perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                _log_completion(
                    logger=logger,
                    invocation=invocation,
                    started=started,
                    exc=exc,
                )
                raise
            _log_completion(
                logger=logger,
                invocation=invocation,
                started=started,
                exc=None,
            )
            return result

        return wrapper

    return decorator


def _log_completion(
    *,
    logger: Any,
    invocation: InvocationContext,
    started: float,
    exc: Exception | None,
) -> None:
    """Emit the completion record for one invocation."""
    payload = _invocation_log_context(invocation)
    payload.update(
        {
            fields.EVENT: fields.PUBLIC_API_COMPLETION_EVENT,
            fields.SUCCESS: exc is None,
            fields.DURATION_MS: round((perf_counter() - started) * 1000, 3),
        }
    )
    if exc is not None:
        payload[fields.ERROR_TYPE] = type(exc).__name__
    with log_context(payload):
        if exc is None:
            logger.info("Public API completion")
        else:
            logger.warning("Public API completion")


def _invocation_log_context(context: InvocationContext) -> dict[str, object]:
    """Build common structured fields for one invocation event."""
    return {
        fields.EVENT: fields.PUBLIC_API_INVOCATION_EVENT,
        fields.COMPONENT_ID: context.component_id,
        fields.API_NAME: context.api_name,
        **context.references,
    }
