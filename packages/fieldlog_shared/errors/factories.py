"""Factory helpers that pin each error category to its retry semantics."""

from __future__ import annotations

from typing import Mapping

from . import codes
from .types import ErrorCategory, ErrorDetail


def _detail(
    category: ErrorCategory,
    message: str,
    *,
    code: str,
    retryable: bool,
    metadata: Mapping[str, str] | None,
) -> ErrorDetail:
    return ErrorDetail(
        code=code,
        message=message,
        category=category,
        retryable=retryable,
        metadata={} if metadata is None else dict(metadata),
    )


def validation_error(
    message: str,
    *,
    code: str = codes.VALIDATION_ERROR,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Malformed caller input; never retryable as-is."""
    return _detail(
        ErrorCategory.VALIDATION, message, code=code, retryable=False, metadata=metadata
    )


def not_found_error(
    message: str,
    *,
    code: str = codes.NOT_FOUND,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    return _detail(
        ErrorCategory.NOT_FOUND, message, code=code, retryable=False, metadata=metadata
    )


def conflict_error(
    message: str,
    *,
    code: str = codes.CONFLICT,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    return _detail(
        ErrorCategory.CONFLICT, message, code=code, retryable=False, metadata=metadata
    )


def dependency_error(
    message: str,
    *,
    code: str = codes.DEPENDENCY_FAILURE,
    retryable: bool = True,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Failure of an external system such as Postgres; retryable by default."""
    return _detail(
        ErrorCategory.DEPENDENCY,
        message,
        code=code,
        retryable=retryable,
        metadata=metadata,
    )


def internal_error(
    message: str,
    *,
    code: str = codes.INTERNAL_ERROR,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    return _detail(
        ErrorCategory.INTERNAL, message, code=code, retryable=False, metadata=metadata
    )
