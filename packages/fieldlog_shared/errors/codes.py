"""Stable machine-readable error codes.

Codes appear in HTTP error bodies (``errors[].code``) and in log records.
Each category has a generic code plus the narrower ones Fieldlog emits.
"""

VALIDATION_ERROR = "VALIDATION_ERROR"
# Request body or path parameter rejected at the HTTP boundary.
INVALID_ARGUMENT = "INVALID_ARGUMENT"

NOT_FOUND = "NOT_FOUND"
# No inspection exists for the requested id.
RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

CONFLICT = "CONFLICT"
# Unique constraint violation reported by Postgres.
ALREADY_EXISTS = "ALREADY_EXISTS"

DEPENDENCY_FAILURE = "DEPENDENCY_FAILURE"
# Connection refused, pool exhausted or timed out.
DEPENDENCY_UNAVAILABLE = "DEPENDENCY_UNAVAILABLE"

INTERNAL_ERROR = "INTERNAL_ERROR"
UNEXPECTED_EXCEPTION = "UNEXPECTED_EXCEPTION"
