"""Canonical logging field names shared by every Fieldlog module."""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"
EVENT = "event"

# Public API invocation fields.
COMPONENT_ID = "component_id"
API_NAME = "api_name"
PUBLIC_API_INVOCATION_EVENT = "public_api_invocation"
PUBLIC_API_COMPLETION_EVENT = "public_api_completion"
SUCCESS = "success"
DURATION_MS = "duration_ms"
ERROR_TYPE = "error_type"

# Push-stream fields.
SUBSCRIPTION_ID = "subscription_id"
ACTIVE_CONNECTIONS = "active_connections"
INSPECTION_ID = "inspection_id"

# Common service-level fields.
SERVICE = "service"
ENVIRONMENT = "environment"
