"""Inspection Authority Service native package exports."""

from packages.fieldlog_shared.errors import ErrorCategory, ErrorDetail
from services.state.inspection_authority.broadcaster import (
    HEARTBEAT_FRAME,
    ConnectionRegistry,
    SubscriberDeliveryFailure,
    Subscription,
    SubscriptionState,
)
from services.state.inspection_authority.config import (
    SERVICE_COMPONENT_ID,
    InspectionAuthoritySettings,
)
from services.state.inspection_authority.domain import (
    HealthStatus,
    InspectionRecord,
    InspectionSnapshot,
    InspectionStatus,
    InspectionSubmission,
    PendingSync,
    Synced,
)
from services.state.inspection_authority.implementation import (
    DefaultInspectionAuthorityService,
)
from services.state.inspection_authority.interfaces import (
    InspectionRepository,
    StorageUnavailable,
)
from services.state.inspection_authority.service import InspectionAuthorityService
from services.state.inspection_authority.submission import SubmitInspectionUseCase

__all__ = [
    "HEARTBEAT_FRAME",
    "SERVICE_COMPONENT_ID",
    "ConnectionRegistry",
    "DefaultInspectionAuthorityService",
    "ErrorCategory",
    "ErrorDetail",
    "HealthStatus",
    "InspectionAuthorityService",
    "InspectionAuthoritySettings",
    "InspectionRecord",
    "InspectionRepository",
    "InspectionSnapshot",
    "InspectionStatus",
    "InspectionSubmission",
    "PendingSync",
    "StorageUnavailable",
    "SubmitInspectionUseCase",
    "SubscriberDeliveryFailure",
    "Subscription",
    "SubscriptionState",
    "Synced",
]
