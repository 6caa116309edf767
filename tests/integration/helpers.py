"""Shared helpers for integration tests."""

from __future__ import annotations

import os


def real_provider_tests_enabled() -> bool:
    """Return True when tests against a real Postgres are explicitly enabled."""
    raw = os.getenv("FIELDLOG_RUN_INTEGRATION_REAL", "").strip().lower()
    return raw in {"1", "true", "yes", "on"}
