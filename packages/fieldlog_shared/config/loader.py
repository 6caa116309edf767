"""Settings loading with deterministic precedence.

The cascade is always:
1) explicit overrides passed to ``load_settings``
2) environment variables (``FIELDLOG_`` prefix, ``__`` for nesting)
3) the YAML config file
4) built-in model defaults

Example: ``FIELDLOG_LOGGING__LEVEL=DEBUG`` -> ``logging.level = "DEBUG"``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, ClassVar

from .models import DEFAULT_CONFIG_PATH, FieldlogSettings

CONFIG_FILE_ENV_VAR = "FIELDLOG_CONFIG_FILE"


def load_settings(
    *,
    config_path: str | Path | None = None,
    **overrides: Any,
) -> FieldlogSettings:
    """Load typed settings, reading YAML from ``config_path`` when given."""
    resolved_path = _resolve_config_path(config_path)

    class _FileBoundSettings(FieldlogSettings):
        _config_path: ClassVar[Path] = resolved_path

    return _FileBoundSettings(**overrides)


def _resolve_config_path(config_path: str | Path | None) -> Path:
    """Pick the YAML path from the argument, the environment, or the default."""
    if config_path is not None:
        return Path(config_path)
    from_env = os.environ.get(CONFIG_FILE_ENV_VAR, "").strip()
    if from_env:
        return Path(from_env)
    return DEFAULT_CONFIG_PATH
