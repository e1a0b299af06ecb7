"""Configuration lookup and logging setup shared by the app and the API."""

from __future__ import annotations

import logging
import os
from typing import Any, List, Mapping, Optional

ENV_PREFIX = "CARBONLAB_"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_CORS_ORIGINS = [
    # Vite dev/preview servers
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:4173",
    "http://127.0.0.1:4173",
]


def get_setting(
    name: str,
    default: Optional[str] = None,
    secrets: Optional[Mapping[str, Any]] = None,
) -> Optional[str]:
    """Return a configuration value.

    The lookup order is secrets (e.g., ``st.secrets``) → ``CARBONLAB_<NAME>``
    environment variable → ``default``.
    """

    if secrets is not None:
        secret_value = secrets.get(name.lower())
        if secret_value:
            return str(secret_value)
    return os.environ.get(f"{ENV_PREFIX}{name.upper()}") or default


def get_cors_origins() -> List[str]:
    raw = get_setting("cors_origins", "") or ""
    return [origin.strip() for origin in raw.split(",") if origin.strip()] or list(
        DEFAULT_CORS_ORIGINS
    )


def configure_logging(level: Optional[str] = None) -> None:
    """Apply ``CARBONLAB_LOG_LEVEL`` (or ``level``) to the root logger."""

    resolved = (level or get_setting("log_level", DEFAULT_LOG_LEVEL) or DEFAULT_LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, resolved, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


__all__ = [
    "DEFAULT_CORS_ORIGINS",
    "ENV_PREFIX",
    "configure_logging",
    "get_cors_origins",
    "get_setting",
]
