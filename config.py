"""Centralized configuration for environment variables and external APIs.

This module is the single source of truth for configuration used across the
application. Import constants from here rather than calling os.getenv directly
in multiple places.
"""

from __future__ import annotations

import logging
import os
from typing import Final

from dotenv import load_dotenv

# Load environment variables from .env if present
load_dotenv()


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logging.getLogger(__name__).warning(
            "Ignoring invalid %s=%r, using %s", name, raw, default
        )
        return default


# --- Server API ---
API_BASE_URL: Final[str] = os.getenv(
    "CALYGO_API_BASE_URL", "http://localhost:5000"
).rstrip("/")

# --- Connectivity detection ---
CONNECTIVITY_CHECK_URL: Final[str] = os.getenv(
    "CONNECTIVITY_CHECK_URL", f"{API_BASE_URL}/api/health"
)
CONNECTIVITY_POLL_INTERVAL: Final[float] = _float_env("CONNECTIVITY_POLL_INTERVAL", 15.0)
CONNECTIVITY_PROBE_TIMEOUT: Final[float] = _float_env("CONNECTIVITY_PROBE_TIMEOUT", 5.0)

# --- Offline replay ---
# Upper bound for a single direct write or replayed request
REPLAY_REQUEST_TIMEOUT: Final[float] = _float_env("REPLAY_REQUEST_TIMEOUT", 30.0)

# --- Local durable store ---
MONGODB_URI: Final[str] = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
MONGODB_DATABASE: Final[str] = os.getenv("MONGODB_DATABASE", "calygo_field")

# --- Logging ---
LOG_LEVEL: Final[str] = os.getenv("LOG_LEVEL", "INFO").upper()


__all__ = [
    "API_BASE_URL",
    "CONNECTIVITY_CHECK_URL",
    "CONNECTIVITY_POLL_INTERVAL",
    "CONNECTIVITY_PROBE_TIMEOUT",
    "LOG_LEVEL",
    "MONGODB_DATABASE",
    "MONGODB_URI",
    "REPLAY_REQUEST_TIMEOUT",
]
