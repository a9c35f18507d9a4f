#!/usr/bin/env python3
"""
config.py
=========
Application-wide configuration constants.

Values can be overridden via environment variables (see :mod:`main`).
This module is a thin, import-safe leaf: it never imports from
other project packages.
"""

from typing import Optional

# ── Simulation defaults ──────────────────────────────────────────────────────
DEFAULT_HOST_SPEED_KMH: float = 100.0
DEFAULT_AUTONOMOUS: bool = True
DEFAULT_TICK_MS: float = 16.0          # ~60 Hz
DEFAULT_TRAFFIC_COUNT: int = 35
DEFAULT_SEED: Optional[int] = None

# ── Telemetry ────────────────────────────────────────────────────────────────
TELEMETRY_WINDOW: int = 900            # ~15 s of host samples at 60 Hz

# ── Headless driver ──────────────────────────────────────────────────────────
STATUS_LOG_INTERVAL_S: float = 1.0

# ── Control API ──────────────────────────────────────────────────────────────
API_HOST: str = "0.0.0.0"
API_PORT: int = 8000

# ── Logging ──────────────────────────────────────────────────────────────────
LOG_FILE: str = "highway.log"
WORLD_DEBUG_LOG_FILE: str = "world_debug.log"
