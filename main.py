#!/usr/bin/env python3
"""
main.py
=======
Entry point.  Runs the simulation headless, logging the host once per
second, or serves the control API when ``HIGHWAY_SERVE`` is set.

Environment overrides
---------------------
``HIGHWAY_SEED``, ``HIGHWAY_TICK_MS``, ``HIGHWAY_HOST_SPEED_KMH``,
``HIGHWAY_AUTONOMOUS``, ``HIGHWAY_TRAFFIC``, ``HIGHWAY_SERVE``,
``HIGHWAY_API_PORT``, ``HIGHWAY_LOG_LEVEL``.
"""

import os
import time
import logging
from typing import Callable, TypeVar

import config
from logging_setup import setup_logging
from sim.sim_bridge import SimBridge

log = logging.getLogger("main")

T = TypeVar("T")

_TRUE = {"1", "true", "yes", "on"}


def _env(name: str, default: T, parse: Callable[[str], T]) -> T:
    """Read *name* from the environment, keeping *default* if unset or invalid."""
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return parse(raw)
    except ValueError:
        log.warning("ignoring %s=%r (invalid value)", name, raw)
        return default


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() in _TRUE


def build_bridge() -> SimBridge:
    """Create a :class:`SimBridge` from :mod:`config` plus environment overrides."""
    return SimBridge(
        tick_ms=_env("HIGHWAY_TICK_MS", config.DEFAULT_TICK_MS, float),
        host_speed_kmh=_env("HIGHWAY_HOST_SPEED_KMH", config.DEFAULT_HOST_SPEED_KMH, float),
        autonomous=_env("HIGHWAY_AUTONOMOUS", config.DEFAULT_AUTONOMOUS, _parse_bool),
        random_seed=_env("HIGHWAY_SEED", config.DEFAULT_SEED, int),
        traffic_count=_env("HIGHWAY_TRAFFIC", config.DEFAULT_TRAFFIC_COUNT, int),
        telemetry_window=config.TELEMETRY_WINDOW,
    )


def serve(bridge: SimBridge) -> None:
    import uvicorn
    from control.api import create_app

    port = _env("HIGHWAY_API_PORT", config.API_PORT, int)
    bridge.start()
    log.info("Serving control API on http://%s:%d", config.API_HOST, port)
    try:
        uvicorn.run(create_app(bridge), host=config.API_HOST, port=port)
    finally:
        bridge.stop()


def run_headless(bridge: SimBridge) -> None:
    bridge.start()
    try:
        while True:
            time.sleep(config.STATUS_LOG_INTERVAL_S)
            host = bridge.get_host()
            status = bridge.status()
            log.info(
                "t=%.1fs host x=%.0f lane=%s speed=%.0f km/h action=%s denials=%d",
                status["time_s"], host.get("x", 0.0), host.get("lane"),
                host.get("speed", 0.0), host.get("action"),
                status["lane_change_denials"],
            )
    except KeyboardInterrupt:
        log.info("Shutting down...")
    finally:
        bridge.stop()


def main() -> None:
    level_name = os.environ.get("HIGHWAY_LOG_LEVEL", "INFO").upper()
    setup_logging(getattr(logging, level_name, logging.INFO))
    log.info("Starting highway simulator...")

    bridge = build_bridge()
    if _env("HIGHWAY_SERVE", False, _parse_bool):
        serve(bridge)
    else:
        run_headless(bridge)


if __name__ == "__main__":
    main()
