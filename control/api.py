"""
control/api.py
==============
FastAPI control surface for a running :class:`~sim.sim_bridge.SimBridge`.

Start it through :mod:`main` with ``HIGHWAY_SERVE=1``, or build an app
around your own bridge with :func:`create_app`.

Endpoints
---------
``GET  /state``       status flags plus the render snapshot of every vehicle
``GET  /telemetry``   rolling host ``(time, ax, ay)`` samples
``POST /action``      ``{action}`` one-shot host command (running, manual mode only)
``POST /autonomy``    ``{enabled}``
``POST /params``      ``{host_speed_kmh}``
``POST /start`` · ``/stop`` · ``/reset``
``POST /pause``       ``{paused}``
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from sim.sim_bridge import SimBridge
from sim.vehicle import HostAction

log = logging.getLogger("control.api")

# ── Pydantic request schemas ─────────────────────────────────────────────────


class ActionRequestBody(BaseModel):
    """One-shot host command."""
    action: str


class AutonomyRequest(BaseModel):
    enabled: bool


class PauseRequest(BaseModel):
    paused: bool


class ParamsRequest(BaseModel):
    """Host target speed, within the range the controls allow."""
    host_speed_kmh: float = Field(..., ge=50.0, le=130.0)


# ── FastAPI application ──────────────────────────────────────────────────────


def create_app(bridge: SimBridge) -> FastAPI:
    """Build the control API around *bridge*."""
    app = FastAPI(
        title="Highway Overtaking Simulator API",
        description="Drive the host vehicle and read the simulation state.",
        version="1.0",
    )

    @app.get("/state")
    def get_state() -> Dict[str, Any]:
        """Status flags and every vehicle's render snapshot."""
        return {"status": bridge.status(), "vehicles": bridge.get_vehicles()}

    @app.get("/telemetry")
    def get_telemetry() -> List[Dict[str, float]]:
        return bridge.get_telemetry()

    @app.post("/action")
    def post_action(body: ActionRequestBody) -> Dict[str, Any]:
        """Queue a host command; it is applied on the next tick.

        Manual commands are only accepted while the simulation runs with
        autonomy off (409 otherwise).
        """
        try:
            action = HostAction.parse_command(body.action)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        if not bridge.accepts_manual_actions():
            raise HTTPException(
                status_code=409,
                detail="manual actions need a running simulation with autonomy off",
            )
        request_id = bridge.request_action(action, sender="api")
        return {"id": request_id, "action": action.value}

    @app.post("/autonomy")
    def post_autonomy(body: AutonomyRequest) -> Dict[str, Any]:
        bridge.set_autonomous(body.enabled)
        return bridge.status()

    @app.post("/params")
    def post_params(body: ParamsRequest) -> Dict[str, Any]:
        bridge.set_host_speed(body.host_speed_kmh)
        return bridge.status()

    @app.post("/start")
    def post_start() -> Dict[str, Any]:
        bridge.start()
        return bridge.status()

    @app.post("/stop")
    def post_stop() -> Dict[str, Any]:
        bridge.stop()
        return bridge.status()

    @app.post("/pause")
    def post_pause(body: PauseRequest) -> Dict[str, Any]:
        bridge.set_paused(body.paused)
        return bridge.status()

    @app.post("/reset")
    def post_reset() -> Dict[str, Any]:
        bridge.reset()
        return bridge.status()

    log.debug("control API created")
    return app
