#!/usr/bin/env python3
"""
sim/physics.py
==============
Low-level physics helpers used by :mod:`sim.world` and :mod:`sim.maneuvers`.

Keeping these in a separate module avoids circular imports and makes unit
testing straightforward.
"""

from __future__ import annotations

from sim.vehicle import VehicleState


def kmh_to_mps(speed_kmh: float) -> float:
    """Convert km/h to m/s, clamping negatives to zero."""
    return max(0.0, float(speed_kmh)) / 3.6


def mps_to_kmh(speed_mps: float) -> float:
    """Convert m/s to km/h."""
    return max(0.0, float(speed_mps)) * 3.6


def integrate(vehicle: VehicleState, dt: float) -> None:
    """Explicit-Euler step of *vehicle* over *dt* seconds, in place.

    Uses the ``ax`` / ``ay`` already chosen for this tick.  Longitudinal
    speed is floored at zero (no reverse travel); the lateral axis is
    unclamped.

    Parameters
    ----------
    vehicle : VehicleState
        Vehicle to advance.
    dt : float
        Tick length in seconds.
    """
    vehicle.v = max(0.0, vehicle.v + vehicle.ax * dt)
    vehicle.x += vehicle.v * dt

    vehicle.vy += vehicle.ay * dt
    vehicle.y += vehicle.vy * dt


def tick_down(timer: float, dt: float) -> float:
    """Decrement a countdown by *dt*, clamping at zero."""
    return max(0.0, timer - dt)
