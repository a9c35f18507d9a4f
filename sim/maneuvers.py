#!/usr/bin/env python3
"""
sim/maneuvers.py
================
Per-vehicle manoeuvre state machine.

States
------
``Cruising``
    IDM in the current lane, lateral velocity forced to zero and ``y``
    relaxed toward the lane centre.
``Braking``
    Fixed emergency deceleration until the action timer elapses.
``ChangingLane`` / ``ReturningLane``
    Blinker pre-roll while the action timer runs, then a damped spring
    toward the target lane centre.  A cornering lane change chains into
    ``ReturningLane`` once the first leg completes.

:func:`update_maneuver` chooses ``ax`` / ``ay`` for one tick and performs
the transitions; the ``start_*`` helpers are the entry points used by
:mod:`sim.host_control`.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence

from sim.car_following import target_acceleration
from sim.traffic_policy import DrivingPolicy, lane_center_y, other_lane
from sim.vehicle import (
    Blinker,
    Braking,
    ChangingLane,
    Cruising,
    ReturningLane,
    VehicleState,
)

log = logging.getLogger("maneuvers")

_DEFAULT_POLICY = DrivingPolicy()


# ── entry points ──────────────────────────────────────────────────────────────

def start_braking(vehicle: VehicleState, policy: Optional[DrivingPolicy] = None) -> None:
    """Enter ``Braking``, dropping any lane change or cornering in progress."""
    policy = policy or _DEFAULT_POLICY
    vehicle.maneuver = Braking()
    vehicle.action_timer = policy.braking_duration_s


def start_lane_change(
    vehicle: VehicleState,
    cornering: bool = False,
    policy: Optional[DrivingPolicy] = None,
) -> None:
    """Enter ``ChangingLane`` toward the opposite lane.

    The caller has already checked lane-change safety.  With *cornering*
    the current lane is remembered so the car comes back to it.
    """
    policy = policy or _DEFAULT_POLICY
    vehicle.maneuver = ChangingLane(
        target_lane=other_lane(vehicle.lane),
        cornering=cornering,
        original_lane=vehicle.lane if cornering else None,
    )
    vehicle.action_timer = policy.blinker_preroll_s


def deny_lane_change(vehicle: VehicleState, policy: Optional[DrivingPolicy] = None) -> None:
    """Signal a refused lane change to the presentation layer."""
    policy = policy or _DEFAULT_POLICY
    vehicle.action_denied_timer = policy.denied_feedback_s


# ── per-tick update ───────────────────────────────────────────────────────────

def update_maneuver(
    vehicle: VehicleState,
    fleet: Sequence[VehicleState],
    dt: float,
    policy: Optional[DrivingPolicy] = None,
) -> None:
    """Set ``ax`` / ``ay`` for this tick and apply state transitions.

    Parameters
    ----------
    vehicle : VehicleState
        The vehicle's copy for the *next* snapshot; mutated in place.
    fleet : Sequence[VehicleState]
        The *previous* snapshot, used for every leader lookup.
    dt : float
        Tick length in seconds.
    policy : DrivingPolicy or None
        Tunables; defaults when *None*.
    """
    policy = policy or _DEFAULT_POLICY
    vehicle.blinker = Blinker.NONE

    if isinstance(vehicle.maneuver, Braking):
        if vehicle.action_timer > 0.0:
            vehicle.ax = policy.emergency_decel
            vehicle.ay = 0.0
            vehicle.vy = 0.0
            vehicle.is_emergency_braking = True
            return
        log.debug("vehicle %d: braking finished", vehicle.id)
        vehicle.maneuver = Cruising()

    if isinstance(vehicle.maneuver, (ChangingLane, ReturningLane)):
        _update_lane_change(vehicle, fleet, dt, policy)
    else:
        _update_cruising(vehicle, fleet, policy)


def _update_cruising(
    vehicle: VehicleState,
    fleet: Sequence[VehicleState],
    policy: DrivingPolicy,
) -> None:
    vehicle.ax = target_acceleration(vehicle, fleet, policy)
    vehicle.ay = 0.0
    vehicle.vy = 0.0

    center = lane_center_y(vehicle.lane, policy)
    if abs(vehicle.y - center) > policy.recenter_snap_m:
        vehicle.y += (center - vehicle.y) * policy.recenter_gain
    else:
        vehicle.y = center


def _update_lane_change(
    vehicle: VehicleState,
    fleet: Sequence[VehicleState],
    dt: float,
    policy: DrivingPolicy,
) -> None:
    maneuver = vehicle.maneuver
    vehicle.ax = target_acceleration(vehicle, fleet, policy)

    # Pre-roll: blinker only, no lateral motion yet.
    if vehicle.action_timer > 0.0:
        vehicle.blinker = Blinker.RIGHT if maneuver.target_lane > vehicle.lane else Blinker.LEFT
        vehicle.ay = 0.0
        return

    target_y = lane_center_y(maneuver.target_lane, policy)
    dy = target_y - vehicle.y
    vehicle.ay = dy * policy.lateral_stiffness - vehicle.vy * policy.lateral_damping

    progress = maneuver.progress + dt / policy.lane_change_duration_s
    if progress < 1.0:
        vehicle.maneuver = replace(maneuver, progress=progress)
        return

    vehicle.y = target_y
    vehicle.vy = 0.0
    vehicle.ay = 0.0
    vehicle.lane = maneuver.target_lane

    if isinstance(maneuver, ChangingLane) and maneuver.cornering:
        vehicle.maneuver = ReturningLane(original_lane=maneuver.original_lane)
        vehicle.action_timer = policy.blinker_preroll_s
        log.debug("vehicle %d: reached lane %d, returning to lane %d",
                  vehicle.id, vehicle.lane, maneuver.original_lane)
    else:
        vehicle.maneuver = Cruising()
        log.debug("vehicle %d: lane change complete, now in lane %d",
                  vehicle.id, vehicle.lane)
