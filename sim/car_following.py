#!/usr/bin/env python3
"""
sim/car_following.py
====================
Longitudinal acceleration law (Intelligent Driver Model).

:func:`idm_acceleration` is the bare law for one subject / leader pair;
:func:`target_acceleration` applies it in the lanes that matter for the
subject's current manoeuvre.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from sim.gaps import find_leader
from sim.traffic_policy import DrivingPolicy
from sim.vehicle import ChangingLane, ReturningLane, VehicleState

_DEFAULT_POLICY = DrivingPolicy()


def idm_acceleration(
    v: float,
    desired_speed: float,
    x: float,
    leader: Optional[VehicleState] = None,
    policy: Optional[DrivingPolicy] = None,
) -> float:
    """Desired longitudinal acceleration (m/s²).

    ``a_max * (1 - (v / v0)**delta - (s* / s)**2)`` where the interaction
    term is only present with a leader.  A bumper gap below
    ``policy.contact_gap_m`` bypasses the formula and returns
    ``policy.contact_decel``.  The result is otherwise unclamped.

    Parameters
    ----------
    v : float
        Subject speed (m/s).
    desired_speed : float
        Subject target speed ``v0`` (m/s, positive).
    x : float
        Subject longitudinal position (m).
    leader : VehicleState or None
        Vehicle ahead, if any.
    policy : DrivingPolicy or None
        IDM parameters; defaults when *None*.
    """
    policy = policy or _DEFAULT_POLICY
    a_max = policy.idm_max_accel

    free_road = (v / desired_speed) ** policy.idm_delta

    interaction = 0.0
    if leader is not None:
        gap = leader.x - x - policy.vehicle_length_m
        if gap < policy.contact_gap_m:
            return policy.contact_decel
        delta_v = v - leader.v
        braking = (v * delta_v) / (2.0 * math.sqrt(a_max * policy.idm_comfort_decel))
        s_star = policy.idm_min_gap_m + max(0.0, v * policy.safe_following_time_s + braking)
        interaction = (s_star / gap) ** 2

    return a_max * (1.0 - free_road - interaction)


def target_acceleration(
    vehicle: VehicleState,
    fleet: Sequence[VehicleState],
    policy: Optional[DrivingPolicy] = None,
) -> float:
    """IDM acceleration for *vehicle* against the *fleet* snapshot.

    While changing or returning lanes the car straddles two lanes, so
    the more conservative of the current-lane and target-lane values is
    used.
    """
    leader = find_leader(vehicle, fleet, vehicle.lane)
    accel = idm_acceleration(vehicle.v, vehicle.target_speed, vehicle.x, leader, policy)

    if isinstance(vehicle.maneuver, (ChangingLane, ReturningLane)):
        target_leader = find_leader(vehicle, fleet, vehicle.maneuver.target_lane)
        accel = min(
            accel,
            idm_acceleration(vehicle.v, vehicle.target_speed, vehicle.x, target_leader, policy),
        )
    return accel
