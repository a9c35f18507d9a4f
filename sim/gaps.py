#!/usr/bin/env python3
"""
sim/gaps.py
===========
Gap and safety evaluation on the two-lane road.

All functions take the *previous* tick's fleet so that every decision of
one tick sees the same settled snapshot.  Lookups are linear scans; the
fleet is small.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from sim.traffic_policy import DrivingPolicy, other_lane
from sim.vehicle import VehicleState

_DEFAULT_POLICY = DrivingPolicy()


def find_leader(
    subject: VehicleState,
    fleet: Sequence[VehicleState],
    lane: int,
) -> Optional[VehicleState]:
    """Nearest vehicle strictly ahead of *subject* in *lane*.

    The subject itself (matched by ``id``) is ignored.  Returns ``None``
    when nobody in *lane* is ahead.
    """
    leader: Optional[VehicleState] = None
    min_distance = math.inf
    for other in fleet:
        if other.id == subject.id or other.lane != lane:
            continue
        distance = other.x - subject.x
        if 0.0 < distance < min_distance:
            min_distance = distance
            leader = other
    return leader


def lane_clear_distance(
    subject: VehicleState,
    fleet: Sequence[VehicleState],
    lane: int,
    policy: Optional[DrivingPolicy] = None,
) -> float:
    """Free road ahead of *subject* in *lane* (bumper to bumper).

    ``math.inf`` when the lane has no leader.
    """
    policy = policy or _DEFAULT_POLICY
    leader = find_leader(subject, fleet, lane)
    if leader is None:
        return math.inf
    return leader.x - subject.x - policy.vehicle_length_m


def is_lane_change_safe(
    subject: VehicleState,
    fleet: Sequence[VehicleState],
    policy: Optional[DrivingPolicy] = None,
) -> bool:
    """Whether *subject* may move into the opposite lane right now.

    Every vehicle already in the opposite lane must pass two checks:

    1. projected ``safety_horizon_s`` ahead at constant speed, the two
       are at least ``safety_margin_factor`` vehicle lengths apart;
    2. their current separation is at least ``current_gap_factor``
       vehicle lengths, whichever of the two is ahead.

    An empty opposite lane is always safe.
    """
    policy = policy or _DEFAULT_POLICY
    target_lane = other_lane(subject.lane)
    projected_margin = policy.vehicle_length_m * policy.safety_margin_factor
    current_margin = policy.vehicle_length_m * policy.current_gap_factor
    horizon = policy.safety_horizon_s

    subject_future_x = subject.x + subject.v * horizon
    for other in fleet:
        if other.id == subject.id or other.lane != target_lane:
            continue
        other_future_x = other.x + other.v * horizon
        if abs(subject_future_x - other_future_x) < projected_margin:
            return False
        if abs(other.x - subject.x) < current_margin:
            return False
    return True
