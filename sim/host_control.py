#!/usr/bin/env python3
"""
sim/host_control.py
===================
Host-only control: the one-shot command interpreter and the autonomous
overtaking policy.  Background vehicles never go through this module.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from sim.gaps import find_leader, is_lane_change_safe, lane_clear_distance
from sim.maneuvers import deny_lane_change, start_braking, start_lane_change
from sim.traffic_policy import DrivingPolicy, other_lane
from sim.vehicle import Cruising, HostAction, VehicleState

log = logging.getLogger("host_control")

_DEFAULT_POLICY = DrivingPolicy()

_LANE_REQUESTS = (HostAction.REQUESTING_LANE_CHANGE, HostAction.REQUESTING_CORNERING)


def apply_host_command(
    host: VehicleState,
    action: HostAction,
    fleet: Sequence[VehicleState],
    policy: Optional[DrivingPolicy] = None,
) -> bool:
    """Apply one pending external *action* to *host*.

    Returns
    -------
    bool
        True when the request was consumed and the caller should clear
        it.  ``cruising`` is the empty sentinel and never consumed.
        ``braking`` is always consumed.  Lane-change and cornering
        requests are consumed only while the host is cruising, even
        when the lane change itself is refused as unsafe; otherwise
        they are dropped and reported not consumed.
    """
    policy = policy or _DEFAULT_POLICY

    if action is HostAction.BRAKING:
        start_braking(host, policy)
        log.info("host %d: braking", host.id)
        return True

    if action not in _LANE_REQUESTS or not isinstance(host.maneuver, Cruising):
        return False

    cornering = action is HostAction.REQUESTING_CORNERING
    if is_lane_change_safe(host, fleet, policy):
        start_lane_change(host, cornering=cornering, policy=policy)
        log.info("host %d: %s accepted, lane %d -> %d",
                 host.id, action.value, host.lane, host.target_lane)
    else:
        deny_lane_change(host, policy)
        log.info("host %d: %s denied, opposite lane occupied", host.id, action.value)
    return True


def run_autonomous_policy(
    host: VehicleState,
    fleet: Sequence[VehicleState],
    policy: Optional[DrivingPolicy] = None,
) -> bool:
    """Start an overtake when the host is stuck behind slower traffic.

    Triggers only when all of the following hold:

    * a leader exists in the current lane and the host runs below
      ``blocked_speed_ratio`` of its target speed;
    * the action timer has elapsed;
    * the opposite lane offers more than ``overtake_advantage_lengths``
      vehicle lengths of extra clear road;
    * the lane change is safe.

    Returns True when an overtake was started.
    """
    policy = policy or _DEFAULT_POLICY
    if not isinstance(host.maneuver, Cruising):
        return False

    leader = find_leader(host, fleet, host.lane)
    blocked = leader is not None and host.v < host.target_speed * policy.blocked_speed_ratio
    if not blocked or host.action_timer > 0.0:
        return False

    current_clear = lane_clear_distance(host, fleet, host.lane, policy)
    target_clear = lane_clear_distance(host, fleet, other_lane(host.lane), policy)
    advantage = policy.vehicle_length_m * policy.overtake_advantage_lengths
    if target_clear <= current_clear + advantage:
        return False
    if not is_lane_change_safe(host, fleet, policy):
        return False

    start_lane_change(host, cornering=False, policy=policy)
    log.info("host %d: autonomous overtake, clear %.1f m vs %.1f m",
             host.id, target_clear, current_clear)
    return True
