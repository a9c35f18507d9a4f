#!/usr/bin/env python3
"""
sim/scenario.py
===============
Initial fleet for the forced-overtake scenario.

Layout
------
* the host in lane 0 at ``host_start_x_m``;
* a cluster of slow vehicles directly ahead of it in the same lane, so
  the host eventually has to overtake;
* one vehicle in lane 1 just ahead of the host, leaving a tight but
  passable gap;
* random background traffic over both lanes.

A forward-only spacing pass then guarantees nobody starts inside an
unsafe following distance.
"""

from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional

from sim.physics import kmh_to_mps
from sim.traffic_policy import DrivingPolicy, lane_center_y, spawn_gap_m
from sim.vehicle import ManeuverParameters, VehicleRole, VehicleState

log = logging.getLogger("scenario")

_DEFAULT_POLICY = DrivingPolicy()


def initialize_vehicles(
    params: ManeuverParameters,
    policy: Optional[DrivingPolicy] = None,
    seed: Optional[int] = None,
    traffic_count: Optional[int] = None,
) -> List[VehicleState]:
    """Build a fresh fleet.

    Parameters
    ----------
    params : ManeuverParameters
        Supplies the host target speed; slow traffic is derived from it.
    policy : DrivingPolicy or None
        Geometry and spawn layout; defaults when *None*.
    seed : int or None
        Seed for the random background traffic.  The same seed always
        yields the same fleet.
    traffic_count : int or None
        Number of random background vehicles; ``policy.random_traffic_count``
        when *None*.

    Returns
    -------
    List[VehicleState]
        Lane 0 sorted by position, followed by lane 1 sorted by position.
        All vehicles start at rest and cruising.
    """
    policy = policy or _DEFAULT_POLICY
    rng = random.Random(seed)
    count = policy.random_traffic_count if traffic_count is None else max(0, int(traffic_count))
    host_speed = kmh_to_mps(params.host_speed_kmh)

    fleet: List[VehicleState] = []

    def spawn(role: VehicleRole, x: float, lane: int, target_speed: float) -> None:
        fleet.append(VehicleState(
            id=len(fleet),
            role=role,
            x=x,
            y=lane_center_y(lane, policy),
            lane=lane,
            target_speed=target_speed,
        ))

    spawn(VehicleRole.HOST, policy.host_start_x_m, 0, host_speed)

    slow_speed = host_speed * policy.slow_speed_ratio
    for i in range(policy.slow_cluster_size):
        x = policy.slow_cluster_start_x_m + i * (policy.vehicle_length_m + policy.slow_cluster_spacing_m)
        spawn(VehicleRole.AI, x, 0, slow_speed)

    spawn(VehicleRole.AI, policy.gap_car_x_m, 1, host_speed * policy.gap_car_speed_ratio)

    for _ in range(count):
        lane = 0 if rng.random() > 0.5 else 1
        speed_kmh = policy.random_speed_min_kmh + rng.random() * policy.random_speed_span_kmh
        x = policy.random_x_min_m + rng.random() * policy.random_x_span_m
        spawn(VehicleRole.AI, x, lane, kmh_to_mps(speed_kmh))

    lanes = enforce_spawn_spacing(fleet, policy)
    ordered = lanes[0] + lanes[1]
    log.info("scenario: %d vehicles (host %.0f km/h, %d random, seed=%s)",
             len(ordered), params.host_speed_kmh, count, seed)
    return ordered


def enforce_spawn_spacing(
    fleet: List[VehicleState],
    policy: Optional[DrivingPolicy] = None,
) -> Dict[int, List[VehicleState]]:
    """Push vehicles forward until consecutive same-lane gaps are safe.

    Each lane is sorted by ascending ``x``; walking front to back, every
    vehicle must be at least :func:`~sim.traffic_policy.spawn_gap_m` of
    the previous one's target speed ahead of it.  Vehicles only ever move
    forward.

    Returns
    -------
    Dict[int, List[VehicleState]]
        Lane index → that lane's vehicles, sorted by position.
    """
    policy = policy or _DEFAULT_POLICY
    lanes: Dict[int, List[VehicleState]] = {0: [], 1: []}
    for vehicle in fleet:
        lanes[vehicle.lane].append(vehicle)

    corrections = 0
    for lane, vehicles in lanes.items():
        vehicles.sort(key=lambda v: v.x)
        for behind, current in zip(vehicles, vehicles[1:]):
            required = spawn_gap_m(behind.target_speed, policy)
            if current.x - behind.x < required:
                current.x = behind.x + required
                corrections += 1
    log.debug("scenario: spacing pass moved %d vehicles", corrections)
    return lanes
