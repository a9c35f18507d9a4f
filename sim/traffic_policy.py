#!/usr/bin/env python3
"""
sim/traffic_policy.py
=====================
Tunable geometry, car-following, manoeuvre and spawn parameters for the
two-lane highway simulation.  Every constant lives in the frozen
:class:`DrivingPolicy` dataclass so that experiments can swap policies
without touching code.

Also provides three stateless geometry helpers:

* :func:`lane_center_y`: lateral position of a lane centre.
* :func:`other_lane`: index of the opposite lane.
* :func:`spawn_gap_m`: minimum initial spacing behind a vehicle.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DrivingPolicy:
    """Immutable bag of every tunable simulation parameter.

    Groups: geometry, car-following (IDM), emergency braking, lane
    change, cruising lane keeping, lane-change safety, autonomy,
    scenario spawn.
    """

    # ── Geometry ──────────────────────────────────────────────────────────
    lane_width_m: float = 3.9
    """Width of one lane; lane ``k`` is centred at ``(k + 0.5) * lane_width_m``."""

    vehicle_length_m: float = 4.5
    """Bumper-to-bumper length of every vehicle."""

    vehicle_width_m: float = 1.8
    """Vehicle width (presentation only)."""

    # ── Car-following (IDM) ───────────────────────────────────────────────
    idm_max_accel: float = 1.5
    """Maximum acceleration ``a_max`` (m/s²)."""

    idm_comfort_decel: float = 2.0
    """Comfortable deceleration ``b`` (m/s²)."""

    idm_delta: float = 4.0
    """Free-road acceleration exponent."""

    idm_min_gap_m: float = 2.0
    """Jam distance ``s0``."""

    safe_following_time_s: float = 1.5
    """Desired time headway ``T``; also used for spawn spacing."""

    contact_gap_m: float = 0.1
    """Bumper gap below which the IDM formula is bypassed."""

    contact_decel: float = -10.0
    """Acceleration returned on imminent contact."""

    # ── Emergency braking ─────────────────────────────────────────────────
    emergency_decel: float = -8.0
    """Fixed longitudinal acceleration while braking (m/s²)."""

    braking_duration_s: float = 1.5
    """How long a braking command holds the emergency deceleration."""

    # ── Lane change ───────────────────────────────────────────────────────
    blinker_preroll_s: float = 0.5
    """Blinker-only delay before lateral motion starts."""

    lane_change_duration_s: float = 3.0
    """Nominal duration of the lateral part of a lane change."""

    lateral_stiffness: float = 2.0
    """Spring gain pulling ``y`` toward the target lane centre."""

    lateral_damping: float = 2.5
    """Damping gain on lateral velocity."""

    denied_feedback_s: float = 1.0
    """How long a refused lane change is signalled to the presentation layer."""

    # ── Cruising lane keeping ─────────────────────────────────────────────
    recenter_gain: float = 0.1
    """Fraction of the lateral offset removed per tick while cruising."""

    recenter_snap_m: float = 0.01
    """Offset below which ``y`` snaps exactly onto the lane centre."""

    # ── Lane-change safety ────────────────────────────────────────────────
    safety_horizon_s: float = 1.0
    """Constant-speed projection horizon for the predicted gap check."""

    safety_margin_factor: float = 1.2
    """Predicted separation must be at least this many vehicle lengths."""

    current_gap_factor: float = 2.4
    """Current separation must be at least this many vehicle lengths."""

    # ── Autonomy ──────────────────────────────────────────────────────────
    blocked_speed_ratio: float = 0.95
    """Host is *blocked* below this fraction of its target speed."""

    overtake_advantage_lengths: float = 2.0
    """Extra clear distance (in vehicle lengths) the other lane must offer."""

    # ── Scenario spawn ────────────────────────────────────────────────────
    host_start_x_m: float = 20.0
    """Longitudinal start position of the host (lane 0)."""

    slow_cluster_size: int = 4
    """Slow vehicles placed directly ahead of the host."""

    slow_cluster_start_x_m: float = 80.0
    """Position of the first slow vehicle."""

    slow_cluster_spacing_m: float = 25.0
    """Bumper gap between slow vehicles before the spacing pass."""

    slow_speed_ratio: float = 0.7
    """Slow-cluster target speed as a fraction of the host target."""

    gap_car_x_m: float = 60.0
    """Position of the other-lane vehicle forming the overtaking gap."""

    gap_car_speed_ratio: float = 0.8
    """Gap vehicle target speed as a fraction of the host target."""

    random_traffic_count: int = 35
    """Background vehicles scattered over both lanes."""

    random_x_min_m: float = -500.0
    """Lower bound of random spawn positions."""

    random_x_span_m: float = 2000.0
    """Width of the random spawn window."""

    random_speed_min_kmh: float = 80.0
    """Lower bound of random target speeds."""

    random_speed_span_kmh: float = 40.0
    """Width of the random target-speed band."""

    spawn_extra_gap_m: float = 5.0
    """Clearance added on top of headway and vehicle length at spawn."""


def lane_center_y(lane: int, policy: DrivingPolicy) -> float:
    """Lateral coordinate of the centre of *lane* (0 = top, 1 = bottom)."""
    return policy.lane_width_m * (0.5 if lane == 0 else 1.5)


def other_lane(lane: int) -> int:
    """Return the index of the opposite lane on a two-lane road."""
    return 1 - lane


def spawn_gap_m(target_speed_mps: float, policy: DrivingPolicy) -> float:
    """Minimum initial spacing between consecutive same-lane vehicles.

    Parameters
    ----------
    target_speed_mps : float
        Target speed of the vehicle the spacing is measured from (m/s).
    policy : DrivingPolicy
        Supplies headway, vehicle length and extra clearance.
    """
    return (
        target_speed_mps * policy.safe_following_time_s
        + policy.vehicle_length_m
        + policy.spawn_extra_gap_m
    )
