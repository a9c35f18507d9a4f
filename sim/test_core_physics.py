#!/usr/bin/env python3
"""
Tests for the integrator, the IDM acceleration law and the gap / safety
evaluator.
"""

from __future__ import annotations

import math
import unittest

from sim.car_following import idm_acceleration, target_acceleration
from sim.gaps import find_leader, is_lane_change_safe, lane_clear_distance
from sim.physics import integrate, kmh_to_mps, mps_to_kmh, tick_down
from sim.traffic_policy import DrivingPolicy, lane_center_y, other_lane, spawn_gap_m
from sim.vehicle import ChangingLane, VehicleRole, VehicleState

POLICY = DrivingPolicy()
LENGTH = POLICY.vehicle_length_m


def make_vehicle(
    vid: int,
    x: float,
    lane: int = 0,
    v: float = 0.0,
    target: float = 25.0,
    role: VehicleRole = VehicleRole.AI,
) -> VehicleState:
    return VehicleState(
        id=vid,
        role=role,
        x=x,
        y=lane_center_y(lane, POLICY),
        lane=lane,
        target_speed=target,
        v=v,
    )


class GeometryTests(unittest.TestCase):
    def test_lane_centres(self) -> None:
        self.assertAlmostEqual(lane_center_y(0, POLICY), 1.95)
        self.assertAlmostEqual(lane_center_y(1, POLICY), 5.85)
        self.assertEqual(other_lane(0), 1)
        self.assertEqual(other_lane(1), 0)

    def test_spawn_gap(self) -> None:
        self.assertAlmostEqual(spawn_gap_m(20.0, POLICY), 20.0 * 1.5 + 4.5 + 5.0)

    def test_unit_conversion(self) -> None:
        self.assertAlmostEqual(kmh_to_mps(36.0), 10.0)
        self.assertAlmostEqual(mps_to_kmh(10.0), 36.0)
        self.assertEqual(kmh_to_mps(-5.0), 0.0)


class IntegratorTests(unittest.TestCase):
    def test_euler_step_uses_updated_speed(self) -> None:
        car = make_vehicle(1, x=10.0, v=5.0)
        car.ax = 2.0
        car.ay = 1.0
        car.vy = 0.5
        y0 = car.y

        integrate(car, 0.5)

        self.assertAlmostEqual(car.v, 6.0)
        self.assertAlmostEqual(car.x, 13.0)
        self.assertAlmostEqual(car.vy, 1.0)
        self.assertAlmostEqual(car.y, y0 + 0.5)

    def test_speed_floor_at_zero(self) -> None:
        car = make_vehicle(1, x=10.0, v=1.0)
        car.ax = -8.0

        integrate(car, 1.0)

        self.assertEqual(car.v, 0.0)
        self.assertEqual(car.x, 10.0)

    def test_lateral_axis_unclamped(self) -> None:
        car = make_vehicle(1, x=0.0)
        car.vy = -3.0
        car.ay = -2.0

        integrate(car, 1.0)

        self.assertAlmostEqual(car.vy, -5.0)
        self.assertLess(car.y, 0.0)

    def test_timer_clamps_at_zero(self) -> None:
        self.assertEqual(tick_down(0.01, 0.5), 0.0)
        self.assertEqual(tick_down(0.0, 0.5), 0.0)
        self.assertAlmostEqual(tick_down(1.5, 0.5), 1.0)


class CarFollowingTests(unittest.TestCase):
    def test_free_road_from_rest_is_max_accel(self) -> None:
        self.assertAlmostEqual(idm_acceleration(0.0, 25.0, 0.0), POLICY.idm_max_accel)

    def test_free_road_at_desired_speed_is_zero(self) -> None:
        self.assertAlmostEqual(idm_acceleration(25.0, 25.0, 0.0), 0.0)

    def test_free_road_above_desired_speed_decelerates(self) -> None:
        self.assertLess(idm_acceleration(30.0, 25.0, 0.0), 0.0)

    def test_gap_below_min_gap_is_negative(self) -> None:
        eps = 0.05
        for v in (0.0, 5.0, 20.0, 35.0):
            for gap in (0.2, 1.0, POLICY.idm_min_gap_m - eps):
                leader = make_vehicle(2, x=100.0 + LENGTH + gap, v=v)
                accel = idm_acceleration(v, 30.0, 100.0, leader)
                self.assertLess(accel, 0.0, msg=f"v={v} gap={gap}")

    def test_gap_just_above_min_gap_is_negative_when_moving(self) -> None:
        gap = POLICY.idm_min_gap_m + 0.05
        for v in (1.0, 10.0, 30.0):
            leader = make_vehicle(2, x=LENGTH + gap, v=v)
            self.assertLess(idm_acceleration(v, 30.0, 0.0, leader), 0.0)

    def test_contact_override(self) -> None:
        leader = make_vehicle(2, x=LENGTH + 0.05, v=10.0)
        self.assertEqual(idm_acceleration(10.0, 25.0, 0.0, leader), POLICY.contact_decel)

    def test_interaction_term(self) -> None:
        v, v0, gap, leader_v = 20.0, 25.0, 50.0, 18.0
        leader = make_vehicle(2, x=LENGTH + gap, v=leader_v)
        s_star = 2.0 + max(0.0, v * 1.5 + v * (v - leader_v) / (2.0 * math.sqrt(1.5 * 2.0)))
        expected = 1.5 * (1.0 - (v / v0) ** 4 - (s_star / gap) ** 2)
        self.assertAlmostEqual(idm_acceleration(v, v0, 0.0, leader), expected)

    def test_lane_change_uses_more_conservative_lane(self) -> None:
        host = make_vehicle(0, x=0.0, lane=0, v=20.0, role=VehicleRole.HOST)
        host.maneuver = ChangingLane(target_lane=1)
        far_leader = make_vehicle(1, x=150.0, lane=0, v=20.0)
        near_leader = make_vehicle(2, x=25.0, lane=1, v=15.0)
        fleet = [host, far_leader, near_leader]

        accel = target_acceleration(host, fleet)

        current_lane = idm_acceleration(20.0, 25.0, 0.0, far_leader)
        target_lane = idm_acceleration(20.0, 25.0, 0.0, near_leader)
        self.assertEqual(accel, min(current_lane, target_lane))
        self.assertEqual(accel, target_lane)

    def test_cruising_ignores_other_lane(self) -> None:
        car = make_vehicle(0, x=0.0, lane=0, v=20.0)
        near_other_lane = make_vehicle(1, x=10.0, lane=1, v=5.0)
        self.assertEqual(
            target_acceleration(car, [car, near_other_lane]),
            idm_acceleration(20.0, 25.0, 0.0, None),
        )


class GapTests(unittest.TestCase):
    def test_find_leader_picks_nearest_ahead_in_lane(self) -> None:
        subject = make_vehicle(0, x=50.0, lane=0)
        fleet = [
            subject,
            make_vehicle(1, x=120.0, lane=0),
            make_vehicle(2, x=80.0, lane=0),
            make_vehicle(3, x=60.0, lane=1),
            make_vehicle(4, x=40.0, lane=0),
            make_vehicle(5, x=50.0, lane=0),
        ]
        self.assertEqual(find_leader(subject, fleet, 0).id, 2)
        self.assertEqual(find_leader(subject, fleet, 1).id, 3)

    def test_find_leader_none(self) -> None:
        subject = make_vehicle(0, x=50.0)
        fleet = [subject, make_vehicle(1, x=10.0)]
        self.assertIsNone(find_leader(subject, fleet, 0))
        self.assertIsNone(find_leader(subject, fleet, 1))

    def test_lane_clear_distance(self) -> None:
        subject = make_vehicle(0, x=0.0)
        fleet = [subject, make_vehicle(1, x=30.0, lane=0)]
        self.assertAlmostEqual(lane_clear_distance(subject, fleet, 0), 30.0 - LENGTH)
        self.assertEqual(lane_clear_distance(subject, fleet, 1), math.inf)

    def test_empty_opposite_lane_is_safe(self) -> None:
        subject = make_vehicle(0, x=0.0, lane=0, v=25.0)
        same_lane = make_vehicle(1, x=3.0, lane=0, v=25.0)
        self.assertTrue(is_lane_change_safe(subject, [subject, same_lane]))

    def test_neighbour_within_current_margin_is_unsafe(self) -> None:
        # Projected positions are far apart; only the current gap fails.
        subject = make_vehicle(0, x=100.0, lane=0, v=30.0)
        behind = make_vehicle(1, x=90.0, lane=1, v=0.0)
        self.assertLess(abs(subject.x - behind.x), 2.4 * LENGTH)
        self.assertFalse(is_lane_change_safe(subject, [subject, behind]))

        ahead = make_vehicle(2, x=110.0, lane=1, v=60.0)
        self.assertFalse(is_lane_change_safe(subject, [subject, ahead]))

    def test_projected_conflict_is_unsafe(self) -> None:
        subject = make_vehicle(0, x=100.0, lane=0, v=20.0)
        closing = make_vehicle(1, x=80.0, lane=1, v=38.0)
        self.assertFalse(is_lane_change_safe(subject, [subject, closing]))

    def test_sufficient_gap_is_safe(self) -> None:
        subject = make_vehicle(0, x=100.0, lane=0, v=20.0)
        ahead = make_vehicle(1, x=111.0, lane=1, v=20.0)
        behind = make_vehicle(2, x=60.0, lane=1, v=20.0)
        self.assertTrue(is_lane_change_safe(subject, [subject, ahead, behind]))


if __name__ == "__main__":
    unittest.main()
