#!/usr/bin/env python3
"""
Tests for the initial fleet builder and the spawn spacing pass.
"""

from __future__ import annotations

import unittest

from sim.physics import kmh_to_mps
from sim.scenario import enforce_spawn_spacing, initialize_vehicles
from sim.traffic_policy import DrivingPolicy, lane_center_y, spawn_gap_m
from sim.vehicle import HostAction, ManeuverParameters, VehicleRole, VehicleState

POLICY = DrivingPolicy()
PARAMS = ManeuverParameters(host_speed_kmh=100.0)


class InitializeVehiclesTests(unittest.TestCase):
    def test_fleet_composition(self) -> None:
        fleet = initialize_vehicles(PARAMS, seed=1)

        self.assertEqual(len(fleet), 1 + POLICY.slow_cluster_size + 1 + POLICY.random_traffic_count)
        hosts = [v for v in fleet if v.role is VehicleRole.HOST]
        self.assertEqual(len(hosts), 1)
        self.assertEqual(hosts[0].id, 0)
        self.assertEqual(sorted(v.id for v in fleet), list(range(len(fleet))))

    def test_host_and_slow_cluster(self) -> None:
        fleet = initialize_vehicles(PARAMS, seed=2, traffic_count=0)
        host = next(v for v in fleet if v.is_host)
        host_speed = kmh_to_mps(100.0)

        self.assertEqual(host.lane, 0)
        self.assertEqual(host.x, POLICY.host_start_x_m)
        self.assertEqual(host.y, lane_center_y(0, POLICY))
        self.assertAlmostEqual(host.target_speed, host_speed)

        slow = [v for v in fleet if v.lane == 0 and not v.is_host]
        self.assertEqual(len(slow), POLICY.slow_cluster_size)
        for vehicle in slow:
            self.assertGreater(vehicle.x, host.x)
            self.assertAlmostEqual(vehicle.target_speed, host_speed * 0.7)

        gap_car = [v for v in fleet if v.lane == 1]
        self.assertEqual(len(gap_car), 1)
        self.assertEqual(gap_car[0].x, POLICY.gap_car_x_m)
        self.assertAlmostEqual(gap_car[0].target_speed, host_speed * 0.8)

    def test_everyone_starts_at_rest_and_cruising(self) -> None:
        for vehicle in initialize_vehicles(PARAMS, seed=3):
            self.assertEqual(vehicle.v, 0.0)
            self.assertEqual(vehicle.vy, 0.0)
            self.assertEqual(vehicle.action, HostAction.CRUISING)
            self.assertEqual(vehicle.action_timer, 0.0)
            self.assertEqual(vehicle.y, lane_center_y(vehicle.lane, POLICY))

    def test_random_traffic_within_bounds(self) -> None:
        low = kmh_to_mps(POLICY.random_speed_min_kmh)
        high = kmh_to_mps(POLICY.random_speed_min_kmh + POLICY.random_speed_span_kmh)
        fleet = initialize_vehicles(PARAMS, seed=4)
        for vehicle in fleet[1:]:
            if vehicle.id <= POLICY.slow_cluster_size + 1:
                continue
            self.assertGreaterEqual(vehicle.target_speed, low)
            self.assertLessEqual(vehicle.target_speed, high)
            self.assertGreaterEqual(vehicle.x, POLICY.random_x_min_m)

    def test_spacing_holds_in_both_lanes(self) -> None:
        for seed in range(5):
            fleet = initialize_vehicles(PARAMS, seed=seed)
            for lane in (0, 1):
                in_lane = [v for v in fleet if v.lane == lane]
                xs = [v.x for v in in_lane]
                self.assertEqual(xs, sorted(xs), msg=f"seed={seed} lane={lane}")
                for behind, current in zip(in_lane, in_lane[1:]):
                    self.assertGreaterEqual(
                        current.x - behind.x,
                        spawn_gap_m(behind.target_speed, POLICY) - 1e-9,
                        msg=f"seed={seed} lane={lane} ids={behind.id},{current.id}",
                    )

    def test_output_is_lane_zero_then_lane_one(self) -> None:
        fleet = initialize_vehicles(PARAMS, seed=5)
        lanes = [v.lane for v in fleet]
        self.assertEqual(lanes, sorted(lanes))

    def test_same_seed_same_fleet(self) -> None:
        first = [v.as_dict() for v in initialize_vehicles(PARAMS, seed=42)]
        second = [v.as_dict() for v in initialize_vehicles(PARAMS, seed=42)]
        self.assertEqual(first, second)

    def test_different_seed_different_fleet(self) -> None:
        first = [v.as_dict() for v in initialize_vehicles(PARAMS, seed=1)]
        second = [v.as_dict() for v in initialize_vehicles(PARAMS, seed=2)]
        self.assertNotEqual(first, second)

    def test_slow_traffic_follows_host_speed(self) -> None:
        fleet = initialize_vehicles(ManeuverParameters(host_speed_kmh=60.0), traffic_count=0)
        slow = [v for v in fleet if v.lane == 0 and not v.is_host]
        for vehicle in slow:
            self.assertAlmostEqual(vehicle.target_speed, kmh_to_mps(60.0) * 0.7)


class SpawnSpacingTests(unittest.TestCase):
    def _car(self, vid: int, x: float, lane: int = 0, target: float = 20.0) -> VehicleState:
        return VehicleState(
            id=vid, role=VehicleRole.AI, x=x, y=lane_center_y(lane, POLICY),
            lane=lane, target_speed=target,
        )

    def test_overlapping_vehicles_are_pushed_forward(self) -> None:
        fleet = [self._car(1, 2.0), self._car(2, 0.0), self._car(3, 1.0)]
        gap = spawn_gap_m(20.0, POLICY)

        lanes = enforce_spawn_spacing(fleet, POLICY)

        self.assertEqual([v.id for v in lanes[0]], [2, 3, 1])
        self.assertEqual(lanes[0][0].x, 0.0)
        self.assertAlmostEqual(lanes[0][1].x, gap)
        self.assertAlmostEqual(lanes[0][2].x, 2 * gap)
        self.assertEqual(lanes[1], [])

    def test_vehicles_never_move_backward(self) -> None:
        fleet = [self._car(1, 0.0), self._car(2, 500.0), self._car(3, 10.0, lane=1)]
        before = {v.id: v.x for v in fleet}

        enforce_spawn_spacing(fleet, POLICY)

        for vehicle in fleet:
            self.assertGreaterEqual(vehicle.x, before[vehicle.id])
        self.assertEqual(fleet[1].x, 500.0)
        self.assertEqual(fleet[2].x, 10.0)

    def test_gap_uses_speed_of_vehicle_behind(self) -> None:
        fast_behind = self._car(1, 0.0, target=30.0)
        slow_ahead = self._car(2, 1.0, target=10.0)

        enforce_spawn_spacing([fast_behind, slow_ahead], POLICY)

        self.assertAlmostEqual(slow_ahead.x, spawn_gap_m(30.0, POLICY))


if __name__ == "__main__":
    unittest.main()
