#!/usr/bin/env python3
"""
sim/world.py
============
Per-tick world update for the two-lane highway.

:func:`step` is the pure orchestrator: it takes the previous fleet
snapshot and returns a new one, so every decision of a tick (leader
lookup, safety check, acceleration) sees the same settled state and the
result does not depend on vehicle order.  The :class:`World` class wraps
it with the current fleet, parameters and a few counters for callers that
prefer an object that owns its state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from sim.host_control import apply_host_command, run_autonomous_policy
from sim.maneuvers import update_maneuver
from sim.physics import integrate, kmh_to_mps, tick_down
from sim.scenario import initialize_vehicles
from sim.traffic_policy import DrivingPolicy
from sim.vehicle import Cruising, HostAction, ManeuverParameters, VehicleState

log = logging.getLogger("world")

_DEFAULT_POLICY = DrivingPolicy()

# Host state is dumped to the debug log every this many ticks.
_DEBUG_EVERY = 60


@dataclass(frozen=True)
class WorldUpdate:
    """Result of one :func:`step`.

    Attributes
    ----------
    vehicles : List[VehicleState]
        The next fleet snapshot, same identities and order as the input.
    host_action_consumed : bool
        True when the caller should clear its pending host action.
    """

    vehicles: List[VehicleState]
    host_action_consumed: bool


def step(
    vehicles: Sequence[VehicleState],
    params: ManeuverParameters,
    host_action: HostAction,
    autonomous: bool,
    dt: float,
    policy: Optional[DrivingPolicy] = None,
) -> WorldUpdate:
    """Advance the whole fleet by one tick of *dt* seconds.

    For every vehicle: count timers down, clear the emergency flag, run
    the host command interpreter and autonomous policy (host only; other
    vehicles are forced back to cruising), run the manoeuvre state
    machine, then integrate.  The input snapshot is never modified.

    Preconditions (``dt > 0``, positive host speed, exactly one host) are
    the caller's responsibility.
    """
    policy = policy or _DEFAULT_POLICY
    previous = list(vehicles)
    host_speed = kmh_to_mps(params.host_speed_kmh)
    consumed = False

    next_states: List[VehicleState] = []
    for prev in previous:
        vehicle = prev.clone()
        vehicle.action_timer = tick_down(vehicle.action_timer, dt)
        vehicle.action_denied_timer = tick_down(vehicle.action_denied_timer, dt)
        vehicle.is_emergency_braking = False

        if vehicle.is_host:
            vehicle.target_speed = host_speed
            if apply_host_command(vehicle, host_action, previous, policy):
                consumed = True
            if autonomous:
                run_autonomous_policy(vehicle, previous, policy)
        else:
            vehicle.maneuver = Cruising()

        update_maneuver(vehicle, previous, dt, policy)
        integrate(vehicle, dt)
        next_states.append(vehicle)

    return WorldUpdate(vehicles=next_states, host_action_consumed=consumed)


class World:
    """Stateful wrapper around :func:`step`.

    Parameters
    ----------
    params : ManeuverParameters or None
        Host target speed; defaults when *None*.
    autonomous : bool
        Whether the host overtakes on its own.
    seed : int or None
        Seed for the random background traffic.
    traffic_count : int or None
        Random background vehicles; policy default when *None*.
    policy : DrivingPolicy or None
        Tunable constants; uses defaults when *None*.
    """

    def __init__(
        self,
        params: Optional[ManeuverParameters] = None,
        autonomous: bool = True,
        seed: Optional[int] = None,
        traffic_count: Optional[int] = None,
        policy: Optional[DrivingPolicy] = None,
    ) -> None:
        self.policy = policy or DrivingPolicy()
        self.params = params or ManeuverParameters()
        self.autonomous = autonomous
        self.seed = seed
        self.traffic_count = traffic_count
        self.vehicles: List[VehicleState] = []
        self.time_s: float = 0.0
        self.tick_count: int = 0
        self.actions_consumed: int = 0
        self.lane_change_denials: int = 0
        self._init_vehicles()

    # ── initialisation / reset ────────────────────────────────────────────

    def _init_vehicles(self) -> None:
        self.vehicles = initialize_vehicles(
            self.params,
            policy=self.policy,
            seed=self.seed,
            traffic_count=self.traffic_count,
        )
        self.time_s = 0.0
        self.tick_count = 0
        self.actions_consumed = 0
        self.lane_change_denials = 0

    def reset(self, params: Optional[ManeuverParameters] = None) -> None:
        """Discard the fleet and build a new one, optionally with new *params*."""
        if params is not None:
            self.params = params
        self._init_vehicles()

    # ── queries ───────────────────────────────────────────────────────────

    def host(self) -> Optional[VehicleState]:
        for vehicle in self.vehicles:
            if vehicle.is_host:
                return vehicle
        return None

    def all_vehicles(self) -> List[VehicleState]:
        return list(self.vehicles)

    # ── physics tick ──────────────────────────────────────────────────────

    def update_physics(
        self,
        dt: float,
        host_action: HostAction = HostAction.CRUISING,
    ) -> bool:
        """Apply one :func:`step` and swap in the new fleet.

        Returns the *host action consumed* flag.
        """
        update = step(self.vehicles, self.params, host_action, self.autonomous, dt, self.policy)
        self.vehicles = update.vehicles
        self.tick_count += 1
        self.time_s += dt

        if update.host_action_consumed:
            self.actions_consumed += 1
        host = self.host()
        if host is not None and self._was_denied(host):
            self.lane_change_denials += 1
            log.debug("tick %d: host lane change denied", self.tick_count)

        if host is not None and self.tick_count % _DEBUG_EVERY == 1:
            log.debug(
                "tick %d t=%.2f host x=%.1f y=%.2f v=%.1f ax=%.2f ay=%.2f lane=%d action=%s",
                self.tick_count, self.time_s, host.x, host.y, host.v,
                host.ax, host.ay, host.lane, host.action.value,
            )
        return update.host_action_consumed

    def _was_denied(self, host: VehicleState) -> bool:
        # A denial on this tick leaves the timer at its full value (set after the countdown).
        return host.action_denied_timer == self.policy.denied_feedback_s
