"""
sim/sim_bridge.py
=================
Background-thread driver tying :mod:`sim.world`, the host action
mailbox and the telemetry recorder together.  A presentation layer polls
the bridge for the latest snapshot without blocking.

Public API
----------
* ``start()`` / ``stop()`` / ``set_paused(bool)`` / ``reset()``
* ``set_autonomous(bool)`` / ``set_host_speed(kmh)``
* ``request_action(action)``  → request ID
* ``accepts_manual_actions()`` → ``bool`` (running and not autonomous)
* ``step_once()``             → ``bool`` (host action consumed)
* ``get_vehicles()``          → ``List[dict]``
* ``get_host()``              → ``dict``
* ``get_telemetry()``         → ``List[dict]``
* ``status()``                → ``dict``
"""

from __future__ import annotations

import threading
import time
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from control.mailbox import HostActionMailbox
from sim.physics import mps_to_kmh
from sim.telemetry import TelemetryRecorder
from sim.traffic_policy import DrivingPolicy
from sim.vehicle import HostAction, ManeuverParameters, VehicleState
from sim.world import World

log = logging.getLogger("sim_bridge")

# ── constants shared with the presentation layer ──────────────────────────────
_HOST_COLOR: Tuple[int, int, int] = (220, 38, 38)
_AI_COLOR: Tuple[int, int, int] = (75, 85, 99)


class SimBridge:
    """Simulation driver running in a background thread.

    The thread calls :meth:`_tick` every ``tick_ms`` milliseconds,
    offering the pending host action from the mailbox to
    :class:`~sim.world.World`, acknowledging it, recording host
    telemetry, and caching a render snapshot for readers.

    Parameters
    ----------
    tick_ms : float
        Tick period in milliseconds; also the simulated ``dt``.
    host_speed_kmh : float
        Initial host target speed.
    autonomous : bool
        Initial autonomy flag.
    random_seed : int or None
        Seed for the random background traffic.
    traffic_count : int or None
        Random background vehicles; policy default when *None*.
    telemetry_window : int
        Samples kept by the telemetry recorder.
    policy : DrivingPolicy or None
        Tunable constants.
    mailbox : HostActionMailbox or None
        Shared mailbox; a private one is created when *None*.
    """

    def __init__(
        self,
        tick_ms: float = 16.0,
        host_speed_kmh: float = 100.0,
        autonomous: bool = True,
        random_seed: Optional[int] = None,
        traffic_count: Optional[int] = None,
        telemetry_window: int = 900,
        policy: Optional[DrivingPolicy] = None,
        mailbox: Optional[HostActionMailbox] = None,
    ) -> None:
        self._dt = tick_ms / 1000.0
        self._default_params = ManeuverParameters(host_speed_kmh=host_speed_kmh)

        self._world = World(
            params=self._default_params,
            autonomous=autonomous,
            seed=random_seed,
            traffic_count=traffic_count,
            policy=policy,
        )
        self._mailbox = mailbox or HostActionMailbox()
        self._telemetry = TelemetryRecorder(window=telemetry_window)

        self._world_lock = threading.RLock()
        self._lock = threading.Lock()

        # Cached state, written by the sim thread and read by callers
        self._vehicles: List[Dict[str, Any]] = []
        self._host: Dict[str, Any] = {}

        self._thread: Optional[threading.Thread] = None
        self._running = False
        self._paused = False

        self._refresh_cache()

    @property
    def mailbox(self) -> HostActionMailbox:
        return self._mailbox

    @property
    def world(self) -> World:
        return self._world

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def start(self) -> None:
        """Build a fresh fleet and spawn the background thread."""
        if self._running:
            return
        self._restart_scenario()
        self._running = True
        self._paused = False
        self._thread = threading.Thread(
            target=self._loop, daemon=True, name="SimBridge"
        )
        self._thread.start()
        log.info("SimBridge started at %.1f Hz", 1.0 / self._dt)

    def stop(self) -> None:
        """Signal the thread to stop and wait for it to join."""
        if not self._running:
            return
        self._running = False
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join(timeout=2.0)
        self._thread = None
        log.info("SimBridge stopped")

    def reset(self) -> None:
        """Stop, restore default parameters and rebuild the fleet.

        The autonomy flag is left as the caller last set it.
        """
        self.stop()
        with self._world_lock:
            self._world.reset(self._default_params)
        self._mailbox.clear()
        self._telemetry.clear()
        self._refresh_cache()
        log.info("SimBridge reset")

    def set_paused(self, paused: bool) -> None:
        """Pause / unpause the simulation tick."""
        self._paused = paused
        log.info("SimBridge %s", "paused" if paused else "resumed")

    def is_running(self) -> bool:
        return self._running

    # ── Control API ───────────────────────────────────────────────────────────

    def set_autonomous(self, enabled: bool) -> None:
        with self._world_lock:
            self._world.autonomous = bool(enabled)
        log.info("autonomous mode %s", "on" if enabled else "off")

    def set_host_speed(self, host_speed_kmh: float) -> None:
        with self._world_lock:
            self._world.params = ManeuverParameters(host_speed_kmh=float(host_speed_kmh))
        log.info("host target speed %.0f km/h", host_speed_kmh)

    def request_action(self, action: Union[str, HostAction], sender: str = "api") -> Optional[str]:
        """Post a one-shot host command; see :meth:`HostActionMailbox.post`."""
        return self._mailbox.post(action, sender=sender)

    def accepts_manual_actions(self) -> bool:
        """True while the loop is running and the host is under manual control."""
        with self._world_lock:
            return self._running and not self._world.autonomous

    def step_once(self) -> bool:
        """Advance one tick synchronously; returns the consumed flag."""
        return self._tick(self._dt)

    # ── Readers ───────────────────────────────────────────────────────────────

    def get_vehicles(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._vehicles)

    def get_host(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._host)

    def get_telemetry(self) -> List[Dict[str, float]]:
        with self._world_lock:
            return [sample._asdict() for sample in self._telemetry.samples()]

    def status(self) -> Dict[str, Any]:
        with self._world_lock:
            return {
                "running": self._running,
                "paused": self._paused,
                "autonomous": self._world.autonomous,
                "host_speed_kmh": self._world.params.host_speed_kmh,
                "time_s": self._world.time_s,
                "tick": self._world.tick_count,
                "pending_action": self._mailbox.pending().value,
                "lane_change_denials": self._world.lane_change_denials,
                "mailbox": self._mailbox.metrics.report(),
            }

    # ── Background loop ───────────────────────────────────────────────────────

    def _loop(self) -> None:
        while self._running:
            t0 = time.perf_counter()
            if not self._paused:
                try:
                    self._tick(self._dt)
                except Exception:
                    log.exception("SimBridge tick error")
            time.sleep(max(0.0, self._dt - (time.perf_counter() - t0)))

    # ── tick ──────────────────────────────────────────────────────────────────

    def _tick(self, dt: float) -> bool:
        action, request_id = self._mailbox.offer()
        with self._world_lock:
            consumed = self._world.update_physics(dt=dt, host_action=action)
            host = self._world.host()
            if host is not None:
                self._telemetry.record(host, dt)
        self._mailbox.acknowledge(request_id, consumed)
        self._refresh_cache()
        return consumed

    def _restart_scenario(self) -> None:
        with self._world_lock:
            self._world.reset()
        self._mailbox.clear()
        self._telemetry.clear()
        self._refresh_cache()

    # ── helpers: build render dicts ───────────────────────────────────────────

    @staticmethod
    def _make_vehicle_dict(vehicle: VehicleState) -> Dict[str, Any]:
        return {
            "id": vehicle.id,
            "role": vehicle.role.value,
            "x": vehicle.x,
            "y": vehicle.y,
            "lane": vehicle.lane,
            "speed": mps_to_kmh(vehicle.v),
            "ax": vehicle.ax,
            "ay": vehicle.ay,
            "action": vehicle.action.value,
            "blinker": vehicle.blinker.value,
            "action_denied": vehicle.action_denied_timer > 0.0,
            "emergency_braking": vehicle.is_emergency_braking,
            "color": _HOST_COLOR if vehicle.is_host else _AI_COLOR,
        }

    def _refresh_cache(self) -> None:
        with self._world_lock:
            vehicles = self._world.all_vehicles()
        rendered = [self._make_vehicle_dict(v) for v in vehicles]
        host = next((d for d in rendered if d["role"] == "host"), {})

        # Atomic swap; readers use the public getters.
        with self._lock:
            self._vehicles = rendered
            self._host = host
