#!/usr/bin/env python3
"""
sim/vehicle.py
==============
Vehicle state and the manoeuvre variants it can be in.

A :class:`VehicleState` is one vehicle of the fleet.  Its manoeuvre is a
tagged variant (:class:`Cruising`, :class:`Braking`, :class:`ChangingLane`,
:class:`ReturningLane`) carrying only the fields that state needs, so a
cruising car can never hold a stale ``original_lane`` or a half-finished
lateral progress.  The flat attributes the presentation layer expects
(``action``, ``lane_change_progress``, ``is_cornering``, ``original_lane``)
are derived properties.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Union


class VehicleRole(str, Enum):
    """Who controls the vehicle."""

    HOST = "host"
    AI = "ai"


class HostAction(str, Enum):
    """Manoeuvre states plus the one-shot commands that start them.

    The values match the names used on the wire by the control surface.
    """

    CRUISING = "cruising"
    REQUESTING_LANE_CHANGE = "requestingLaneChange"
    REQUESTING_CORNERING = "requestingCornering"
    BRAKING = "braking"
    CHANGING_LANE = "changingLane"
    RETURNING_LANE = "returningLane"

    @classmethod
    def parse(cls, value: Union[str, "HostAction"]) -> "HostAction":
        """Accept an enum member, its value (``"braking"``) or its name
        (``"BRAKING"``, case-insensitive).

        Raises
        ------
        ValueError
            If *value* names no action.
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for member in cls:
            if text == member.value or text.upper() == member.name:
                return member
        raise ValueError(f"unknown host action: {value!r}")

    @classmethod
    def parse_command(cls, value: Union[str, "HostAction"]) -> "HostAction":
        """Like :meth:`parse`, but also rejects in-progress states
        (``changingLane`` / ``returningLane``) with ``ValueError``."""
        action = cls.parse(value)
        if not action.is_command:
            raise ValueError(f"{action.value} is not a requestable host action")
        return action

    @property
    def is_command(self) -> bool:
        """True for the actions a caller may request (not in-progress states)."""
        return self in _COMMANDS


_COMMANDS = frozenset({
    HostAction.CRUISING,
    HostAction.REQUESTING_LANE_CHANGE,
    HostAction.REQUESTING_CORNERING,
    HostAction.BRAKING,
})


class Blinker(str, Enum):
    NONE = "none"
    LEFT = "left"
    RIGHT = "right"


# ── Manoeuvre variants ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Cruising:
    """Default state: car-following in the current lane."""

    action: ClassVar[HostAction] = HostAction.CRUISING


@dataclass(frozen=True)
class Braking:
    """Fixed emergency deceleration until the action timer elapses."""

    action: ClassVar[HostAction] = HostAction.BRAKING


@dataclass(frozen=True)
class ChangingLane:
    """Move to *target_lane*.

    Attributes
    ----------
    target_lane : int
        Lane being moved into.
    progress : float
        Normalised lateral progress in ``[0, 1]``.
    cornering : bool
        True when the car returns to *original_lane* afterwards.
    original_lane : int or None
        Lane the cornering manoeuvre started from.
    """

    target_lane: int
    progress: float = 0.0
    cornering: bool = False
    original_lane: Optional[int] = None

    action: ClassVar[HostAction] = HostAction.CHANGING_LANE


@dataclass(frozen=True)
class ReturningLane:
    """Second leg of a cornering manoeuvre, back to *original_lane*."""

    original_lane: int
    progress: float = 0.0

    action: ClassVar[HostAction] = HostAction.RETURNING_LANE

    @property
    def target_lane(self) -> int:
        return self.original_lane


Maneuver = Union[Cruising, Braking, ChangingLane, ReturningLane]


@dataclass(frozen=True)
class ManeuverParameters:
    """Externally supplied per-tick parameters.

    Attributes
    ----------
    host_speed_kmh : float
        Host target speed in km/h (must be positive).
    """

    host_speed_kmh: float = 100.0


@dataclass
class VehicleState:
    """One vehicle of the fleet.

    Attributes
    ----------
    id : int
        Stable identity, unique within a fleet.
    role : VehicleRole
        ``HOST`` for the single controlled vehicle, ``AI`` otherwise.
    x, y : float
        Longitudinal / lateral position (m).
    lane : int
        Authoritative lane membership, 0 or 1.
    target_speed : float
        Desired cruising speed (m/s).
    v, vy : float
        Longitudinal / lateral velocity (m/s).
    ax, ay : float
        Accelerations produced on the last tick (m/s²).
    maneuver : Maneuver
        Current manoeuvre variant.
    action_timer : float
        Countdown gating sub-phases of the manoeuvre (s, never negative).
    action_denied_timer : float
        Countdown signalling a refused lane change (s, never negative).
    is_emergency_braking, blinker
        Presentation flags, recomputed every tick.
    """

    id: int
    role: VehicleRole
    x: float
    y: float
    lane: int
    target_speed: float
    v: float = 0.0
    vy: float = 0.0
    ax: float = 0.0
    ay: float = 0.0
    maneuver: Maneuver = field(default_factory=Cruising)
    action_timer: float = 0.0
    action_denied_timer: float = 0.0
    is_emergency_braking: bool = False
    blinker: Blinker = Blinker.NONE

    # ── derived views ─────────────────────────────────────────────────────
    @property
    def is_host(self) -> bool:
        return self.role is VehicleRole.HOST

    @property
    def action(self) -> HostAction:
        return self.maneuver.action

    @property
    def lane_change_progress(self) -> float:
        return getattr(self.maneuver, "progress", 0.0)

    @property
    def is_cornering(self) -> bool:
        return isinstance(self.maneuver, ChangingLane) and self.maneuver.cornering

    @property
    def original_lane(self) -> Optional[int]:
        return getattr(self.maneuver, "original_lane", None)

    @property
    def target_lane(self) -> int:
        """Lane the car is heading for; its own lane unless changing lanes."""
        return getattr(self.maneuver, "target_lane", self.lane)

    # ── copies / serialisation ────────────────────────────────────────────
    def clone(self) -> "VehicleState":
        """Shallow copy; manoeuvre variants are immutable so this is safe."""
        return replace(self)

    def as_dict(self) -> Dict[str, Any]:
        """Serialisable mapping of every field plus the derived views."""
        return {
            "id": self.id,
            "role": self.role.value,
            "x": self.x,
            "y": self.y,
            "v": self.v,
            "vy": self.vy,
            "ax": self.ax,
            "ay": self.ay,
            "lane": self.lane,
            "target_speed": self.target_speed,
            "action": self.action.value,
            "action_timer": self.action_timer,
            "action_denied_timer": self.action_denied_timer,
            "lane_change_progress": self.lane_change_progress,
            "is_cornering": self.is_cornering,
            "original_lane": self.original_lane,
            "is_emergency_braking": self.is_emergency_braking,
            "blinker": self.blinker.value,
        }
