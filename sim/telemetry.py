#!/usr/bin/env python3
"""
sim/telemetry.py
================
Rolling record of the host's accelerations for charting.

One ``(time, ax, ay)`` sample per tick, bounded to the most recent
*window* samples (900 ≈ 15 s at 60 Hz by default).
"""

from __future__ import annotations

from collections import deque
from typing import Deque, List, NamedTuple, Tuple

import numpy as np
import pandas as pd

from sim.vehicle import VehicleState


class AccelSample(NamedTuple):
    time: float
    ax: float
    ay: float


class TelemetryRecorder:
    """Bounded buffer of host acceleration samples.

    Parameters
    ----------
    window : int
        Maximum number of samples kept; older ones are discarded.
    """

    def __init__(self, window: int = 900) -> None:
        self.window = max(1, int(window))
        self._samples: Deque[AccelSample] = deque(maxlen=self.window)
        self._time_s = 0.0

    def __len__(self) -> int:
        return len(self._samples)

    @property
    def time_s(self) -> float:
        """Simulated time of the latest sample."""
        return self._time_s

    def record(self, host: VehicleState, dt: float) -> AccelSample:
        """Advance the clock by *dt* and append the host's current accelerations."""
        self._time_s += dt
        sample = AccelSample(self._time_s, host.ax, host.ay)
        self._samples.append(sample)
        return sample

    def clear(self) -> None:
        self._samples.clear()
        self._time_s = 0.0

    def samples(self) -> List[AccelSample]:
        return list(self._samples)

    def as_arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return ``(time, ax, ay)`` as three float arrays of equal length."""
        if not self._samples:
            empty = np.empty(0, dtype=float)
            return empty, empty.copy(), empty.copy()
        data = np.asarray(self._samples, dtype=float)
        return data[:, 0], data[:, 1], data[:, 2]

    def to_frame(self) -> pd.DataFrame:
        """Samples as a DataFrame with columns ``time``, ``ax``, ``ay``."""
        return pd.DataFrame(self.samples(), columns=list(AccelSample._fields))
