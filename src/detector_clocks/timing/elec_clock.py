"""
Electronics Clock - one periodic hardware clock domain

================================================================================
MODEL
================================================================================
A clock ticks at a fixed frequency (MHz = ticks/µs) and counts its ticks in
frames of fixed duration (the frame period, shared by all clocks of one
detector). It also carries a current reference instant ("time"), which the
clock provider resets once per event.

    tick_period     = 1 / frequency
    ticks_per_frame = round(frame_period / tick_period)

    time_at(sample, frame)  = frame * frame_period + sample * tick_period
    ticks_at(sample, frame) = frame * ticks_per_frame + sample

No bounds checking is applied to sample or frame: negative or large values
extrapolate linearly. All accessors accept scalars or numpy arrays.
"""

import math
from typing import Optional, Union
import numpy as np

Number = Union[int, float, np.ndarray]


def _truncate(value: Number) -> Number:
    """Truncate toward zero, preserving array shape."""
    if np.ndim(value):
        return np.trunc(value).astype(np.int64)
    return int(value)


class ElecClock:
    """
    Periodic electronics clock with immutable frequency and a mutable origin.

    Frequency and frame period are fixed at construction; only the current
    reference time changes afterwards.
    """

    def __init__(self, time: float = 0.0, frame_period: float = 1600.0, frequency: float = 2.0):
        """
        Initialize clock.

        Args:
            time: Current reference instant [µs]
            frame_period: Duration of one frame [µs]
            frequency: Tick frequency [MHz]
        """
        if not (math.isfinite(frequency) and frequency > 0):
            raise ValueError(f"Clock frequency must be positive and finite, got {frequency}")
        if not (math.isfinite(frame_period) and frame_period > 0):
            raise ValueError(f"Frame period must be positive and finite, got {frame_period}")

        self._time = float(time)
        self._frame_period = float(frame_period)
        self._frequency = float(frequency)
        self._ticks_per_frame = int(round(self._frame_period * self._frequency))

    @property
    def time(self) -> float:
        """Current reference instant [µs]."""
        return self._time

    @property
    def frequency(self) -> float:
        """Tick frequency [MHz]."""
        return self._frequency

    @property
    def frame_period(self) -> float:
        """Frame duration [µs]."""
        return self._frame_period

    @property
    def tick_period(self) -> float:
        """Duration of one tick [µs]."""
        return 1.0 / self._frequency

    @property
    def ticks_per_frame(self) -> int:
        """Number of ticks in one frame."""
        return self._ticks_per_frame

    def time_at(self, sample: Number, frame: Number = 0) -> Number:
        """Absolute clock time [µs] of a sample within a frame."""
        return frame * self._frame_period + sample * self.tick_period

    def time_of_ticks(self, ticks: Number) -> Number:
        """Time [µs] elapsed over a number of ticks."""
        return ticks * self.tick_period

    def ticks_at(self, sample: Number, frame: Number = 0) -> Number:
        """Absolute tick count of a sample within a frame."""
        return frame * self._ticks_per_frame + sample

    def ticks(self, time: Optional[Number] = None) -> Number:
        """Absolute tick count (truncated) at a time; defaults to current time."""
        if time is None:
            time = self._time
        return _truncate(np.multiply(time, self._frequency))

    def frame(self, time: Optional[Number] = None) -> Number:
        """Frame number containing a time; defaults to current time."""
        if time is None:
            time = self._time
        return _truncate(np.divide(time, self._frame_period))

    def sample(self, time: Optional[Number] = None) -> Number:
        """Sample index within its frame at a time; defaults to current time."""
        if time is None:
            time = self._time
        within_frame = np.subtract(time, np.multiply(self.frame(time), self._frame_period))
        return _truncate(np.multiply(within_frame, self._frequency))

    def set_time(self, time: float) -> None:
        """Set the current reference instant [µs]."""
        self._time = float(time)

    def set_time_at(self, sample: int, frame: int) -> None:
        """Set the current reference instant from a sample/frame pair."""
        self._time = float(self.time_at(sample, frame))

    def with_time(self, time: float) -> "ElecClock":
        """Copy of this clock with a different reference instant."""
        return ElecClock(time, self._frame_period, self._frequency)

    def copy(self) -> "ElecClock":
        return self.with_time(self._time)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ElecClock):
            return NotImplemented
        return (
            self._time == other._time
            and self._frame_period == other._frame_period
            and self._frequency == other._frequency
        )

    def __repr__(self) -> str:
        return (
            f"ElecClock(time={self._time}, frame_period={self._frame_period}, "
            f"frequency={self._frequency})"
        )
