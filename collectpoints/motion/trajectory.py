from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence

import numpy as np

from .pose import Pose


class Trajectory:
    """Scripted motion of a frame over time (seconds, millimetres)."""

    @property
    def start_time_s(self) -> float:
        raise NotImplementedError

    @property
    def duration_s(self) -> float:
        raise NotImplementedError

    def sample(self, t: float) -> Pose:
        raise NotImplementedError

    def timeline(self) -> Iterable[tuple[float, Pose]]:
        raise NotImplementedError

    def sample_times(self, rate_hz: float) -> np.ndarray:
        """Evenly spaced times covering the trajectory, end time included."""
        if rate_hz <= 0.0:
            raise ValueError("rate_hz must be positive.")
        start = self.start_time_s
        n = int(np.floor(self.duration_s * rate_hz + 1e-9)) + 1
        times = start + np.arange(n, dtype=np.float64) / rate_hz
        end = start + self.duration_s
        if times[-1] < end - 1e-9:
            times = np.append(times, end)
        return times


@dataclass
class StaticTrajectory(Trajectory):
    """A single fixed pose held for ``hold_s`` seconds."""

    pose: Pose
    start_s: float = 0.0
    hold_s: float = 0.0

    @property
    def start_time_s(self) -> float:
        return self.start_s

    @property
    def duration_s(self) -> float:
        return self.hold_s

    def sample(self, t: float) -> Pose:
        return self.pose

    def timeline(self) -> Iterable[tuple[float, Pose]]:
        yield (self.start_s, self.pose)


class PolylineTrajectory(Trajectory):
    """Piecewise-linear path through waypoints at constant speed, fixed orientation."""

    def __init__(
        self,
        waypoints: Sequence[Sequence[float]],
        speed_mm_s: float,
        rpy_deg: tuple[float, float, float] = (0.0, 0.0, 0.0),
        start_time_s: float = 0.0,
    ) -> None:
        if len(waypoints) < 2:
            raise ValueError("PolylineTrajectory requires at least two waypoints.")
        if speed_mm_s <= 0.0:
            raise ValueError("speed_mm_s must be positive.")

        self._points = np.asarray(waypoints, dtype=np.float64)
        if self._points.ndim != 2 or self._points.shape[1] != 3:
            raise ValueError("Waypoints must be (x, y, z) triples.")
        self._speed = float(speed_mm_s)
        self._start_time = float(start_time_s)
        self._R = Pose.from_xyz_rpy((0.0, 0.0, 0.0), rpy_deg).R

        seg_lengths = np.linalg.norm(np.diff(self._points, axis=0), axis=1)
        if np.any(seg_lengths == 0):
            raise ValueError("Consecutive waypoints must be distinct.")
        times = np.concatenate([[0.0], np.cumsum(seg_lengths / self._speed)])
        self._times = self._start_time + times

    @property
    def start_time_s(self) -> float:
        return self._start_time

    @property
    def duration_s(self) -> float:
        return float(self._times[-1] - self._times[0])

    def _pose_at(self, pos: np.ndarray) -> Pose:
        return Pose(t=np.array(pos, dtype=np.float64), R=self._R.copy())

    def sample(self, t: float) -> Pose:
        if t <= self._times[0]:
            return self._pose_at(self._points[0])
        if t >= self._times[-1]:
            return self._pose_at(self._points[-1])

        idx = int(np.searchsorted(self._times, t, side="right")) - 1
        t0, t1 = self._times[idx], self._times[idx + 1]
        alpha = (t - t0) / max(t1 - t0, 1e-9)
        pos = (1.0 - alpha) * self._points[idx] + alpha * self._points[idx + 1]
        return self._pose_at(pos)

    def timeline(self) -> Iterable[tuple[float, Pose]]:
        for t, p in zip(self._times, self._points):
            yield (float(t), self._pose_at(p))
