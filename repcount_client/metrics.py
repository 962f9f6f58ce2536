# repcount_client/metrics.py

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

import numpy as np

from repcount_client.rep_logic import FrameMetrics, Phase

# Depth scoring window (degrees): 150 and above scores 0, 120 and below scores 100
DEPTH_SCORE_TOP = 150.0
DEPTH_SCORE_SPAN = 30.0


@dataclass
class RepRecord:
    rep_number: int
    duration_s: float     # since the previous rep was counted (or session start)
    depth_angle: float    # lowest unrounded angle reached during the rep
    timestamp_s: float    # session time at which the rep was counted


@dataclass
class SessionMetrics:
    """
    Turns the per-frame counter output into display numbers:
    pace (reps/min), elapsed time, per-rep durations and a 0-100 quality
    score mixing tempo consistency and depth.

    A rep is counted by the counter on the way down; its RepRecord is
    emitted once the body is back UP, so depth_angle covers the whole
    bottom of the movement.
    """
    reps: int = 0
    state: Phase = Phase.NO_POSE
    elapsed: float = 0.0
    angle: int = 0
    pace: float = 0.0
    quality_score: int = 0
    last_rep_duration: float = 0.0
    rep_records: List[RepRecord] = field(default_factory=list)

    _last_rep_time: float = field(default=0.0, repr=False)
    _lowest_angle: Optional[float] = field(default=None, repr=False)
    _pending: Optional[RepRecord] = field(default=None, repr=False)

    def update(self, rep_count: int, phase: Phase, metrics: FrameMetrics) -> List[RepRecord]:
        """Feed one counter tick. Returns the reps completed on this tick."""
        completed: List[RepRecord] = []
        now = metrics.total_time
        # depth is kept unrounded so a rep counted at 119.6 deg is not reported as 120
        angle = metrics.exact_angle if metrics.exact_angle is not None else float(metrics.angle)

        if phase != Phase.NO_POSE:
            if self._lowest_angle is None or angle < self._lowest_angle:
                self._lowest_angle = angle

        if rep_count > self.reps:
            if self._pending is not None:
                completed.append(self._finish_pending())
            duration = round(max(0.0, now - self._last_rep_time), 2)
            self._pending = RepRecord(
                rep_number=rep_count,
                duration_s=duration,
                depth_angle=angle,
                timestamp_s=now,
            )
            self._last_rep_time = now
            self.last_rep_duration = duration
        elif phase == Phase.UP and self._pending is not None:
            completed.append(self._finish_pending())

        self.reps = rep_count
        self.state = phase
        self.elapsed = round(now, 1)
        self.angle = metrics.angle
        self.pace = round(rep_count / now * 60, 1) if now > 0 else 0.0
        self.quality_score = self._quality()
        return completed

    def flush(self) -> List[RepRecord]:
        """Close the rep still in progress (end of video, user stop)."""
        if self._pending is None:
            return []
        record = self._finish_pending()
        self.quality_score = self._quality()
        return [record]

    def _finish_pending(self) -> RepRecord:
        record = self._pending
        if self._lowest_angle is not None:
            record.depth_angle = min(record.depth_angle, self._lowest_angle)
        self.rep_records.append(record)
        self._pending = None
        self._lowest_angle = None
        return record

    def _quality(self) -> int:
        if len(self.rep_records) < 2:
            return 0
        durations_ms = np.array([r.duration_s * 1000.0 for r in self.rep_records])
        consistency = max(0.0, 100.0 - float(np.std(durations_ms)) / 10.0)

        mean_depth = float(np.mean([r.depth_angle for r in self.rep_records]))
        depth_quality = (DEPTH_SCORE_TOP - mean_depth) / DEPTH_SCORE_SPAN * 100.0
        depth_quality = min(100.0, max(0.0, depth_quality))

        return int(round(consistency * 0.6 + depth_quality * 0.4))

    def reset(self) -> None:
        self.reps = 0
        self.state = Phase.NO_POSE
        self.elapsed = 0.0
        self.angle = 0
        self.pace = 0.0
        self.quality_score = 0
        self.last_rep_duration = 0.0
        self.rep_records = []
        self._last_rep_time = 0.0
        self._lowest_angle = None
        self._pending = None

    def snapshot(self) -> Dict[str, Any]:
        return {
            "reps": self.reps,
            "state": self.state.value,
            "elapsed": self.elapsed,
            "angle": self.angle,
            "pace": self.pace,
            "quality_score": self.quality_score,
            "last_rep_duration": self.last_rep_duration,
        }

    def summary_for(self, record: RepRecord, exercise: str) -> Dict[str, Any]:
        """Payload for the coaching backend (matches backend RepSummary)."""
        rep = asdict(record)
        rep.pop("timestamp_s")
        rep.update({
            "exercise": exercise,
            "pace": self.pace,
            "quality_score": self.quality_score,
        })
        return rep
