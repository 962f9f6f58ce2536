# repcount_client/rep_logic.py

import logging
import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union

from repcount_client.pose_utils import FrameSample, angle_between, coerce_joint

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    UP = "up"
    DOWN = "down"
    NO_POSE = "no_pose"


@dataclass(frozen=True)
class ExerciseConfig:
    """
    One exercise = one parameterization of the same hysteresis counter.

      - sides      : side name -> (outer, joint, outer) landmark triple;
                     the angle is measured at the middle landmark
      - up_threshold   : angle above this means "extended" (phase UP)
      - down_threshold : angle below this, coming from UP, counts a rep
      - visibility_threshold : a landmark is usable only strictly above it
    """
    name: str
    sides: Mapping[str, Tuple[str, str, str]]
    up_threshold: float = 150.0
    down_threshold: float = 120.0
    visibility_threshold: float = 0.5

    def __post_init__(self):
        if not self.sides:
            raise ValueError(f"{self.name}: at least one landmark triple is required")
        for side, triple in self.sides.items():
            if len(triple) != 3:
                raise ValueError(f"{self.name}: side '{side}' needs exactly 3 landmarks")
        if self.down_threshold >= self.up_threshold:
            raise ValueError(
                f"{self.name}: down_threshold ({self.down_threshold}) must be "
                f"below up_threshold ({self.up_threshold})"
            )
        if not 0.0 <= self.visibility_threshold <= 1.0:
            raise ValueError(f"{self.name}: visibility_threshold must be in [0, 1]")


# ----------------- Per-exercise configuration -----------------
EXERCISE_CONFIG: Dict[str, ExerciseConfig] = {
    "squat": ExerciseConfig(
        name="squat",
        sides={
            "left": ("left_hip", "left_knee", "left_ankle"),
            "right": ("right_hip", "right_knee", "right_ankle"),
        },
    ),
    "pushup": ExerciseConfig(
        name="pushup",
        sides={
            "left": ("left_shoulder", "left_elbow", "left_wrist"),
            "right": ("right_shoulder", "right_elbow", "right_wrist"),
        },
    ),
}

DEFAULT_EXERCISE = "squat"


def get_exercise_config(exercise_name: Optional[str]) -> ExerciseConfig:
    if exercise_name and exercise_name in EXERCISE_CONFIG:
        return EXERCISE_CONFIG[exercise_name]
    logger.warning("Unknown exercise %r, falling back to %s", exercise_name, DEFAULT_EXERCISE)
    return EXERCISE_CONFIG[DEFAULT_EXERCISE]


@dataclass
class FrameMetrics:
    angle: int = 0            # rounded joint angle, 0 on a no-pose tick
    total_time: float = 0.0   # seconds since the first valid frame
    exact_angle: Optional[float] = None   # unrounded angle, None on a no-pose tick


@dataclass
class CounterState:
    rep_count: int = 0
    phase: Phase = Phase.UP
    elapsed_seconds: float = 0.0
    start_time: Optional[float] = field(default=None, repr=False)


class RepCounter:
    """
    Angle-hysteresis rep counter for a single session.

    Feed one FrameSample per processed video frame through update(). A rep
    is counted on the UP -> DOWN edge only; angles between the two
    thresholds leave the phase alone. Frames without a usable side are
    reported as NO_POSE and change nothing.

    Usage:
        counter = RepCounter("squat")
        reps, phase, metrics = counter.update(frame)   # each frame
        counter.reset()                                # on user action
    """

    def __init__(
        self,
        exercise: Union[str, ExerciseConfig, None] = DEFAULT_EXERCISE,
        clock: Callable[[], float] = time.perf_counter,
    ):
        if isinstance(exercise, ExerciseConfig):
            self.config = exercise
        else:
            self.config = get_exercise_config(exercise)
        self._clock = clock
        self._state = CounterState()

    @property
    def state(self) -> CounterState:
        s = self._state
        return CounterState(
            rep_count=s.rep_count,
            phase=s.phase,
            elapsed_seconds=s.elapsed_seconds,
            start_time=s.start_time,
        )

    @property
    def rep_count(self) -> int:
        return self._state.rep_count

    @property
    def phase(self) -> Phase:
        return self._state.phase

    def _side_angles(self, frame: FrameSample) -> List[float]:
        threshold = self.config.visibility_threshold
        angles = []
        for triple in self.config.sides.values():
            joints = [coerce_joint(frame.get(name)) for name in triple]
            if not all(j is not None and j.visibility > threshold for j in joints):
                continue
            a, b, c = joints
            angle = angle_between((a.x, a.y), (b.x, b.y), (c.x, c.y))
            if math.isnan(angle):
                continue
            angles.append(angle)
        return angles

    def _tick_clock(self, start: bool) -> float:
        s = self._state
        if s.start_time is None:
            if not start:
                return s.elapsed_seconds
            s.start_time = self._clock()
        s.elapsed_seconds = max(s.elapsed_seconds, self._clock() - s.start_time)
        return s.elapsed_seconds

    def update(self, frame: Optional[FrameSample]) -> Tuple[int, Phase, FrameMetrics]:
        """
        Process one frame.

        Returns (rep_count, phase, metrics). Never raises on bad input:
        None, empty or malformed frames come back as a NO_POSE tick.
        """
        s = self._state
        angles = self._side_angles(frame) if isinstance(frame, Mapping) else []

        if not angles:
            elapsed = self._tick_clock(start=False)
            return s.rep_count, Phase.NO_POSE, FrameMetrics(angle=0, total_time=round(elapsed, 2))

        elapsed = self._tick_clock(start=True)
        angle = sum(angles) / len(angles)

        # Hysteresis: must be back above up_threshold before the next rep can count
        if angle > self.config.up_threshold:
            s.phase = Phase.UP
        elif angle < self.config.down_threshold and s.phase == Phase.UP:
            s.phase = Phase.DOWN
            s.rep_count += 1
            logger.debug("%s rep %d at %.1f deg", self.config.name, s.rep_count, angle)

        return s.rep_count, s.phase, FrameMetrics(
            angle=int(round(angle)), total_time=round(elapsed, 2), exact_angle=angle,
        )

    def reset(self) -> None:
        self._state = CounterState()
