"""
Pose-driven rep counter (client side).

    from repcount_client import RepCounter, SessionMetrics, frame_from_landmarks

    counter = RepCounter("squat")
    session = SessionMetrics()

    # In the frame loop:
    reps, phase, metrics = counter.update(frame_from_landmarks(landmarks))
    completed = session.update(reps, phase, metrics)
"""

from .rep_logic import (
    EXERCISE_CONFIG,
    CounterState,
    ExerciseConfig,
    FrameMetrics,
    Phase,
    RepCounter,
    get_exercise_config,
)
from .metrics import RepRecord, SessionMetrics
from .pose_utils import JointPosition, LANDMARK_INDEX, angle_between, frame_from_landmarks

__all__ = [
    # Counter
    'RepCounter',
    'CounterState',
    'FrameMetrics',
    'Phase',
    'ExerciseConfig',
    'EXERCISE_CONFIG',
    'get_exercise_config',

    # Session metrics
    'SessionMetrics',
    'RepRecord',

    # Pose helpers
    'JointPosition',
    'LANDMARK_INDEX',
    'angle_between',
    'frame_from_landmarks',
]

__version__ = '1.0.0'
