# repcount_client/pose_utils.py

import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

import numpy as np


# BlazePose landmark indices (33-point topology)
LANDMARK_INDEX: Dict[str, int] = {
    "nose": 0,
    "left_eye_inner": 1,
    "left_eye": 2,
    "left_eye_outer": 3,
    "right_eye_inner": 4,
    "right_eye": 5,
    "right_eye_outer": 6,
    "left_ear": 7,
    "right_ear": 8,
    "mouth_left": 9,
    "mouth_right": 10,
    "left_shoulder": 11,
    "right_shoulder": 12,
    "left_elbow": 13,
    "right_elbow": 14,
    "left_wrist": 15,
    "right_wrist": 16,
    "left_pinky": 17,
    "right_pinky": 18,
    "left_index": 19,
    "right_index": 20,
    "left_thumb": 21,
    "right_thumb": 22,
    "left_hip": 23,
    "right_hip": 24,
    "left_knee": 25,
    "right_knee": 26,
    "left_ankle": 27,
    "right_ankle": 28,
    "left_heel": 29,
    "right_heel": 30,
    "left_foot_index": 31,
    "right_foot_index": 32,
}

# Segments drawn by the camera loop
POSE_CONNECTIONS: Tuple[Tuple[str, str], ...] = (
    ("left_shoulder", "right_shoulder"),
    ("left_shoulder", "left_elbow"),
    ("left_elbow", "left_wrist"),
    ("right_shoulder", "right_elbow"),
    ("right_elbow", "right_wrist"),
    ("left_shoulder", "left_hip"),
    ("right_shoulder", "right_hip"),
    ("left_hip", "right_hip"),
    ("left_hip", "left_knee"),
    ("left_knee", "left_ankle"),
    ("right_hip", "right_knee"),
    ("right_knee", "right_ankle"),
)


@dataclass(frozen=True)
class JointPosition:
    x: float
    y: float
    visibility: float = 0.0
    z: Optional[float] = None


FrameSample = Mapping[str, Any]


def _finite(*values: float) -> bool:
    try:
        return all(math.isfinite(v) for v in values)
    except TypeError:
        return False


def coerce_joint(value: Any) -> Optional[JointPosition]:
    """
    Best-effort conversion of one landmark value into a JointPosition.

    Accepts a JointPosition, a mapping with x/y/visibility[/z] keys, or any
    object exposing those attributes (MediaPipe landmarks). Returns None for
    anything that cannot be read as numbers.
    """
    if value is None:
        return None
    if isinstance(value, JointPosition):
        return value if _finite(value.x, value.y, value.visibility) else None

    if isinstance(value, Mapping):
        get = value.get
    else:
        def get(key, default=None):
            return getattr(value, key, default)

    try:
        x = float(get("x"))
        y = float(get("y"))
        visibility = float(get("visibility", 0.0) or 0.0)
        z = get("z")
        z = float(z) if z is not None else None
    except (TypeError, ValueError, OverflowError):
        return None
    if not _finite(x, y, visibility):
        return None
    if z is not None and not math.isfinite(z):
        z = None
    return JointPosition(x=x, y=y, visibility=visibility, z=z)


def angle_between(a, b, c) -> float:
    """
    Returns the angle (in degrees) at point b formed by points a-b-c.
    NaN when either segment has zero length or a coordinate is not finite.
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    c = np.asarray(c, dtype=float)

    v1 = a - b
    v2 = c - b
    if not (np.all(np.isfinite(v1)) and np.all(np.isfinite(v2))):
        return float("nan")

    n1 = np.linalg.norm(v1)
    n2 = np.linalg.norm(v2)
    if n1 == 0 or n2 == 0:
        return float("nan")

    cosang = float(np.dot(v1, v2) / (n1 * n2))
    if not math.isfinite(cosang):
        return float("nan")
    cosang = max(-1.0, min(1.0, cosang))
    return math.degrees(math.acos(cosang))


def frame_from_landmarks(landmarks: Optional[Sequence[Any]]) -> Dict[str, JointPosition]:
    """
    Input: a landmark list from the pose model (33 entries for BlazePose),
           or None when nothing was detected.
    Output: FrameSample keyed by landmark name. Entries that cannot be read
            are left out, so a short or broken list just yields fewer joints.
    """
    if not landmarks:
        return {}

    frame: Dict[str, JointPosition] = {}
    count = len(landmarks)
    for name, idx in LANDMARK_INDEX.items():
        if idx >= count:
            continue
        joint = coerce_joint(landmarks[idx])
        if joint is not None:
            frame[name] = joint
    return frame


def to_pixel(joint: JointPosition, width: int, height: int) -> Tuple[int, int]:
    """Normalized landmark -> integer pixel coordinates for drawing."""
    return int(joint.x * width), int(joint.y * height)
