# repcount_client/pose_estimator.py

import logging
import os
os.environ.setdefault("TF_CPP_MIN_LOG_LEVEL", "3")

import cv2
import mediapipe as mp
from mediapipe.tasks import python as mp_tasks
from mediapipe.tasks.python import vision

from repcount_client.pose_utils import frame_from_landmarks

logger = logging.getLogger(__name__)


class PoseEstimator:
    """
    Pose source for the counter: MediaPipe PoseLandmarker in VIDEO mode.

    process() takes a BGR frame and a monotonically increasing timestamp
    (ms) and returns the FrameSample plus the raw landmark list for
    drawing (None when no person is detected).
    """

    def __init__(self, model_path: str, detection_conf: float = 0.5, tracking_conf: float = 0.5):
        if not os.path.isfile(model_path):
            raise FileNotFoundError(
                f"Pose model not found at '{model_path}'. Download pose_landmarker_full.task "
                f"and set REPCOUNT_POSE_MODEL."
            )
        options = vision.PoseLandmarkerOptions(
            base_options=mp_tasks.BaseOptions(model_asset_path=model_path),
            running_mode=vision.RunningMode.VIDEO,
            num_poses=1,
            min_pose_detection_confidence=detection_conf,
            min_pose_presence_confidence=detection_conf,
            min_tracking_confidence=tracking_conf,
        )
        self.pose = vision.PoseLandmarker.create_from_options(options)
        self._last_ts = -1
        logger.info("Pose landmarker loaded from %s", model_path)

    def process(self, frame_bgr, timestamp_ms: int):
        # VIDEO mode rejects non-increasing timestamps
        timestamp_ms = max(int(timestamp_ms), self._last_ts + 1)
        self._last_ts = timestamp_ms

        rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)
        results = self.pose.detect_for_video(mp_image, timestamp_ms)

        if not results.pose_landmarks:
            return {}, None

        landmarks = results.pose_landmarks[0]
        return frame_from_landmarks(landmarks), landmarks

    def close(self):
        self.pose.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
