# repcount_client/config.py

import logging
import math
import os

import dotenv

dotenv.load_dotenv()

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        value = None
    if value is None or not math.isfinite(value):
        logger.warning("Ignoring %s=%r (not a finite number), using %s", name, raw, default)
        return default
    return value


def _env_int(name: str, default: int) -> int:
    return int(_env_float(name, default))


# Coaching backend (FastAPI) endpoint
BACKEND_URL = os.getenv("REPCOUNT_BACKEND_URL", "http://127.0.0.1:8000/analyze_rep")
COACHING_TIMEOUT_S = _env_float("REPCOUNT_COACHING_TIMEOUT_S", 2.0)
# Only every Nth completed rep is sent for coaching
COACH_EVERY_N_REPS = max(1, _env_int("REPCOUNT_COACH_EVERY_N_REPS", 2))

# MediaPipe Tasks pose landmarker bundle (.task)
POSE_MODEL_PATH = os.getenv("REPCOUNT_POSE_MODEL", "models/pose_landmarker_full.task")

COUNTDOWN_SECONDS = _env_int("REPCOUNT_COUNTDOWN_SECONDS", 5)
TTS_RATE = _env_int("REPCOUNT_TTS_RATE", 165)
LOG_LEVEL = os.getenv("REPCOUNT_LOG_LEVEL", "INFO").upper()
