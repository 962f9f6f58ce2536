# repcount_client/rep_demo.py

import argparse
import logging
import time
from threading import Thread

import cv2
import pyttsx3

from repcount_client import coaching, config
from repcount_client.metrics import SessionMetrics
from repcount_client.pose_estimator import PoseEstimator
from repcount_client.pose_utils import POSE_CONNECTIONS, to_pixel
from repcount_client.rep_logic import EXERCISE_CONFIG, Phase, RepCounter

logger = logging.getLogger("repcount_client.rep_demo")

WINDOW_NAME = "Rep Counter"

# ---------- Exercise options ----------
EXERCISE_OPTIONS = {str(i): name for i, name in enumerate(EXERCISE_CONFIG, start=1)}

PHASE_COLORS = {
    Phase.UP: (0, 255, 0),
    Phase.DOWN: (0, 165, 255),
    Phase.NO_POSE: (0, 0, 255),
}


def choose_exercise():
    print("Select exercise to track:")
    for key, name in EXERCISE_OPTIONS.items():
        print(f"  {key}. {name}")
    choice = input(f"Enter {', '.join(EXERCISE_OPTIONS)}: ").strip()
    exercise = EXERCISE_OPTIONS.get(choice, "squat")
    print(f"\nYou selected: {exercise}\n")
    return exercise


# ---------- TTS helper (per-message thread) ----------

def speak_message(text: str):
    """
    Fresh pyttsx3 engine per message, run on its own thread so the
    camera loop never blocks.
    """
    if not text:
        return
    try:
        engine = pyttsx3.init()
        engine.setProperty("rate", config.TTS_RATE)
        engine.say(text)
        engine.runAndWait()
        engine.stop()
    except (RuntimeError, OSError) as e:
        logger.warning("TTS error: %s", e)


def speak_in_background(text: str):
    Thread(target=speak_message, args=(text,), daemon=True).start()


# ---------- Drawing ----------

def draw_skeleton(frame, landmarks_frame):
    h, w = frame.shape[:2]
    for a, b in POSE_CONNECTIONS:
        ja, jb = landmarks_frame.get(a), landmarks_frame.get(b)
        if ja is None or jb is None or ja.visibility < 0.5 or jb.visibility < 0.5:
            continue
        cv2.line(frame, to_pixel(ja, w, h), to_pixel(jb, w, h), (255, 0, 0), 2)
    for joint in landmarks_frame.values():
        if joint.visibility >= 0.5:
            cv2.circle(frame, to_pixel(joint, w, h), 3, (0, 255, 0), -1)


def draw_overlay(frame, exercise: str, phase: Phase, session: SessionMetrics):
    lines = [
        (f"Exercise: {exercise}", (200, 255, 200), 0.7),
        (f"Reps: {session.reps}", (0, 255, 0), 0.9),
        (f"Stage: {phase.value}", PHASE_COLORS[phase], 0.7),
        (f"Angle: {session.angle}  Time: {session.elapsed:.1f}s", (255, 255, 255), 0.6),
        (f"Pace: {session.pace}/min  Quality: {session.quality_score}", (0, 255, 255), 0.6),
    ]
    y = 30
    for text, color, scale in lines:
        cv2.putText(frame, text, (20, y), cv2.FONT_HERSHEY_SIMPLEX, scale, color, 2)
        y += 30

    if coaching.last_coaching_message:
        cv2.putText(frame,
                    coaching.last_coaching_message,
                    (20, frame.shape[0] - 30),
                    cv2.FONT_HERSHEY_SIMPLEX,
                    0.7,
                    (0, 200, 255),
                    2)


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="Live rep counter using pose landmarks")
    ap.add_argument("--exercise", choices=sorted(EXERCISE_CONFIG), help="Skip the menu and track this exercise")
    ap.add_argument("--source", default="0", help="Camera index or video file path")
    ap.add_argument("--model", default=config.POSE_MODEL_PATH, help="Pose landmarker .task file")
    ap.add_argument("--backend-url", default=config.BACKEND_URL)
    ap.add_argument("--no-coaching", action="store_true", help="Do not send reps to the backend")
    ap.add_argument("--no-tts", action="store_true", help="Do not speak coaching messages")
    ap.add_argument("--countdown", type=int, default=config.COUNTDOWN_SECONDS)
    return ap.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # 1) Choose exercise
    current_exercise = args.exercise or choose_exercise()

    # 2) Open camera / video
    source = int(args.source) if args.source.isdigit() else args.source
    cap = cv2.VideoCapture(source)
    if not cap.isOpened():
        print(f"Error: Could not open video source {args.source!r}.")
        return 1
    is_file = not isinstance(source, int)

    # 3) Init pose estimator, counter and session metrics
    try:
        pose_estimator = PoseEstimator(args.model)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        cap.release()
        return 1
    counter = RepCounter(current_exercise)
    session = SessionMetrics()

    # 4) Start background coaching worker
    coaching_enabled = not args.no_coaching
    if coaching_enabled:
        on_message = None if args.no_tts else speak_in_background
        Thread(target=coaching.coaching_worker, args=(args.backend_url, on_message), daemon=True).start()

    # 5) Countdown before tracking (live camera only)
    countdown_done = is_file or args.countdown <= 0
    countdown_start = time.time()
    if not countdown_done:
        print(f"Get into position... starting in {args.countdown} seconds.")

    phase = Phase.NO_POSE
    t0 = time.monotonic()
    try:
        while True:
            ret, frame = cap.read()
            if not ret:
                break

            display_frame = frame.copy()

            # ---------- PHASE 1: Countdown ----------
            if not countdown_done:
                remaining = args.countdown - int(time.time() - countdown_start)
                if remaining > 0:
                    cv2.putText(display_frame, f"Get ready: {remaining}", (60, 100),
                                cv2.FONT_HERSHEY_SIMPLEX, 1.2, (0, 255, 255), 3)
                else:
                    countdown_done = True
                    print("Go! Tracking reps now.")
                cv2.imshow(WINDOW_NAME, display_frame)
                if cv2.waitKey(1) & 0xFF == ord('q'):
                    break
                continue

            # ---------- PHASE 2: Pose + rep tracking ----------
            if is_file:
                timestamp_ms = int(cap.get(cv2.CAP_PROP_POS_MSEC))
            else:
                timestamp_ms = int((time.monotonic() - t0) * 1000)
            frame_sample, landmarks = pose_estimator.process(frame, timestamp_ms)

            if landmarks:
                draw_skeleton(display_frame, frame_sample)

            reps, phase, metrics = counter.update(frame_sample)
            completed = session.update(reps, phase, metrics)
            coaching.queue_for_coaching(session, completed, current_exercise, coaching_enabled)

            draw_overlay(display_frame, current_exercise, phase, session)
            cv2.imshow(WINDOW_NAME, display_frame)

            key = cv2.waitKey(1) & 0xFF
            if key == ord('q'):
                break
            if key == ord('r'):
                counter.reset()
                session.reset()
                print("Counter reset.")
    finally:
        coaching.queue_for_coaching(session, session.flush(), current_exercise, coaching_enabled)
        pose_estimator.close()
        cap.release()
        cv2.destroyAllWindows()

    print(f"Session finished: {session.snapshot()}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
