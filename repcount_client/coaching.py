# repcount_client/coaching.py

import logging
from queue import Queue
from typing import Callable, Dict, Iterable, Optional

import requests

from repcount_client import config
from repcount_client.metrics import RepRecord, SessionMetrics

logger = logging.getLogger(__name__)

# ---------- Queue for background coaching calls ----------
rep_queue: Queue = Queue()     # completed rep summaries to send to backend

# Last coaching line from the backend, drawn at the bottom of the frame
last_coaching_message: str = ""


def should_coach(rep_number: int, every_n: int) -> bool:
    """Reps 1, 1+N, 1+2N, ... go to the backend + voice."""
    return (rep_number - 1) % max(1, every_n) == 0


def queue_for_coaching(
    session: SessionMetrics,
    records: Iterable[RepRecord],
    exercise: str,
    enabled: bool,
    every_n: int = config.COACH_EVERY_N_REPS,
    queue: Optional[Queue] = None,
) -> None:
    queue = rep_queue if queue is None else queue
    for record in records:
        rep_summary = session.summary_for(record, exercise)
        print(f"=== REP COMPLETED (rep={record.rep_number}) ===")
        logger.info("Rep summary: %s", rep_summary)
        if enabled and should_coach(record.rep_number, every_n):
            queue.put(rep_summary)   # returns instantly


def send_rep(backend_url: str, rep_summary: Dict) -> Optional[str]:
    """POST one rep summary; returns the coaching line or None."""
    try:
        resp = requests.post(backend_url, json=rep_summary, timeout=config.COACHING_TIMEOUT_S)
    except requests.RequestException as e:
        logger.warning("Coaching request failed: %s", e)
        return None
    if resp.status_code != 200:
        logger.warning("Coaching backend error %s: %s", resp.status_code, resp.text)
        return None
    try:
        msg = resp.json().get("message", "")
    except (ValueError, AttributeError):
        logger.warning("Coaching backend sent a non-JSON reply: %s", resp.text)
        return None
    return msg if isinstance(msg, str) and msg else None


def coaching_worker(backend_url: str, on_message: Optional[Callable[[str], None]] = None):
    """
    Reads rep summaries from rep_queue, posts them to the coaching backend,
    keeps the latest message for the overlay and hands it to on_message
    (the demo speaks it).
    """
    global last_coaching_message

    while True:
        rep_summary = rep_queue.get()
        try:
            msg = send_rep(backend_url, rep_summary)
            if msg:
                last_coaching_message = msg
                if on_message is not None:
                    on_message(msg)
        finally:
            rep_queue.task_done()
