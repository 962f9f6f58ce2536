# repcount_backend/scoring.py

from typing import List, Tuple

from repcount_backend.models import RepAssessment, RepSummary
from repcount_client.rep_logic import EXERCISE_CONFIG, get_exercise_config

# A rep whose lowest angle stays within this margin of the counting threshold barely made depth
DEPTH_MARGIN_DEG = 10.0
MIN_REP_DURATION_S = 0.4

SEVERITY_PENALTY = {"low": 10, "medium": 25, "high": 50}


def score_rep(rep: RepSummary) -> RepAssessment:
    """
    Rule-based check of a single rep. Issues in priority order:
      - shallow_depth : lowest angle not clearly below the down threshold
      - too_fast      : rep shorter than MIN_REP_DURATION_S
    The reported main_issue is the first one found; every issue costs points.
    """
    cfg = get_exercise_config(rep.exercise)
    issues: List[Tuple[str, str]] = []

    if rep.depth_angle >= cfg.down_threshold:
        issues.append(("shallow_depth", "high"))
    elif rep.depth_angle > cfg.down_threshold - DEPTH_MARGIN_DEG:
        issues.append(("shallow_depth", "medium"))

    if rep.duration_s < MIN_REP_DURATION_S:
        issues.append(("too_fast", "medium"))

    score = 100 - sum(SEVERITY_PENALTY[severity] for _, severity in issues)
    exercise = rep.exercise if rep.exercise in EXERCISE_CONFIG else cfg.name

    if not issues:
        return RepAssessment(exercise=exercise, score=score)

    main_issue, severity = issues[0]
    return RepAssessment(exercise=exercise, main_issue=main_issue, severity=severity, score=max(0, score))
