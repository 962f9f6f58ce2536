# repcount_backend/models.py
from typing import Literal, Optional

from pydantic import BaseModel, Field

Severity = Literal["none", "low", "medium", "high"]


class RepSummary(BaseModel):
    exercise: str = "squat"
    rep_number: int = Field(..., ge=1)
    duration_s: float = Field(..., ge=0)
    depth_angle: float = Field(..., ge=0, le=180)   # lowest joint angle in the rep
    pace: float = Field(0.0, ge=0)                  # reps per minute so far
    quality_score: int = Field(0, ge=0, le=100)     # session quality so far


class RepAssessment(BaseModel):
    exercise: str
    main_issue: Optional[str] = None   # e.g. "shallow_depth", "too_fast"
    severity: Severity = "none"
    score: int = Field(100, ge=0, le=100)


class CoachingResponse(BaseModel):
    exercise: str
    main_issue: Optional[str]
    severity: Severity
    message: str
    score: int
