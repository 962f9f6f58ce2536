# repcount_backend/main.py
import logging
import os

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from repcount_backend import llm_agent
from repcount_backend.models import CoachingResponse, RepSummary
from repcount_backend.scoring import score_rep

logger = logging.getLogger(__name__)

CORS_ORIGINS = [o.strip() for o in os.getenv("REPCOUNT_CORS_ORIGINS", "*").split(",") if o.strip()]

app = FastAPI(title="Rep Counter Coaching Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def health_check():
    return {"status": "ok", "llm": "groq" if llm_agent.llm_configured() else "disabled"}


@app.post("/analyze_rep", response_model=CoachingResponse)
def analyze_rep(rep: RepSummary):
    assessment = score_rep(rep)
    message = llm_agent.coach_rep(rep, assessment)
    if message is None:
        raise HTTPException(
            status_code=503,
            detail={"message": "Coaching unavailable", "assessment": assessment.model_dump()},
        )
    logger.info("Rep %d (%s): %s", rep.rep_number, assessment.main_issue or "ok", message)
    return CoachingResponse(**assessment.model_dump(), message=message)
