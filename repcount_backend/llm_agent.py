# repcount_backend/llm_agent.py

import json
import logging
import os
import re
from typing import Dict, Optional

import dotenv
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_groq import ChatGroq

from repcount_backend.models import RepAssessment, RepSummary

dotenv.load_dotenv()

logger = logging.getLogger(__name__)

GROQ_API_KEY = os.getenv("GROQ_API_KEY")
GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")

_llm: Optional[ChatGroq] = None

SYSTEM_PROMPT = (
    "You are the voice coach inside a live rep-counting workout app.\n\n"
    "For EACH completed rep you give one super short spoken line that feels like a "
    "professional trainer talking directly to the user.\n\n"
    "Style rules:\n"
    "- Confident, supportive, energetic, not cringe.\n"
    "- Talk directly to the user as \"you\".\n"
    "- 5-10 words, never more than 12.\n"
    "- No emojis, no hashtags, no extra punctuation.\n"
    "- Simple gym language, no technical terms, never mention data or that you are an AI.\n\n"
    "You receive the rep numbers AND an assessment that was already decided.\n"
    "Do not change the assessment; only phrase it.\n"
    "Respond with a SINGLE JSON object ONLY, no commentary, no markdown:\n"
    "{\n"
    '  "message": string   // the spoken line\n'
    "}\n\n"
    "Signals:\n"
    "- exercise: squat or pushup\n"
    "- depth_angle: lowest knee (squat) or elbow (pushup) angle, 180 = straight\n"
    "- duration_s: seconds since the previous rep\n"
    "- main_issue: null, shallow_depth or too_fast\n"
    "- severity: none, low, medium, high\n\n"
    "Guidelines:\n"
    "- main_issue null -> short positive reinforcement like \"Nice rep, keep that form\".\n"
    "- shallow_depth -> tell them to go deeper (squat) or lower (pushup).\n"
    "- too_fast -> tell them to slow down and control the rep.\n"
)


def _get_llm() -> Optional[ChatGroq]:
    global _llm
    if _llm is None and GROQ_API_KEY:
        _llm = ChatGroq(
            api_key=GROQ_API_KEY,
            model=GROQ_MODEL,
            temperature=0.2,
            max_retries=1,
            timeout=1.5,
        )
    return _llm


def llm_configured() -> bool:
    return bool(GROQ_API_KEY)


_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def _parse_llm_json(raw) -> Optional[Dict]:
    """
    Pull the first {...} object out of a model reply. Code fences and chatter
    around the object are tolerated; anything that is not a JSON object
    (lists, numbers, non-text content blocks) yields None.
    """
    if not isinstance(raw, str):
        return None
    text = _FENCE.sub("", raw.strip())
    start, end = text.find("{"), text.rfind("}")
    if start < 0 or end < start:
        return None
    try:
        parsed = json.loads(text[start:end + 1])
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def coach_rep(rep: RepSummary, assessment: RepAssessment) -> Optional[str]:
    """
    Asks the Groq LLM to phrase the assessment as one spoken line.
    Returns None when the LLM is not configured, fails or answers garbage;
    no canned coaching is generated here.
    """
    llm = _get_llm()
    if llm is None:
        logger.warning("GROQ_API_KEY not set, skipping coaching for rep %d", rep.rep_number)
        return None

    payload = {**rep.model_dump(), **assessment.model_dump(exclude={"exercise"})}
    messages = [
        SystemMessage(content=SYSTEM_PROMPT),
        HumanMessage(
            content=(
                f"Exercise: {rep.exercise}\n"
                f"Rep JSON: {json.dumps(payload, ensure_ascii=False)}"
            )
        ),
    ]

    try:
        resp = llm.invoke(messages)
    except Exception as e:
        logger.error("Exception calling Groq: %s", e)
        return None

    # content can also be a list of content blocks; only plain text is accepted
    raw = getattr(resp, "content", resp)
    parsed = _parse_llm_json(raw)
    if parsed is None or not isinstance(parsed.get("message"), str):
        logger.error("Could not parse LLM JSON. Raw: %s", raw)
        return None

    message = parsed["message"].strip()
    return message or None
