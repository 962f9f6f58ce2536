import pytest
from fastapi.testclient import TestClient

from repcount_backend import llm_agent
from repcount_backend import main
from repcount_backend.models import RepAssessment, RepSummary
from repcount_backend.scoring import score_rep


@pytest.fixture
def client():
    return TestClient(main.app)


def rep(**kwargs):
    data = {"exercise": "squat", "rep_number": 1, "duration_s": 1.5, "depth_angle": 85.0}
    data.update(kwargs)
    return RepSummary(**data)


@pytest.mark.parametrize("kwargs, issue, severity, score", [
    ({}, None, "none", 100),
    ({"depth_angle": 115.0}, "shallow_depth", "medium", 75),
    ({"depth_angle": 119.6}, "shallow_depth", "medium", 75),
    ({"depth_angle": 130.0}, "shallow_depth", "high", 50),
    ({"duration_s": 0.3}, "too_fast", "medium", 75),
    ({"depth_angle": 112.0, "duration_s": 0.2}, "shallow_depth", "medium", 50),
    ({"exercise": "pushup", "depth_angle": 125.0, "duration_s": 0.1}, "shallow_depth", "high", 25),
])
def test_score_rep(kwargs, issue, severity, score):
    result = score_rep(rep(**kwargs))
    assert (result.main_issue, result.severity, result.score) == (issue, severity, score)


def test_score_rep_unknown_exercise_uses_squat_thresholds():
    assert score_rep(rep(exercise="burpee")).exercise == "squat"


@pytest.mark.parametrize("raw, expected", [
    ('{"message": "Nice rep"}', {"message": "Nice rep"}),
    ('```json\n{"message": "Go deeper"}\n```', {"message": "Go deeper"}),
    ('Sure! {"message": "Slow down"} hope that helps', {"message": "Slow down"}),
    ("no json here", None),
    ("[1, 2]", None),
    ("{not json}", None),
    ([{"type": "text", "text": "{\"message\": \"hi\"}"}], None),
    (None, None),
])
def test_parse_llm_json(raw, expected):
    assert llm_agent._parse_llm_json(raw) == expected


def test_coach_rep_without_key_returns_none(monkeypatch):
    monkeypatch.setattr(llm_agent, "GROQ_API_KEY", None)
    monkeypatch.setattr(llm_agent, "_llm", None)
    assert llm_agent.coach_rep(rep(), RepAssessment(exercise="squat")) is None


class _FakeLLM:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.messages = None

    def invoke(self, messages):
        self.messages = messages
        if self.error:
            raise self.error
        return type("Resp", (), {"content": self.reply})()


def test_coach_rep_sends_assessment(monkeypatch):
    fake = _FakeLLM(reply='{"message": " Go a bit deeper "}')
    monkeypatch.setattr(llm_agent, "_get_llm", lambda: fake)
    assessment = RepAssessment(exercise="squat", main_issue="shallow_depth", severity="medium", score=75)
    assert llm_agent.coach_rep(rep(depth_angle=115.0), assessment) == "Go a bit deeper"
    assert '"main_issue": "shallow_depth"' in fake.messages[1].content


@pytest.mark.parametrize("fake", [
    _FakeLLM(error=RuntimeError("boom")),
    _FakeLLM(reply='{"msg": "wrong key"}'),
    _FakeLLM(reply='{"message": "   "}'),
    _FakeLLM(reply=[{"type": "text", "text": '{"message": "Nice"}'}]),
    _FakeLLM(reply='{"message": 5}'),
])
def test_coach_rep_failures_return_none(monkeypatch, fake):
    monkeypatch.setattr(llm_agent, "_get_llm", lambda: fake)
    assert llm_agent.coach_rep(rep(), RepAssessment(exercise="squat")) is None


def test_health(client, monkeypatch):
    monkeypatch.setattr(llm_agent, "GROQ_API_KEY", None)
    assert client.get("/").json() == {"status": "ok", "llm": "disabled"}


def test_analyze_rep(client, monkeypatch):
    monkeypatch.setattr(llm_agent, "coach_rep", lambda r, a: "Slow it down, control the rep")
    resp = client.post("/analyze_rep", json={
        "exercise": "squat", "rep_number": 3, "duration_s": 0.3, "depth_angle": 80,
        "pace": 40.0, "quality_score": 70,
    })
    assert resp.status_code == 200
    assert resp.json() == {
        "exercise": "squat",
        "main_issue": "too_fast",
        "severity": "medium",
        "message": "Slow it down, control the rep",
        "score": 75,
    }


def test_analyze_rep_without_llm_is_503(client, monkeypatch):
    monkeypatch.setattr(llm_agent, "coach_rep", lambda r, a: None)
    resp = client.post("/analyze_rep", json={"rep_number": 1, "duration_s": 1.0, "depth_angle": 90})
    assert resp.status_code == 503
    assert resp.json()["detail"]["assessment"]["severity"] == "none"


@pytest.mark.parametrize("payload", [
    {"rep_number": 0, "duration_s": 1.0, "depth_angle": 90},
    {"rep_number": 1, "duration_s": -1.0, "depth_angle": 90},
    {"rep_number": 1, "duration_s": 1.0, "depth_angle": 200},
    {"rep_number": 1, "duration_s": 1.0},
])
def test_analyze_rep_validation(client, payload):
    assert client.post("/analyze_rep", json=payload).status_code == 422


def test_analyze_rep_with_non_text_llm_content_is_503(client, monkeypatch):
    fake = _FakeLLM(reply=[{"type": "text", "text": '{"message": "Nice"}'}])
    monkeypatch.setattr(llm_agent, "_get_llm", lambda: fake)
    resp = client.post("/analyze_rep", json={"rep_number": 2, "duration_s": 1.0, "depth_angle": 119.6})
    assert resp.status_code == 503
    assert resp.json()["detail"]["assessment"]["severity"] == "medium"
