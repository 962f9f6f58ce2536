import pytest

from repcount_client.metrics import RepRecord, SessionMetrics
from repcount_client.rep_logic import FrameMetrics, Phase, RepCounter

from frames import squat_frame


def tick(session, reps, phase, angle, t):
    return session.update(reps, phase, FrameMetrics(angle=angle, total_time=t))


def test_rep_record_emitted_when_back_up():
    s = SessionMetrics()
    assert tick(s, 0, Phase.UP, 170, 0.0) == []
    assert tick(s, 1, Phase.DOWN, 115, 1.0) == []
    assert tick(s, 1, Phase.DOWN, 85, 1.3) == []
    assert tick(s, 1, Phase.NO_POSE, 0, 1.4) == []
    done = tick(s, 1, Phase.UP, 165, 2.0)
    assert done == [RepRecord(rep_number=1, duration_s=1.0, depth_angle=85.0, timestamp_s=1.0)]
    assert s.last_rep_duration == 1.0


def test_pace_and_quality():
    s = SessionMetrics()
    t = 0.0
    tick(s, 0, Phase.UP, 170, t)
    for rep in (1, 2, 3):
        t += 2.0
        tick(s, rep, Phase.DOWN, 90, t)
        tick(s, rep, Phase.UP, 170, t + 0.5)
    assert s.reps == 3
    assert s.pace == pytest.approx(round(3 / 6.5 * 60, 1))
    # equal 2 s durations -> consistency 100, depth 90 -> depth quality 100
    assert s.quality_score == 100
    assert [r.duration_s for r in s.rep_records] == [2.0, 2.0, 2.0]


def test_quality_needs_two_reps_and_penalizes_shallow_uneven_reps():
    s = SessionMetrics()
    tick(s, 0, Phase.UP, 170, 0.0)
    tick(s, 1, Phase.DOWN, 119, 1.0)
    tick(s, 1, Phase.UP, 170, 1.5)
    assert s.quality_score == 0

    tick(s, 2, Phase.DOWN, 119, 4.0)
    tick(s, 2, Phase.UP, 170, 4.5)
    # durations 1.0 s / 3.0 s: std 1000 ms -> consistency 0; depth 119 caps at 100
    assert s.quality_score == 40


def test_flush_closes_rep_in_progress():
    s = SessionMetrics()
    tick(s, 0, Phase.UP, 170, 0.0)
    tick(s, 1, Phase.DOWN, 100, 0.8)
    tick(s, 1, Phase.DOWN, 95, 1.0)
    records = s.flush()
    assert [r.depth_angle for r in records] == [95.0]
    assert s.flush() == []


def test_reset_clears_everything():
    s = SessionMetrics()
    tick(s, 0, Phase.UP, 170, 0.0)
    tick(s, 1, Phase.DOWN, 100, 1.0)
    s.reset()
    assert s.snapshot() == {
        "reps": 0, "state": "no_pose", "elapsed": 0.0, "angle": 0,
        "pace": 0.0, "quality_score": 0, "last_rep_duration": 0.0,
    }
    assert s.flush() == []


def test_summary_for_matches_backend_payload():
    s = SessionMetrics()
    tick(s, 0, Phase.UP, 170, 0.0)
    tick(s, 1, Phase.DOWN, 100, 1.2)
    record = tick(s, 1, Phase.UP, 170, 2.0)[0]
    assert s.summary_for(record, "squat") == {
        "rep_number": 1,
        "duration_s": 1.2,
        "depth_angle": 100.0,
        "exercise": "squat",
        "pace": 30.0,
        "quality_score": 0,
    }


def test_with_real_counter(clock):
    counter = RepCounter("squat", clock=clock)
    s = SessionMetrics()
    completed = []
    for angle in (170, 140, 110, 90, 100, 140, 170, 100, 80, 165):
        clock.advance(0.25)
        completed += s.update(*counter.update(squat_frame(angle)))
    assert [r.rep_number for r in completed] == [1, 2]
    assert [r.depth_angle for r in completed] == pytest.approx([90.0, 80.0])
    assert s.reps == 2
    assert s.state == Phase.UP


def test_depth_angle_is_not_rounded():
    s = SessionMetrics()
    s.update(0, Phase.UP, FrameMetrics(angle=170, total_time=0.0, exact_angle=170.2))
    s.update(1, Phase.DOWN, FrameMetrics(angle=120, total_time=1.0, exact_angle=119.6))
    record = s.update(1, Phase.UP, FrameMetrics(angle=165, total_time=1.8, exact_angle=165.0))[0]
    assert s.angle == 120
    assert record.depth_angle == pytest.approx(119.6)
    assert s.summary_for(record, "squat")["depth_angle"] < 120
