from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from workwell.tracking.accumulator import OpenWindow, SessionAccumulator
from workwell.tracking.classifier import PostureQuality
from workwell.tracking.motion import OrientationSample

T0 = datetime(2026, 10, 19, 9, 0, 0, tzinfo=timezone.utc)


def _at(seconds: float) -> datetime:
    return T0 + timedelta(seconds=seconds)


def _sample(pitch: float, seconds: float, roll: float = 0.0, yaw: float = 0.0) -> OrientationSample:
    return OrientationSample(pitch_degrees=pitch, roll_degrees=roll, yaw_degrees=yaw, timestamp=_at(seconds))


def test_ingest_requires_start():
    acc = SessionAccumulator()
    with pytest.raises(RuntimeError):
        acc.ingest_sample(_sample(-5.0, 0))


def test_first_sample_seeds_filter_then_smooths():
    acc = SessionAccumulator()
    acc.start(T0)
    acc.ingest_sample(_sample(-10.0, 1, roll=5.0, yaw=20.0))
    assert acc.pitch == -10.0
    assert acc.roll == 5.0
    assert acc.yaw == 20.0
    acc.ingest_sample(_sample(0.0, 2, roll=0.0, yaw=0.0))
    assert acc.pitch == pytest.approx(-8.0)
    assert acc.roll == pytest.approx(4.0)
    assert acc.yaw == pytest.approx(16.0)


def test_classification_uses_smoothed_pitch():
    acc = SessionAccumulator()
    acc.start(T0)
    assert acc.ingest_sample(_sample(-10.0, 1)) is PostureQuality.GOOD
    # -10 * 0.8 + -40 * 0.2 = -16
    assert acc.ingest_sample(_sample(-40.0, 2)) is PostureQuality.WARNING
    assert not acc.in_poor_window


def test_history_keeps_most_recent_values():
    acc = SessionAccumulator(history_capacity=100)
    acc.start(T0)
    seen = []
    for i in range(150):
        acc.ingest_sample(_sample(float(-i % 37), i * 0.033))
        seen.append(acc.pitch)
    assert len(acc.pitch_history) == 100
    assert acc.history() == seen[-100:]


def test_poor_duration_accrues_only_on_tick_while_poor():
    acc = SessionAccumulator()
    acc.start(T0)
    acc.ingest_sample(_sample(-30.0, 0))
    assert isinstance(acc.window, OpenWindow)
    for t in range(1, 5):
        acc.ingest_sample(_sample(-30.0, t))
        assert acc.poor_posture_duration == 0.0
    acc.tick(_at(5))
    assert acc.poor_posture_duration == pytest.approx(5.0)
    acc.ingest_sample(_sample(-30.0, 6))
    acc.tick(_at(7))
    assert acc.poor_posture_duration == pytest.approx(7.0)


def test_no_accrual_outside_poor_band():
    acc = SessionAccumulator()
    acc.start(T0)
    for t in range(0, 6):
        acc.ingest_sample(_sample(-17.0, t))
        acc.tick(_at(t + 0.5))
    assert acc.quality is PostureQuality.WARNING
    assert acc.poor_posture_duration == 0.0
    assert acc.poor_posture_percentage == 0
    assert acc.session_duration == pytest.approx(5.5)


def test_many_ticks_do_not_double_count():
    acc = SessionAccumulator()
    acc.start(T0)
    acc.ingest_sample(_sample(-5.0, 1))
    acc.ingest_sample(_sample(-70.0, 2))  # smoothed -18.0
    assert acc.quality is PostureQuality.WARNING
    acc.ingest_sample(_sample(-80.0, 2.5))  # smoothed -30.4, window opens
    assert acc.quality is PostureQuality.POOR
    for t in (3.0, 3.5, 4.0, 5.25, 6.0, 7.0):
        acc.tick(_at(t))
    acc.ingest_sample(_sample(60.0, 8.5))  # smoothed -12.32
    assert acc.quality is PostureQuality.GOOD
    assert not acc.in_poor_window
    record = acc.finalize(_at(10))
    assert record.poor_posture_duration == pytest.approx(6.0)
    assert record.total_duration == pytest.approx(10.0)
    assert record.poor_posture_percentage == 60


def test_tick_before_samples_and_backwards_clock():
    acc = SessionAccumulator()
    acc.start(T0)
    acc.tick(_at(2))
    assert acc.poor_posture_duration == 0.0
    acc.ingest_sample(_sample(-30.0, 3))
    acc.tick(_at(2.5))
    assert acc.poor_posture_duration == 0.0
    acc.tick(_at(4))
    assert acc.poor_posture_duration == pytest.approx(1.0)


def test_finalize_without_samples():
    acc = SessionAccumulator()
    acc.start(T0)
    record = acc.finalize(T0)
    assert record.average_pitch == 0.0
    assert record.min_pitch == 0.0
    assert record.max_pitch == 0.0
    assert record.total_duration == 0.0
    assert record.poor_posture_percentage == 0


def test_scenario_steady_poor_session():
    acc = SessionAccumulator()
    acc.start(T0)
    for t in range(1, 6):
        acc.ingest_sample(_sample(-25.0, t))
        if t == 3:
            acc.tick(_at(3))
    acc.tick(_at(6))
    record = acc.finalize(_at(6))
    # Window opens with the first poor sample at t=1
    assert record.poor_posture_duration == pytest.approx(5.0)
    assert record.poor_posture_percentage == 83
    assert record.min_pitch == pytest.approx(-25.0)
    assert record.max_pitch == pytest.approx(-25.0)
    assert record.average_pitch == pytest.approx(-25.0)


def test_scenario_poor_from_session_start():
    acc = SessionAccumulator()
    acc.start(T0)
    for t in range(0, 6):
        acc.ingest_sample(_sample(-25.0, t))
    acc.tick(_at(3))
    record = acc.finalize(_at(6))
    assert record.poor_posture_duration == pytest.approx(6.0)
    assert record.poor_posture_percentage == 100


def test_start_resets_previous_session():
    acc = SessionAccumulator()
    acc.start(T0)
    acc.ingest_sample(_sample(-30.0, 1))
    acc.tick(_at(4))
    acc.start(_at(10))
    assert acc.start_time == _at(10)
    assert acc.poor_posture_duration == 0.0
    assert acc.pitch_count == 0
    assert acc.history() == []
    assert not acc.in_poor_window


@pytest.mark.parametrize("kwargs", [{"smoothing_factor": 0.0}, {"history_capacity": 0}])
def test_invalid_configuration(kwargs):
    with pytest.raises(ValueError):
        SessionAccumulator(**kwargs)


@pytest.mark.parametrize("bad", [float("inf"), float("-inf"), float("nan")])
def test_non_finite_samples_are_dropped(bad):
    acc = SessionAccumulator()
    acc.start(T0)
    acc.ingest_sample(_sample(-30.0, 1))
    assert acc.ingest_sample(_sample(bad, 2)) is PostureQuality.POOR
    acc.ingest_sample(_sample(-30.0, 3, yaw=bad))
    assert acc.pitch == pytest.approx(-30.0)
    assert acc.pitch_count == 1
    assert acc.history() == [pytest.approx(-30.0)]

    for t in range(4, 8):
        acc.ingest_sample(_sample(-30.0, t))
    record = acc.finalize(_at(8))
    assert record.poor_posture_duration == pytest.approx(7.0)
    assert record.max_pitch == pytest.approx(-30.0)
    assert record.average_pitch == pytest.approx(-30.0)
