from datetime import datetime, timedelta, timezone

from app.queue.estimator import ReleaseCadenceEstimator

START = datetime(2026, 2, 2, 9, 0, tzinfo=timezone.utc)


def test_estimator_falls_back_to_default_without_history():
    estimator = ReleaseCadenceEstimator(history_size=10, default_interval_seconds=4.0)
    assert estimator.average_interval() == 4.0

    estimator.record(START)
    assert estimator.average_interval() == 4.0
    assert estimator.estimate_wait(3) == 12


def test_estimator_averages_recent_release_gaps():
    estimator = ReleaseCadenceEstimator(history_size=10, default_interval_seconds=30.0)
    for offset in (0, 2, 4, 9):
        estimator.record(START + timedelta(seconds=offset))

    assert estimator.average_interval() == 3.0
    assert estimator.estimate_wait(2) == 6
    assert estimator.estimate_wait(0) == 0


def test_estimator_keeps_only_the_latest_history():
    estimator = ReleaseCadenceEstimator(history_size=3, default_interval_seconds=30.0)
    for offset in (0, 100, 101, 102):
        estimator.record(START + timedelta(seconds=offset))

    assert len(estimator) == 3
    assert estimator.average_interval() == 1.0


def test_estimate_rounds_up_partial_seconds():
    estimator = ReleaseCadenceEstimator(history_size=5, default_interval_seconds=0.4)
    assert estimator.estimate_wait(1) == 1
    assert estimator.estimate_wait(5) == 2


def test_reset_clears_history():
    estimator = ReleaseCadenceEstimator(history_size=5, default_interval_seconds=7.0)
    estimator.record(START)
    estimator.record(START + timedelta(seconds=1))
    estimator.reset()
    assert estimator.average_interval() == 7.0


def test_same_instant_burst_falls_back_to_default():
    estimator = ReleaseCadenceEstimator(history_size=10, default_interval_seconds=6.0)
    for _ in range(5):
        estimator.record(START)

    assert estimator.average_interval() == 6.0
    assert estimator.estimate_wait(3, START) == 18


def test_time_since_last_release_bounds_the_interval():
    estimator = ReleaseCadenceEstimator(history_size=10, default_interval_seconds=30.0)
    for offset in (0, 2, 4):
        estimator.record(START + timedelta(seconds=offset))

    assert estimator.average_interval(START + timedelta(seconds=5)) == 2.0
    assert estimator.average_interval(START + timedelta(seconds=64)) == 60.0
    assert estimator.estimate_wait(2, START + timedelta(seconds=64)) == 120
