# tests
import pytest

from napalert.baseline import BaselineEstimator


def test_no_baseline_before_ten_samples():
    estimator = BaselineEstimator()
    for bpm in range(60, 69):
        assert estimator.ingest(bpm) is None
    assert estimator.baseline is None
    assert estimator.sample_count == 9
    assert not estimator.is_established


def test_tenth_sample_sets_mean_immediately():
    estimator = BaselineEstimator()
    samples = [68, 70, 72, 71, 69, 70, 70, 73, 67, 70]
    for bpm in samples[:-1]:
        estimator.ingest(bpm)

    assert estimator.ingest(samples[-1]) == pytest.approx(sum(samples) / 10)
    assert estimator.baseline == pytest.approx(70.0)


def test_baseline_frozen_after_established():
    estimator = BaselineEstimator()
    for _ in range(10):
        estimator.ingest(70)

    for bpm in (40, 120, 55):
        estimator.ingest(bpm)

    assert estimator.baseline == 70
    assert estimator.history == (70,) * 10


def test_reset_clears_history_and_baseline():
    estimator = BaselineEstimator()
    for _ in range(10):
        estimator.ingest(80)
    estimator.reset()

    assert estimator.baseline is None
    assert estimator.history == ()
    for _ in range(9):
        estimator.ingest(60)
    assert estimator.baseline is None
    estimator.ingest(60)
    assert estimator.baseline == 60


def test_implausible_values_are_accepted():
    estimator = BaselineEstimator(target=2)
    estimator.ingest(-5)
    estimator.ingest(405)
    assert estimator.baseline == 200


def test_target_must_be_positive():
    with pytest.raises(ValueError):
        BaselineEstimator(target=0)
