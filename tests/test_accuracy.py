"""Test accuracy scoring, validation and aggregate accuracy."""

import numpy as np
import pandas as pd
import pytest

from hotelcast.accuracy import (
    AccuracyTracker,
    calculate_accuracy_score,
    calculate_error_metrics,
    summarize_accuracy,
)
from hotelcast.exceptions import NotFoundError
from hotelcast.types import ForecastRecord


def _record(clock, predicted=100.0, model="ensemble", forecast_date="2026-07-01", generated_at=None):
    return ForecastRecord(
        type="revenue",
        period="monthly",
        forecast_date=pd.Timestamp(forecast_date),
        predicted_value=predicted,
        confidence=80.0,
        upper_bound=predicted * 1.2,
        lower_bound=predicted * 0.8,
        model=model,
        generated_at=generated_at if generated_at is not None else clock(),
    )


class TestAccuracyScore:
    @pytest.mark.parametrize(
        "predicted,actual,expected",
        [
            (80, 100, 80.0),
            (0, 0, 100.0),
            (5, 0, 0.0),
            (100, 100, 100.0),
            (120, 100, 80.0),
            (350, 100, 0.0),
        ],
    )
    def test_scores(self, predicted, actual, expected):
        assert calculate_accuracy_score(predicted, actual) == pytest.approx(expected)

    def test_negative_actual_uses_magnitude(self):
        assert calculate_accuracy_score(-90, -100) == pytest.approx(90.0)


class TestErrorMetrics:
    def test_known_values(self):
        metrics = calculate_error_metrics(np.array([100.0, 200.0]), np.array([90.0, 220.0]))
        assert metrics["mae"] == pytest.approx(15.0)
        assert metrics["mape"] == pytest.approx(10.0)

    def test_mape_skips_zero_actuals(self):
        metrics = calculate_error_metrics(np.array([0.0, 100.0]), np.array([5.0, 110.0]))
        assert metrics["mape"] == pytest.approx(10.0)

    def test_all_zero_actuals(self):
        assert calculate_error_metrics(np.array([0.0]), np.array([3.0]))["mape"] is None

    def test_empty(self):
        assert calculate_error_metrics(np.array([]), np.array([])) == {"mae": None, "mape": None}


class TestSummarizeAccuracy:
    def test_empty(self):
        summary = summarize_accuracy([])
        assert summary["overall"] is None
        assert summary["by_model"] == {}
        assert summary["sample_size"] == 0

    def test_by_model(self, clock):
        records = []
        for model, score in [("ensemble", 80.0), ("ensemble", 100.0), ("linear_regression", 60.0)]:
            record = _record(clock, model=model)
            record.accuracy_score = score
            record.actual_value = 100.0
            record.validated = True
            records.append(record)

        summary = summarize_accuracy(records)
        assert summary["overall"] == pytest.approx(80.0)
        assert summary["by_model"] == {"ensemble": pytest.approx(90.0), "linear_regression": pytest.approx(60.0)}
        assert summary["sample_size"] == 3


class TestAccuracyTracker:
    def test_update_marks_validated(self, store, clock):
        stored = store.persist_forecast_records([_record(clock, predicted=80.0)])[0]
        clock.advance(days=20)

        tracker = AccuracyTracker(store, clock=clock)
        result = tracker.update_forecast_accuracy(stored.id, 100.0)

        assert result == {"accuracy_score": pytest.approx(80.0), "validated": True}
        updated = store.get_forecast(stored.id)
        assert updated.validated is True
        assert updated.actual_value == 100.0
        assert updated.accuracy_score == pytest.approx(80.0)
        assert updated.validated_at == clock()

    def test_unknown_forecast(self, store, clock):
        tracker = AccuracyTracker(store, clock=clock)
        with pytest.raises(NotFoundError):
            tracker.update_forecast_accuracy("missing", 10.0)

    def test_revalidation_keeps_validated(self, store, clock):
        stored = store.persist_forecast_records([_record(clock, predicted=100.0)])[0]
        tracker = AccuracyTracker(store, clock=clock)
        tracker.update_forecast_accuracy(stored.id, 100.0)
        tracker.update_forecast_accuracy(stored.id, 50.0)

        updated = store.get_forecast(stored.id)
        assert updated.validated is True
        assert updated.accuracy_score == pytest.approx(0.0)

    def test_calculate_accuracy_uses_lookback(self, store, clock):
        recent = store.persist_forecast_records([_record(clock, predicted=90.0, forecast_date="2026-07-01")])[0]
        old = store.persist_forecast_records(
            [_record(clock, predicted=10.0, forecast_date="2025-07-01", generated_at=clock() - pd.DateOffset(months=7))]
        )[0]
        unvalidated = store.persist_forecast_records([_record(clock, forecast_date="2026-08-01")])[0]

        tracker = AccuracyTracker(store, clock=clock)
        tracker.update_forecast_accuracy(recent.id, 100.0)
        tracker.update_forecast_accuracy(old.id, 100.0)

        summary = tracker.calculate_accuracy("revenue", "monthly")
        assert summary["overall"] == pytest.approx(90.0)
        assert summary["sample_size"] == 1
        assert summary["by_model"] == {"ensemble": pytest.approx(90.0)}
        assert summary["mae"] == pytest.approx(10.0)
        assert store.get_forecast(unvalidated.id).validated is False

    def test_calculate_accuracy_other_metric_is_empty(self, store, clock):
        tracker = AccuracyTracker(store, clock=clock)
        assert tracker.calculate_accuracy("occupancy", "daily")["overall"] is None
