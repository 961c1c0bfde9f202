"""
Accuracy Tracking Module

Scores stored predictions against actual values once they are known and summarises
how accurate recent forecasts of a metric have been, overall and per model.
"""

import logging
from collections import defaultdict
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from .exceptions import NotFoundError
from .store import ForecastStore
from .types import AccuracySummary, ForecastRecord, MetricType, Period
from .utils import now

logger = logging.getLogger(__name__)


def calculate_accuracy_score(predicted: float, actual: float) -> float:
    """
    Percentage closeness of a prediction to the observed value.

    Both zero scores 100; a non-zero prediction of a zero actual scores 0; otherwise
    100 minus the absolute percentage error, floored at 0.
    """
    if actual == 0 and predicted == 0:
        return 100.0
    if actual == 0:
        return 0.0

    error = abs(predicted - actual) / abs(actual)
    return max(0.0, 100.0 - error * 100.0)


def calculate_error_metrics(actual: np.ndarray, predicted: np.ndarray) -> Dict[str, Optional[float]]:
    """
    MAE and MAPE over paired actual/predicted values

    MAPE ignores zero actuals and is None when every actual is zero.
    """
    min_length = min(len(actual), len(predicted))
    actual = actual[:min_length]
    predicted = predicted[:min_length]

    if min_length == 0:
        return {"mae": None, "mape": None}

    mae = float(np.mean(np.abs(actual - predicted)))

    non_zero_mask = actual != 0
    if np.sum(non_zero_mask) > 0:
        mape = float(np.mean(np.abs((actual[non_zero_mask] - predicted[non_zero_mask]) / actual[non_zero_mask])) * 100)
    else:
        mape = None

    return {
        "mae": round(mae, 2),
        "mape": None if mape is None else round(mape, 2),
    }


def summarize_accuracy(records: Sequence[ForecastRecord]) -> AccuracySummary:
    """Mean accuracy score overall and per model across validated records"""
    if not records:
        return {"overall": None, "by_model": {}, "sample_size": 0, "mae": None, "mape": None}

    per_model: Dict[str, List[float]] = defaultdict(list)
    scores = []
    for record in records:
        score = record.accuracy_score or 0.0
        scores.append(score)
        per_model[record.model].append(score)

    paired = [record for record in records if record.actual_value is not None]
    metrics = calculate_error_metrics(
        np.array([record.actual_value for record in paired], dtype=float),
        np.array([record.predicted_value for record in paired], dtype=float),
    )

    return {
        "overall": float(np.mean(scores)),
        "by_model": {model: float(np.mean(values)) for model, values in per_model.items()},
        "sample_size": len(records),
        "mae": metrics["mae"],
        "mape": metrics["mape"],
    }


class AccuracyTracker:
    """Validates stored forecasts against actual values"""

    def __init__(
        self,
        store: ForecastStore,
        clock: Callable[[], pd.Timestamp] = now,
        lookback_months: int = 6,
    ) -> None:
        self.store = store
        self.clock = clock
        self.lookback_months = lookback_months

    def update_forecast_accuracy(self, forecast_id: str, actual_value: float) -> Dict[str, object]:
        """
        Score a stored forecast against the observed value and mark it validated.

        Raises:
            NotFoundError: if no forecast has this id
        """
        forecast = self.store.get_forecast(forecast_id)
        if forecast is None:
            raise NotFoundError(forecast_id)

        accuracy_score = calculate_accuracy_score(forecast.predicted_value, actual_value)
        self.store.mark_validated(forecast_id, actual_value, accuracy_score, self.clock())
        logger.info(
            f"Validated forecast {forecast_id} ({forecast.type}/{forecast.period} {forecast.model}): "
            f"predicted={forecast.predicted_value:.2f}, actual={actual_value:.2f}, score={accuracy_score:.1f}"
        )

        return {"accuracy_score": accuracy_score, "validated": True}

    def calculate_accuracy(self, metric_type: MetricType, period: Period) -> AccuracySummary:
        """Accuracy of validated forecasts of the metric generated within the lookback window"""
        since = self.clock() - pd.DateOffset(months=self.lookback_months)
        records = self.store.find_validated(metric_type, period, since)
        summary = summarize_accuracy(records)
        if summary["overall"] is not None:
            logger.debug(f"Accuracy for {metric_type}/{period}: {summary['overall']:.1f}% over {summary['sample_size']} records")
        return summary
