import logging
from typing import List, Sequence

import numpy as np

from ..types import MOVING_AVERAGE, HistoricalPoint, ModelForecastPoint, Period
from .base import check_inputs, decayed_confidence, forecast_dates, series_values

logger = logging.getLogger(__name__)

MAX_WINDOW = 6


def moving_average_window(n: int) -> int:
    """Window size for a series of ``n`` points: half the series, capped at 6, never empty"""
    return max(1, min(MAX_WINDOW, n // 2))


def moving_average_forecast(
    series: Sequence[HistoricalPoint], horizon: int, period: Period = "monthly"
) -> List[ModelForecastPoint]:
    """Flat forecast at the mean of the most recent window"""
    check_inputs(series, horizon, period)

    values = series_values(series)
    window = moving_average_window(len(values))
    average = float(np.mean(values[-window:]))
    logger.debug(f"  Moving average: window={window}, average={average:.4f}")

    dates = forecast_dates(series[-1].date, horizon, period)
    return [
        ModelForecastPoint(
            forecast_date=date,
            predicted_value=max(0.0, average),
            confidence=decayed_confidence(85, 3, 60, step),
            model=MOVING_AVERAGE,
        )
        for step, date in enumerate(dates, start=1)
    ]
