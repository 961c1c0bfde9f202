"""
Shared building blocks for the forecast models.

Every model is a pure function ``(series, horizon, period) -> List[ModelForecastPoint]``
over an ascending series. Models never mutate the series and always return a fresh list
of exactly ``horizon`` points dated one period step after the last historical date.
"""

from typing import Callable, List, Sequence, Tuple

import numpy as np
import pandas as pd

from ..exceptions import InsufficientDataError
from ..types import HistoricalPoint, ModelForecastPoint, Period
from ..utils import SeriesValidator, add_period

ForecastFunction = Callable[[Sequence[HistoricalPoint], int, Period], List[ModelForecastPoint]]


def series_values(series: Sequence[HistoricalPoint]) -> np.ndarray:
    return np.array([point.value for point in series], dtype=float)


def linear_trend(values: np.ndarray) -> Tuple[float, float]:
    """
    Ordinary least squares of ``values`` against the index ``1..n``.

    Returns:
        (slope, intercept); a single value has slope 0 and intercept equal to the value
    """
    n = len(values)
    if n == 0:
        return 0.0, 0.0
    if n < 2:
        return 0.0, float(values[0])

    x = np.arange(1, n + 1, dtype=float)
    sum_x = x.sum()
    sum_y = values.sum()
    sum_xy = (x * values).sum()
    sum_x2 = (x * x).sum()

    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_x2 - sum_x * sum_x)
    intercept = (sum_y - slope * sum_x) / n
    return float(slope), float(intercept)


def decayed_confidence(start: float, decay: float, floor: float, step: int) -> float:
    """Confidence for horizon step ``step`` (1-based), decaying linearly down to ``floor``"""
    return float(max(floor, start - decay * step))


def forecast_dates(last_date: pd.Timestamp, horizon: int, period: Period) -> List[pd.Timestamp]:
    return [add_period(last_date, step, period) for step in range(1, horizon + 1)]


def check_inputs(series: Sequence[HistoricalPoint], horizon: int, period: Period) -> None:
    """Validate arguments shared by all models"""
    SeriesValidator.validate_horizon(horizon)
    SeriesValidator.validate_period(period)
    if len(series) == 0:
        raise InsufficientDataError("Cannot forecast an empty series", required=1, available=0)
