import logging
from typing import List, Sequence

from ..types import EXPONENTIAL_SMOOTHING, HistoricalPoint, ModelForecastPoint, Period
from .base import check_inputs, decayed_confidence, forecast_dates, series_values

logger = logging.getLogger(__name__)

DEFAULT_ALPHA = 0.3


def smoothed_level(values, alpha: float = DEFAULT_ALPHA) -> float:
    """Final level of simple exponential smoothing seeded with the first value"""
    level = float(values[0])
    for value in values[1:]:
        level = alpha * float(value) + (1 - alpha) * level
    return level


def exponential_smoothing_forecast(
    series: Sequence[HistoricalPoint],
    horizon: int,
    period: Period = "monthly",
    alpha: float = DEFAULT_ALPHA,
) -> List[ModelForecastPoint]:
    """Flat forecast at the final smoothed level"""
    check_inputs(series, horizon, period)

    level = smoothed_level(series_values(series), alpha)
    logger.debug(f"  Exponential smoothing: alpha={alpha}, level={level:.4f}")

    dates = forecast_dates(series[-1].date, horizon, period)
    return [
        ModelForecastPoint(
            forecast_date=date,
            predicted_value=max(0.0, level),
            confidence=decayed_confidence(90, 3, 65, step),
            model=EXPONENTIAL_SMOOTHING,
        )
        for step, date in enumerate(dates, start=1)
    ]
