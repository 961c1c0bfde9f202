import logging
from typing import List, Sequence

from ..types import LINEAR_REGRESSION, HistoricalPoint, ModelForecastPoint, Period
from .base import check_inputs, decayed_confidence, forecast_dates, linear_trend, series_values

logger = logging.getLogger(__name__)


def linear_regression_forecast(
    series: Sequence[HistoricalPoint], horizon: int, period: Period = "monthly"
) -> List[ModelForecastPoint]:
    """Extend the least-squares trend line over the horizon, clipped at zero"""
    check_inputs(series, horizon, period)

    values = series_values(series)
    n = len(values)
    slope, intercept = linear_trend(values)
    logger.debug(f"  Linear regression: slope={slope:.4f}, intercept={intercept:.4f} over {n} points")

    dates = forecast_dates(series[-1].date, horizon, period)
    return [
        ModelForecastPoint(
            forecast_date=date,
            predicted_value=max(0.0, intercept + slope * (n + step)),
            confidence=decayed_confidence(90, 5, 50, step),
            model=LINEAR_REGRESSION,
        )
        for step, date in enumerate(dates, start=1)
    ]
