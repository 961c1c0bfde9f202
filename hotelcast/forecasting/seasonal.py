import logging
from typing import List, Sequence

from ..seasonality import calculate_seasonal_indices
from ..types import SEASONAL_DECOMPOSITION, HistoricalPoint, ModelForecastPoint, Period
from ..utils import season_length_for
from .base import check_inputs, decayed_confidence, forecast_dates, linear_trend, series_values
from .moving_average import moving_average_forecast

logger = logging.getLogger(__name__)


def seasonal_forecast(
    series: Sequence[HistoricalPoint], horizon: int, period: Period = "monthly"
) -> List[ModelForecastPoint]:
    """
    Seasonal decomposition forecast: last value plus linear trend, scaled by the seasonal index.

    Needs at least two full seasonal cycles of history; shorter series fall back to the
    moving average forecast.
    """
    check_inputs(series, horizon, period)

    season_length = season_length_for(period)
    n = len(series)
    if n < season_length * 2:
        logger.warning(
            f"  Seasonal decomposition needs {season_length * 2} points, got {n} - falling back to moving average"
        )
        return moving_average_forecast(series, horizon, period)

    indices = calculate_seasonal_indices(series, season_length)
    values = series_values(series)
    trend, _ = linear_trend(values)
    base_value = float(values[-1])
    logger.debug(f"  Seasonal decomposition: trend={trend:.4f}, base={base_value:.4f}, season_length={season_length}")

    forecasts = []
    for step, date in enumerate(forecast_dates(series[-1].date, horizon, period), start=1):
        seasonal_factor = indices[(n + step - 1) % season_length]
        forecasts.append(
            ModelForecastPoint(
                forecast_date=date,
                predicted_value=max(0.0, (base_value + trend * step) * seasonal_factor),
                confidence=decayed_confidence(88, 4, 55, step),
                model=SEASONAL_DECOMPOSITION,
                seasonal_factor=seasonal_factor,
            )
        )
    return forecasts
