"""
Forecast Models

Four independent univariate forecasters and the weighted ensemble that combines them.
"""

from typing import Dict

from .base import ForecastFunction, linear_trend
from .ensemble import combine_forecasts
from .linear import linear_regression_forecast
from .moving_average import moving_average_forecast
from .seasonal import seasonal_forecast
from .smoothing import exponential_smoothing_forecast
from ..types import LINEAR_REGRESSION, MOVING_AVERAGE, SEASONAL_DECOMPOSITION, EXPONENTIAL_SMOOTHING

# Evaluation order of the ensemble members
MODEL_REGISTRY: Dict[str, ForecastFunction] = {
    LINEAR_REGRESSION: linear_regression_forecast,
    MOVING_AVERAGE: moving_average_forecast,
    SEASONAL_DECOMPOSITION: seasonal_forecast,
    EXPONENTIAL_SMOOTHING: exponential_smoothing_forecast,
}

__all__ = [
    "MODEL_REGISTRY",
    "ForecastFunction",
    "combine_forecasts",
    "linear_regression_forecast",
    "linear_trend",
    "moving_average_forecast",
    "seasonal_forecast",
    "exponential_smoothing_forecast",
]
