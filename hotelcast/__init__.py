"""
Hotel Operations Forecasting Engine

Ensemble forecasting of hotel business metrics with seasonality analysis and
post-hoc accuracy tracking.
"""

from .accuracy import AccuracyTracker, calculate_accuracy_score
from .config import EnsembleWeights, ForecastConfig
from .engine import ForecastOrchestrator, is_forecast_fresh
from .exceptions import (
    ForecastingError,
    InsufficientDataError,
    InvalidHorizonError,
    NotFoundError,
    UnsupportedForecastTypeError,
    UnsupportedPeriodError,
)
from .history import HistoricalSeriesProvider, LedgerHistoryProvider, StaticHistoryProvider
from .seasonality import analyze_seasonality, calculate_seasonal_indices
from .store import CsvForecastStore, ForecastStore, InMemoryForecastStore
from .types import ForecastRecord, ForecastReport, HistoricalPoint, ModelForecastPoint

__all__ = [
    "AccuracyTracker",
    "calculate_accuracy_score",
    "EnsembleWeights",
    "ForecastConfig",
    "ForecastOrchestrator",
    "is_forecast_fresh",
    "ForecastingError",
    "InsufficientDataError",
    "InvalidHorizonError",
    "NotFoundError",
    "UnsupportedForecastTypeError",
    "UnsupportedPeriodError",
    "HistoricalSeriesProvider",
    "LedgerHistoryProvider",
    "StaticHistoryProvider",
    "analyze_seasonality",
    "calculate_seasonal_indices",
    "CsvForecastStore",
    "ForecastStore",
    "InMemoryForecastStore",
    "ForecastRecord",
    "ForecastReport",
    "HistoricalPoint",
    "ModelForecastPoint",
]
