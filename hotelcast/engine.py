"""
Forecast Orchestration Module

Public entry point of the forecasting engine. Checks the store for a fresh forecast,
otherwise fetches history, runs the four models, combines them into an ensemble,
persists the result and returns a report bundle.
"""

import functools
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .accuracy import AccuracyTracker
from .config import ForecastConfig
from .exceptions import InsufficientDataError
from .forecasting import MODEL_REGISTRY, ForecastFunction, combine_forecasts
from .history import HistoricalSeriesProvider
from .seasonality import analyze_seasonality, generate_seasonal_recommendations
from .store import ForecastStore
from .types import (
    ENSEMBLE,
    EXPONENTIAL_SMOOTHING,
    ForecastRecord,
    ForecastReport,
    HistoricalPoint,
    MetricType,
    ModelForecastPoint,
    Period,
)
from .utils import DateLike, SeriesValidator, calculate_horizon, now, season_length_for

logger = logging.getLogger(__name__)


def is_forecast_fresh(record: ForecastRecord, as_of: datetime, max_age: pd.Timedelta) -> bool:
    """A cached record is reusable while younger than ``max_age`` and still forecasting the future"""
    age = pd.Timestamp(as_of) - pd.Timestamp(record.generated_at)
    return age < max_age and pd.Timestamp(record.forecast_date) >= pd.Timestamp(as_of)


class ForecastOrchestrator:
    """Coordinates history, models, ensemble, persistence and accuracy tracking"""

    def __init__(
        self,
        history_provider: HistoricalSeriesProvider,
        store: ForecastStore,
        config: Optional[ForecastConfig] = None,
        clock: Callable[[], pd.Timestamp] = now,
    ) -> None:
        self.history_provider = history_provider
        self.store = store
        self.config = config or ForecastConfig()
        self.clock = clock
        self.accuracy_tracker = AccuracyTracker(store, clock=clock, lookback_months=self.config.accuracy_lookback_months)

    def _models(self) -> Dict[str, ForecastFunction]:
        models: Dict[str, ForecastFunction] = dict(MODEL_REGISTRY)
        models[EXPONENTIAL_SMOOTHING] = functools.partial(
            MODEL_REGISTRY[EXPONENTIAL_SMOOTHING], alpha=self.config.smoothing_alpha
        )
        return models

    def generate_forecast(self, metric_type: MetricType, period: Period = "monthly", horizon: int = 6) -> ForecastReport:
        """
        Forecast ``horizon`` period steps of a metric.

        Returns:
            ForecastReport with the ensemble records, the last historical points and the
            accuracy summary of recently validated forecasts

        Raises:
            UnsupportedForecastTypeError: unknown metric type
            UnsupportedPeriodError: unknown period
            InvalidHorizonError: horizon below 1
            InsufficientDataError: fewer than ``config.min_history_points`` historical points
        """
        SeriesValidator.validate_metric_type(metric_type)
        SeriesValidator.validate_period(period)
        SeriesValidator.validate_horizon(horizon)

        cached = self._get_cached_report(metric_type, period, horizon)
        if cached is not None:
            return cached

        logger.info(f"Generating {period} {metric_type} forecast for {horizon} periods")

        # Single snapshot shared by every model in this run
        history: Tuple[HistoricalPoint, ...] = tuple(
            SeriesValidator.sort_series(
                self.history_provider.fetch_historical_series(
                    metric_type, period, horizon * self.config.history_multiplier
                )
            )
        )

        if len(history) < self.config.min_history_points:
            raise InsufficientDataError(
                "Insufficient historical data for forecasting",
                required=self.config.min_history_points,
                available=len(history),
            )

        model_forecasts = self.run_models(history, horizon, period)
        combined = combine_forecasts(model_forecasts, self.config.ensemble_weights)

        generated_at = self.clock()
        stored = self.store.persist_forecast_records(
            self._to_records(metric_type, period, combined, generated_at)
        )
        logger.info(f"Stored {len(stored)} {ENSEMBLE} forecast points for {metric_type}/{period}")

        return ForecastReport(
            type=metric_type,
            period=period,
            horizon=horizon,
            forecasts=stored,
            historical=list(history[-self.config.historical_context_points :]),
            accuracy=self.accuracy_tracker.calculate_accuracy(metric_type, period),
            generated_at=generated_at,
            next_update=self._next_update_time(generated_at),
        )

    def run_models(
        self, history: Sequence[HistoricalPoint], horizon: int, period: Period
    ) -> List[List[ModelForecastPoint]]:
        """Evaluate every registered model on the same history; results keep registry order"""
        models = self._models()

        if not self.config.parallel_models:
            return [model(history, horizon, period) for model in models.values()]

        with ThreadPoolExecutor(max_workers=len(models), thread_name_prefix="forecast-model") as executor:
            futures = [executor.submit(model, history, horizon, period) for model in models.values()]
            return [future.result() for future in futures]

    def get_booking_forecast(self, start_date: DateLike, end_date: DateLike, period: Period = "monthly") -> ForecastReport:
        horizon = calculate_horizon(start_date, end_date, period)
        return self.generate_forecast("booking_demand", period, horizon)

    def get_revenue_forecast(self, start_date: DateLike, end_date: DateLike, period: Period = "monthly") -> ForecastReport:
        horizon = calculate_horizon(start_date, end_date, period)
        return self.generate_forecast("revenue", period, horizon)

    def get_seasonal_trends(self, metric_type: MetricType, period: Period = "monthly") -> Dict[str, Any]:
        """Seasonality report and recommendations over ``config.seasonal_history_points`` periods"""
        SeriesValidator.validate_metric_type(metric_type)
        season_length = season_length_for(period)

        history = SeriesValidator.sort_series(
            self.history_provider.fetch_historical_series(metric_type, period, self.config.seasonal_history_points)
        )
        seasonality = analyze_seasonality(history, season_length)

        return {
            "type": metric_type,
            "period": period,
            "seasonality": seasonality,
            "recommendations": generate_seasonal_recommendations(seasonality),
            "generated_at": self.clock(),
        }

    def update_forecast_accuracy(self, forecast_id: str, actual_value: float) -> Dict[str, object]:
        return self.accuracy_tracker.update_forecast_accuracy(forecast_id, actual_value)

    def _get_cached_report(self, metric_type: MetricType, period: Period, horizon: int) -> Optional[ForecastReport]:
        as_of = self.clock()
        max_age = pd.Timedelta(self.config.freshness_window)
        latest = self.store.load_cached_forecast(metric_type, period, as_of)
        if latest is None or not is_forecast_fresh(latest, as_of, max_age):
            return None

        upcoming = [
            record
            for record in self.store.list_upcoming(metric_type, period, as_of, ENSEMBLE)
            if is_forecast_fresh(record, as_of, max_age)
        ]
        if len(upcoming) < horizon:
            logger.warning(
                f"Fresh {metric_type}/{period} forecast covers {len(upcoming)} of {horizon} periods - regenerating"
            )
            return None

        logger.info(f"Using cached {metric_type}/{period} forecast generated at {latest.generated_at}")
        generated_at = pd.Timestamp(latest.generated_at)
        return ForecastReport(
            type=metric_type,
            period=period,
            horizon=horizon,
            forecasts=upcoming[:horizon],
            historical=[],
            accuracy=self.accuracy_tracker.calculate_accuracy(metric_type, period),
            generated_at=generated_at,
            next_update=self._next_update_time(generated_at),
            cached=True,
        )

    @staticmethod
    def _to_records(
        metric_type: MetricType, period: Period, combined: Sequence[ModelForecastPoint], generated_at: datetime
    ) -> List[ForecastRecord]:
        return [
            ForecastRecord(
                type=metric_type,
                period=period,
                forecast_date=point.forecast_date,
                predicted_value=point.predicted_value,
                confidence=point.confidence,
                upper_bound=point.upper_bound if point.upper_bound is not None else point.predicted_value,
                lower_bound=point.lower_bound if point.lower_bound is not None else point.predicted_value,
                model=point.model,
                generated_at=generated_at,
            )
            for point in combined
        ]

    def _next_update_time(self, generated_at: datetime) -> pd.Timestamp:
        return pd.Timestamp(generated_at) + pd.Timedelta(self.config.freshness_window)
