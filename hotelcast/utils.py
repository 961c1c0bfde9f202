"""
Utility functions for the forecasting engine
"""

import math
from datetime import datetime
from typing import Iterable, List, Union

import pandas as pd

from .exceptions import InvalidHorizonError, UnsupportedForecastTypeError, UnsupportedPeriodError
from .types import METRIC_TYPES, PERIODS, HistoricalPoint, Period

DateLike = Union[str, datetime, pd.Timestamp]

# Positions in one seasonal cycle per period granularity
SEASON_LENGTHS = {"monthly": 12, "weekly": 52, "daily": 7}

# Days per step used when converting a date range to a horizon
_DAYS_PER_STEP = {"monthly": 30, "weekly": 7, "daily": 1}


def now() -> pd.Timestamp:
    """Default engine clock (naive local time, matching ledger timestamps)"""
    return pd.Timestamp.now()


def add_period(date: DateLike, amount: int, period: Period) -> pd.Timestamp:
    """Shift a date by ``amount`` period steps, clamping month ends like calendar arithmetic"""
    ts = pd.Timestamp(date)
    if period == "monthly":
        return ts + pd.DateOffset(months=amount)
    if period == "weekly":
        return ts + pd.DateOffset(weeks=amount)
    if period == "daily":
        return ts + pd.DateOffset(days=amount)
    raise UnsupportedPeriodError(period)


def subtract_periods(date: DateLike, amount: int, period: Period) -> pd.Timestamp:
    return add_period(date, -amount, period)


def bucket_start(dates: pd.Series, period: Period) -> pd.Series:
    """Floor a datetime Series to the start of its period bucket"""
    dates = pd.to_datetime(dates)
    if period == "monthly":
        return dates.dt.to_period("M").dt.to_timestamp()
    if period == "weekly":
        return dates.dt.to_period("W").dt.start_time
    if period == "daily":
        return dates.dt.normalize()
    raise UnsupportedPeriodError(period)


def calculate_horizon(start_date: DateLike, end_date: DateLike, period: Period) -> int:
    """Number of period steps needed to cover ``start_date``..``end_date``, rounded up"""
    SeriesValidator.validate_period(period)
    delta = pd.Timestamp(end_date) - pd.Timestamp(start_date)
    days = delta.total_seconds() / (60 * 60 * 24)
    return int(math.ceil(days / _DAYS_PER_STEP[period]))


def season_length_for(period: Period) -> int:
    SeriesValidator.validate_period(period)
    return SEASON_LENGTHS[period]


class SeriesValidator:
    """Validates arguments and series handed to the forecasting engine"""

    @staticmethod
    def validate_metric_type(metric_type: str) -> None:
        if metric_type not in METRIC_TYPES:
            raise UnsupportedForecastTypeError(metric_type)

    @staticmethod
    def validate_period(period: str) -> None:
        if period not in PERIODS:
            raise UnsupportedPeriodError(period)

    @staticmethod
    def validate_horizon(horizon: int) -> None:
        if isinstance(horizon, bool) or not isinstance(horizon, int) or horizon < 1:
            raise InvalidHorizonError(horizon)

    @staticmethod
    def sort_series(points: Iterable[HistoricalPoint]) -> List[HistoricalPoint]:
        """Return points ordered by date ascending"""
        return sorted(points, key=lambda point: pd.Timestamp(point.date))
