"""
Historical Series Module

Turns operational ledgers (bookings, revenue, expenses, KPI snapshots) into ascending,
period-bucketed metric series for the forecasting engine.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Union, cast

import pandas as pd

from .exceptions import UnsupportedForecastTypeError
from .types import HistoricalPoint, MetricType, Period
from .utils import SeriesValidator, bucket_start, now, subtract_periods

logger = logging.getLogger(__name__)

# Ledger name -> required columns
LEDGER_COLUMNS: Dict[str, List[str]] = {
    "bookings": ["created_at", "status", "total_price"],
    "revenue": ["received_at", "payment_status", "amount"],
    "expenses": ["paid_at", "is_approved", "amount"],
    "kpis": ["date", "period", "occupancy_rate", "total_bookings", "total_revenue"],
}

LEDGER_FILES: Dict[str, str] = {name: f"{name}.csv" for name in LEDGER_COLUMNS}

LEDGER_DATE_COLUMNS: Dict[str, str] = {
    "bookings": "created_at",
    "revenue": "received_at",
    "expenses": "paid_at",
    "kpis": "date",
}


class HistoricalSeriesProvider(ABC):
    """Read interface over historical metric series"""

    @abstractmethod
    def fetch_historical_series(self, metric_type: MetricType, period: Period, point_count: int) -> List[HistoricalPoint]:
        """
        Return up to ``point_count`` periods of history for a metric.

        Returns:
            Points sorted by date ascending; may be empty
        """
        pass


class LedgerHistoryProvider(HistoricalSeriesProvider):
    """Buckets pandas ledgers into metric series, one adapter per metric type"""

    def __init__(
        self,
        ledgers: Mapping[str, pd.DataFrame],
        clock: Callable[[], pd.Timestamp] = now,
    ) -> None:
        self.ledgers: Dict[str, pd.DataFrame] = {
            name: self._prepare_ledger(name, frame) for name, frame in ledgers.items()
        }
        self.clock = clock
        self._adapters: Dict[MetricType, Callable[[Period, int], List[HistoricalPoint]]] = {
            "booking_demand": self._booking_series,
            "revenue": self._revenue_series,
            "expenses": self._expense_series,
            "occupancy": self._occupancy_series,
        }

    @classmethod
    def from_csv_dir(cls, data_dir: Union[str, Path], clock: Callable[[], pd.Timestamp] = now) -> "LedgerHistoryProvider":
        """Load every ledger CSV present in ``data_dir``; missing files are treated as empty ledgers"""
        data_dir = Path(data_dir)
        if not data_dir.is_dir():
            raise FileNotFoundError(f"Data directory not found: {data_dir}")

        ledgers = {}
        for name, filename in LEDGER_FILES.items():
            path = data_dir / filename
            if path.exists():
                ledgers[name] = pd.read_csv(path)
                logger.debug(f"Loaded {len(ledgers[name]):,} rows from {path}")
            else:
                logger.warning(f"Ledger file not found: {path} - treating {name} as empty")
        return cls(ledgers, clock=clock)

    @staticmethod
    def _prepare_ledger(name: str, frame: pd.DataFrame) -> pd.DataFrame:
        """Validate required columns and parse the ledger's date column"""
        if name not in LEDGER_COLUMNS:
            raise ValueError(f"Unknown ledger: {name}")

        missing_columns = [col for col in LEDGER_COLUMNS[name] if col not in frame.columns]
        if missing_columns:
            raise ValueError(f"Ledger '{name}' is missing required columns: {missing_columns}")

        frame = frame.copy()
        date_column = LEDGER_DATE_COLUMNS[name]
        # Rows mix date-only, timed and UTC ("Z") stamps; the clock is naive
        parsed = pd.to_datetime(frame[date_column], errors="coerce", format="mixed", utc=True)
        frame[date_column] = parsed.dt.tz_convert(None)

        invalid_dates_mask = frame[date_column].isna()
        if invalid_dates_mask.sum() > 0:
            logger.warning(f"Removing {invalid_dates_mask.sum()} {name} rows with invalid dates")
            frame = pd.DataFrame(frame[~invalid_dates_mask])

        return frame

    def fetch_historical_series(self, metric_type: MetricType, period: Period, point_count: int) -> List[HistoricalPoint]:
        SeriesValidator.validate_period(period)
        adapter = self._adapters.get(metric_type)
        if adapter is None:
            raise UnsupportedForecastTypeError(metric_type)

        points = adapter(period, point_count)
        logger.debug(f"Fetched {len(points)} {period} points for {metric_type}")
        return SeriesValidator.sort_series(points)

    def _window(self, name: str, period: Period, point_count: int) -> pd.DataFrame:
        """Ledger rows whose date falls in [now - point_count periods, now]"""
        frame = self.ledgers.get(name)
        if frame is None or frame.empty:
            return pd.DataFrame(columns=LEDGER_COLUMNS[name])

        end_date = self.clock()
        start_date = subtract_periods(end_date, point_count, period)
        date_column = LEDGER_DATE_COLUMNS[name]
        return cast(pd.DataFrame, frame[(frame[date_column] >= start_date) & (frame[date_column] <= end_date)])

    def _booking_series(self, period: Period, point_count: int) -> List[HistoricalPoint]:
        bookings = self._window("bookings", period, point_count)
        bookings = cast(pd.DataFrame, bookings[bookings["status"].isin(["Confirmed", "Cancelled"])])
        if bookings.empty:
            return []

        bookings = bookings.assign(
            bucket=bucket_start(bookings["created_at"], period),
            confirmed=(bookings["status"] == "Confirmed").astype(int),
        )
        bookings["confirmed_revenue"] = pd.to_numeric(bookings["total_price"], errors="coerce").fillna(0) * bookings[
            "confirmed"
        ]

        grouped = (
            bookings.groupby("bucket")
            .agg(
                bookings=("status", "size"),
                confirmed_bookings=("confirmed", "sum"),
                revenue=("confirmed_revenue", "sum"),
            )
            .reset_index()
        )

        return [
            HistoricalPoint(
                date=pd.Timestamp(row["bucket"]),
                value=float(row["confirmed_bookings"]),
                metadata={"total_bookings": int(row["bookings"]), "revenue": float(row["revenue"])},
            )
            for _, row in grouped.iterrows()
        ]

    def _amount_series(self, name: str, mask_column: str, mask_value, period: Period, point_count: int) -> List[HistoricalPoint]:
        """Sum of ``amount`` per bucket over rows where ``mask_column == mask_value``"""
        ledger = self._window(name, period, point_count)
        ledger = cast(pd.DataFrame, ledger[ledger[mask_column] == mask_value])
        if ledger.empty:
            return []

        date_column = LEDGER_DATE_COLUMNS[name]
        ledger = ledger.assign(
            bucket=bucket_start(ledger[date_column], period),
            amount=pd.to_numeric(ledger["amount"], errors="coerce").fillna(0),
        )
        grouped = ledger.groupby("bucket").agg(total=("amount", "sum"), transactions=("amount", "size")).reset_index()

        return [
            HistoricalPoint(
                date=pd.Timestamp(row["bucket"]),
                value=float(row["total"]),
                metadata={"transactions": int(row["transactions"])},
            )
            for _, row in grouped.iterrows()
        ]

    def _revenue_series(self, period: Period, point_count: int) -> List[HistoricalPoint]:
        return self._amount_series("revenue", "payment_status", "completed", period, point_count)

    def _expense_series(self, period: Period, point_count: int) -> List[HistoricalPoint]:
        return self._amount_series("expenses", "is_approved", True, period, point_count)

    def _occupancy_series(self, period: Period, point_count: int) -> List[HistoricalPoint]:
        kpis = self._window("kpis", period, point_count)
        kpis = cast(pd.DataFrame, kpis[kpis["period"] == period])
        if kpis.empty:
            return []

        kpis = kpis.sort_values("date")
        return [
            HistoricalPoint(
                date=pd.Timestamp(row["date"]),
                value=float(row["occupancy_rate"]),
                metadata={"total_bookings": row["total_bookings"], "revenue": row["total_revenue"]},
            )
            for _, row in kpis.iterrows()
        ]


class StaticHistoryProvider(HistoricalSeriesProvider):
    """Serves pre-built series keyed by (metric_type, period); returns the most recent ``point_count``"""

    def __init__(self, series: Optional[Mapping[tuple, List[HistoricalPoint]]] = None) -> None:
        self.series: Dict[tuple, List[HistoricalPoint]] = {
            key: SeriesValidator.sort_series(points) for key, points in (series or {}).items()
        }
        self.calls: List[tuple] = []

    def fetch_historical_series(self, metric_type: MetricType, period: Period, point_count: int) -> List[HistoricalPoint]:
        SeriesValidator.validate_metric_type(metric_type)
        SeriesValidator.validate_period(period)
        self.calls.append((metric_type, period, point_count))
        points = self.series.get((metric_type, period), [])
        return list(points[-point_count:]) if point_count > 0 else []
