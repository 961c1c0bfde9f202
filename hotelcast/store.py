"""
Forecast Store Module

Persistence interface for forecast records plus an in-memory implementation and a
CSV-backed one used by the command line tool.
"""

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import pandas as pd

from .exceptions import NotFoundError
from .types import ENSEMBLE, ForecastKey, ForecastRecord, MetricType, ModelKind, Period

logger = logging.getLogger(__name__)

# Fields an upsert overwrites; identity and validation fields are left alone
UPSERT_FIELDS = (
    "predicted_value",
    "confidence",
    "upper_bound",
    "lower_bound",
    "generated_at",
    "generated_by",
)

CSV_COLUMNS = [
    "id",
    "type",
    "period",
    "forecast_date",
    "model",
    "predicted_value",
    "confidence",
    "upper_bound",
    "lower_bound",
    "generated_at",
    "generated_by",
    "actual_value",
    "accuracy_score",
    "validated",
    "validated_at",
]


class ForecastStore(ABC):
    """Persistence interface for forecast records"""

    @abstractmethod
    def load_cached_forecast(self, metric_type: MetricType, period: Period, as_of: datetime) -> Optional[ForecastRecord]:
        """Most recently generated record of the metric whose forecast date is at or after ``as_of``"""
        pass

    @abstractmethod
    def list_upcoming(
        self, metric_type: MetricType, period: Period, as_of: datetime, model: ModelKind = ENSEMBLE
    ) -> List[ForecastRecord]:
        """Records of one model with forecast date at or after ``as_of``, ordered by forecast date"""
        pass

    @abstractmethod
    def persist_forecast_records(self, records: Iterable[ForecastRecord]) -> List[ForecastRecord]:
        """Upsert records keyed by (type, period, forecast_date, model); returns the stored copies"""
        pass

    @abstractmethod
    def get_forecast(self, forecast_id: str) -> Optional[ForecastRecord]:
        pass

    @abstractmethod
    def mark_validated(
        self, forecast_id: str, actual_value: float, accuracy_score: float, validated_at: datetime
    ) -> ForecastRecord:
        """Record ground truth for one forecast; raises NotFoundError for unknown ids"""
        pass

    @abstractmethod
    def find_validated(self, metric_type: MetricType, period: Period, since: datetime) -> List[ForecastRecord]:
        """Validated records of the metric generated at or after ``since``"""
        pass


class InMemoryForecastStore(ForecastStore):
    """Dictionary-backed store; safe to share between threads"""

    def __init__(self) -> None:
        self._records: Dict[ForecastKey, ForecastRecord] = {}
        self._ids: Dict[str, ForecastKey] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._records)

    def all_records(self) -> List[ForecastRecord]:
        with self._lock:
            return [replace(record) for record in self._records.values()]

    def load_cached_forecast(self, metric_type: MetricType, period: Period, as_of: datetime) -> Optional[ForecastRecord]:
        as_of = pd.Timestamp(as_of)
        with self._lock:
            candidates = [
                record
                for record in self._records.values()
                if record.type == metric_type and record.period == period and pd.Timestamp(record.forecast_date) >= as_of
            ]
            if not candidates:
                return None
            latest = max(candidates, key=lambda record: pd.Timestamp(record.generated_at))
            return replace(latest)

    def list_upcoming(
        self, metric_type: MetricType, period: Period, as_of: datetime, model: ModelKind = ENSEMBLE
    ) -> List[ForecastRecord]:
        as_of = pd.Timestamp(as_of)
        with self._lock:
            upcoming = [
                replace(record)
                for record in self._records.values()
                if record.type == metric_type
                and record.period == period
                and record.model == model
                and pd.Timestamp(record.forecast_date) >= as_of
            ]
        return sorted(upcoming, key=lambda record: pd.Timestamp(record.forecast_date))

    def persist_forecast_records(self, records: Iterable[ForecastRecord]) -> List[ForecastRecord]:
        stored = []
        with self._lock:
            for record in records:
                key = record.key
                existing = self._records.get(key)
                if existing is None:
                    merged = replace(record, forecast_date=pd.Timestamp(record.forecast_date), id=record.id or uuid.uuid4().hex)
                    self._ids[merged.id] = key
                else:
                    merged = replace(existing, **{name: getattr(record, name) for name in UPSERT_FIELDS})
                self._records[key] = merged
                stored.append(replace(merged))
            self._after_write()
            total = len(self._records)
        logger.debug(f"Persisted {len(stored)} forecast records ({total} in store)")
        return stored

    def get_forecast(self, forecast_id: str) -> Optional[ForecastRecord]:
        with self._lock:
            key = self._ids.get(forecast_id)
            if key is None:
                return None
            return replace(self._records[key])

    def mark_validated(
        self, forecast_id: str, actual_value: float, accuracy_score: float, validated_at: datetime
    ) -> ForecastRecord:
        with self._lock:
            key = self._ids.get(forecast_id)
            if key is None:
                raise NotFoundError(forecast_id)
            updated = replace(
                self._records[key],
                actual_value=actual_value,
                accuracy_score=accuracy_score,
                validated=True,
                validated_at=validated_at,
            )
            self._records[key] = updated
            self._after_write()
            return replace(updated)

    def find_validated(self, metric_type: MetricType, period: Period, since: datetime) -> List[ForecastRecord]:
        since = pd.Timestamp(since)
        with self._lock:
            return [
                replace(record)
                for record in self._records.values()
                if record.type == metric_type
                and record.period == period
                and record.validated
                and pd.Timestamp(record.generated_at) >= since
            ]

    def _after_write(self) -> None:
        """Hook for subclasses that mirror writes elsewhere; called with the lock held"""
        pass

    def to_frame(self) -> pd.DataFrame:
        with self._lock:
            rows = [record.to_dict() for record in self._records.values()]
        frame = pd.DataFrame(rows, columns=CSV_COLUMNS)
        return frame.sort_values(["type", "period", "model", "forecast_date"]).reset_index(drop=True)


class CsvForecastStore(InMemoryForecastStore):
    """In-memory store mirrored to a CSV file after every write"""

    def __init__(self, path: Union[str, Path]) -> None:
        super().__init__()
        self.path = Path(path)
        if self.path.exists():
            self._load()

    def _load(self) -> None:
        frame = pd.read_csv(
            self.path,
            parse_dates=["forecast_date", "generated_at", "validated_at"],
            dtype={"id": str, "type": str, "period": str, "model": str, "generated_by": str},
        )
        for row in frame.to_dict("records"):
            record = ForecastRecord(
                id=str(row["id"]),
                type=row["type"],
                period=row["period"],
                forecast_date=pd.Timestamp(row["forecast_date"]),
                model=row["model"],
                predicted_value=float(row["predicted_value"]),
                confidence=float(row["confidence"]),
                upper_bound=float(row["upper_bound"]),
                lower_bound=float(row["lower_bound"]),
                generated_at=pd.Timestamp(row["generated_at"]),
                generated_by=row["generated_by"],
                actual_value=_optional_float(row["actual_value"]),
                accuracy_score=_optional_float(row["accuracy_score"]),
                validated=_as_bool(row["validated"]),
                validated_at=None if pd.isna(row["validated_at"]) else pd.Timestamp(row["validated_at"]),
            )
            self._records[record.key] = record
            self._ids[record.id] = record.key
        logger.debug(f"Loaded {len(self._records)} forecast records from {self.path}")

    def _after_write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.to_frame().to_csv(self.path, index=False)


def _optional_float(value) -> Optional[float]:
    return None if pd.isna(value) else float(value)


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)
