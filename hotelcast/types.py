from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, TypedDict

import pandas as pd

# Type aliases
MetricType = str  # booking_demand, revenue, expenses, occupancy
Period = str  # daily, weekly, monthly
ModelKind = str  # linear_regression, moving_average, ...
ForecastKey = tuple  # (type, period, forecast_date, model)

LINEAR_REGRESSION = "linear_regression"
MOVING_AVERAGE = "moving_average"
SEASONAL_DECOMPOSITION = "seasonal_decomposition"
EXPONENTIAL_SMOOTHING = "exponential_smoothing"
ENSEMBLE = "ensemble"

MODEL_KINDS = (
    LINEAR_REGRESSION,
    MOVING_AVERAGE,
    SEASONAL_DECOMPOSITION,
    EXPONENTIAL_SMOOTHING,
    ENSEMBLE,
)

METRIC_TYPES = ("booking_demand", "revenue", "expenses", "occupancy")
PERIODS = ("daily", "weekly", "monthly")


@dataclass(frozen=True)
class HistoricalPoint:
    """One time bucket of a historical metric series"""

    date: pd.Timestamp
    value: float
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)


# Read-only snapshot handed to every model within one run
Series = Sequence[HistoricalPoint]


@dataclass
class ModelForecastPoint:
    forecast_date: pd.Timestamp
    predicted_value: float
    confidence: float
    model: ModelKind
    seasonal_factor: Optional[float] = None
    upper_bound: Optional[float] = None
    lower_bound: Optional[float] = None


@dataclass
class ForecastRecord:
    """Persisted forecast point, unique per (type, period, forecast_date, model)"""

    type: MetricType
    period: Period
    forecast_date: pd.Timestamp
    predicted_value: float
    confidence: float
    upper_bound: float
    lower_bound: float
    model: ModelKind
    generated_at: datetime
    generated_by: str = "ai_system"
    id: Optional[str] = None
    actual_value: Optional[float] = None
    accuracy_score: Optional[float] = None
    validated: bool = False
    validated_at: Optional[datetime] = None

    @property
    def key(self) -> ForecastKey:
        return (self.type, self.period, pd.Timestamp(self.forecast_date), self.model)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class Recommendation(TypedDict):
    type: str
    message: str
    priority: str


class SeasonalityReport(TypedDict):
    indices: List[float]
    peak_season: int
    low_season: int
    seasonality: float
    pattern: str


class AccuracySummary(TypedDict, total=False):
    overall: Optional[float]
    by_model: Dict[str, float]
    sample_size: int
    mae: Optional[float]
    mape: Optional[float]


@dataclass
class ForecastReport:
    """Bundle returned by ForecastOrchestrator.generate_forecast"""

    type: MetricType
    period: Period
    horizon: int
    forecasts: List[ForecastRecord]
    historical: List[HistoricalPoint]
    accuracy: AccuracySummary
    generated_at: datetime
    next_update: datetime
    cached: bool = False

    def to_frame(self) -> pd.DataFrame:
        """Forecast rows as a DataFrame, one row per forecast date"""
        return pd.DataFrame([record.to_dict() for record in self.forecasts])
