"""
Shared fixtures for the forecasting engine test suite.

Everything runs against in-memory stores, static series and a controllable clock,
so no ledger database or wall-clock time is involved.
"""

from typing import List, Sequence

import pandas as pd
import pytest

from hotelcast import ForecastConfig, ForecastOrchestrator, InMemoryForecastStore, StaticHistoryProvider
from hotelcast.types import HistoricalPoint
from hotelcast.utils import add_period

FIXED_NOW = pd.Timestamp("2026-06-15 12:00:00")


class FakeClock:
    """Callable clock that only moves when told to"""

    def __init__(self, start: pd.Timestamp = FIXED_NOW) -> None:
        self.current = pd.Timestamp(start)

    def __call__(self) -> pd.Timestamp:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + pd.Timedelta(**kwargs)


def build_series(
    values: Sequence[float], start: str = "2025-01-01", period: str = "monthly"
) -> List[HistoricalPoint]:
    return [HistoricalPoint(date=add_period(start, i, period), value=float(v)) for i, v in enumerate(values)]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_series():
    """Factory building an ascending series of HistoricalPoints one period apart"""
    return build_series


@pytest.fixture
def store():
    return InMemoryForecastStore()


@pytest.fixture
def monthly_history():
    """Twelve monthly revenue points, the last one being the current month of FIXED_NOW"""
    values = [100, 110, 120, 130, 140, 150, 160, 170, 180, 190, 200, 210]
    return build_series(values, start="2025-07-01", period="monthly")


@pytest.fixture
def provider(monthly_history):
    return StaticHistoryProvider({("revenue", "monthly"): monthly_history})


@pytest.fixture
def orchestrator(provider, store, clock):
    return ForecastOrchestrator(history_provider=provider, store=store, config=ForecastConfig(), clock=clock)
