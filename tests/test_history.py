"""Test ledger bucketing and date helpers."""

import pandas as pd
import pytest

from hotelcast.exceptions import UnsupportedForecastTypeError, UnsupportedPeriodError
from hotelcast.history import LedgerHistoryProvider, StaticHistoryProvider
from hotelcast.utils import add_period, bucket_start, calculate_horizon


@pytest.fixture
def ledgers():
    bookings = pd.DataFrame(
        {
            "created_at": [
                "2026-04-03",
                "2026-04-20",
                "2026-04-21",
                "2026-05-02",
                "2026-05-09",
                "2026-05-10",
                "2024-01-10",  # outside any window used below
            ],
            "status": ["Confirmed", "Cancelled", "Pending", "Confirmed", "Confirmed", "Cancelled", "Confirmed"],
            "total_price": [200.0, 150.0, 90.0, 300.0, 100.0, 80.0, 999.0],
        }
    )
    revenue = pd.DataFrame(
        {
            "received_at": ["2026-04-05", "2026-04-06", "2026-05-01", "2026-05-02"],
            "payment_status": ["completed", "pending", "completed", "completed"],
            "amount": [100.0, 50.0, 70.0, 30.0],
        }
    )
    expenses = pd.DataFrame(
        {
            "paid_at": ["2026-06-01", "2026-06-01", "2026-06-02", "not a date"],
            "is_approved": [True, False, True, True],
            "amount": [10.0, 99.0, 15.0, 5.0],
        }
    )
    kpis = pd.DataFrame(
        {
            "date": ["2026-04-01", "2026-05-01", "2026-06-01", "2026-06-10"],
            "period": ["monthly", "monthly", "monthly", "daily"],
            "occupancy_rate": [71.5, 80.0, 88.25, 90.0],
            "total_bookings": [40, 44, 50, 3],
            "total_revenue": [4000.0, 4400.0, 5000.0, 300.0],
        }
    )
    return {"bookings": bookings, "revenue": revenue, "expenses": expenses, "kpis": kpis}


@pytest.fixture
def ledger_provider(ledgers, clock):
    return LedgerHistoryProvider(ledgers, clock=clock)


class TestLedgerHistoryProvider:
    def test_booking_demand_monthly(self, ledger_provider):
        points = ledger_provider.fetch_historical_series("booking_demand", "monthly", 12)

        assert [point.date for point in points] == [pd.Timestamp("2026-04-01"), pd.Timestamp("2026-05-01")]
        assert [point.value for point in points] == [1.0, 2.0]
        assert points[0].metadata == {"total_bookings": 2, "revenue": 200.0}
        assert points[1].metadata == {"total_bookings": 3, "revenue": 400.0}

    def test_booking_demand_daily(self, ledger_provider):
        points = ledger_provider.fetch_historical_series("booking_demand", "daily", 60)
        assert [point.date.day for point in points] == [20, 2, 9, 10]
        assert [point.value for point in points] == [0.0, 1.0, 1.0, 0.0]

    def test_window_excludes_old_rows(self, ledger_provider):
        points = ledger_provider.fetch_historical_series("booking_demand", "monthly", 1)
        # window starts 2026-05-15 12:00
        assert points == []

    def test_revenue(self, ledger_provider):
        points = ledger_provider.fetch_historical_series("revenue", "monthly", 12)
        assert [point.value for point in points] == [100.0, 100.0]
        assert [point.metadata["transactions"] for point in points] == [1, 2]

    def test_expenses_skip_unapproved_and_invalid_dates(self, ledger_provider):
        points = ledger_provider.fetch_historical_series("expenses", "daily", 30)
        assert [(point.date, point.value) for point in points] == [
            (pd.Timestamp("2026-06-01"), 10.0),
            (pd.Timestamp("2026-06-02"), 15.0),
        ]

    def test_occupancy_filters_period(self, ledger_provider):
        points = ledger_provider.fetch_historical_series("occupancy", "monthly", 12)
        assert [point.value for point in points] == [71.5, 80.0, 88.25]
        assert points[-1].metadata["total_bookings"] == 50

    def test_weekly_buckets_start_on_monday(self, ledger_provider):
        points = ledger_provider.fetch_historical_series("revenue", "weekly", 20)
        assert all(point.date.dayofweek == 0 for point in points)

    def test_missing_ledger_is_empty(self, clock):
        provider = LedgerHistoryProvider({}, clock=clock)
        assert provider.fetch_historical_series("revenue", "monthly", 12) == []

    def test_unsupported_type(self, ledger_provider):
        with pytest.raises(UnsupportedForecastTypeError):
            ledger_provider.fetch_historical_series("laundry", "monthly", 12)

    def test_unsupported_period(self, ledger_provider):
        with pytest.raises(UnsupportedPeriodError):
            ledger_provider.fetch_historical_series("revenue", "yearly", 12)

    def test_missing_columns(self, clock):
        with pytest.raises(ValueError, match="missing required columns"):
            LedgerHistoryProvider({"revenue": pd.DataFrame({"amount": [1.0]})}, clock=clock)

    def test_from_csv_dir(self, ledgers, tmp_path, clock):
        ledgers["revenue"].to_csv(tmp_path / "revenue.csv", index=False)
        provider = LedgerHistoryProvider.from_csv_dir(tmp_path, clock=clock)

        assert [point.value for point in provider.fetch_historical_series("revenue", "monthly", 12)] == [100.0, 100.0]
        assert provider.fetch_historical_series("booking_demand", "monthly", 12) == []

    def test_from_missing_dir(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            LedgerHistoryProvider.from_csv_dir(tmp_path / "nope")

    def test_mixed_date_formats_are_kept(self, clock):
        revenue = pd.DataFrame(
            {
                "received_at": ["2026-03-17 15:30", "2026-04-01", "2026-05-02"],
                "payment_status": ["completed"] * 3,
                "amount": [100.0, 200.0, 300.0],
            }
        )
        provider = LedgerHistoryProvider({"revenue": revenue}, clock=clock)

        points = provider.fetch_historical_series("revenue", "monthly", 6)
        assert [point.value for point in points] == [100.0, 200.0, 300.0]

    def test_utc_timestamps_become_naive(self, clock):
        revenue = pd.DataFrame(
            {
                "received_at": ["2026-04-08T00:00:00.000Z", "2026-05-31T23:30:00.000Z", "2026-06-02T10:00:00+02:00"],
                "payment_status": ["completed"] * 3,
                "amount": [10.0, 20.0, 30.0],
            }
        )
        provider = LedgerHistoryProvider({"revenue": revenue}, clock=clock)

        assert provider.ledgers["revenue"]["received_at"].dt.tz is None
        points = provider.fetch_historical_series("revenue", "monthly", 6)
        assert [(point.date, point.value) for point in points] == [
            (pd.Timestamp("2026-04-01"), 10.0),
            (pd.Timestamp("2026-05-01"), 20.0),
            (pd.Timestamp("2026-06-01"), 30.0),
        ]


class TestStaticHistoryProvider:
    def test_returns_most_recent_points(self, make_series):
        provider = StaticHistoryProvider({("revenue", "monthly"): make_series([1, 2, 3, 4, 5])})
        assert [point.value for point in provider.fetch_historical_series("revenue", "monthly", 2)] == [4.0, 5.0]

    def test_sorts_input(self, make_series):
        series = make_series([1, 2, 3])
        provider = StaticHistoryProvider({("revenue", "monthly"): list(reversed(series))})
        assert provider.fetch_historical_series("revenue", "monthly", 3) == series


class TestDateHelpers:
    def test_add_period(self):
        assert add_period("2026-01-31", 1, "monthly") == pd.Timestamp("2026-02-28")
        assert add_period("2026-01-31", 2, "weekly") == pd.Timestamp("2026-02-14")
        assert add_period("2026-01-31", 3, "daily") == pd.Timestamp("2026-02-03")

    def test_add_period_unknown(self):
        with pytest.raises(UnsupportedPeriodError):
            add_period("2026-01-31", 1, "fortnightly")

    @pytest.mark.parametrize(
        "start,end,period,expected",
        [
            ("2026-01-01", "2026-03-02", "monthly", 2),
            ("2026-01-01", "2026-03-03", "monthly", 3),
            ("2026-01-01", "2026-01-15", "weekly", 2),
            ("2026-01-01", "2026-01-04 01:00", "daily", 4),
        ],
    )
    def test_calculate_horizon(self, start, end, period, expected):
        assert calculate_horizon(start, end, period) == expected

    def test_bucket_start(self):
        dates = pd.Series(pd.to_datetime(["2026-03-17 15:30", "2026-03-01"], format="mixed"))
        assert list(bucket_start(dates, "monthly")) == [pd.Timestamp("2026-03-01")] * 2
        assert list(bucket_start(dates, "weekly")) == [pd.Timestamp("2026-03-16"), pd.Timestamp("2026-02-23")]
        assert list(bucket_start(dates, "daily")) == [pd.Timestamp("2026-03-17"), pd.Timestamp("2026-03-01")]
