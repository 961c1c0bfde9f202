"""
Forecasting engine exceptions.

Store and history-provider I/O errors are not wrapped; they reach the caller unchanged.
"""

from typing import Any, Dict, Optional


class ForecastingError(Exception):
    """Base class for every error raised by the forecasting engine"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | details: {self.details}"
        return self.message


class InsufficientDataError(ForecastingError):
    """Not enough historical points to forecast yet"""

    def __init__(self, message: str, required: Optional[int] = None, available: Optional[int] = None):
        details = {}
        if required is not None:
            details["required"] = required
        if available is not None:
            details["available"] = available
        self.required = required
        self.available = available
        super().__init__(message, details)


class UnsupportedForecastTypeError(ForecastingError):
    def __init__(self, metric_type: str):
        self.metric_type = metric_type
        super().__init__(f"Unsupported forecast type: {metric_type}", {"type": metric_type})


class UnsupportedPeriodError(ForecastingError):
    def __init__(self, period: str):
        self.period = period
        super().__init__(f"Unsupported period: {period}", {"period": period})


class InvalidHorizonError(ForecastingError):
    def __init__(self, horizon: Any):
        self.horizon = horizon
        super().__init__(f"Forecast horizon must be a positive integer, got {horizon!r}", {"horizon": horizon})


class NotFoundError(ForecastingError):
    """Forecast record does not exist"""

    def __init__(self, forecast_id: str):
        self.forecast_id = forecast_id
        super().__init__("Forecast not found", {"forecast_id": forecast_id})
