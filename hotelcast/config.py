from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, Mapping

from .types import (
    LINEAR_REGRESSION,
    MOVING_AVERAGE,
    SEASONAL_DECOMPOSITION,
    EXPONENTIAL_SMOOTHING,
)

DEFAULT_MODEL_WEIGHTS: Dict[str, float] = {
    LINEAR_REGRESSION: 0.25,
    MOVING_AVERAGE: 0.20,
    SEASONAL_DECOMPOSITION: 0.35,
    EXPONENTIAL_SMOOTHING: 0.20,
}


@dataclass(frozen=True)
class EnsembleWeights:
    """Per-model weights for the ensemble combiner"""

    weights: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_MODEL_WEIGHTS))
    default_weight: float = 0.25

    def weight_for(self, model: str) -> float:
        return self.weights.get(model, self.default_weight)


@dataclass
class ForecastConfig:
    """Configuration for forecast generation, caching and accuracy tracking"""

    ensemble_weights: EnsembleWeights = field(default_factory=EnsembleWeights)
    smoothing_alpha: float = 0.3
    freshness_window: timedelta = timedelta(days=1)
    accuracy_lookback_months: int = 6
    history_multiplier: int = 2
    seasonal_history_points: int = 24
    historical_context_points: int = 12
    min_history_points: int = 3
    parallel_models: bool = True

    def __post_init__(self) -> None:
        if not 0 < self.smoothing_alpha <= 1:
            raise ValueError(f"smoothing_alpha must be in (0, 1], got {self.smoothing_alpha}")
        if self.min_history_points < 1:
            raise ValueError("min_history_points must be at least 1")
