"""
Seasonality Analysis Module

Computes multiplicative seasonal indices for a metric series, classifies how seasonal
the series is and derives advisory recommendations for pricing, staffing and marketing.
The index routine is shared with the seasonal decomposition forecaster.
"""

import logging
from typing import List, Sequence

import numpy as np

from .exceptions import InsufficientDataError
from .types import HistoricalPoint, Recommendation, SeasonalityReport

logger = logging.getLogger(__name__)

STABLE_VARIANCE = 0.1
MODERATE_VARIANCE = 0.3
MARKETING_SEASONALITY = 0.5


def calculate_seasonal_indices(series: Sequence[HistoricalPoint], season_length: int) -> List[float]:
    """
    Seasonal factor per position in the cycle, relative to the overall mean.

    Position ``b`` collects every point whose index ``i`` satisfies ``i % season_length == b``.
    Empty positions take the overall mean (factor 1.0); a non-positive overall mean
    yields 1.0 for every position.
    """
    if season_length < 1:
        raise ValueError(f"season_length must be positive, got {season_length}")

    values = np.array([point.value for point in series], dtype=float)
    if len(values) == 0:
        return [1.0] * season_length

    overall_mean = float(values.mean())
    positions = np.arange(len(values)) % season_length

    indices = []
    for bucket in range(season_length):
        bucket_values = values[positions == bucket]
        season_mean = float(bucket_values.mean()) if len(bucket_values) > 0 else overall_mean
        indices.append(season_mean / overall_mean if overall_mean > 0 else 1.0)

    return indices


def identify_seasonal_pattern(indices: Sequence[float]) -> str:
    """Classify a set of seasonal indices by their population variance"""
    variance = float(np.var(np.asarray(indices, dtype=float))) if len(indices) > 0 else 0.0

    if variance < STABLE_VARIANCE:
        return "stable"
    if variance < MODERATE_VARIANCE:
        return "moderate_seasonal"
    return "highly_seasonal"


def analyze_seasonality(series: Sequence[HistoricalPoint], season_length: int) -> SeasonalityReport:
    """Build a SeasonalityReport for the series"""
    if len(series) == 0:
        raise InsufficientDataError("No historical data available for seasonality analysis", required=1, available=0)

    indices = calculate_seasonal_indices(series, season_length)
    highest = max(indices)
    lowest = min(indices)

    report: SeasonalityReport = {
        "indices": indices,
        # 1-based, first occurrence wins on ties
        "peak_season": indices.index(highest) + 1,
        "low_season": indices.index(lowest) + 1,
        "seasonality": highest - lowest,
        "pattern": identify_seasonal_pattern(indices),
    }
    logger.debug(
        f"Seasonality over {len(series)} points: pattern={report['pattern']}, "
        f"amplitude={report['seasonality']:.3f}, peak={report['peak_season']}, low={report['low_season']}"
    )
    return report


def generate_seasonal_recommendations(report: SeasonalityReport) -> List[Recommendation]:
    recommendations: List[Recommendation] = []

    if report["pattern"] == "highly_seasonal":
        recommendations.append(
            {
                "type": "pricing",
                "message": "Consider dynamic pricing based on seasonal demand patterns",
                "priority": "high",
            }
        )
        recommendations.append(
            {
                "type": "staffing",
                "message": f"Increase staffing during peak season (period {report['peak_season']})",
                "priority": "medium",
            }
        )

    if report["seasonality"] > MARKETING_SEASONALITY:
        recommendations.append(
            {
                "type": "marketing",
                "message": f"Focus marketing efforts during low season (period {report['low_season']})",
                "priority": "medium",
            }
        )

    return recommendations
