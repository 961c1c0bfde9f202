import logging
from typing import List, Optional, Sequence

from ..config import EnsembleWeights
from ..types import ENSEMBLE, ModelForecastPoint

logger = logging.getLogger(__name__)

UPPER_BOUND_FACTOR = 1.2
LOWER_BOUND_FACTOR = 0.8


def combine_forecasts(
    forecasts: Sequence[Sequence[ModelForecastPoint]],
    weights: Optional[EnsembleWeights] = None,
) -> List[ModelForecastPoint]:
    """
    Weighted arithmetic mean of the model forecasts at each horizon step.

    Args:
        forecasts: One list of points per model, all anchored on the same dates
        weights: Model weights; unknown models get ``weights.default_weight``

    Returns:
        Ensemble points with +/-20% bounds. Steps missing from a model only count the
        models that have them, so the result stays finite when a model is absent.
    """
    weights = weights or EnsembleWeights()
    model_outputs = [points for points in forecasts if points]
    if not model_outputs:
        return []

    anchor = model_outputs[0]
    combined = []
    for step, anchor_point in enumerate(anchor):
        weighted_value = 0.0
        weighted_confidence = 0.0
        total_weight = 0.0

        for points in model_outputs:
            if step >= len(points):
                continue
            point = points[step]
            weight = weights.weight_for(point.model)
            weighted_value += point.predicted_value * weight
            weighted_confidence += point.confidence * weight
            total_weight += weight

        if total_weight <= 0:
            logger.warning(f"  Zero total weight at step {step + 1} - ensemble value set to 0")
            value, confidence = 0.0, 0.0
        else:
            value = weighted_value / total_weight
            confidence = weighted_confidence / total_weight

        combined.append(
            ModelForecastPoint(
                forecast_date=anchor_point.forecast_date,
                predicted_value=value,
                confidence=confidence,
                model=ENSEMBLE,
                upper_bound=value * UPPER_BOUND_FACTOR,
                lower_bound=value * LOWER_BOUND_FACTOR,
            )
        )

    return combined
