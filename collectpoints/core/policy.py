from __future__ import annotations
from typing import Optional
import numpy as np

from .collection import CollectMode
from .utils import distance


def effective_minimum_distance(config) -> float:
    """Configured gate distance in automatic mode, 0 (no gate) otherwise."""
    if config.mode == CollectMode.AUTOMATIC:
        return float(config.minimum_distance_mm)
    return 0.0


def should_capture(
    mode: CollectMode,
    minimum_distance_mm: float,
    candidate: np.ndarray,
    last_point: Optional[np.ndarray],
) -> bool:
    if mode != CollectMode.AUTOMATIC:
        return True
    if minimum_distance_mm <= 0.0 or last_point is None:
        return True
    # ties are kept
    return distance(candidate, last_point) >= minimum_distance_mm
