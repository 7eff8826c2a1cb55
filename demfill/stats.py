"""Summary statistics over the valid cells of a DEM."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from demfill.grid import NO_DATA_VALUE, Dem


@dataclass(frozen=True)
class Statistics:
    minimum: float
    maximum: float
    mean: float
    std_dev: float


def calculate_statistics(dem: Dem) -> Statistics:
    """Minimum, maximum, mean and population standard deviation of valid cells.

    Raises ValueError when the grid has no valid cells.
    """
    values = dem.data.astype(np.float64).ravel()
    values = values[np.abs(values - NO_DATA_VALUE) >= 0.00001]
    if values.size == 0:
        raise ValueError("the DEM has no valid cells")
    count = values.size
    mean = float(values.sum()) / count
    mean_square = float((values * values).sum()) / count
    variance = max(mean_square - mean * mean, 0.0)
    return Statistics(
        minimum=float(values.min()),
        maximum=float(values.max()),
        mean=mean,
        std_dev=math.sqrt(variance),
    )