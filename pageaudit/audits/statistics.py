"""Log-normal distribution used for numeric audit scoring."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class LogNormalDistribution:
    """Log-normal distribution parameterized by location (ln median) and shape."""

    location: float
    shape: float

    def complementary_percentile(self, x: float) -> float:
        """Fraction of the distribution above x."""
        if x <= 0:
            return 1.0
        standardized = (math.log(x) - self.location) / (math.sqrt(2) * self.shape)
        return (1 - math.erf(standardized)) / 2


def get_log_normal_distribution(median: float, falloff: float) -> LogNormalDistribution:
    """
    Fit a log-normal distribution from two control points.

    `median` maps to the 50th percentile. `falloff` (the point of
    diminishing returns) is the smaller positive inflection point of the
    PDF, which places it at roughly the 90th percentile of the
    complementary CDF.

    Raises:
        ValueError: if either point is not positive or falloff >= median.
    """
    if median <= 0 or falloff <= 0:
        raise ValueError("median and falloff must be positive")
    if falloff >= median:
        raise ValueError("falloff (point of diminishing returns) must be below the median")

    location = math.log(median)
    log_ratio = math.log(falloff / median)
    shape = math.sqrt(1 - 3 * log_ratio - math.sqrt((log_ratio - 3) ** 2 - 8)) / 2
    return LogNormalDistribution(location=location, shape=shape)
