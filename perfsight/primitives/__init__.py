"""
Numeric primitives: descriptive statistics, regression, trend tests.

Pure functions over arrays. Degenerate input (empty, too short, flat)
returns a zeroed result instead of raising.
"""

from perfsight.primitives.statistics import (
    calculate_statistics,
    percentile,
    percentile_rank,
    moving_average,
)
from perfsight.primitives.regression import linear_regression, linear_regression_xy
from perfsight.primitives.trend import mann_kendall_test, exponential_smoothing
