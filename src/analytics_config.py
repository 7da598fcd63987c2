"""Central analytics configuration.

Tunable constants for trend classification, rounding and the group
breakdown live here. Each can be overridden from the environment.
"""

import os

# Slope above +threshold is "up", below -threshold is "down"
TREND_THRESHOLD = float(os.environ.get("ANALYTICS_TREND_THRESHOLD", "0.01"))

# Number of groups kept by the per-elevator breakdown
DEFAULT_TOP_N = int(os.environ.get("ANALYTICS_TOP_N", "3"))

# Decimal places for reported averages/min/max and for the regression slope
VALUE_DECIMALS = 2
SLOPE_DECIMALS = 4

# Crop class pre-selected by the analytics page
DEFAULT_CROP_CLASS_CODE = os.environ.get("ANALYTICS_DEFAULT_CROP_CLASS", "CWRS")
