# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Policy constants for billing classification and the balance-point scan.

Every default used by the engine lives here so that auditors can trace a
result back to a concrete number.  :class:`heat_load.config.EngineSettings`
exposes the tunable ones.
"""

# ---------------------------------------------------------------------------
# Billing period policy
# ---------------------------------------------------------------------------
MIN_PERIOD_LENGTH_DAYS = 20        # Shorter bills are excluded by default

# Mean outdoor temperature (°F) bands used to classify a billing period
HEATING_MAX_MEAN_TEMPERATURE = 60.0   # Below this = heating
COOLING_MIN_MEAN_TEMPERATURE = 70.0   # Above this = cooling
# In between = base load

# ---------------------------------------------------------------------------
# Balance-point scan
# ---------------------------------------------------------------------------
MIN_BALANCE_POINT = 55.0
MAX_BALANCE_POINT = 75.0
BALANCE_POINT_STEP = 1.0

# ---------------------------------------------------------------------------
# Outlier elimination
# ---------------------------------------------------------------------------
OUTLIER_Z_THRESHOLD = 2.0
MAX_OUTLIER_ITERATIONS = 5
MIN_REGRESSION_RECORDS = 3         # OLS with n - 2 degrees of freedom

# ---------------------------------------------------------------------------
# Heat-load curve
# ---------------------------------------------------------------------------
COMPARISON_SET_POINT = 70.0        # Design-day thermostat set point (°F)
CURVE_RANGE_BELOW_DESIGN = 10.0    # Curve starts this far below design temp
HOURS_PER_DAY = 24.0
