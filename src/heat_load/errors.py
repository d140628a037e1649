# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Exception and warning types raised by the heat-load analytics engine.

Only :class:`ValidationError` is fatal to an analysis call.  Weather gaps
are handled per record and non-convergence of the outlier loop is reported
through a warning plus the ``converged`` flag on the summary.
"""

from __future__ import annotations

from datetime import date


class HeatLoadError(Exception):
    """Base class for all engine errors."""


class ValidationError(HeatLoadError):
    """Malformed input rejected before any computation.

    Carries the offending *field* and a human-readable *reason* so that
    callers can surface a field-level message.
    """

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


class DataGapError(HeatLoadError):
    """The weather series does not cover a billing period."""

    def __init__(self, start: date, end: date, missing: int) -> None:
        self.start = start
        self.end = end
        self.missing = missing
        super().__init__(
            f"weather series is missing {missing} day(s) between "
            f"{start.isoformat()} and {end.isoformat()}"
        )


class AnalysisCancelled(HeatLoadError):
    """A newer request superseded this analysis before it finished."""


class ConfigError(HeatLoadError):
    """An engine settings file could not be loaded or validated."""


class InputFileError(HeatLoadError):
    """A case or result file is not valid JSON or does not match its model."""


class RegressionNonConvergence(UserWarning):
    """The outlier set did not stabilize within the iteration cap."""
