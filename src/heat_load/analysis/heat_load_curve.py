# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Average and maximum heat-load lines for charting.

The curve spans from ten degrees below the design temperature up to the
comparison set point.  Each line is straight, so three temperatures are
enough for a charting collaborator to draw it:

- ``design_temperature - 10`` -- start of the range
- ``design_temperature`` -- carries the rounded point marker
- the comparison set point -- end of the range
"""

from __future__ import annotations

import math

from heat_load.analysis.thresholds import COMPARISON_SET_POINT, CURVE_RANGE_BELOW_DESIGN
from heat_load.data.models import HeatLoadGraphPoint, HeatLoadSummary, HomeThermalProfile


def round_half_up(value: float) -> float:
    """Round to the nearest whole unit, halves away from zero."""
    return float(math.copysign(math.floor(abs(value) + 0.5), value))


class HeatLoadCurveBuilder:
    """Derive graphable average/maximum heat-load points from a summary."""

    def __init__(self, set_point: float = COMPARISON_SET_POINT) -> None:
        self.set_point = set_point

    def avg_heat_load(self, summary: HeatLoadSummary, temperature: float) -> float:
        """Heat load in BTU/h at *temperature* for the average indoor temperature."""
        return summary.whole_home_heat_loss_rate * (
            summary.average_indoor_temperature - temperature
        )

    def max_heat_load(
        self, summary: HeatLoadSummary, temperature: float, design_indoor: float
    ) -> float:
        """Heat load in BTU/h at *temperature* for the design indoor temperature."""
        return summary.whole_home_heat_loss_rate * (design_indoor - temperature)

    def build(
        self,
        summary: HeatLoadSummary,
        profile: HomeThermalProfile | None = None,
    ) -> list[HeatLoadGraphPoint]:
        """Return the six chart points: three on the avg line, three on the max.

        The design indoor temperature blends the set point with the
        profile's setback schedule; without a profile it is the set point.
        """
        design = summary.design_temperature
        start = design - CURVE_RANGE_BELOW_DESIGN
        end = self.set_point
        if profile is not None:
            design_indoor = profile.design_indoor_temperature(self.set_point)
        else:
            design_indoor = self.set_point

        avg_at_design = self.avg_heat_load(summary, design)
        max_at_design = self.max_heat_load(summary, design, design_indoor)

        return [
            HeatLoadGraphPoint(
                temperature=start,
                avg_line=self.avg_heat_load(summary, start),
            ),
            HeatLoadGraphPoint(
                temperature=design,
                avg_line=avg_at_design,
                avg_point=round_half_up(avg_at_design),
            ),
            HeatLoadGraphPoint(
                temperature=end,
                avg_line=self.avg_heat_load(summary, end),
            ),
            HeatLoadGraphPoint(
                temperature=start,
                max_line=self.max_heat_load(summary, start, design_indoor),
            ),
            HeatLoadGraphPoint(
                temperature=design,
                max_line=max_at_design,
                max_point=round_half_up(max_at_design),
            ),
            HeatLoadGraphPoint(
                temperature=end,
                max_line=self.max_heat_load(summary, end, design_indoor),
            ),
        ]
