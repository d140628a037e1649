"""Home and climate presets for synthetic analysis cases.

Each preset pairs a :class:`HomeThermalProfile` with a simple annual
temperature model and the "true" building physics the generator bakes
into the simulated bills, so the engine's estimates can be checked
against known answers.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from heat_load.data.models import FuelType, HomeThermalProfile


class CaseProfile(BaseModel):
    """Preset describing a simulated home, its climate and its physics."""

    name: str = Field(description="Short identifier for the preset")
    description: str = Field(description="Human-readable description of the preset")

    home: HomeThermalProfile = Field(description="Auditor-entered home data")

    # Climate (daily mean outdoor temperature in °F)
    mean_annual_temperature: float = Field(
        description="Annual mean of the daily mean temperature"
    )
    seasonal_amplitude: float = Field(
        description="Half the difference between mid-summer and mid-winter means"
    )
    daily_noise: float = Field(
        default=5.0, description="Standard deviation of day-to-day weather noise"
    )

    # Building physics used to simulate the bills
    true_balance_point: float = Field(description="Balance point in °F")
    true_heat_loss_rate: float = Field(description="Whole-home UA in BTU/h-°F")
    baseload_per_day: float = Field(
        description="Non-heating fuel use per day in billing units"
    )
    usage_noise: float = Field(
        default=0.03, description="Relative noise applied to each bill"
    )


# ---------------------------------------------------------------------------
# Preset definitions
# ---------------------------------------------------------------------------

NEW_ENGLAND_GAS = CaseProfile(
    name="new_england_gas",
    description=(
        "Coastal Massachusetts colonial heated by a condensing gas boiler, "
        "with a nightly setback."
    ),
    home=HomeThermalProfile(
        living_area=2155,
        fuel_type=FuelType.GAS,
        heating_system_efficiency=0.97,
        design_temperature=1,
        thermostat_set_point=68,
        setback_temperature=65,
        setback_hours_per_day=8,
    ),
    mean_annual_temperature=51.0,
    seasonal_amplitude=22.0,
    true_balance_point=61.0,
    true_heat_loss_rate=480.0,
    baseload_per_day=0.9,
)

UPPER_MIDWEST_OIL = CaseProfile(
    name="upper_midwest_oil",
    description=(
        "Leaky 1920s farmhouse in Minnesota on an older oil furnace, "
        "held at a constant set point."
    ),
    home=HomeThermalProfile(
        living_area=1800,
        fuel_type=FuelType.OIL,
        heating_system_efficiency=0.82,
        design_temperature=-12,
        thermostat_set_point=70,
    ),
    mean_annual_temperature=46.0,
    seasonal_amplitude=30.0,
    true_balance_point=63.0,
    true_heat_loss_rate=650.0,
    baseload_per_day=0.15,
)

SOUTHEAST_PROPANE = CaseProfile(
    name="southeast_propane",
    description=(
        "Compact ranch in north Georgia on a propane furnace with a "
        "daytime setback."
    ),
    home=HomeThermalProfile(
        living_area=1400,
        fuel_type=FuelType.PROPANE,
        heating_system_efficiency=0.92,
        design_temperature=23,
        thermostat_set_point=69,
        setback_temperature=62,
        setback_hours_per_day=9,
    ),
    mean_annual_temperature=62.0,
    seasonal_amplitude=17.0,
    true_balance_point=58.0,
    true_heat_loss_rate=310.0,
    baseload_per_day=0.4,
)

# ---------------------------------------------------------------------------
# Preset registry
# ---------------------------------------------------------------------------

PROFILES: dict[str, CaseProfile] = {
    "new_england_gas": NEW_ENGLAND_GAS,
    "upper_midwest_oil": UPPER_MIDWEST_OIL,
    "southeast_propane": SOUTHEAST_PROPANE,
}


def get_profile(name: str) -> CaseProfile:
    """Return the preset for the given name.

    Raises
    ------
    KeyError
        If *name* does not match any registered preset.
    """
    try:
        return PROFILES[name]
    except KeyError:
        available = ", ".join(sorted(PROFILES.keys()))
        raise KeyError(
            f"Unknown profile '{name}'. Available profiles: {available}"
        ) from None
