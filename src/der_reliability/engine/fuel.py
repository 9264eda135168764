"""Linear generator fuel curve.

Fuel burn is modeled as a straight line through the full-load and half-load
operating points:

  fuel [gal/hr] = slope [gal/kWh] × output [kW] + intercept [gal/hr]
"""

from __future__ import annotations


def fuel_slope_and_intercept(
    electric_efficiency_full_load: float,
    electric_efficiency_half_load: float,
    fuel_higher_heating_value_kwh_per_unit: float,
) -> tuple[float, float]:
    """Slope and intercept of the fuel curve, per kW of rated capacity.

    Multiply the intercept by the generator rating to get the no-load burn
    of a specific unit.

    Returns
    -------
    tuple[float, float]
        ``(fuel_slope_per_kwhe, fuel_intercept_per_hr_per_kw)`` in fuel units.
    """
    if electric_efficiency_full_load <= 0 or electric_efficiency_half_load <= 0:
        raise ValueError("generator electric efficiencies must be positive")
    if fuel_higher_heating_value_kwh_per_unit <= 0:
        raise ValueError("fuel_higher_heating_value_kwh_per_unit must be positive")

    # kWh of fuel per kWh of rated capacity at full and half load
    fuel_burn_full_load_kwht = 1.0 / electric_efficiency_full_load
    fuel_burn_half_load_kwht = 0.5 / electric_efficiency_half_load
    fuel_slope_kwht_per_kwhe = (fuel_burn_full_load_kwht - fuel_burn_half_load_kwht) / (1.0 - 0.5)
    fuel_intercept_kwht_per_hr = fuel_burn_full_load_kwht - fuel_slope_kwht_per_kwhe

    return (
        fuel_slope_kwht_per_kwhe / fuel_higher_heating_value_kwh_per_unit,
        fuel_intercept_kwht_per_hr / fuel_higher_heating_value_kwh_per_unit,
    )
