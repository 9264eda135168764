"""Backup battery specification."""

from pydantic import BaseModel, Field


class BatteryConfig(BaseModel):
    """Stationary battery used to ride through an outage.

    Efficiencies are one-way:
      charge_efficiency    = increase_in_soc_kwh / input_kwh
      discharge_efficiency = delivered_kwh / reduction_in_soc_kwh
    """

    size_kwh: float = Field(default=0.0, ge=0, description="Energy capacity (kWh)")
    size_kw: float = Field(default=0.0, ge=0, description="Inverter capacity (kW)")
    charge_efficiency: float = Field(default=0.948, gt=0, le=1.0, description="One-way charge efficiency")
    discharge_efficiency: float = Field(default=0.948, gt=0, le=1.0, description="One-way discharge efficiency")
    minimum_soc_fraction: float = Field(
        default=0.0, ge=0, le=1.0,
        description="Reserve that is never discharged, as a fraction of size_kwh",
    )
    operational_availability: float = Field(
        default=0.97, ge=0, le=1.0,
        description="Probability the battery is available when the outage starts",
    )
    num_battery_bins: int = Field(
        default=101, ge=2,
        description="Discrete state-of-charge levels; bin 1 is empty, the last bin is full",
    )

    @property
    def usable_kwh(self) -> float:
        """Energy between the minimum SOC reserve and full charge."""
        return self.size_kwh * (1.0 - self.minimum_soc_fraction)
