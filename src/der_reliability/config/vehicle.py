"""Electric vehicles that can back up the site during an outage."""

from pydantic import BaseModel, Field, model_validator


class ElectricVehicleConfig(BaseModel):
    """An EV that regularly parks on site.

    ``on_site_series`` and ``soc_series_fraction`` are per time step and must
    match the length of the critical load.  An EV that is away when the outage
    starts joins the pool at its next on-site step and then stays on site.
    """

    name: str = Field(default="EV", description="Human label")
    size_kwh: float = Field(default=60.0, ge=0, description="Usable pack energy (kWh)")
    size_kw: float = Field(default=11.0, ge=0, description="Bidirectional charger rating (kW)")
    roundtrip_efficiency: float = Field(default=0.85, gt=0, le=1.0, description="Charge × discharge efficiency")
    on_site_series: list[float] = Field(
        default_factory=list,
        description="1 when the EV is plugged in on site, 0 when away",
    )
    soc_series_fraction: list[float] = Field(
        default_factory=list,
        description="State of charge (0–1) for every time step",
    )

    @model_validator(mode="after")
    def _check_series(self) -> "ElectricVehicleConfig":
        if len(self.on_site_series) != len(self.soc_series_fraction):
            raise ValueError(
                f"EV '{self.name}': on_site_series and soc_series_fraction must have the same length "
                f"({len(self.on_site_series)} != {len(self.soc_series_fraction)})"
            )
        if any(s < 0 or s > 1 for s in self.soc_series_fraction):
            raise ValueError(f"EV '{self.name}': soc_series_fraction values must be within [0, 1]")
        return self


class FloaterVehicleConfig(BaseModel):
    """A visiting EV that arrives a fixed number of time steps into the outage."""

    name: str = Field(default="Floater EV", description="Human label")
    arrival_time_step: int = Field(
        default=0, ge=0,
        description="Time steps after outage start when the EV arrives; 0 = on site at start",
    )
    arrival_soc_fraction: float = Field(default=0.8, ge=0, le=1.0, description="SOC on arrival")
    size_kwh: float = Field(default=60.0, ge=0, description="Usable pack energy (kWh)")
    size_kw: float = Field(default=11.0, ge=0, description="Bidirectional charger rating (kW)")
    roundtrip_efficiency: float = Field(default=0.85, gt=0, le=1.0, description="Charge × discharge efficiency")
