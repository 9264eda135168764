"""Top-level input records — one per engine.

``ReliabilityInputs`` feeds the probabilistic (Markov) backup reliability
engine; ``OutageSimulationInputs`` feeds the deterministic outage simulator.
Both are flat records keyed the same way as the JSON documents the API
accepts, so ``ReliabilityInputs(**payload)`` is all a caller needs.
"""

from __future__ import annotations

import numpy as np
from pydantic import BaseModel, Field, ValidationError, model_validator

from der_reliability.config.battery import BatteryConfig
from der_reliability.config.generator import GeneratorConfig
from der_reliability.config.vehicle import ElectricVehicleConfig, FloaterVehicleConfig


# ═══════════════════════════════════════════════════════════════════════════
# Probabilistic engine inputs
# ═══════════════════════════════════════════════════════════════════════════

class ReliabilityInputs(BaseModel):
    """Inputs for the Markov backup reliability calculation.

    The generator fields accept either a scalar (one generator type) or a
    list with one entry per generator type.  Scalars are broadcast against
    lists, so ``num_generators=[1, 1]`` with ``generator_size_kw=1`` means two
    types of one 1 kW unit each.
    """

    critical_loads_kw: list[float] = Field(
        default_factory=list,
        description="Critical load for every time step of the year (kW)",
    )
    max_outage_duration: int = Field(
        default=96, ge=0,
        description="Longest outage modeled, in time steps. 0 disables the calculation.",
    )

    # --- Generators (scalar or one entry per type) ---
    num_generators: int | list[int] = Field(default=1, description="Units per generator type")
    generator_size_kw: float | list[float] = Field(default=0.0, description="Rated output per unit (kW)")
    generator_operational_availability: float | list[float] = Field(
        default=0.995, description="Probability a unit is available at outage start",
    )
    generator_failure_to_start: float | list[float] = Field(
        default=0.0094, description="Probability an available unit fails to start",
    )
    generator_mean_time_to_failure: float | list[float] = Field(
        default=1_100.0, description="Mean running hours between failures",
    )

    # --- Battery ---
    num_battery_bins: int = Field(default=101, ge=2, description="Discrete SOC levels")
    battery_size_kwh: float = Field(default=0.0, ge=0, description="Energy capacity (kWh)")
    battery_size_kw: float = Field(default=0.0, ge=0, description="Inverter capacity (kW)")
    battery_charge_efficiency: float = Field(default=0.948, gt=0, le=1.0)
    battery_discharge_efficiency: float = Field(default=0.948, gt=0, le=1.0)
    battery_minimum_soc_fraction: float = Field(default=0.0, ge=0, le=1.0)
    battery_operational_availability: float = Field(default=0.97, ge=0, le=1.0)
    battery_starting_soc_series_fraction: list[float] = Field(
        default_factory=list,
        description="SOC (0–1) at the start of each time step; empty = battery starts full",
    )

    # --- On-site PV ---
    pv_size_kw: float = Field(default=0.0, ge=0, description="PV DC rating (kW)")
    pv_production_factor_series: list[float] = Field(
        default_factory=list,
        description="AC output per kW of PV for every time step",
    )
    pv_kw_ac_time_series: list[float] = Field(
        default_factory=list,
        description="Explicit PV AC output series (kW), added to pv_size_kw × production factor",
    )

    @model_validator(mode="after")
    def _check_consistency(self) -> "ReliabilityInputs":
        n = len(self.critical_loads_kw)
        if n == 0:
            raise ValueError("critical_loads_kw must contain at least one time step")
        for name in ("battery_starting_soc_series_fraction", "pv_production_factor_series", "pv_kw_ac_time_series"):
            series = getattr(self, name)
            if series and len(series) != n:
                raise ValueError(f"{name} has {len(series)} entries but critical_loads_kw has {n}")
        if any(s < 0 or s > 1 for s in self.battery_starting_soc_series_fraction):
            raise ValueError("battery_starting_soc_series_fraction values must be within [0, 1]")
        # builds and validates every generator type
        self.generator_types()
        return self

    # ── Derived views ───────────────────────────────────────────────────

    def generator_types(self) -> list[GeneratorConfig]:
        """Expand the scalar/list generator fields into one config per type."""
        fields = {
            "num_generators": self.num_generators,
            "generator_size_kw": self.generator_size_kw,
            "operational_availability": self.generator_operational_availability,
            "failure_to_start": self.generator_failure_to_start,
            "mean_time_to_failure": self.generator_mean_time_to_failure,
        }
        lengths = {len(v) for v in fields.values() if isinstance(v, list)}
        if len(lengths) > 1:
            raise ValueError(f"generator lists must all have the same length, got lengths {sorted(lengths)}")
        num_types = lengths.pop() if lengths else 1
        if num_types == 0:
            raise ValueError("generator lists must not be empty")

        types: list[GeneratorConfig] = []
        for i in range(num_types):
            values = {k: (v[i] if isinstance(v, list) else v) for k, v in fields.items()}
            try:
                types.append(GeneratorConfig(**values))
            except ValidationError as exc:
                raise ValueError(f"generator type {i}: {exc}") from exc
        return types

    @property
    def battery(self) -> BatteryConfig:
        return BatteryConfig(
            size_kwh=self.battery_size_kwh,
            size_kw=self.battery_size_kw,
            charge_efficiency=self.battery_charge_efficiency,
            discharge_efficiency=self.battery_discharge_efficiency,
            minimum_soc_fraction=self.battery_minimum_soc_fraction,
            operational_availability=self.battery_operational_availability,
            num_battery_bins=self.num_battery_bins,
        )

    @property
    def n_time_steps(self) -> int:
        return len(self.critical_loads_kw)

    def pv_kw_ac(self) -> np.ndarray:
        """PV AC production for every time step (zeros when there is no PV)."""
        pv = np.zeros(self.n_time_steps)
        if self.pv_size_kw > 0 and self.pv_production_factor_series:
            pv += self.pv_size_kw * np.asarray(self.pv_production_factor_series, dtype=float)
        if self.pv_kw_ac_time_series:
            pv += np.asarray(self.pv_kw_ac_time_series, dtype=float)
        return pv

    def net_critical_loads_kw(self) -> np.ndarray:
        """Critical load minus PV production."""
        return np.asarray(self.critical_loads_kw, dtype=float) - self.pv_kw_ac()

    def starting_battery_soc_kwh(self) -> np.ndarray:
        """Usable energy in the battery at the start of each time step.

        The minimum-SOC reserve is removed, so 0 kWh means "at reserve".
        """
        batt = self.battery
        if self.battery_starting_soc_series_fraction:
            soc = np.asarray(self.battery_starting_soc_series_fraction, dtype=float)
        else:
            soc = np.ones(self.n_time_steps)
        return np.maximum(0.0, soc - batt.minimum_soc_fraction) * batt.size_kwh


# ═══════════════════════════════════════════════════════════════════════════
# Deterministic simulator inputs
# ═══════════════════════════════════════════════════════════════════════════

HOURS_PER_YEAR = 8760


class OutageSimulationInputs(BaseModel):
    """Inputs for the deterministic outage time-series simulator."""

    critical_loads_kw: list[float] = Field(default_factory=list, description="Critical load per time step (kW)")
    pv_kw_ac_time_series: list[float] = Field(default_factory=list, description="PV AC output per time step (kW)")
    wind_kw_ac_time_series: list[float] = Field(default_factory=list, description="Wind AC output per time step (kW)")

    # --- Battery ---
    battery_size_kwh: float = Field(default=0.0, ge=0)
    battery_size_kw: float = Field(default=0.0, ge=0)
    battery_soc_series_fraction: list[float] = Field(
        default_factory=list,
        description="SOC (0–1) at each time step; empty = battery starts full",
    )
    battery_roundtrip_efficiency: float = Field(default=0.829, gt=0, le=1.0)

    # --- Generator ---
    generator_size_kw: float = Field(default=0.0, ge=0, description="Total generator capacity (kW)")
    fuel_available_gal: float = Field(default=0.0, ge=0, description="Fuel on site at outage start (gal)")
    fuel_slope_gal_per_kwh: float = Field(default=0.076, ge=0, description="Fuel burn per kWh delivered (gal/kWh)")
    fuel_intercept_gal_per_hr: float = Field(default=0.0, ge=0, description="No-load fuel burn (gal/hr)")
    generator_min_turndown_fraction: float = Field(
        default=0.3, ge=0, le=1.0,
        description="Minimum loading as a fraction of capacity; surplus charges storage",
    )

    # --- Vehicles ---
    electric_vehicles: list[ElectricVehicleConfig] = Field(default_factory=list)
    floater_vehicles: list[FloaterVehicleConfig] = Field(default_factory=list)

    time_steps_per_hour: int | None = Field(
        default=None, ge=1,
        description="Time steps per hour; None infers it from the critical load length",
    )

    @model_validator(mode="after")
    def _check_consistency(self) -> "OutageSimulationInputs":
        n = len(self.critical_loads_kw)
        if n == 0:
            raise ValueError("critical_loads_kw must contain at least one time step")
        for name in ("pv_kw_ac_time_series", "wind_kw_ac_time_series", "battery_soc_series_fraction"):
            series = getattr(self, name)
            if series and len(series) != n:
                raise ValueError(f"{name} has {len(series)} entries but critical_loads_kw has {n}")
        for ev in self.electric_vehicles:
            if len(ev.on_site_series) != n:
                raise ValueError(f"EV '{ev.name}' series have {len(ev.on_site_series)} entries but critical_loads_kw has {n}")
        for ev in self.floater_vehicles:
            if ev.arrival_time_step >= n:
                raise ValueError(f"floater EV '{ev.name}' arrives after the end of the simulated horizon")
        return self

    @property
    def n_time_steps(self) -> int:
        return len(self.critical_loads_kw)

    @property
    def steps_per_hour(self) -> int:
        if self.time_steps_per_hour is not None:
            return self.time_steps_per_hour
        n = self.n_time_steps
        return n // HOURS_PER_YEAR if n % HOURS_PER_YEAR == 0 else 1

    @property
    def has_battery(self) -> bool:
        return self.battery_size_kw > 0 and self.battery_size_kwh > 0
