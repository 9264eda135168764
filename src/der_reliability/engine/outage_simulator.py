"""Deterministic outage simulator — how long does the site survive from each start step?

Complements the probabilistic survival engine: no random failures, just a
forward walk through the net critical load (load − PV − wind) that spends
generator fuel, battery charge, and on-site EV charge until a step's load
cannot be met.  Running the walk from every start step gives an empirical
distribution of survivable outage lengths.

Each step of the walk:
  net load < 0  → surplus charges the battery, then the EV pool
  net load ≥ 0  → generator first (capacity + fuel limited, linear fuel curve
                  fuel = slope × max(load, turndown × kW) + intercept per hour),
                  turndown surplus charges storage, then battery / EV pool
                  cover any residual
  residual > 0  → outage ends; survival = steps walked / steps per hour
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

import numpy as np

from der_reliability.config.scenario import OutageSimulationInputs, HOURS_PER_YEAR
from der_reliability.config.vehicle import ElectricVehicleConfig, FloaterVehicleConfig

logger = logging.getLogger(__name__)

_DAYS_PER_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


# ═══════════════════════════════════════════════════════════════════════════
# Vehicle pool
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class VehiclePool:
    """Aggregate EV storage on site during one simulated outage (mutable)."""

    kwh: float = 0.0
    """Energy stored in EVs currently on site."""

    total_kwh: float = 0.0
    """Capacity of EVs currently on site."""

    kw: float = 0.0
    """Combined charger rating of EVs currently on site."""

    roundtrip_efficiency: float = 1.0

    arrivals: dict[int, list[float]] = field(default_factory=dict)
    """Step offset → ``[kwh, total_kwh, kw]`` joining the pool at that offset."""

    def arrive(self, offset: int) -> None:
        joining = self.arrivals.get(offset)
        if joining is not None:
            self.kwh += joining[0]
            self.total_kwh += joining[1]
            self.kw += joining[2]

    def available_kw(self, steps_per_hour: int) -> float:
        return min(self.kw, self.kwh * steps_per_hour)

    def charge(self, excess_kw: float, steps_per_hour: int) -> None:
        if self.kwh < self.total_kwh:
            self.kwh += min(
                self.total_kwh - self.kwh,
                self.kw / steps_per_hour * self.roundtrip_efficiency,
                excess_kw / steps_per_hour * self.roundtrip_efficiency,
            )

    def discharge(self, load_kw: float, steps_per_hour: int) -> None:
        self.kwh = max(0.0, self.kwh - load_kw / steps_per_hour)


def _next_on_site_offsets(on_site: np.ndarray) -> np.ndarray:
    """Steps until the EV is next on site, for every start step (−1 = never)."""
    n = on_site.size
    offsets = np.full(n, -1, dtype=int)
    next_k = -1
    # scan two laps backwards so the search wraps around the year
    for k in range(2 * n - 1, -1, -1):
        if on_site[k % n]:
            next_k = k
        if k < n and next_k >= 0:
            offsets[k] = next_k - k
    return offsets


class VehicleFleet:
    """Precomputed EV availability; builds a fresh ``VehiclePool`` per outage start."""

    def __init__(
        self,
        electric_vehicles: Sequence[ElectricVehicleConfig],
        floater_vehicles: Sequence[FloaterVehicleConfig],
        n_time_steps: int,
    ) -> None:
        self._evs = list(electric_vehicles)
        self._floaters = list(floater_vehicles)
        self._n = n_time_steps
        self._next_on_site = [_next_on_site_offsets(np.asarray(ev.on_site_series) > 0) for ev in self._evs]
        self._soc = [np.asarray(ev.soc_series_fraction, dtype=float) for ev in self._evs]
        efficiencies = [v.roundtrip_efficiency for v in self._evs + self._floaters]
        self._roundtrip_efficiency = float(np.mean(efficiencies)) if efficiencies else 1.0

    def __len__(self) -> int:
        return len(self._evs) + len(self._floaters)

    def pool_at(self, init_time_step: int) -> VehiclePool:
        pool = VehiclePool(roundtrip_efficiency=self._roundtrip_efficiency)
        members = [
            (int(offsets[init_time_step]), soc[(init_time_step + offsets[init_time_step]) % self._n], ev)
            for ev, offsets, soc in zip(self._evs, self._next_on_site, self._soc)
        ] + [
            (fl.arrival_time_step, fl.arrival_soc_fraction, fl) for fl in self._floaters
        ]
        for offset, soc, vehicle in members:
            if offset < 0:
                continue
            if offset == 0:
                pool.kwh += soc * vehicle.size_kwh
                pool.total_kwh += vehicle.size_kwh
                pool.kw += vehicle.size_kw
            else:
                joining = pool.arrivals.setdefault(offset, [0.0, 0.0, 0.0])
                joining[0] += soc * vehicle.size_kwh
                joining[1] += vehicle.size_kwh
                joining[2] += vehicle.size_kw
        return pool


# ═══════════════════════════════════════════════════════════════════════════
# Single outage walk
# ═══════════════════════════════════════════════════════════════════════════

def _fuel_limited_kw(fuel_available: float, steps_per_hour: int, intercept: float, slope: float) -> float:
    """Output the remaining fuel can sustain for one step."""
    if slope <= 0:
        return 0.0
    return max(0.0, (fuel_available * steps_per_hour - intercept) / slope)


def simulate_outage(
    init_time_step: int,
    critical_load: Sequence[float],
    *,
    generator_kw: float = 0.0,
    fuel_available_gal: float = 0.0,
    fuel_slope_gal_per_kwh: float = 0.0,
    fuel_intercept_gal_per_hr: float = 0.0,
    min_turndown_fraction: float = 0.0,
    battery_kwh: float = 0.0,
    battery_kw: float = 0.0,
    battery_soc_kwh: float = 0.0,
    battery_roundtrip_efficiency: float = 1.0,
    time_steps_per_hour: int = 1,
    vehicles: VehiclePool | None = None,
) -> float:
    """Hours the net critical load is met for an outage starting at ``init_time_step`` (0-based).

    Returns the full horizon length (in hours) when the load is met at every
    step of the year.  ``vehicles`` is mutated.
    """
    n = len(critical_load)
    sph = time_steps_per_hour
    m = fuel_slope_gal_per_kwh
    b = fuel_intercept_gal_per_hr
    fuel = fuel_available_gal
    soc = battery_soc_kwh
    turndown_kw = min_turndown_fraction * generator_kw

    for i in range(n):
        t = (init_time_step + i) % n
        load_kw = float(critical_load[t])
        if vehicles is not None and i > 0:
            vehicles.arrive(i)

        if load_kw < 0:
            # renewables exceed load
            if soc < battery_kwh:
                soc += min(
                    battery_kwh - soc,
                    battery_kw / sph * battery_roundtrip_efficiency,
                    -load_kw / sph * battery_roundtrip_efficiency,
                )
            elif vehicles is not None:
                vehicles.charge(-load_kw, sph)

        else:
            if generator_kw > 0:
                fuel_needed = (m * max(load_kw, turndown_kw) + b) / sph
                if load_kw <= generator_kw and fuel_needed <= fuel:
                    fuel -= fuel_needed
                    if load_kw < turndown_kw:
                        surplus_kw = turndown_kw - load_kw
                        if soc < battery_kwh:
                            soc += min(
                                battery_kwh - soc,
                                battery_kw / sph * battery_roundtrip_efficiency,
                                surplus_kw / sph * battery_roundtrip_efficiency,
                            )
                        elif vehicles is not None:
                            vehicles.charge(surplus_kw, sph)
                    load_kw = 0.0
                elif load_kw <= generator_kw:
                    # tank is the limit
                    load_kw = max(0.0, load_kw - _fuel_limited_kw(fuel, sph, b, m))
                    fuel = 0.0
                elif fuel_needed <= fuel:
                    # capacity is the limit
                    load_kw -= generator_kw
                    fuel = max(0.0, fuel - (generator_kw * m + b) / sph)
                else:
                    load_kw -= min(generator_kw, _fuel_limited_kw(fuel, sph, b, m))
                    fuel = 0.0

            if load_kw > 0:
                battery_avail_kw = min(battery_kw, soc * sph)
                vehicle_avail_kw = vehicles.available_kw(sph) if vehicles is not None else 0.0
                if battery_avail_kw >= load_kw:
                    soc = max(0.0, soc - load_kw / sph)
                    load_kw = 0.0
                elif vehicle_avail_kw >= load_kw:
                    vehicles.discharge(load_kw, sph)
                    load_kw = 0.0
                elif battery_avail_kw + vehicle_avail_kw >= load_kw:
                    soc = max(0.0, soc - battery_avail_kw / sph)
                    vehicles.discharge(load_kw - battery_avail_kw, sph)
                    load_kw = 0.0

        if round(load_kw, 5) > 0:
            return i / sph

    return n / sph


# ═══════════════════════════════════════════════════════════════════════════
# Every start step
# ═══════════════════════════════════════════════════════════════════════════

def _zero_resilience(n_time_steps: int) -> dict[str, Any]:
    return {
        "resilience_by_time_step": [0.0] * n_time_steps,
        "resilience_hours_min": 0.0,
        "resilience_hours_max": 0.0,
        "resilience_hours_avg": 0.0,
        "outage_durations": [],
        "probs_of_surviving": [],
        "probs_of_surviving_by_month": [],
        "probs_of_surviving_by_hour_of_the_day": [],
    }


def simulate_outages(inputs: OutageSimulationInputs | dict[str, Any]) -> dict[str, Any]:
    """Simulate an outage from every time step and summarize survival.

    Returns the mapping produced by :func:`process_results`, or an all-zero
    mapping when the site has no PV, wind, generator, battery, or EVs.
    """
    if not isinstance(inputs, OutageSimulationInputs):
        inputs = OutageSimulationInputs(**inputs)

    n = inputs.n_time_steps
    sph = inputs.steps_per_hour
    zeros = np.zeros(n)
    pv = np.asarray(inputs.pv_kw_ac_time_series, dtype=float) if inputs.pv_kw_ac_time_series else zeros
    wind = np.asarray(inputs.wind_kw_ac_time_series, dtype=float) if inputs.wind_kw_ac_time_series else zeros
    has_vehicles = bool(inputs.electric_vehicles or inputs.floater_vehicles)

    if inputs.has_battery:
        if inputs.battery_soc_series_fraction:
            init_soc = np.asarray(inputs.battery_soc_series_fraction, dtype=float)
        else:
            init_soc = np.ones(n)
    else:
        init_soc = zeros
        if pv.sum() == 0 and wind.sum() == 0 and inputs.generator_size_kw == 0 and not has_vehicles:
            logger.debug("No PV, wind, generator, battery or EVs; resilience is zero")
            return _zero_resilience(n)

    load_minus_der = np.asarray(inputs.critical_loads_kw, dtype=float) - pv - wind
    fleet = VehicleFleet(inputs.electric_vehicles, inputs.floater_vehicles, n) if has_vehicles else None

    logger.info(
        "Simulating %d outages: %.1f kW generator, %.1f kWh / %.1f kW battery, %d EV(s)",
        n, inputs.generator_size_kw, inputs.battery_size_kwh, inputs.battery_size_kw,
        len(fleet) if fleet is not None else 0,
    )
    r = np.zeros(n)
    for time_step in range(n):
        r[time_step] = simulate_outage(
            time_step,
            load_minus_der,
            generator_kw=inputs.generator_size_kw,
            fuel_available_gal=inputs.fuel_available_gal,
            fuel_slope_gal_per_kwh=inputs.fuel_slope_gal_per_kwh,
            fuel_intercept_gal_per_hr=inputs.fuel_intercept_gal_per_hr,
            min_turndown_fraction=inputs.generator_min_turndown_fraction,
            battery_kwh=inputs.battery_size_kwh,
            battery_kw=inputs.battery_size_kw,
            battery_soc_kwh=init_soc[time_step] * inputs.battery_size_kwh,
            battery_roundtrip_efficiency=inputs.battery_roundtrip_efficiency,
            time_steps_per_hour=sph,
            vehicles=fleet.pool_at(time_step) if fleet is not None else None,
        )
    return process_results(r, n, sph)


def _survival_fractions(r: np.ndarray, durations: Sequence[int]) -> list[float]:
    if r.size == 0:
        return [0.0] * len(durations)
    return [round(float((r >= hrs).sum()) / r.size, 4) for hrs in durations]


def process_results(r: Sequence[float], n_time_steps: int, time_steps_per_hour: int = 1) -> dict[str, Any]:
    """Summarize survival hours from every start step.

    ``probs_of_surviving[k]`` is the fraction of start steps that survive at
    least ``outage_durations[k]`` hours.  The monthly breakdown is only
    produced for a full calendar year of data.
    """
    r = np.asarray(r, dtype=float)
    r_max = float(r.max())
    durations = list(range(1, int(np.floor(r_max)) + 2))

    by_month: list[list[float]] = []
    if n_time_steps == HOURS_PER_YEAR * time_steps_per_hour:
        steps_per_day = 24 * time_steps_per_hour
        start = 0
        for days in _DAYS_PER_MONTH:
            stop = start + days * steps_per_day
            by_month.append(_survival_fractions(r[start:stop], durations))
            start = stop

    hour_of_day = (np.arange(n_time_steps) // time_steps_per_hour) % 24
    by_hour = [_survival_fractions(r[hour_of_day == h], durations) for h in range(24)]

    return {
        "resilience_by_time_step": r.tolist(),
        "resilience_hours_min": float(r.min()),
        "resilience_hours_max": r_max,
        "resilience_hours_avg": round(float(r.sum()) / r.size, 2),
        "outage_durations": durations,
        "probs_of_surviving": _survival_fractions(r, durations),
        "probs_of_surviving_by_month": by_month,
        "probs_of_surviving_by_hour_of_the_day": by_hour,
    }
