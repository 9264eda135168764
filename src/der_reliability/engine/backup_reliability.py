"""Backup reliability driver — picks the survival model and summarizes it.

Entry points:
  - ``backup_reliability(inputs)``                      standalone inputs
  - ``backup_reliability_from_results(results, inputs)`` sizes taken from an
    optimization-results dictionary

Model selection (``return_backup_reliability``):
  max_outage_duration == 0            → no results
  generator capacity  < 0.1 kW        → no results
  battery inverter    < 0.1 kW        → generators only
  otherwise                           → generators + battery

When the battery's operational availability ``a`` is below 1 the battery
result is blended with the generator-only result:
  survival = a × with_battery + (1 − a) × generator_only
"""

from __future__ import annotations

import logging
import math
from typing import Any

import numpy as np

from der_reliability.config.scenario import ReliabilityInputs
from der_reliability.engine.survival import survival_over_time_gen_only, survival_with_battery

logger = logging.getLogger(__name__)

# Below this many kW a generator or inverter is treated as absent
_MIN_CAPACITY_KW = 0.1


# ═══════════════════════════════════════════════════════════════════════════
# Model selection
# ═══════════════════════════════════════════════════════════════════════════

def return_backup_reliability(inputs: ReliabilityInputs) -> list[np.ndarray]:
    """Run the appropriate survival model.

    Returns ``[]`` when no reliability can be computed, otherwise
    ``[marginal_matrix, cumulative_matrix]`` (each T×D).
    """
    if inputs.max_outage_duration == 0:
        logger.debug("max_outage_duration is 0; skipping backup reliability")
        return []

    gens = inputs.generator_types()
    total_gen_kw = sum(g.total_kw for g in gens)
    if total_gen_kw < _MIN_CAPACITY_KW:
        logger.debug("No generator capacity (%.3f kW); skipping backup reliability", total_gen_kw)
        return []

    gen_params = dict(
        OA=[g.operational_availability for g in gens],
        FTS=[g.failure_to_start for g in gens],
        FTR=[g.failure_to_run for g in gens],
        num_generators=[g.num_generators for g in gens],
        gen_capacity=[g.generator_size_kw for g in gens],
    )
    net_load = inputs.net_critical_loads_kw()
    batt = inputs.battery

    def gen_only(marginal: bool) -> np.ndarray:
        return survival_over_time_gen_only(
            net_load, max_duration=inputs.max_outage_duration,
            marginal_survival=marginal, **gen_params,
        )

    if batt.size_kw < _MIN_CAPACITY_KW or batt.usable_kwh <= 0:
        logger.info(
            "Generator-only reliability: %d generator type(s), %.1f kW, %d time steps × %d durations",
            len(gens), total_gen_kw, inputs.n_time_steps, inputs.max_outage_duration,
        )
        return [gen_only(True), gen_only(False)]

    logger.info(
        "Generator + battery reliability: %.1f kW generators, %.1f kWh / %.1f kW battery, "
        "%d bins, %d time steps × %d durations",
        total_gen_kw, batt.usable_kwh, batt.size_kw, batt.num_battery_bins,
        inputs.n_time_steps, inputs.max_outage_duration,
    )
    starting_soc = inputs.starting_battery_soc_kwh()

    def with_battery(marginal: bool) -> np.ndarray:
        return survival_with_battery(
            net_load, starting_soc,
            batt_kwh=batt.usable_kwh,
            batt_kw=batt.size_kw,
            num_bins=batt.num_battery_bins,
            max_outage_duration=inputs.max_outage_duration,
            batt_charge_efficiency=batt.charge_efficiency,
            batt_discharge_efficiency=batt.discharge_efficiency,
            marginal_survival=marginal,
            **gen_params,
        )

    results = [with_battery(True), with_battery(False)]
    oa = batt.operational_availability
    if oa < 1.0:
        logger.debug("Blending battery result with generator-only result (battery OA = %.3f)", oa)
        results = [
            oa * results[0] + (1.0 - oa) * gen_only(True),
            oa * results[1] + (1.0 - oa) * gen_only(False),
        ]
    return results


# ═══════════════════════════════════════════════════════════════════════════
# Aggregation
# ═══════════════════════════════════════════════════════════════════════════

def process_reliability_results(results: list[np.ndarray], n_time_steps: int,
                                max_outage_duration: int) -> dict[str, Any]:
    """Reduce ``[marginal, cumulative]`` survival matrices to summary statistics.

    Per duration: mean and minimum across outage start steps.  Per start
    step: survival at the longest modeled duration.  All zeros when
    ``results`` is empty.
    """
    if len(results) == 0:
        zeros_by_duration = [0.0] * max_outage_duration
        zeros_by_step = [0.0] * n_time_steps
        summary: dict[str, Any] = {}
        for kind in ("marginal", "cumulative"):
            summary[f"unlimited_fuel_mean_{kind}_survival_by_duration"] = list(zeros_by_duration)
            summary[f"unlimited_fuel_min_{kind}_survival_by_duration"] = list(zeros_by_duration)
            summary[f"unlimited_fuel_{kind}_survival_final_time_step"] = list(zeros_by_step)
            summary[f"mean_{kind}_survival_final_time_step"] = 0.0
        return summary

    summary = {}
    for kind, matrix in zip(("marginal", "cumulative"), results):
        final = matrix[:, max_outage_duration - 1]
        summary[f"unlimited_fuel_mean_{kind}_survival_by_duration"] = matrix.mean(axis=0).tolist()
        summary[f"unlimited_fuel_min_{kind}_survival_by_duration"] = matrix.min(axis=0).tolist()
        summary[f"unlimited_fuel_{kind}_survival_final_time_step"] = final.tolist()
        summary[f"mean_{kind}_survival_final_time_step"] = float(final.mean())
    return summary


# ═══════════════════════════════════════════════════════════════════════════
# Public entry points
# ═══════════════════════════════════════════════════════════════════════════

def backup_reliability(inputs: ReliabilityInputs | dict[str, Any]) -> dict[str, Any]:
    """Run the backup reliability calculation and return the summary mapping.

    ``inputs`` may be a ``ReliabilityInputs`` or a plain dict of its fields.
    """
    if not isinstance(inputs, ReliabilityInputs):
        inputs = ReliabilityInputs(**inputs)
    results = return_backup_reliability(inputs)
    return process_reliability_results(results, inputs.n_time_steps, inputs.max_outage_duration)


def backup_reliability_inputs_from_results(results: dict[str, Any],
                                           reliability_inputs: dict[str, Any]) -> ReliabilityInputs:
    """Fill reliability inputs from an optimization-results dictionary.

    Values already present in ``reliability_inputs`` win.  Generator count
    and unit size are reconciled with the optimal total generator size:

    - no unit size given: one unit of the total size, or the total split
      evenly across ``num_generators``;
    - no unit count given (0): as many units as needed to cover the total.

    Setting ``use_full_battery_charge`` starts every outage with a full battery
    instead of the optimal dispatch's state of charge.
    """
    d = dict(reliability_inputs)
    use_full_battery_charge = bool(d.pop("use_full_battery_charge", False))

    if "critical_loads_kw" not in d and "ElectricLoad" in results:
        d["critical_loads_kw"] = results["ElectricLoad"].get("critical_load_series_kw", [])
    # typed view of the overrides; raises ValidationError before any derivation
    given = ReliabilityInputs(**d)
    n = given.n_time_steps

    total_gen_kw = float(results.get("Generator", {}).get("size_kw", 0.0))
    num_gens = given.num_generators
    gen_capacity = given.generator_size_kw
    if not isinstance(num_gens, list) and not isinstance(gen_capacity, list):
        if gen_capacity < _MIN_CAPACITY_KW:
            if num_gens <= 1:
                gen_capacity = total_gen_kw
                num_gens = 1
            else:
                gen_capacity = total_gen_kw / num_gens
        elif num_gens == 0:
            num_gens = math.ceil(total_gen_kw / gen_capacity)
        d["num_generators"] = num_gens
        d["generator_size_kw"] = gen_capacity

    storage = results.get("ElectricStorage", {})
    d.setdefault("battery_size_kw", storage.get("size_kw", 0.0))
    d.setdefault("battery_size_kwh", storage.get("size_kwh", 0.0))
    if use_full_battery_charge:
        d["battery_starting_soc_series_fraction"] = []
    else:
        d.setdefault("battery_starting_soc_series_fraction", list(storage.get("soc_series_fraction", [])))

    if "PV" in results and "pv_kw_ac_time_series" not in d:
        pv = np.zeros(n)
        for key in ("electric_to_storage_series_kw", "electric_curtailed_series_kw",
                    "electric_to_load_series_kw", "electric_to_grid_series_kw"):
            series = results["PV"].get(key)
            if series:
                pv += np.asarray(series, dtype=float)
        d["pv_kw_ac_time_series"] = pv.tolist()

    return ReliabilityInputs(**d)


def backup_reliability_from_results(results: dict[str, Any],
                                    reliability_inputs: dict[str, Any]) -> dict[str, Any]:
    """``backup_reliability`` with technology sizes taken from optimization results."""
    return backup_reliability(backup_reliability_inputs_from_results(results, reliability_inputs))
