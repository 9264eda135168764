"""Survival curve engine — probability of carrying the critical load through an outage.

For every outage start step ``t`` and every duration ``d = 1..D`` the engine
returns the probability that backup resources meet the critical load,
as a T×D matrix.  Two flavours:

- **marginal** (``marginal_survival=True``): chance the load is met in
  outage step ``d``, regardless of earlier steps.
- **cumulative** (``marginal_survival=False``): chance the load is met in
  every step ``1..d``.  Failed probability mass is pruned after each step.

Per duration step the order is fixed:

  1. generator failures:      probs = probs @ markov
  2. survival indicator:      output capacity ≥ load at wrapped step h
  3. record:                  sum(probs × survival)
  4. cumulative mode only:    probs = probs × survival
  5. battery model only:      shift battery bins by (generation − load)

The outage index wraps around the end of the year:
``h = (t + d − 1) mod T`` (0-based).
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from der_reliability.engine.battery_bins import (
    battery_bin_shift,
    bin_battery_charge,
    get_maximum_generation,
    shift_gen_battery_prob_matrix,
)
from der_reliability.engine.markov import as_type_arrays, generator_state_space


def survival_over_time_gen_only(
    critical_load: Sequence[float],
    OA,
    FTS,
    FTR,
    num_generators,
    gen_capacity,
    max_duration: int,
    *,
    marginal_survival: bool = True,
) -> np.ndarray:
    """Survival probability with generators only (no battery).

    Parameters
    ----------
    critical_load : sequence of float
        Critical (or net critical) load for every time step of the year.
    OA, FTS, FTR : float or sequence of float
        Operational availability, failure-to-start, and per-step
        failure-to-run probability (``1 / MTTF``), per generator type.
    num_generators : int or sequence of int
        Units per generator type.
    gen_capacity : float or sequence of float
        Output per unit (kW), per generator type.
    max_duration : int
        Longest outage modeled, in time steps.
    marginal_survival : bool
        Marginal (``True``) or cumulative (``False``) survival.

    Returns
    -------
    np.ndarray
        T×D matrix; rows = outage start, columns = outage duration.

    Examples
    --------
    With loads ``[1, 2, 1, 1]``, two 1 kW units and FTR = 0.2, an outage
    starting in the first step survives with probability
    ``[0.96, 0.4096, 0.761856]`` (marginal) or ``[0.96, 0.4096, 0.393216]``
    (cumulative).
    """
    load = np.asarray(critical_load, dtype=float)
    t_max = load.size
    output, transition, start = generator_state_space(num_generators, gen_capacity, OA, FTS, FTR)

    survival_probability_matrix = np.zeros((t_max, max_duration))
    for t in range(t_max):
        gen_probs = start.copy()
        for d in range(max_duration):
            h = (t + d) % t_max
            survival = (output - load[h] >= 0).astype(float)

            gen_probs = gen_probs @ transition
            survival_probability_matrix[t, d] = np.sum(gen_probs * survival)
            if not marginal_survival:
                gen_probs = gen_probs * survival
    return survival_probability_matrix


def survival_with_battery(
    net_critical_load: Sequence[float],
    starting_batt_soc_kwh: Sequence[float],
    OA,
    FTS,
    FTR,
    num_generators,
    gen_capacity,
    batt_kwh: float,
    batt_kw: float,
    num_bins: int,
    max_outage_duration: int,
    batt_charge_efficiency: float,
    batt_discharge_efficiency: float,
    *,
    marginal_survival: bool = True,
) -> np.ndarray:
    """Survival probability with generators and a battery.

    The state is an M×N joint probability matrix (M battery bins × N joint
    generator states).  Each outage start ``t`` begins with all mass in that
    step's starting battery bin, spread across generator states by the
    starting-availability distribution.

    Parameters
    ----------
    net_critical_load : sequence of float
        Critical load minus renewable production for every time step.
    starting_batt_soc_kwh : sequence of float
        Battery energy (kWh) at the start of each time step.
    OA, FTS, FTR, num_generators, gen_capacity
        As for :func:`survival_over_time_gen_only`.
    batt_kwh, batt_kw : float
        Battery energy and inverter capacity.
    num_bins : int
        Number of battery SOC bins (≥ 2).
    max_outage_duration : int
        Longest outage modeled, in time steps.
    batt_charge_efficiency, batt_discharge_efficiency : float
        One-way efficiencies.
    marginal_survival : bool
        Marginal (``True``) or cumulative (``False``) survival.

    Returns
    -------
    np.ndarray
        T×D matrix; rows = outage start, columns = outage duration.
    """
    load = np.asarray(net_critical_load, dtype=float)
    t_max = load.size
    if len(starting_batt_soc_kwh) != t_max:
        raise ValueError(
            f"starting_batt_soc_kwh has {len(starting_batt_soc_kwh)} entries but the load has {t_max}"
        )
    if num_bins < 2:
        raise ValueError(f"num_bins must be at least 2, got {num_bins}")
    if batt_kwh <= 0 or batt_kw < 0:
        raise ValueError(f"battery must have positive energy and non-negative power, got {batt_kwh} kWh / {batt_kw} kW")

    # zero charge is also a bin
    bin_size = batt_kwh / (num_bins - 1)
    starting_battery_bins = bin_battery_charge(starting_batt_soc_kwh, num_bins, batt_kwh)

    nums, caps, oas, ftss, ftrs = as_type_arrays(num_generators, gen_capacity, OA, FTS, FTR)
    gen_prod, transition, start = generator_state_space(nums, caps, oas, ftss, ftrs)
    maximum_generation = get_maximum_generation(
        batt_kw, caps, bin_size, num_bins, nums, batt_discharge_efficiency,
    )

    survival_probability_matrix = np.zeros((t_max, max_outage_duration))
    for t in range(t_max):
        gen_battery_prob_matrix = np.zeros((num_bins, gen_prod.size))
        gen_battery_prob_matrix[starting_battery_bins[t] - 1, :] = start

        for d in range(max_outage_duration):
            h = (t + d) % t_max
            excess_generation = gen_prod - load[h]
            # a state fails when even full battery discharge plus generation falls short
            survival = (maximum_generation - load[h] >= 0).astype(float)

            gen_battery_prob_matrix = gen_battery_prob_matrix @ transition
            survival_probability_matrix[t, d] = np.sum(gen_battery_prob_matrix * survival)
            if not marginal_survival:
                gen_battery_prob_matrix = gen_battery_prob_matrix * survival

            shift_gen_battery_prob_matrix(
                gen_battery_prob_matrix,
                battery_bin_shift(excess_generation, bin_size, batt_kw,
                                  batt_charge_efficiency, batt_discharge_efficiency),
            )
    return survival_probability_matrix
