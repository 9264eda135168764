"""Battery state-of-charge discretization and bin shifting.

The battery's state of charge is tracked as one of ``num_bins`` discrete
levels so the joint (battery bin × generator state) probability stays finite:

  bin_size = batt_kwh / (num_bins − 1)
  bin 1    = empty, bin num_bins = full

Bins are 1-based labels; row ``bin − 1`` of the joint probability matrix
holds bin ``bin``.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from der_reliability.engine.markov import joint_generator_output


def bin_battery_charge(batt_soc_kwh: Sequence[float], num_bins: int, batt_kwh: float) -> np.ndarray:
    """Round each SOC (kWh) to its nearest bin label in ``1..num_bins``.

    >>> bin_battery_charge([30, 100, 170.5, 250, 251, 1000], 11, 1000)
    array([ 1,  2,  3,  3,  4, 11])
    """
    if num_bins < 2:
        raise ValueError(f"num_bins must be at least 2, got {num_bins}")
    if batt_kwh <= 0:
        raise ValueError(f"batt_kwh must be positive to bin state of charge, got {batt_kwh}")
    soc = np.asarray(batt_soc_kwh, dtype=float)
    if (soc < 0).any():
        raise ValueError(f"battery state of charge must be non-negative, got minimum {soc.min()} kWh")
    bin_size = batt_kwh / (num_bins - 1)
    bins = np.round(soc / bin_size) + 1
    return np.minimum(num_bins, bins).astype(int)


def battery_discharge_limits(batt_kw: float, bin_size: float, num_bins: int,
                             batt_discharge_efficiency: float) -> np.ndarray:
    """Maximum deliverable battery power for every bin: ``min(kW, (bin − 1) × bin_size × η_d)``."""
    stored = np.arange(num_bins) * bin_size * batt_discharge_efficiency
    return np.minimum(batt_kw, stored)


def get_maximum_generation(batt_kw: float, gen_capacity, bin_size: float, num_bins: int,
                           num_generators, batt_discharge_efficiency: float) -> np.ndarray:
    """Maximum combined output; rows = battery bin, columns = joint generator state.

    ``num_generators`` and ``gen_capacity`` are scalars for one generator type
    or sequences with one entry per type.

    >>> get_maximum_generation(1000, 750, 250, 5, 3, 1.0)
    array([[   0.,  750., 1500., 2250.],
           [ 250., 1000., 1750., 2500.],
           [ 500., 1250., 2000., 2750.],
           [ 750., 1500., 2250., 3000.],
           [1000., 1750., 2500., 3250.]])
    """
    return (
        battery_discharge_limits(batt_kw, bin_size, num_bins, batt_discharge_efficiency)[:, None]
        + joint_generator_output(num_generators, gen_capacity)[None, :]
    )


def battery_bin_shift(excess_generation: Sequence[float], bin_size: float, batt_kw: float,
                      batt_charge_efficiency: float, batt_discharge_efficiency: float) -> np.ndarray:
    """Number of bins the battery moves for each generator state.

    Surplus charges the battery at ``η_c``; a deficit drains ``1 / η_d`` of
    stored energy per kWh delivered.  Either way the flow is capped at the
    inverter rating before being converted to whole bins.
    """
    flow = np.array(excess_generation, dtype=float)
    flow = np.where(flow > 0, flow * batt_charge_efficiency, flow / batt_discharge_efficiency)
    flow = np.clip(flow, -batt_kw, batt_kw)
    return np.round(flow / bin_size).astype(int)


def shift_gen_battery_prob_matrix(gen_battery_prob_matrix: np.ndarray, shift_vector: Sequence[int]) -> np.ndarray:
    """Shift every column of the joint probability matrix by its own bin offset, in place.

    Column ``i`` moves by ``shift_vector[i]`` rows.  Probability that would
    move past the empty or full bin piles up in that bin instead, so each
    column's total is unchanged.  Returns the same (mutated) matrix.
    """
    num_bins = gen_battery_prob_matrix.shape[0]
    for i, s in enumerate(shift_vector):
        s = int(max(-(num_bins - 1), min(num_bins - 1, s)))
        if s == 0:
            continue
        column = np.roll(gen_battery_prob_matrix[:, i], s)
        if s < 0:
            # rows num_bins+s.. wrapped around from the bottom
            column[0] += column[num_bins + s:].sum()
            column[num_bins + s:] = 0.0
        else:
            column[-1] += column[:s].sum()
            column[:s] = 0.0
        gen_battery_prob_matrix[:, i] = column
    return gen_battery_prob_matrix
