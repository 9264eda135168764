"""Markov generator-failure model.

A bank of ``N`` identical generators is a Markov chain over the number of
units still running, ``0..N``.  In each time step every running unit fails
independently with probability ``p``, so going from ``n`` to ``n'`` running
units is a binomial event:

  P(n → n') = C(n, n') × (1 − p)^n' × p^(n − n')        (0 for n' > n)

The same machinery gives the distribution of units that actually pick up
load at outage start: a unit is lost if it is down for maintenance
(1 − OA) or available but fails to start (FTS × OA).

Several generator *types* are combined by taking the Kronecker product of
their per-type matrices / vectors, so the joint state index enumerates the
Cartesian product of per-type counts (first type most significant).
"""

from __future__ import annotations

from functools import reduce
from math import comb
from typing import Sequence

import numpy as np


def transition_prob(n: Sequence[int], n_prime: Sequence[int], p: float) -> np.ndarray:
    """Probability that ``n_prime`` of ``n`` running generators are still running.

    ``n`` and ``n_prime`` are paired element-wise.

    >>> transition_prob([1, 2, 3, 4], [0, 1, 2, 3], 0.5)
    array([0.5  , 0.5  , 0.375, 0.25 ])
    """
    n = np.asarray(n, dtype=int)
    n_prime = np.asarray(n_prime, dtype=int)
    if n.shape != n_prime.shape:
        raise ValueError(f"n and n_prime must have the same shape, got {n.shape} and {n_prime.shape}")
    if (n < 0).any() or (n_prime < 0).any():
        raise ValueError("generator counts must be non-negative")

    binomial = np.array([comb(a, b) for a, b in zip(n.ravel(), n_prime.ravel())], dtype=float).reshape(n.shape)
    # p ** (n - n') is infinite for n' > n when p == 0; the binomial term is 0 there
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        return binomial * (1.0 - p) ** n_prime.astype(float) * p ** (n - n_prime).astype(float)


def markov_matrix(num_generators: int, p: float) -> np.ndarray:
    """(N+1)×(N+1) transition matrix; row = units running now, column = units running next step.

    >>> markov_matrix(2, 0.1)
    array([[1.  , 0.  , 0.  ],
           [0.1 , 0.9 , 0.  ],
           [0.01, 0.18, 0.81]])
    """
    if num_generators < 0:
        raise ValueError(f"num_generators must be >= 0, got {num_generators}")
    states = np.arange(num_generators + 1)
    n, n_prime = np.meshgrid(states, states, indexing="ij")
    matrix = transition_prob(n, n_prime, p)
    matrix[np.isnan(matrix)] = 0.0
    return matrix


def starting_probabilities(num_generators: int, operational_availability: float,
                           failure_to_start: float) -> np.ndarray:
    """Distribution of units that successfully start, element ``k`` = ``k`` units running.

    A unit is lost at start with probability ``(1 − OA) + FTS × OA``.

    >>> starting_probabilities(2, 0.99, 0.05).round(8)
    array([0.00354025, 0.1119195 , 0.88454025])
    """
    p_lost = (1.0 - operational_availability) + failure_to_start * operational_availability
    all_started = np.zeros(num_generators + 1)
    all_started[-1] = 1.0
    return all_started @ markov_matrix(num_generators, p_lost)


def generator_output(num_generators: int, gen_capacity: float) -> np.ndarray:
    """Maximum output for 0..N running units: ``[0, c, 2c, ..., Nc]``."""
    return np.arange(num_generators + 1) * float(gen_capacity)


# ═══════════════════════════════════════════════════════════════════════════
# Multiple generator types
# ═══════════════════════════════════════════════════════════════════════════

def as_type_arrays(*params) -> list[np.ndarray]:
    """Broadcast scalar-or-sequence generator parameters to equal-length 1-D arrays."""
    arrays = [np.atleast_1d(np.asarray(p, dtype=float)) for p in params]
    lengths = {a.size for a in arrays if a.size != 1}
    if len(lengths) > 1:
        raise ValueError(f"per-type generator parameters have mismatched lengths {sorted(lengths)}")
    size = lengths.pop() if lengths else 1
    return [np.broadcast_to(a, (size,)) for a in arrays]


def _type_counts(num_generators) -> np.ndarray:
    counts = np.atleast_1d(np.asarray(num_generators, dtype=float))
    if (counts < 0).any() or (counts != np.round(counts)).any():
        raise ValueError(f"num_generators must be non-negative integers, got {counts.tolist()}")
    return counts.astype(int)


def joint_generator_output(num_generators, gen_capacity) -> np.ndarray:
    """Maximum output for every joint generator state (outer sum of per-type outputs).

    >>> joint_generator_output([1, 2], [100, 50])
    array([  0.,  50., 100., 100., 150., 200.])
    """
    nums, caps = as_type_arrays(num_generators, gen_capacity)
    return reduce(
        lambda a, b: np.add.outer(a, b).ravel(),
        [generator_output(n, c) for n, c in zip(_type_counts(nums), caps)],
    )


def generator_state_space(num_generators, gen_capacity, operational_availability,
                          failure_to_start, failure_to_run) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Joint generator model for one or more generator types.

    Every argument is a scalar or a sequence with one entry per type.

    Returns
    -------
    output : np.ndarray
        Maximum generator output for every joint state.
    transition : np.ndarray
        Joint per-step Markov matrix (failure-to-run).
    start : np.ndarray
        Joint starting distribution (availability and failure-to-start).
    """
    nums, caps, oas, ftss, ftrs = as_type_arrays(
        num_generators, gen_capacity, operational_availability, failure_to_start, failure_to_run,
    )
    counts = _type_counts(nums)

    output = joint_generator_output(counts, caps)
    transition = reduce(np.kron, [markov_matrix(n, ftr) for n, ftr in zip(counts, ftrs)])
    start = reduce(np.kron, [starting_probabilities(n, oa, fts) for n, oa, fts in zip(counts, oas, ftss)])
    return output, transition, start
