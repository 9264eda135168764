"""Result types — the contract between the engines and the HTTP API.

Both drivers return plain dicts so they can be called without pydantic in
the loop; these models validate and document those dicts at the API edge.
"""

from __future__ import annotations

from pydantic import BaseModel


# ═══════════════════════════════════════════════════════════════════════════
# Probabilistic backup reliability
# ═══════════════════════════════════════════════════════════════════════════

class ReliabilityResult(BaseModel):
    """Summary of the marginal and cumulative survival matrices (T starts × D durations)."""

    # --- By outage duration (length D) ---
    unlimited_fuel_mean_marginal_survival_by_duration: list[float]
    """Mean over start steps of P(load met in outage step d)."""
    unlimited_fuel_min_marginal_survival_by_duration: list[float]
    unlimited_fuel_mean_cumulative_survival_by_duration: list[float]
    """Mean over start steps of P(load met in every step 1..d)."""
    unlimited_fuel_min_cumulative_survival_by_duration: list[float]

    # --- By outage start (length T) ---
    unlimited_fuel_marginal_survival_final_time_step: list[float]
    unlimited_fuel_cumulative_survival_final_time_step: list[float]
    """Survival through the longest modeled outage, per start step."""

    mean_marginal_survival_final_time_step: float
    mean_cumulative_survival_final_time_step: float


# ═══════════════════════════════════════════════════════════════════════════
# Deterministic outage simulation
# ═══════════════════════════════════════════════════════════════════════════

class OutageSimulationResult(BaseModel):
    """Hours survived from every start step, and the distribution they imply."""

    resilience_by_time_step: list[float]
    resilience_hours_min: float
    resilience_hours_max: float
    resilience_hours_avg: float

    outage_durations: list[int]
    """Outage lengths (hours) the survival fractions below refer to."""
    probs_of_surviving: list[float]
    """Fraction of start steps that survive at least each outage duration."""

    probs_of_surviving_by_month: list[list[float]] = []
    """12 × len(outage_durations); empty unless a whole calendar year was simulated."""
    probs_of_surviving_by_hour_of_the_day: list[list[float]] = []
