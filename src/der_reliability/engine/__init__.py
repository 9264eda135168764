"""Engine — probabilistic survival model and deterministic outage simulator."""

from der_reliability.engine.markov import (
    transition_prob,
    markov_matrix,
    starting_probabilities,
    generator_output,
    joint_generator_output,
    generator_state_space,
)
from der_reliability.engine.battery_bins import (
    bin_battery_charge,
    get_maximum_generation,
    battery_bin_shift,
    shift_gen_battery_prob_matrix,
)
from der_reliability.engine.survival import survival_over_time_gen_only, survival_with_battery
from der_reliability.engine.backup_reliability import (
    return_backup_reliability,
    process_reliability_results,
    backup_reliability,
    backup_reliability_inputs_from_results,
    backup_reliability_from_results,
)
from der_reliability.engine.fuel import fuel_slope_and_intercept
from der_reliability.engine.outage_simulator import (
    VehiclePool,
    VehicleFleet,
    simulate_outage,
    simulate_outages,
    process_results,
)

__all__ = [
    "transition_prob",
    "markov_matrix",
    "starting_probabilities",
    "generator_output",
    "joint_generator_output",
    "generator_state_space",
    "bin_battery_charge",
    "get_maximum_generation",
    "battery_bin_shift",
    "shift_gen_battery_prob_matrix",
    "survival_over_time_gen_only",
    "survival_with_battery",
    "return_backup_reliability",
    "process_reliability_results",
    "backup_reliability",
    "backup_reliability_inputs_from_results",
    "backup_reliability_from_results",
    "fuel_slope_and_intercept",
    # Deterministic simulator
    "VehiclePool",
    "VehicleFleet",
    "simulate_outage",
    "simulate_outages",
    "process_results",
]
