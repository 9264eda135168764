"""Result models — engine output contracts."""

from der_reliability.models.results import OutageSimulationResult, ReliabilityResult

__all__ = [
    "OutageSimulationResult",
    "ReliabilityResult",
]
