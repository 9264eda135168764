"""Configuration models — engine inputs."""

from der_reliability.config.generator import GeneratorConfig
from der_reliability.config.battery import BatteryConfig
from der_reliability.config.vehicle import ElectricVehicleConfig, FloaterVehicleConfig
from der_reliability.config.scenario import ReliabilityInputs, OutageSimulationInputs

__all__ = [
    "GeneratorConfig",
    "BatteryConfig",
    "ElectricVehicleConfig",
    "FloaterVehicleConfig",
    "ReliabilityInputs",
    "OutageSimulationInputs",
]
