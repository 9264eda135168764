"""Shared test fixtures — small hand-checkable reliability scenarios."""

from __future__ import annotations

import pytest

from der_reliability.config import OutageSimulationInputs, ReliabilityInputs


@pytest.fixture
def two_generator_inputs() -> dict:
    """Two 1 kW units, FTR 0.2 per step, perfect availability and starting."""
    return dict(
        OA=1.0,
        FTS=0.0,
        FTR=0.2,
        num_generators=2,
        gen_capacity=1.0,
    )


@pytest.fixture
def battery_inputs(two_generator_inputs) -> dict:
    """2 kWh / 1 kW lossless battery with 3 bins (0, 1, 2 kWh) starting half full."""
    return dict(
        two_generator_inputs,
        net_critical_load=[1.0, 2.0, 2.0, 1.0],
        starting_batt_soc_kwh=[1.0, 1.0, 1.0, 1.0],
        batt_kwh=2.0,
        batt_kw=1.0,
        num_bins=3,
        max_outage_duration=3,
        batt_charge_efficiency=1.0,
        batt_discharge_efficiency=1.0,
    )


@pytest.fixture
def reliability_payload() -> dict:
    """Battery scenario above, keyed as a ReliabilityInputs document."""
    return {
        "critical_loads_kw": [1, 2, 2, 1],
        "battery_starting_soc_series_fraction": [0.5, 0.5, 0.5, 0.5],
        "max_outage_duration": 3,
        "num_generators": 2,
        "generator_size_kw": 1,
        "generator_operational_availability": 1,
        "generator_failure_to_start": 0.0,
        "generator_mean_time_to_failure": 5,
        "num_battery_bins": 3,
        "battery_size_kwh": 2,
        "battery_size_kw": 1,
        "battery_charge_efficiency": 1,
        "battery_discharge_efficiency": 1,
        "battery_operational_availability": 1.0,
    }


@pytest.fixture
def reliability_inputs(reliability_payload) -> ReliabilityInputs:
    return ReliabilityInputs(**reliability_payload)


@pytest.fixture
def outage_inputs() -> OutageSimulationInputs:
    """10 kW flat load, 20 kWh / 10 kW battery, no generator — survives exactly 2 hours."""
    return OutageSimulationInputs(
        critical_loads_kw=[10.0] * 24,
        battery_size_kwh=20.0,
        battery_size_kw=10.0,
        battery_soc_series_fraction=[1.0] * 24,
        generator_min_turndown_fraction=0.0,
    )
