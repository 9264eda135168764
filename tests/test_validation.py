"""Pydantic validation tests — ensure invalid inputs are rejected.

Config errors surface as ``ValidationError`` at construction time, never
part-way through a simulation.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from der_reliability.config import (
    BatteryConfig,
    ElectricVehicleConfig,
    FloaterVehicleConfig,
    GeneratorConfig,
    OutageSimulationInputs,
    ReliabilityInputs,
)


# ═══════════════════════════════════════════════════════════════════════════
# Component configs
# ═══════════════════════════════════════════════════════════════════════════

class TestGeneratorValidation:

    def test_defaults_are_valid(self):
        g = GeneratorConfig()
        assert g.failure_to_run == pytest.approx(1 / 1100)

    def test_zero_mttf_rejected(self):
        with pytest.raises(ValidationError):
            GeneratorConfig(mean_time_to_failure=0)

    def test_availability_above_one_rejected(self):
        with pytest.raises(ValidationError):
            GeneratorConfig(operational_availability=1.2)

    def test_negative_units_rejected(self):
        with pytest.raises(ValidationError):
            GeneratorConfig(num_generators=-1)

    def test_total_kw(self):
        assert GeneratorConfig(num_generators=3, generator_size_kw=250).total_kw == 750


class TestBatteryValidation:

    def test_usable_energy_excludes_reserve(self):
        b = BatteryConfig(size_kwh=100, minimum_soc_fraction=0.2)
        assert b.usable_kwh == pytest.approx(80)

    def test_one_bin_rejected(self):
        with pytest.raises(ValidationError):
            BatteryConfig(num_battery_bins=1)

    def test_zero_efficiency_rejected(self):
        with pytest.raises(ValidationError):
            BatteryConfig(charge_efficiency=0)

    def test_negative_size_rejected(self):
        with pytest.raises(ValidationError):
            BatteryConfig(size_kwh=-5)


class TestVehicleValidation:

    def test_series_length_mismatch_rejected(self):
        with pytest.raises(ValidationError):
            ElectricVehicleConfig(on_site_series=[1, 1], soc_series_fraction=[0.5])

    def test_soc_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            ElectricVehicleConfig(on_site_series=[1], soc_series_fraction=[1.5])

    def test_negative_arrival_rejected(self):
        with pytest.raises(ValidationError):
            FloaterVehicleConfig(arrival_time_step=-1)


# ═══════════════════════════════════════════════════════════════════════════
# ReliabilityInputs
# ═══════════════════════════════════════════════════════════════════════════

class TestReliabilityInputsValidation:

    def test_payload_is_valid(self, reliability_inputs):
        assert reliability_inputs.n_time_steps == 4
        assert reliability_inputs.battery.usable_kwh == 2.0

    def test_empty_load_rejected(self):
        with pytest.raises(ValidationError):
            ReliabilityInputs()

    def test_series_length_mismatch_rejected(self, reliability_payload):
        reliability_payload["battery_starting_soc_series_fraction"] = [0.5, 0.5]
        with pytest.raises(ValidationError, match="battery_starting_soc_series_fraction"):
            ReliabilityInputs(**reliability_payload)

    def test_generator_lists_of_unequal_length_rejected(self, reliability_payload):
        reliability_payload["num_generators"] = [1, 1]
        reliability_payload["generator_size_kw"] = [1, 1, 1]
        with pytest.raises(ValidationError):
            ReliabilityInputs(**reliability_payload)

    def test_invalid_generator_type_rejected(self, reliability_payload):
        reliability_payload["num_generators"] = [1, 1]
        reliability_payload["generator_operational_availability"] = [1.0, 1.5]
        with pytest.raises(ValidationError, match="generator type 1"):
            ReliabilityInputs(**reliability_payload)

    def test_negative_battery_rejected(self, reliability_payload):
        reliability_payload["battery_size_kwh"] = -1
        with pytest.raises(ValidationError):
            ReliabilityInputs(**reliability_payload)

    def test_generator_types_broadcast(self, reliability_payload):
        reliability_payload["num_generators"] = [1, 2]
        types = ReliabilityInputs(**reliability_payload).generator_types()
        assert [g.num_generators for g in types] == [1, 2]
        assert [g.generator_size_kw for g in types] == [1.0, 1.0]
        assert types[1].failure_to_run == pytest.approx(0.2)

    def test_starting_soc_above_reserve(self, reliability_payload):
        reliability_payload.update(
            battery_size_kwh=10,
            battery_minimum_soc_fraction=0.2,
            battery_starting_soc_series_fraction=[0.5, 0.1, 1.0, 0.2],
        )
        soc = ReliabilityInputs(**reliability_payload).starting_battery_soc_kwh()
        assert soc.tolist() == pytest.approx([3.0, 0.0, 8.0, 0.0])

    def test_pv_from_size_and_production_factor(self, reliability_payload):
        reliability_payload.update(pv_size_kw=2, pv_production_factor_series=[0.5, 0.0, 0.25, 0.0])
        inputs = ReliabilityInputs(**reliability_payload)
        assert inputs.net_critical_loads_kw().tolist() == pytest.approx([0.0, 2.0, 1.5, 1.0])


# ═══════════════════════════════════════════════════════════════════════════
# OutageSimulationInputs
# ═══════════════════════════════════════════════════════════════════════════

class TestOutageInputsValidation:

    def test_empty_load_rejected(self):
        with pytest.raises(ValidationError):
            OutageSimulationInputs()

    def test_wind_length_mismatch_rejected(self):
        with pytest.raises(ValidationError, match="wind_kw_ac_time_series"):
            OutageSimulationInputs(critical_loads_kw=[1, 2], wind_kw_ac_time_series=[1])

    def test_ev_series_must_match_load(self):
        ev = ElectricVehicleConfig(on_site_series=[1], soc_series_fraction=[0.5])
        with pytest.raises(ValidationError):
            OutageSimulationInputs(critical_loads_kw=[1, 2], electric_vehicles=[ev])

    def test_floater_must_arrive_within_horizon(self):
        with pytest.raises(ValidationError):
            OutageSimulationInputs(critical_loads_kw=[1, 2], floater_vehicles=[FloaterVehicleConfig(arrival_time_step=2)])

    def test_steps_per_hour_inferred(self):
        assert OutageSimulationInputs(critical_loads_kw=[0.0] * 17520).steps_per_hour == 2
        assert OutageSimulationInputs(critical_loads_kw=[0.0] * 100).steps_per_hour == 1
        assert OutageSimulationInputs(critical_loads_kw=[0.0] * 100, time_steps_per_hour=4).steps_per_hour == 4

    def test_battery_needs_energy_and_power(self):
        assert not OutageSimulationInputs(critical_loads_kw=[1.0], battery_size_kwh=10).has_battery
        assert OutageSimulationInputs(critical_loads_kw=[1.0], battery_size_kwh=10, battery_size_kw=5).has_battery
