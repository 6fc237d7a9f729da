"""Tests for the closed-loop simulation engine."""

import numpy as np
import pytest
import sys, os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from enclosure_pid.exceptions import InvalidConfiguration, SimulationCancelled
from enclosure_pid.models.reference import ReferenceCurve
from enclosure_pid.models.thermal_model import step
from enclosure_pid.simulation import engine
from enclosure_pid.simulation.engine import (
    run_simulation, SimulationResult, DIAGNOSTICS
)
from enclosure_pid.utils.parameters import (
    PIDParameters, ThermalParameters, SimulationConfig, VARIANTS
)


def _short_config(duration=5.0):
    return SimulationConfig(sample_time=0.1, run_duration=duration,
                            starting_temperature=20.3)


# ===================== Engine Tests =====================

class TestEngine:
    def test_series_lengths(self):
        result = run_simulation(_short_config(), VARIANTS['A'],
                                ThermalParameters())
        assert len(result.time) == 51
        assert len(result.temperature) == len(result.time) + 1
        assert len(result.output) == len(result.time) + 1

    def test_idle_actuator_at_ambient_stays_constant(self):
        config = SimulationConfig(sample_time=1.0, run_duration=2.0,
                                  starting_temperature=20.0)
        pid = PIDParameters(Kp=1.0, Ki=0.0, Kd=0.0, setpoint=18.0)
        thermal = ThermalParameters(ambient_temperature=20.0,
                                    max_actuator_energy=0.0)
        result = run_simulation(config, pid, thermal)
        assert result.time.tolist() == [0.0, 1.0, 2.0]
        assert result.temperature.tolist() == [20.0] * 4
        assert result.output.tolist() == [2.0] * 4

    def test_strong_actuator_reaches_setpoint_without_overshoot(self):
        config = SimulationConfig(sample_time=1.0, run_duration=2.0,
                                  starting_temperature=20.0)
        pid = PIDParameters(Kp=1.0, Ki=0.0, Kd=0.0, setpoint=18.0)
        base = ThermalParameters(ambient_temperature=20.0)
        # Removes the 2 degree gap in one step at the 2 % first command
        E_max = 2.0 * 1000 * base.heat_capacity / 0.02
        thermal = ThermalParameters(ambient_temperature=20.0,
                                    max_actuator_energy=E_max)
        result = run_simulation(config, pid, thermal)
        T = result.temperature
        assert T[1] == pytest.approx(18.0, abs=1e-9)
        assert np.all(T >= 18.0 - 1e-9)
        assert np.all(np.diff(T) <= 1e-6)
        assert np.all((result.output >= 0.0) & (result.output <= 100.0))

    def test_first_step_follows_thermal_model(self):
        config = _short_config()
        thermal = ThermalParameters()
        result = run_simulation(config, VARIANTS['B'], thermal)
        assert result.temperature[0] == 20.3
        assert result.temperature[1] == step(
            result.temperature[0], result.output[0], thermal, 0.1)

    def test_outputs_in_range_and_cooling(self):
        for name in VARIANTS:
            result = run_simulation(_short_config(20.0), VARIANTS[name],
                                    ThermalParameters())
            assert np.all((result.output >= 0.0) & (result.output <= 100.0))
            assert np.all(np.isfinite(result.temperature))
            assert result.temperature[-1] < result.temperature[0]

    def test_running_method_matches_history(self):
        config = _short_config(20.0)
        thermal = ThermalParameters()
        for name in VARIANTS:
            full = run_simulation(config, VARIANTS[name], thermal)
            fast = run_simulation(config, VARIANTS[name], thermal,
                                  method='running')
            assert np.allclose(full.temperature, fast.temperature,
                               rtol=0, atol=1e-6)
            assert np.allclose(full.output, fast.output, rtol=0, atol=1e-6)

    def test_reference_seed(self):
        result = run_simulation(_short_config(), VARIANTS['A'],
                                ThermalParameters(),
                                initial_condition=ReferenceCurve())
        assert result.temperature[0] == pytest.approx(20.3)

    def test_constant_seed_overrides_config(self):
        from enclosure_pid.models.reference import ConstantTemperature
        result = run_simulation(_short_config(), VARIANTS['A'],
                                ThermalParameters(),
                                initial_condition=ConstantTemperature(25.0))
        assert result.temperature[0] == 25.0

    def test_result_is_read_only(self):
        result = run_simulation(_short_config(), VARIANTS['A'],
                                ThermalParameters(), record_diagnostics=True)
        with pytest.raises(ValueError):
            result.temperature[0] = 0.0
        with pytest.raises(ValueError):
            result.output[0] = 0.0
        with pytest.raises(ValueError):
            result.diagnostics['external_energy'][0] = 0.0

    def test_result_built_from_lists_is_read_only(self):
        result = SimulationResult([0.0], [1.0, 2.0], [3.0, 4.0],
                                  {'external_energy': [0.5]})
        assert isinstance(result.temperature, np.ndarray)
        with pytest.raises(ValueError):
            result.temperature[0] = 99.0
        with pytest.raises(ValueError):
            result.time[0] = 1.0
        with pytest.raises(ValueError):
            result.diagnostics['external_energy'][0] = 1.0

    def test_aligned(self):
        result = run_simulation(_short_config(), VARIANTS['A'],
                                ThermalParameters())
        t, T, u = result.aligned()
        assert len(t) == len(T) == len(u) == len(result)
        assert np.array_equal(T, result.temperature[:-1])

    def test_diagnostics(self):
        result = run_simulation(_short_config(), VARIANTS['A'],
                                ThermalParameters(), record_diagnostics=True)
        assert set(result.diagnostics) == set(DIAGNOSTICS)
        for values in result.diagnostics.values():
            assert len(values) == len(result.time)
        dT = result.diagnostics['temperature_change']
        assert np.array_equal(result.temperature[1:],
                              result.temperature[:-1] - dT)
        d = result.diagnostics
        assert np.allclose(d['energy_change'],
                           d['external_energy'] + d['actuator_energy'])

    def test_no_diagnostics_by_default(self):
        result = run_simulation(_short_config(), VARIANTS['A'],
                                ThermalParameters())
        assert result.diagnostics is None

    def test_controller_receives_read_only_history(self, monkeypatch):
        seen = []

        def spy(history, params, dt):
            seen.append((len(history), history.flags.writeable))
            return 0.0

        monkeypatch.setattr(engine, 'compute_output', spy)
        run_simulation(_short_config(0.3), VARIANTS['A'], ThermalParameters())
        assert [n for n, _ in seen] == [1, 2, 3, 4, 5]
        assert not any(writeable for _, writeable in seen)


# ===================== Cancellation & Error Tests =====================

class TestEngineErrors:
    def test_cancellation(self):
        calls = []

        def should_stop():
            calls.append(1)
            return len(calls) > 5

        with pytest.raises(SimulationCancelled) as excinfo:
            run_simulation(_short_config(), VARIANTS['A'],
                           ThermalParameters(), should_stop=should_stop)
        assert excinfo.value.step == 5

    def test_never_stopping(self):
        result = run_simulation(_short_config(), VARIANTS['A'],
                                ThermalParameters(),
                                should_stop=lambda: False)
        assert len(result.time) == 51

    @pytest.mark.parametrize("config", [
        SimulationConfig(sample_time=0.0, run_duration=5.0),
        SimulationConfig(sample_time=-0.1, run_duration=5.0),
        SimulationConfig(sample_time=0.1, run_duration=0.0),
        SimulationConfig(sample_time=0.1, run_duration=5.0,
                         starting_temperature=float('inf')),
    ])
    def test_invalid_config(self, config):
        with pytest.raises(InvalidConfiguration):
            run_simulation(config, VARIANTS['A'], ThermalParameters())

    def test_zero_heat_capacity(self):
        with pytest.raises(InvalidConfiguration):
            run_simulation(_short_config(), VARIANTS['A'],
                           ThermalParameters(mass=0.0))

    def test_negative_actuator_capacity(self):
        with pytest.raises(InvalidConfiguration):
            run_simulation(_short_config(), VARIANTS['A'],
                           ThermalParameters(max_actuator_energy=-1.0))

    def test_non_finite_gain(self):
        pid = PIDParameters(Kp=float('nan'), Ki=0.0, Kd=0.0)
        with pytest.raises(InvalidConfiguration):
            run_simulation(_short_config(), pid, ThermalParameters())

    @pytest.mark.parametrize("seed", [float('nan'), float('inf')])
    def test_non_finite_seed(self, seed):
        with pytest.raises(InvalidConfiguration):
            run_simulation(_short_config(), VARIANTS['A'],
                           ThermalParameters(),
                           initial_condition=lambda t: seed)

    def test_seed_provider_overrides_config_temperature(self):
        config = SimulationConfig(sample_time=0.1, run_duration=1.0,
                                  starting_temperature=float('nan'))
        result = run_simulation(config, VARIANTS['A'], ThermalParameters(),
                                initial_condition=ReferenceCurve())
        assert np.all(np.isfinite(result.temperature))

    def test_unknown_method(self):
        with pytest.raises(InvalidConfiguration):
            run_simulation(_short_config(), VARIANTS['A'],
                           ThermalParameters(), method='trapezoid')

    def test_validation_happens_before_stepping(self):
        def should_stop():
            raise AssertionError("loop should not start")

        with pytest.raises(InvalidConfiguration):
            run_simulation(_short_config(), VARIANTS['A'],
                           ThermalParameters(mass=-1.0),
                           should_stop=should_stop)
