"""
Closed-loop simulation engine.

Each timestep runs the controller on the measured history, then advances
the thermal model with the commanded output:

    T[0]   = initial condition
    u[0]   = pid([T[0]])
    T[t+1] = thermal_step(T[t], u[t])
    u[t+1] = pid(T[0..t+1])

for every t in the time grid, so the temperature and output series end up
one sample longer than the time grid.
"""

import logging
from dataclasses import dataclass, field

import numpy as np

from enclosure_pid.controllers.pid import compute_output, RunningPIDController
from enclosure_pid.exceptions import InvalidConfiguration, SimulationCancelled
from enclosure_pid.models.clock import generate_time
from enclosure_pid.models.reference import ConstantTemperature
from enclosure_pid.models.thermal_model import energy_balance
from enclosure_pid.utils.parameters import (
    validate_config, validate_initial_temperature, validate_pid,
    validate_thermal
)

logger = logging.getLogger(__name__)

METHODS = ('history', 'running')
DIAGNOSTICS = ('external_energy', 'actuator_energy', 'energy_change',
               'temperature_change')

# Steps between progress messages
PROGRESS_INTERVAL = 10000


def _freeze(a):
    a = np.asarray(a)
    a.flags.writeable = False
    return a


@dataclass(frozen=True, eq=False)
class SimulationResult:
    """
    Series produced by one run.

    ``time`` has N samples, ``temperature`` and ``output`` have N + 1.
    ``diagnostics`` maps each name in DIAGNOSTICS to an array of N
    per-step values, or is None if they were not recorded. All arrays are
    read-only.
    """
    time: np.ndarray
    temperature: np.ndarray
    output: np.ndarray
    diagnostics: dict = field(default=None)

    def __post_init__(self):
        for name in ('time', 'temperature', 'output'):
            object.__setattr__(self, name, _freeze(getattr(self, name)))
        if self.diagnostics is not None:
            object.__setattr__(self, 'diagnostics', {
                name: _freeze(values)
                for name, values in self.diagnostics.items()})

    def __len__(self):
        return len(self.time)

    def aligned(self):
        """(t, T, u) trimmed to the time grid, for metrics and plots."""
        n = len(self.time)
        return self.time, self.temperature[:n], self.output[:n]


def run_simulation(config, pid_params, thermal_params, initial_condition=None,
                   method='history', record_diagnostics=False,
                   should_stop=None):
    """
    Simulate the controlled enclosure over the configured run.

    Parameters
    ----------
    config : SimulationConfig
        Sample time, run duration and starting temperature.
    pid_params : PIDParameters
        Controller gains and setpoint.
    thermal_params : ThermalParameters
        Enclosure and actuator constants.
    initial_condition : callable(time) -> float, optional
        Provides T[0] from the time grid. Defaults to
        ``ConstantTemperature(config.starting_temperature)``.
    method : {'history', 'running'}
        'history' recomputes the PID terms from the full history at every
        step; 'running' keeps running sums.
    record_diagnostics : bool
        Also return the per-step energy flows.
    should_stop : callable() -> bool, optional
        Checked between timesteps; returning True aborts the run.

    Returns
    -------
    SimulationResult

    Raises
    ------
    InvalidConfiguration
        If any parameter is invalid. Raised before the first step.
    SimulationCancelled
        If ``should_stop`` requested a stop.
    """
    validate_config(config)
    validate_pid(pid_params)
    validate_thermal(thermal_params)
    if method not in METHODS:
        raise InvalidConfiguration(
            f"method must be one of {METHODS}, got {method!r}")
    if initial_condition is None:
        initial_condition = ConstantTemperature(config.starting_temperature)

    dt = config.sample_time
    time = generate_time(dt, config.run_duration)
    n = len(time)
    T0 = initial_condition(time)
    validate_initial_temperature(T0)

    temperature = np.empty(n + 1)
    output = np.empty(n + 1)
    diagnostics = None
    if record_diagnostics:
        diagnostics = {name: np.empty(n) for name in DIAGNOSTICS}

    if method == 'running':
        controller = RunningPIDController(pid_params, dt)

        def pid(k):
            return controller.update(temperature[k])
    else:
        def pid(k):
            history = temperature[:k + 1]
            history.flags.writeable = False
            return compute_output(history, pid_params, dt)

    logger.info("Simulating %d steps (dt=%g, method=%s, %s)",
                n, dt, method, initial_condition)

    temperature[0] = T0
    output[0] = pid(0)

    for t in range(n):
        if should_stop is not None and should_stop():
            logger.info("Run cancelled at step %d of %d", t, n)
            raise SimulationCancelled(t)

        balance = energy_balance(temperature[t], output[t],
                                 thermal_params, dt)
        temperature[t + 1] = temperature[t] - balance.temperature_change
        output[t + 1] = pid(t + 1)

        if diagnostics is not None:
            for name in DIAGNOSTICS:
                diagnostics[name][t] = getattr(balance, name)

        if t and t % PROGRESS_INTERVAL == 0:
            logger.debug("step %d/%d: T=%.4f u=%.2f",
                         t, n, temperature[t + 1], output[t + 1])

    logger.info("Finished: final T=%.4f, final output=%.2f%%",
                temperature[-1], output[-1])

    return SimulationResult(time, temperature, output, diagnostics)
