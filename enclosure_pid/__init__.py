"""
Closed-loop PID cooling simulation of an enclosure.

A PID controller commands a bounded cooling actuator while a first-order
energy-balance model advances the enclosure temperature under actuator
cooling and ambient heat leakage.
"""

from enclosure_pid.exceptions import (
    SimulationError, InvalidConfiguration, InsufficientHistory,
    SimulationCancelled
)
from enclosure_pid.utils.parameters import (
    PIDParameters, ThermalParameters, SimulationConfig, VARIANTS
)
from enclosure_pid.simulation.engine import run_simulation, SimulationResult

__version__ = "0.1.0"
