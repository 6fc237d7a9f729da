"""
Shared physical parameters for the enclosure cooling simulation.

Times are in minutes, energies in joules, temperatures in deg C.
"""

import math
from dataclasses import dataclass

from enclosure_pid.exceptions import InvalidConfiguration

# --- Enclosure & environment ---
T_AMBIENT = 20.0       # Temperature outside the enclosure (deg C)
T_INITIAL = 20.3       # Starting temperature inside the enclosure (deg C)
T_SET = 18.0           # Controller setpoint (deg C)

# --- Enclosure contents (air) ---
ENCLOSURE_VOLUME = 72.0                        # Litres
AIR_DENSITY = 1.204                            # kg/m^3 at 20 deg C
MASS = 0.01 * ENCLOSURE_VOLUME * AIR_DENSITY   # kg, 0.01 converts L to m^3 scale
SPECIFIC_HEAT_CAPACITY = 1000.0                # J/(kg K), temperature dependent

# --- Enclosure walls ---
CONDUCTIVITY = 0.03    # Wall thermal conductivity
SURFACE_AREA = 1.4136  # Exterior area of the box (m^2)

# --- Actuator ---
E_MAX = 7740.0         # Max energy removed per minute (J/min)
                       # 3 coolers x 43 W = 3 x 2580 J/min

# --- Simulation ---
DT = 0.1               # Sample time (minutes)
T_END = 5000.0         # Run duration (minutes)

# --- Actuator range ---
OUTPUT_MIN = 0.0       # Percent of actuator capacity
OUTPUT_MAX = 100.0


@dataclass(frozen=True)
class PIDParameters:
    """Gains and setpoint of the PID controller."""
    Kp: float
    Ki: float
    Kd: float
    setpoint: float = T_SET


@dataclass(frozen=True)
class ThermalParameters:
    """
    Physical constants of the enclosure and its cooling actuator.

    Parameters
    ----------
    mass : float
        Mass of the air in the enclosure (kg).
    specific_heat_capacity : float
        Specific heat capacity of the contents.
    conductivity : float
        Thermal conductivity of the walls.
    surface_area : float
        Exterior wall area (m^2).
    max_actuator_energy : float
        Energy the actuator removes per minute at 100 % duty.
    ambient_temperature : float
        Temperature outside the enclosure.
    """
    mass: float = MASS
    specific_heat_capacity: float = SPECIFIC_HEAT_CAPACITY
    conductivity: float = CONDUCTIVITY
    surface_area: float = SURFACE_AREA
    max_actuator_energy: float = E_MAX
    ambient_temperature: float = T_AMBIENT

    @property
    def heat_capacity(self):
        """Energy per degree for the whole enclosure contents."""
        return self.specific_heat_capacity * self.mass


@dataclass(frozen=True)
class SimulationConfig:
    """Clock and initial condition of a run."""
    sample_time: float = DT
    run_duration: float = T_END
    starting_temperature: float = T_INITIAL


# Tuning presets
VARIANTS = {
    'A': PIDParameters(Kp=0.5, Ki=1.00, Kd=1.00, setpoint=T_SET),
    'B': PIDParameters(Kp=55.5, Ki=0.01, Kd=1.0, setpoint=T_SET),
}


def _require_finite(name, value):
    if not math.isfinite(value):
        raise InvalidConfiguration(f"{name} must be finite, got {value!r}")


def validate_timing(sample_time, run_duration):
    """Reject clock settings that cannot produce a forward time grid."""
    _require_finite('sample_time', sample_time)
    _require_finite('run_duration', run_duration)
    if sample_time <= 0:
        raise InvalidConfiguration(
            f"sample_time must be positive, got {sample_time}")
    if run_duration <= 0:
        raise InvalidConfiguration(
            f"run_duration must be positive, got {run_duration}")


def validate_config(config):
    validate_timing(config.sample_time, config.run_duration)


def validate_initial_temperature(T0):
    """Reject a seed temperature the loop cannot start from."""
    _require_finite('initial temperature', T0)


def validate_pid(params):
    for name in ('Kp', 'Ki', 'Kd', 'setpoint'):
        _require_finite(name, getattr(params, name))


def validate_thermal(params):
    for name in ('mass', 'specific_heat_capacity', 'conductivity',
                 'surface_area', 'max_actuator_energy',
                 'ambient_temperature'):
        _require_finite(name, getattr(params, name))
    if params.heat_capacity <= 0:
        raise InvalidConfiguration(
            "specific_heat_capacity * mass must be positive, "
            f"got {params.heat_capacity}")
    if params.max_actuator_energy < 0:
        raise InvalidConfiguration(
            "max_actuator_energy cannot be negative, "
            f"got {params.max_actuator_energy}")
