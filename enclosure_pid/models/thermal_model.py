"""
Thermal model: energy balance of a cooled enclosure.

Per step, with q = m c dT:

    E_ext = k * A * (T - T_a)                  # heat leaking in from outside
    E_act = E_max * (u / 100) * dt             # heat pumped out by the actuator
    dT    = ((E_act + E_ext) / 1000) / (c * m)
    T'    = T - dT

E_ext is positive when the enclosure is warmer than ambient and is added to
the energy the actuator must offset. A negative total, as when the
enclosure sits below ambient with the actuator idle, warms the enclosure.

This is a single explicit (forward) Euler step with a fixed time step.
"""

import math
from collections import namedtuple

# Combined energy is divided by this to match the specific heat units.
ENERGY_SCALE = 1000.0


EnergyBalance = namedtuple('EnergyBalance', [
    'external_energy', 'actuator_energy', 'energy_change',
    'temperature_change',
])


def external_energy(T, params):
    """Ambient exchange across the walls; positive when T > T_a."""
    return params.conductivity * params.surface_area * (
        T - params.ambient_temperature)


def actuator_energy(output_percent, params, dt):
    """Energy removed by the actuator at the given duty over one step."""
    return params.max_actuator_energy * (output_percent / 100) * dt


def energy_balance(T, output_percent, params, dt):
    """
    Break one step down into its energy flows.

    Parameters
    ----------
    T : float
        Current enclosure temperature.
    output_percent : float
        Commanded actuator duty, in [0, 100].
    params : ThermalParameters
        Enclosure and actuator constants.
    dt : float
        Sample time (minutes).

    Returns
    -------
    EnergyBalance
        External and actuator energy, their sum, and the resulting
        temperature drop over the step.
    """
    E_ext = external_energy(T, params)
    E_act = actuator_energy(output_percent, params, dt)
    E_total = E_act + E_ext
    dT = (E_total / ENERGY_SCALE) / (
        params.specific_heat_capacity * params.mass)
    return EnergyBalance(E_ext, E_act, E_total, dT)


def step(T, output_percent, params, dt):
    """Temperature at the next sample time."""
    return T - energy_balance(T, output_percent, params, dt).temperature_change


def equilibrium_output(T, params, dt):
    """
    Actuator duty (percent, unclamped) that holds the enclosure at T.

    Useful for judging whether a setpoint is reachable: values above 100
    mean the actuator cannot hold T against ambient leakage, negative
    values mean T is only reachable by heating.
    """
    capacity = params.max_actuator_energy * dt
    leak = external_energy(T, params)
    if capacity == 0:
        return 0.0 if leak == 0 else math.copysign(math.inf, -leak)
    return -100.0 * leak / capacity
