"""
Initial-condition providers for a simulation run.

A provider is called with the run's time grid and returns the temperature
that seeds the measured series. Two are available:

- ConstantTemperature: a fixed starting temperature.
- ReferenceCurve: the closed-form, uncontrolled response

      f(t) = 0.3 * exp(-t) * cos(20*pi*t / 7) + 20

  rounded to 2 decimals. Its value at the first time sample seeds the run,
  and the whole curve can be sampled for comparison plots.
"""

import numpy as np

from enclosure_pid.exceptions import InvalidConfiguration


class ConstantTemperature:
    """Seed the run with a fixed temperature."""

    def __init__(self, value):
        self.value = float(value)

    def __call__(self, time):
        return self.value

    def __repr__(self):
        return f"ConstantTemperature({self.value!r})"


class ReferenceCurve:
    """
    Damped-oscillation reference temperature.

    Parameters
    ----------
    amplitude : float
        Initial deviation from the baseline (deg C).
    decay : float
        Exponential decay rate (1/min).
    frequency : float
        Angular frequency of the oscillation (rad/min).
    baseline : float
        Temperature the curve settles to.
    """

    def __init__(self, amplitude=0.3, decay=1.0, frequency=20 * np.pi / 7,
                 baseline=20.0):
        self.amplitude = amplitude
        self.decay = decay
        self.frequency = frequency
        self.baseline = baseline

    def sample(self, time):
        """Curve values at each time, rounded to 2 decimals."""
        t = np.asarray(time, dtype=float)
        T = (self.amplitude * np.exp(-self.decay * t)
             * np.cos(self.frequency * t) + self.baseline)
        return np.copysign(np.floor(np.abs(T) * 100 + 0.5), T) / 100

    def __call__(self, time):
        return float(self.sample(time[:1])[0])

    def __repr__(self):
        return (f"ReferenceCurve(amplitude={self.amplitude!r}, "
                f"decay={self.decay!r}, baseline={self.baseline!r})")


def make_initial_condition(kind, starting_temperature):
    """Build a provider by name: 'constant' or 'reference'."""
    if kind == 'constant':
        return ConstantTemperature(starting_temperature)
    if kind == 'reference':
        return ReferenceCurve()
    raise InvalidConfiguration(f"Unknown initial condition: {kind!r}")
