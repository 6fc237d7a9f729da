"""
Simulation clock: the fixed-step time grid of a run.

Each time value is rounded to 2 decimals as soon as it is computed so that
floating-point drift does not creep into later values.
"""

import math

import numpy as np

from enclosure_pid.exceptions import InvalidConfiguration
from enclosure_pid.utils.parameters import validate_timing


def round_centi(x):
    """Round to 2 decimals, halves away from zero."""
    return math.copysign(math.floor(abs(x) * 100 + 0.5), x) / 100


def generate_time(sample_time, run_duration):
    """
    Build the time grid 0, dt, 2*dt, ... for a run.

    Values are appended while the last one is strictly below
    ``run_duration``, so the first value reaching ``run_duration`` closes
    the grid.

    Parameters
    ----------
    sample_time : float
        Step between samples (minutes). Must be positive.
    run_duration : float
        Length of the run (minutes). Must be positive.

    Returns
    -------
    time : ndarray
        Strictly increasing time values, starting at 0.
    """
    validate_timing(sample_time, run_duration)

    time = [0.0]
    while time[-1] < run_duration:
        t_next = round_centi(time[-1] + sample_time)
        if t_next <= time[-1]:
            # Steps that round away to nothing never reach run_duration
            raise InvalidConfiguration(
                f"sample_time {sample_time} does not advance the clock, "
                "which is rounded to 0.01")
        time.append(t_next)
    return np.array(time)
