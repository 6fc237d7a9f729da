"""
PID controller for a cooling actuator.

    u = Kp * e[n] + Ki * dt * sum(e[0..n]) + Kd * (e[n] - e[n-1]) / dt

where e[k] = T[k] - T_set is the tracking error. A positive error means the
enclosure is too warm, so a positive output asks for more cooling.

The output is a percentage of actuator capacity, clamped to [0, 100]: the
actuator cannot heat and cannot exceed full duty.

Two forms are provided:

- compute_output: stateless, recomputes every term from the full measured
  history on each call. O(n) per call, O(n^2) over a run. This is the
  reference behaviour.
- RunningPIDController: keeps the error sum and the previous error between
  calls. O(1) per call and equal to compute_output up to floating-point
  rounding of the sum.

References:
- Astrom KJ, Murray RM. Feedback Systems: An Introduction for Scientists
  and Engineers. 2nd ed. Princeton University Press, 2021.
  Chapter 11: PID Control.
"""

import numpy as np

from enclosure_pid.exceptions import InsufficientHistory
from enclosure_pid.utils.parameters import OUTPUT_MIN, OUTPUT_MAX


def saturate(u, u_min=OUTPUT_MIN, u_max=OUTPUT_MAX):
    """Clamp a raw command to the actuator's operating range."""
    return float(np.clip(u, u_min, u_max))


def compute_output(history, params, dt):
    """
    Compute the actuator command from the whole temperature history.

    Parameters
    ----------
    history : array-like
        Measured temperatures so far, oldest first.
    params : PIDParameters
        Gains and setpoint.
    dt : float
        Sample time (minutes).

    Returns
    -------
    u : float
        Actuator command in percent, clamped to [0, 100].

    Raises
    ------
    InsufficientHistory
        If ``history`` is empty.
    """
    T = np.asarray(history, dtype=float)
    if T.size == 0:
        raise InsufficientHistory("PID output needs at least one measurement")

    error = T - params.setpoint

    P = params.Kp * error[-1]
    I = params.Ki * dt * np.sum(error)
    if error.size < 2:
        D = 0.0
    else:
        D = params.Kd * (error[-1] - error[-2]) / dt

    return saturate(P + I + D)


class RunningPIDController:
    """
    Incremental PID with the same output as compute_output.

    Feed it one measurement per sample with update(); the first call
    behaves like compute_output on a single-sample history.

    Parameters
    ----------
    params : PIDParameters
        Gains and setpoint.
    dt : float
        Sample time (minutes).
    """

    def __init__(self, params, dt):
        self.params = params
        self.dt = dt

        # Internal state
        self._error_sum = 0.0
        self._prev_error = None

    def update(self, T):
        """Add measurement T and return the new actuator command."""
        error = T - self.params.setpoint
        self._error_sum += error

        P = self.params.Kp * error
        I = self.params.Ki * self.dt * self._error_sum
        if self._prev_error is None:
            D = 0.0
        else:
            D = self.params.Kd * (error - self._prev_error) / self.dt
        self._prev_error = error

        return saturate(P + I + D)

    def reset(self):
        """Forget all measurements."""
        self._error_sum = 0.0
        self._prev_error = None
