"""
Evaluation metrics for a simulated run.

All metrics take time series aligned to the time grid (see
SimulationResult.aligned) and return scalar values, so tunings and initial
conditions can be compared on equal terms.
"""

import numpy as np
from scipy.integrate import trapezoid

from enclosure_pid.utils.parameters import OUTPUT_MIN, OUTPUT_MAX


def actuator_energy(t, u, E_max):
    """
    Total energy removed by the actuator: E = integral E_max * u/100 dt.

    Parameters
    ----------
    t : ndarray
        Time array (minutes).
    u : ndarray
        Actuator command (percent).
    E_max : float
        Energy removed per minute at full duty.

    Returns
    -------
    E : float
    """
    return float(trapezoid(E_max * np.asarray(u) / 100.0, t))


def temperature_rmse(t, T, T_set):
    """
    Root mean square error of temperature from setpoint.

    RMSE = sqrt(1/T_f * integral (T(t) - T_set)^2 dt)
    """
    duration = t[-1] - t[0]
    if duration <= 0:
        return float(abs(T[0] - T_set))
    integrand = (np.asarray(T) - T_set) ** 2
    return float(np.sqrt(trapezoid(integrand, t) / duration))


def max_overshoot(T, T_set):
    """
    Largest excursion past the setpoint, on the side away from T[0].

    A cooled enclosure starting above the setpoint overshoots when it dips
    below it. Returns 0 if the setpoint is never crossed.
    """
    T = np.asarray(T)
    if T[0] >= T_set:
        return float(max(0.0, T_set - np.min(T)))
    return float(max(0.0, np.max(T) - T_set))


def settling_time(t, T, T_set, band=0.05):
    """
    Time at which T enters and stays within T_set +/- band.

    Returns
    -------
    t_settle : float
        Settling time, or np.inf if T is outside the band at the end.
    """
    within_band = np.abs(np.asarray(T) - T_set) <= band

    outside_indices = np.where(~within_band)[0]
    if len(outside_indices) == 0:
        return float(t[0])

    last_outside = outside_indices[-1]
    if last_outside >= len(t) - 1:
        return np.inf

    return float(t[last_outside + 1])


def mean_duty(u):
    """Average actuator command (percent)."""
    return float(np.mean(u))


def saturated_fraction(u, u_min=OUTPUT_MIN, u_max=OUTPUT_MAX):
    """Fraction of samples where the command sits at either limit."""
    u = np.asarray(u)
    return float(np.mean((u <= u_min) | (u >= u_max)))


def compute_all_metrics(t, T, u, T_set, E_max, band=0.05):
    """
    Compute all metrics in one call.

    Parameters
    ----------
    t : ndarray
        Time array.
    T : ndarray
        Temperature array.
    u : ndarray
        Actuator command (percent).
    T_set : float
        Setpoint.
    E_max : float
        Actuator energy per minute at full duty.
    band : float
        Half-width of the settling band (deg C).

    Returns
    -------
    metrics : dict
    """
    return {
        'energy': actuator_energy(t, u, E_max),
        'rmse': temperature_rmse(t, T, T_set),
        'max_overshoot': max_overshoot(T, T_set),
        'settling_time': settling_time(t, T, T_set, band),
        'mean_duty': mean_duty(u),
        'saturated_fraction': saturated_fraction(u),
    }
