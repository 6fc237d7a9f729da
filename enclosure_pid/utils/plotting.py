"""
Plotting utilities for simulation results.
"""

import logging

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

logger = logging.getLogger(__name__)


def _save(fig, save_path):
    plt.tight_layout()
    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info("Saved: %s", save_path)
    plt.close(fig)


def plot_temperature_and_output(t, T, u, title="PID Cooling",
                                T_set=18.0, T_a=20.0, reference=None,
                                save_path=None):
    """
    Dual-panel plot: enclosure temperature and actuator command.

    Parameters
    ----------
    t : ndarray
        Time array.
    T : ndarray
        Temperature array, aligned to t.
    u : ndarray
        Actuator command (percent), aligned to t.
    title : str
        Figure title.
    T_set : float
        Setpoint temperature.
    T_a : float
        Ambient temperature.
    reference : ndarray, optional
        Uncontrolled reference temperature, aligned to t.
    save_path : str, optional
        Path to save figure.
    """
    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(12, 7), sharex=True,
                                   gridspec_kw={'height_ratios': [3, 1]})

    ax1.plot(t, T, 'b-', linewidth=1.5, label=r'$T(t)$')
    if reference is not None:
        ax1.plot(t, reference, color='gray', linewidth=1.0, alpha=0.8,
                 label='Unmodified reference')
    ax1.axhline(y=T_set, color='r', linestyle='--', alpha=0.7,
                label=f'$T_{{set}} = {T_set}$°C')
    ax1.axhline(y=T_a, color='cyan', linestyle=':', alpha=0.7,
                label=f'$T_a = {T_a}$°C')
    ax1.set_ylabel('Temperature (°C)', fontsize=12)
    ax1.set_title(title, fontsize=14)
    ax1.legend(loc='upper right', fontsize=10)
    ax1.grid(True, alpha=0.3)

    ax2.plot(t, u, 'r-', linewidth=1.2, label='Output $u(t)$')
    ax2.set_xlabel('Time (minutes)', fontsize=12)
    ax2.set_ylabel('Output (%)', fontsize=12)
    ax2.set_ylim(-5, 105)
    ax2.legend(loc='upper right', fontsize=10)
    ax2.grid(True, alpha=0.3)

    _save(fig, save_path)
    return fig


def plot_comparison(results_dict, T_set=18.0, save_path=None):
    """
    Overlay temperature and output curves from several runs.

    Parameters
    ----------
    results_dict : dict
        {name: (t, T, u)} for each run, aligned to t.
    T_set : float
        Setpoint.
    save_path : str, optional
    """
    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(14, 8), sharex=True,
                                   gridspec_kw={'height_ratios': [3, 1]})

    colors = plt.cm.tab10(np.linspace(0, 1, max(len(results_dict), 1)))

    for (name, (t, T, u)), color in zip(results_dict.items(), colors):
        ax1.plot(t, T, linewidth=1.5, label=name, color=color)
        ax2.plot(t, u, linewidth=1.2, label=name, color=color)

    ax1.axhline(y=T_set, color='k', linestyle='--', alpha=0.5,
                label=f'$T_{{set}} = {T_set}$°C')
    ax1.set_ylabel('Temperature (°C)', fontsize=12)
    ax1.set_title('Tuning Comparison', fontsize=14)
    ax1.legend(fontsize=9)
    ax1.grid(True, alpha=0.3)

    ax2.set_xlabel('Time (minutes)', fontsize=12)
    ax2.set_ylabel('Output (%)', fontsize=12)
    ax2.legend(fontsize=9)
    ax2.grid(True, alpha=0.3)

    _save(fig, save_path)
    return fig
