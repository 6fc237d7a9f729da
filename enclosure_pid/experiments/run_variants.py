"""
Experiment: compare PID tunings on the enclosure cooling model.

Usage:
    enclosure-pid                     # run both tunings (A, B)
    enclosure-pid B                   # run a single tuning
    enclosure-pid --quick             # short run (60 min) for testing
    enclosure-pid A --trace temperature_change --duration 1

Prints a metrics table and saves figures to ./results/ unless --no-plots.
"""

import argparse
import logging
import os

from enclosure_pid.exceptions import InvalidConfiguration
from enclosure_pid.models.reference import (
    ReferenceCurve, make_initial_condition
)
from enclosure_pid.models.thermal_model import equilibrium_output
from enclosure_pid.simulation.engine import (
    run_simulation, METHODS, DIAGNOSTICS
)
from enclosure_pid.utils.metrics import compute_all_metrics
from enclosure_pid.utils.parameters import (
    SimulationConfig, ThermalParameters, VARIANTS, DT, T_END, T_INITIAL
)
from enclosure_pid.utils.plotting import (
    plot_temperature_and_output, plot_comparison
)

logger = logging.getLogger(__name__)

QUICK_DURATION = 60.0


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='enclosure-pid',
        description="Simulate PID cooling of an enclosure")
    parser.add_argument('variants', nargs='*', default=[],
                        help=f"Tunings to run ({', '.join(VARIANTS)}). "
                             "Empty = all.")
    parser.add_argument('--quick', action='store_true',
                        help=f"Short run (t_end={QUICK_DURATION:g} min)")
    parser.add_argument('--sample-time', type=float, default=DT,
                        help='Sample time in minutes (default: %(default)s)')
    parser.add_argument('--duration', type=float, default=None,
                        help=f'Run duration in minutes (default: {T_END})')
    parser.add_argument('--start', type=float, default=None,
                        help=f'Starting temperature (default: {T_INITIAL}). '
                             'Ignored with --seed reference')
    parser.add_argument('--seed', choices=('constant', 'reference'),
                        default='constant',
                        help='Initial condition source (default: %(default)s)')
    parser.add_argument('--method', choices=METHODS, default='history',
                        help='PID evaluation (default: %(default)s)')
    parser.add_argument('--trace', nargs='+', choices=DIAGNOSTICS,
                        default=[], metavar='QUANTITY',
                        help='Print per-step values of these quantities: '
                             + ', '.join(DIAGNOSTICS))
    parser.add_argument('--output-dir', default='results',
                        help='Directory for figures (default: %(default)s)')
    parser.add_argument('--no-plots', action='store_true',
                        help='Skip figure generation')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='More log output (-v info, -vv debug)')
    return parser.parse_args(argv)


def print_metrics_table(metrics):
    header = (f"{'Tuning':<8} {'Energy (J)':>14} {'RMSE':>8} "
              f"{'Overshoot':>10} {'Settle':>10} {'Duty %':>8} {'Sat.':>6}")
    print(header)
    print("-" * len(header))
    for name, m in metrics.items():
        print(f"{name:<8} {m['energy']:>14.1f} {m['rmse']:>8.3f} "
              f"{m['max_overshoot']:>10.3f} {m['settling_time']:>10.1f} "
              f"{m['mean_duty']:>8.2f} {m['saturated_fraction']:>6.2f}")


def print_trace(name, result, quantities):
    print(f"\n--- {name}: per-step trace ---")
    print(f"{'time':>10} " + " ".join(f"{q:>20}" for q in quantities))
    for i, t in enumerate(result.time):
        values = " ".join(f"{result.diagnostics[q][i]:>20.8g}"
                          for q in quantities)
        print(f"{t:>10.2f} {values}")


def main(argv=None):
    args = parse_args(argv)

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose,
                                                      logging.DEBUG)
    logging.basicConfig(level=level,
                        format='%(asctime)s %(name)s %(levelname)s: '
                               '%(message)s')

    if args.duration is not None:
        duration = args.duration
    else:
        duration = QUICK_DURATION if args.quick else T_END

    start = T_INITIAL if args.start is None else args.start
    if args.seed == 'reference' and args.start is not None:
        logger.warning("--start %g is ignored, the reference curve sets the "
                       "starting temperature", args.start)

    to_run = [v.upper() for v in args.variants] or list(VARIANTS)
    unknown = [v for v in to_run if v not in VARIANTS]
    if unknown:
        print(f"Unknown tuning(s): {', '.join(unknown)}")
        return 2

    config = SimulationConfig(sample_time=args.sample_time,
                              run_duration=duration,
                              starting_temperature=start)
    thermal = ThermalParameters()

    print("=" * 70)
    print("Enclosure PID Cooling: Tuning Comparison")
    print("=" * 70)

    results = {}
    for i, name in enumerate(to_run, 1):
        pid = VARIANTS[name]
        print(f"\n[{i}/{len(to_run)}] Running tuning {name} "
              f"(Kp={pid.Kp}, Ki={pid.Ki}, Kd={pid.Kd})...")
        try:
            result = run_simulation(
                config, pid, thermal,
                initial_condition=make_initial_condition(args.seed, start),
                method=args.method,
                record_diagnostics=bool(args.trace),
            )
        except InvalidConfiguration as e:
            print(f"Invalid configuration: {e}")
            return 2
        results[name] = result
        print(f"  Done. Final T = {result.temperature[-1]:.3f}°C, "
              f"output = {result.output[-1]:.2f}%")
        if args.trace:
            print_trace(name, result, args.trace)

    holding = equilibrium_output(VARIANTS[to_run[0]].setpoint, thermal,
                                 config.sample_time)
    print(f"\nDuty needed to hold the setpoint: {holding:.3f}%")

    print("\n--- Metrics ---")
    metrics = {}
    for name, result in results.items():
        t, T, u = result.aligned()
        metrics[name] = compute_all_metrics(t, T, u, VARIANTS[name].setpoint,
                                            thermal.max_actuator_energy)
    print_metrics_table(metrics)

    if not args.no_plots:
        print("\n--- Generating plots ---")
        os.makedirs(args.output_dir, exist_ok=True)
        for name, result in results.items():
            t, T, u = result.aligned()
            reference = None
            if args.seed == 'reference':
                reference = ReferenceCurve().sample(t)
            plot_temperature_and_output(
                t, T, u, title=f"PID Cooling, tuning {name}",
                T_set=VARIANTS[name].setpoint,
                T_a=thermal.ambient_temperature, reference=reference,
                save_path=os.path.join(args.output_dir,
                                       f'pid_{name.lower()}.png'))
        if len(results) >= 2:
            plot_comparison(
                {name: r.aligned() for name, r in results.items()},
                T_set=VARIANTS[to_run[0]].setpoint,
                save_path=os.path.join(args.output_dir, 'pid_comparison.png'))
        print("All figures saved to:", args.output_dir)

    print("=" * 70)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
