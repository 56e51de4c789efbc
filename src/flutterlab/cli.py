"""
Command-line entry point: drop a sheet, export the trajectory, optionally plot.

Examples
--------
    flutterlab --sheet a4_paper --altitude 3 --pitch 20 --roll 5 --plots
    flutterlab --config drop.json --export-interval 0.05 --quiet
"""
from __future__ import annotations

import argparse
import sys

from flutterlab.api.scenario import Scenario
from flutterlab.core.config import load_simulation_config
from flutterlab.core.records import DEFAULT_EXPORT_INTERVAL
from flutterlab.dynamics.body import SHEET_PRESETS
from flutterlab.dynamics.environment import ENVIRONMENT_PRESETS
from flutterlab.utils.validation import ConfigurationError, NumericalInstabilityError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flutterlab",
        description="Simulate the 6-DOF free fall of a thin rectangular sheet",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON configuration file (overrides the sheet/environment/release options)"
    )
    parser.add_argument(
        "--sheet",
        choices=sorted(SHEET_PRESETS),
        default="a4_paper",
        help="Sheet preset (default: a4_paper)"
    )
    parser.add_argument(
        "--environment",
        choices=sorted(ENVIRONMENT_PRESETS),
        default="sea_level",
        help="Environment preset (default: sea_level)"
    )
    parser.add_argument("--altitude", type=float, default=2.0, help="Release height [m]")
    parser.add_argument("--yaw", type=float, default=0.0, help="Initial yaw [deg]")
    parser.add_argument("--pitch", type=float, default=0.0, help="Initial pitch [deg]")
    parser.add_argument("--roll", type=float, default=0.0, help="Initial roll [deg]")
    parser.add_argument(
        "--wind",
        type=float,
        nargs=3,
        default=None,
        metavar=("WX", "WY", "WZ"),
        help="Wind velocity [m/s], replaces the preset wind"
    )
    parser.add_argument("--dt", type=float, default=1e-3, help="Time step [s]")
    parser.add_argument("--duration", type=float, default=10.0, help="Maximum simulated time [s]")
    parser.add_argument("--name", type=str, default="sheet_drop", help="Simulation name")
    parser.add_argument(
        "--output-dir",
        type=str,
        default="output",
        help="Base output directory (default: ./output)"
    )
    parser.add_argument(
        "--export-interval",
        type=float,
        default=DEFAULT_EXPORT_INTERVAL,
        help="Spacing of exported rows [s] (default: 0.1)"
    )
    parser.add_argument("--plots", action="store_true", help="Save trajectory/diagnostics plots")
    parser.add_argument("--show", action="store_true", help="Display plots interactively")
    parser.add_argument("--live", action="store_true", help="Live 3D view while running")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser


def build_scenario(args: argparse.Namespace) -> Scenario:
    """Translate parsed arguments into a configured Scenario."""
    if args.config:
        config = load_simulation_config(args.config)
        scenario = Scenario.from_config(args.name, config, output_dir=args.output_dir)
    else:
        overrides = {}
        if args.wind is not None:
            overrides["wind_velocity"] = args.wind
        scenario = (
            Scenario(args.name, output_dir=args.output_dir)
            .with_sheet(args.sheet)
            .with_environment(args.environment, **overrides)
            .release(altitude=args.altitude, yaw=args.yaw, pitch=args.pitch, roll=args.roll)
            .configure(dt=args.dt, duration=args.duration)
        )

    scenario.enable_logging(export_interval=args.export_interval)
    if args.plots or args.show:
        scenario.enable_plotting(show=args.show)
    if args.live:
        scenario.enable_live_view()
    return scenario


def main(argv: list[str] | None = None) -> int:
    """Run one simulation from command-line arguments."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        scenario = build_scenario(args)
        result = scenario.run(log_interval=0 if args.quiet else 1.0)
    except ConfigurationError as e:
        print(f"Error: invalid configuration: {e}")
        return 1
    except NumericalInstabilityError as e:
        print(f"Error: {e}")
        return 2

    summary = result.summary()
    print(f"\nTermination: {summary['reason']} at t={summary['terminal_time']:.4f}s "
          f"after {summary['steps']} steps")
    if summary["touchdown_time"] is not None:
        print(f"Touchdown:   t={summary['touchdown_time']:.4f}s")
    print(f"Landing point: x={summary['final_x']:.3f}m, y={summary['final_y']:.3f}m")
    print(f"Max Reynolds number: {summary['max_reynolds']:.0f}")
    print(f"Output: {scenario.output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
