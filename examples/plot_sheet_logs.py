"""
Standalone plotting script for exported sheet-drop tables.

Useful for re-generating plots after a simulation has completed.
"""
import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from flutterlab.visualization.plotting import plot_from_csv


def main():
    """Plot diagnostics from an exported CSV."""
    parser = argparse.ArgumentParser(
        description="Generate diagnostics plots from FlutterLab CSV exports"
    )
    parser.add_argument(
        "csv_path",
        type=str,
        help="Path to export.csv or simulation.csv"
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Output directory for plots (default: ../plots next to the CSV)"
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Display plots interactively"
    )

    args = parser.parse_args()

    csv_path = Path(args.csv_path)
    if not csv_path.exists():
        print(f"Error: CSV file not found: {csv_path}")
        return 1

    plots_dir = Path(args.output_dir) if args.output_dir else csv_path.parent.parent / "plots"
    plots_dir.mkdir(parents=True, exist_ok=True)

    try:
        plot_from_csv(
            str(csv_path),
            save_path=str(plots_dir / f"{csv_path.stem}_diagnostics.png"),
            show=args.show,
        )
    except KeyError as e:
        print(f"Error: {e}")
        return 1

    print(f"Plots saved to: {plots_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
