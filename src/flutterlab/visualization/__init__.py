from .plotting import (
    LivePlotter,
    plot_diagnostics,
    plot_from_csv,
    plot_trajectory_3d,
    sheet_corners,
)

__all__ = [
    "LivePlotter",
    "plot_diagnostics",
    "plot_from_csv",
    "plot_trajectory_3d",
    "sheet_corners",
]
