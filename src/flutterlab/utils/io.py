# src/flutterlab/utils/io.py
from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pandas as pd

from flutterlab.core.config import load_simulation_config
from flutterlab.core.records import EXPORT_COLUMNS, StepRecord, downsample_records

__all__ = [
    "records_to_dataframe",
    "export_records",
    "load_records_csv",
    "load_simulation_config",
]


def records_to_dataframe(records: Sequence[StepRecord]) -> pd.DataFrame:
    """Tabulate records with one row per record and EXPORT_COLUMNS as columns."""
    return pd.DataFrame([r.as_row() for r in records], columns=list(EXPORT_COLUMNS))


def export_records(
    records: Sequence[StepRecord],
    filepath: str | Path,
    interval: float | None = None,
    dt: float | None = None,
) -> Path:
    """
    Saves StepRecords to a CSV file.

    Args:
        records: Time-ordered records of a run.
        filepath: Destination path (e.g., 'results/run1.csv').
        interval: If given, keep one record every `interval` seconds (first and
            last always kept). Requires `dt`.
        dt: Time step of the run.

    Returns:
        The path written.
    """
    if not records:
        raise ValueError("Simulation history is empty. Nothing to save.")
    if interval is not None:
        if dt is None:
            raise ValueError("dt is required when downsampling by interval")
        records = downsample_records(records, interval, dt)

    path = Path(filepath)
    # Ensure the directory exists
    path.parent.mkdir(parents=True, exist_ok=True)

    df = records_to_dataframe(records)
    df.to_csv(path, index=False)
    print(f"Simulation results saved to {path.absolute()}")
    return path


def load_records_csv(filepath: str | Path) -> pd.DataFrame:
    """Reads an exported CSV back, checking it has the export columns."""
    df = pd.read_csv(filepath)
    missing = [c for c in EXPORT_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"{filepath} is missing columns: {missing}")
    return df
