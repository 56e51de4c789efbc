"""
CSV logging for simulation records with performance optimization.

Buffers rows in memory and writes in batches to minimize I/O overhead.
Implements context manager protocol for safe resource handling.
"""
from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, TextIO

from flutterlab.core.records import EXPORT_COLUMNS, StepRecord


class CSVLogger:
    """
    Streaming CSV logger for StepRecords.

    Features:
    - Buffered writing (reduces syscalls)
    - Context manager support (safe file handling)
    - Automatic header generation
    - Configurable columns

    Parameters
    ----------
    filepath : str | Path
        Output CSV file path
    buffer_size : int
        Number of rows to buffer before writing. Higher = fewer writes but more memory.
        Recommended: 100-1000 for most simulations.
    columns : list[str] | None
        Subset of EXPORT_COLUMNS to write, in the given order. Default: all.
        The time column "t" is always written first.

    Notes
    -----
    **Usage Patterns:**

    1. Context manager (recommended):
    >>> with CSVLogger("output.csv") as logger:
    ...     driver.subscribe(logger.log)
    ...     driver.run()

    2. Owned by the driver (flushed when run() returns):
    >>> driver = SimulationDriver(..., logger=CSVLogger("output.csv"))
    >>> driver.run()
    >>> driver.logger.close()

    Examples
    --------
    >>> # Log only kinematics
    >>> logger = CSVLogger("minimal.csv", columns=["x", "y", "z", "vx", "vy", "vz"])
    """

    def __init__(
        self,
        filepath: str | Path,
        buffer_size: int = 1000,
        columns: list[str] | None = None,
    ) -> None:
        self.filepath = Path(filepath)
        self.buffer_size = int(buffer_size)
        if self.buffer_size < 1:
            raise ValueError(f"buffer_size must be at least 1, got {buffer_size}")

        requested = list(EXPORT_COLUMNS) if columns is None else list(columns)
        invalid = set(requested) - set(EXPORT_COLUMNS)
        if invalid:
            raise ValueError(
                f"Invalid columns: {sorted(invalid)}. Valid options: {list(EXPORT_COLUMNS)}"
            )
        self.columns = ["t"] + [c for c in requested if c != "t"]
        self._indices = [EXPORT_COLUMNS.index(c) for c in self.columns]

        self._buffer: list[list[str]] = []
        self._file: TextIO | None = None
        self._writer: Any = None  # csv.writer is a function, not a type
        self._header_written = False
        self.rows_written = 0

        # Ensure parent directory exists
        self.filepath.parent.mkdir(parents=True, exist_ok=True)

    def __enter__(self) -> CSVLogger:
        """Open file for writing."""
        if self._file is None:
            self._file = open(self.filepath, "w", newline="", encoding="utf-8")
            self._writer = csv.writer(self._file)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Close file, flushing any remaining data."""
        self.close()

    def _write_header(self) -> None:
        self._writer.writerow(self.columns)
        self._file.flush()  # Ensure header written immediately
        self._header_written = True

    def log(self, record: StepRecord) -> None:
        """
        Append one record to the buffer.

        Automatically opens the file on first call if not using the context
        manager. Writes to disk when the buffer is full.
        """
        if self._file is None:
            self.__enter__()

        if not self._header_written:
            self._write_header()

        values = record.as_row()
        row = [f"{values[0]:.10f}"]  # High precision time
        row.extend(f"{values[i]:.10e}" for i in self._indices[1:])
        self._buffer.append(row)

        if len(self._buffer) >= self.buffer_size:
            self.flush()

    def flush(self) -> None:
        """Write buffered rows to disk and clear buffer."""
        if self._writer and self._buffer:
            self._writer.writerows(self._buffer)
            self.rows_written += len(self._buffer)
            if self._file:
                self._file.flush()
            self._buffer.clear()

    def close(self) -> None:
        """Flush remaining rows and close file."""
        self.flush()
        if self._file:
            self._file.close()
            self._file = None
            self._writer = None
