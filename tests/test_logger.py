import csv

import numpy as np
import pytest

from flutterlab.core.records import EXPORT_COLUMNS, StepRecord
from flutterlab.logger import CSVLogger


def make_record(step, dt=0.001):
    return StepRecord(
        step=step,
        time=(step + 1) * dt,
        position=np.array([1.0, 2.0, 3.0 - step * 1e-3]),
        velocity=np.array([0.1, 0.2, -0.3]),
        orientation=np.array([0.0, 0.1, 0.2]),
        angular_velocity=np.array([0.0, 0.0, 0.1]),
        angular_momentum=np.array([0.0, 0.0, 1e-5]),
        projected_area=0.06,
        kinetic_energy=2.5e-4,
        drag_magnitude=1e-3,
        lift_magnitude=2e-4,
        reynolds=8000.0,
    )


def read_rows(path):
    with open(path, "r", newline="") as f:
        return list(csv.reader(f))


def test_logger_basic_io(tmp_path):
    """Test that logger creates file and writes header + data correctly."""
    log_path = tmp_path / "test_basic.csv"

    # Use context manager to ensure close/flush
    with CSVLogger(str(log_path), buffer_size=1) as logger:
        logger.log(make_record(0))

    assert log_path.exists()
    rows = read_rows(log_path)

    # Header + 1 data row
    assert len(rows) == 2
    assert rows[0] == list(EXPORT_COLUMNS)
    assert float(rows[1][0]) == pytest.approx(0.001)
    assert float(rows[1][rows[0].index("reynolds")]) == pytest.approx(8000.0)


def test_logger_buffering(tmp_path):
    """Data is buffered and only written when the buffer fills or flush is called."""
    log_path = tmp_path / "test_buffer.csv"
    logger = CSVLogger(str(log_path), buffer_size=5)

    for i in range(4):
        logger.log(make_record(i))
    # Header only
    assert len(read_rows(log_path)) == 1
    assert logger.rows_written == 0

    logger.log(make_record(4))
    assert len(read_rows(log_path)) == 6
    assert logger.rows_written == 5

    logger.log(make_record(5))
    logger.close()
    assert len(read_rows(log_path)) == 7
    assert logger.rows_written == 6


def test_logger_column_subset(tmp_path):
    log_path = tmp_path / "subset.csv"
    with CSVLogger(log_path, columns=["z", "vz", "t"]) as logger:
        logger.log(make_record(0))
        logger.log(make_record(1))

    rows = read_rows(log_path)
    assert rows[0] == ["t", "z", "vz"]
    assert float(rows[2][1]) == pytest.approx(2.999)
    assert float(rows[2][2]) == pytest.approx(-0.3)


def test_logger_invalid_columns(tmp_path):
    with pytest.raises(ValueError, match="Invalid columns"):
        CSVLogger(tmp_path / "x.csv", columns=["z", "altitude"])


def test_logger_invalid_buffer(tmp_path):
    with pytest.raises(ValueError):
        CSVLogger(tmp_path / "x.csv", buffer_size=0)


def test_logger_creates_parent_directory(tmp_path):
    log_path = tmp_path / "nested" / "logs" / "run.csv"
    with CSVLogger(log_path) as logger:
        logger.log(make_record(0))
    assert log_path.exists()


def test_close_is_idempotent(tmp_path):
    logger = CSVLogger(tmp_path / "x.csv")
    logger.log(make_record(0))
    logger.close()
    logger.close()
    assert len(read_rows(tmp_path / "x.csv")) == 2
