import numpy as np
import pandas as pd
import pytest

from flutterlab.core.records import EXPORT_COLUMNS
from flutterlab.core.simulation import SimulationDriver
from flutterlab.dynamics.body import RigidBodyState
from flutterlab.utils.io import export_records, load_records_csv, records_to_dataframe


@pytest.fixture
def result(a4_sheet, still_air):
    state = RigidBodyState([0.0, 0.0, 50.0], orientation=[0.0, 0.2, 0.1])
    return SimulationDriver(a4_sheet, still_air, state, dt=1e-3, max_steps=255).run(log_interval=0)


def test_dataframe_layout(result):
    df = records_to_dataframe(result.records)
    assert list(df.columns) == list(EXPORT_COLUMNS)
    assert len(df) == 255
    np.testing.assert_allclose(df["z"].to_numpy(), result.positions()[:, 2])


def test_export_full(result, tmp_path):
    path = export_records(result.records, tmp_path / "out" / "full.csv")
    df = pd.read_csv(path)
    assert len(df) == 255
    assert df["t"].iloc[-1] == pytest.approx(0.255)


def test_export_downsampled(result, tmp_path):
    path = export_records(result.records, tmp_path / "ds.csv", interval=0.1, dt=1e-3)
    df = load_records_csv(path)
    # Steps 0, 100, 200 and the final step 254
    np.testing.assert_allclose(df["t"].to_numpy(), [0.001, 0.101, 0.201, 0.255])


def test_export_requires_dt_with_interval(result, tmp_path):
    with pytest.raises(ValueError, match="dt is required"):
        export_records(result.records, tmp_path / "x.csv", interval=0.1)


def test_export_empty(tmp_path):
    with pytest.raises(ValueError, match="empty"):
        export_records([], tmp_path / "x.csv")


def test_load_rejects_foreign_csv(tmp_path):
    path = tmp_path / "other.csv"
    pd.DataFrame({"t": [0.0], "z": [1.0]}).to_csv(path, index=False)
    with pytest.raises(ValueError, match="missing columns"):
        load_records_csv(path)


def test_config_loader_reexported(tmp_path):
    from flutterlab.utils import io

    path = tmp_path / "drop.json"
    path.write_text('{"sheet": "a4_paper", "max_steps": 3}')
    assert io.load_simulation_config(path).n_steps == 3
