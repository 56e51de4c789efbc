import json

import numpy as np
import pytest

from flutterlab.core.config import (
    DEFAULT_DURATION,
    SimulationConfig,
    load_simulation_config,
    step_budget,
)
from flutterlab.dynamics.body import sheet_from_preset
from flutterlab.utils.validation import ConfigurationError


class TestStepBudget:

    @pytest.mark.parametrize("dt,duration,expected", [
        (1e-3, 1.0, 1000),
        (0.1, 0.3, 3),
        (0.01, 0.03, 3),
        (0.003, 0.01, 3),
    ])
    def test_floor_of_ratio(self, dt, duration, expected):
        assert step_budget(dt, duration=duration) == expected

    def test_max_steps(self):
        assert step_budget(1e-3, max_steps=42) == 42

    @pytest.mark.parametrize("kwargs", [
        {},
        {"duration": 1.0, "max_steps": 10},
        {"duration": 1e-4},
        {"max_steps": 0},
        {"max_steps": 2.5},
        {"max_steps": "abc"},
        {"max_steps": float("inf")},
        {"duration": -1.0},
        {"duration": "1.0"},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigurationError):
            step_budget(1e-3, **kwargs)


class TestSimulationConfig:

    def test_defaults(self):
        config = SimulationConfig(body=sheet_from_preset("a4_paper"))
        assert config.duration == DEFAULT_DURATION
        assert config.max_steps is None
        assert config.n_steps == 10000
        assert config.initial_state.position[2] == 2.0

    def test_max_steps_only(self):
        config = SimulationConfig(body=sheet_from_preset("a4_paper"), max_steps=12)
        assert config.duration is None
        assert config.n_steps == 12

    def test_invalid_lift_offset(self):
        with pytest.raises(ConfigurationError):
            SimulationConfig(body=sheet_from_preset("a4_paper"), lift_offset=float("nan"))


class TestFromDict:

    def test_full_document(self):
        config = SimulationConfig.from_dict({
            "sheet": {"preset": "a4_paper", "mass": 0.006},
            "environment": {"preset": "breezy", "air_density": 1.1},
            "initial": {"altitude": 3.0, "pitch": 90.0, "velocity": [0.0, 0.0, -0.5]},
            "dt": 0.002,
            "duration": 4.0,
            "lift_offset": 0.002,
        })
        assert config.body.mass == 0.006
        assert config.body.width == 0.21
        assert config.environment.air_density == 1.1
        np.testing.assert_array_equal(config.environment.wind_velocity, [2.0, 0.0, 0.0])
        np.testing.assert_allclose(config.initial_state.position, [0.0, 0.0, 3.0])
        assert config.initial_state.pitch == pytest.approx(np.pi / 2)
        assert config.initial_state.velocity[2] == -0.5
        assert config.n_steps == 2000
        assert config.lift_offset == 0.002

    def test_empty_document_uses_defaults(self):
        config = SimulationConfig.from_dict({})
        assert config.body == sheet_from_preset("a4_paper")
        assert config.environment.air_density == 1.225
        assert config.duration == DEFAULT_DURATION

    def test_explicit_sheet_dimensions(self):
        config = SimulationConfig.from_dict({
            "sheet": {"width": 0.1, "height": 0.1, "thickness": 2e-4, "mass": 0.002},
            "initial": {"position": [1.0, 2.0, 5.0]},
            "max_steps": 100,
        })
        assert config.body.width == 0.1
        np.testing.assert_array_equal(config.initial_state.position, [1.0, 2.0, 5.0])
        assert config.n_steps == 100

    @pytest.mark.parametrize("data", [
        {"solver": "rk4"},
        {"sheet": "papyrus"},
        {"sheet": {"width": 0.1}},
        {"sheet": 3},
        {"environment": "mars"},
        {"environment": {"preset": "sea_level", "humidity": 0.3}},
        {"initial": {"altitude": 1.0, "position": [0, 0, 1]}},
        {"initial": {"spin": 1.0}},
        {"initial": [0, 0, 1]},
        {"dt": -0.001},
        {"dt": "fast"},
        {"dt": None},
        {"max_steps": "abc"},
        {"lift_offset": "up"},
        {"initial": {"altitude": "high"}},
        {"sheet": {"preset": "a4_paper", "width": "0.2"}},
        {"duration": 1.0, "max_steps": 10},
    ])
    def test_invalid_documents(self, data):
        with pytest.raises(ConfigurationError):
            SimulationConfig.from_dict(data)


class TestLoadSimulationConfig:

    def test_load(self, tmp_path):
        path = tmp_path / "drop.json"
        path.write_text(json.dumps({"sheet": "cardstock", "initial": {"altitude": 1.5}}))
        config = load_simulation_config(path)
        assert config.body == sheet_from_preset("cardstock")
        assert config.initial_state.position[2] == 1.5

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_simulation_config(tmp_path / "nope.json")

    def test_bad_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{sheet: a4}")
        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            load_simulation_config(path)

    def test_top_level_must_be_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(ConfigurationError):
            load_simulation_config(path)
