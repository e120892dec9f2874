"""
Tests for configuration loading, saving and validation.
"""

import json

import pytest

from expression_tasks import config as config_module
from expression_tasks.config import (
    EngineConfig,
    GameConfig,
    create_default_config,
    load_config,
    save_config,
)


@pytest.fixture(autouse=True)
def no_default_config_files(monkeypatch, tmp_path):
    """Keep the search for default config files inside the test's tmp dir."""
    monkeypatch.setattr(
        config_module,
        "DEFAULT_CONFIG_PATHS",
        [tmp_path / "expression_tasks.yaml", tmp_path / "expression_tasks.json"],
    )


class TestLoadConfig:

    def test_defaults_when_no_file(self):
        config = load_config()
        assert config == GameConfig()

    def test_default_location_is_searched(self, tmp_path):
        (tmp_path / "expression_tasks.json").write_text(json.dumps({"camera_id": 3}))

        assert load_config().camera_id == 3

    def test_missing_explicit_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_partial_engine_section_keeps_defaults(self, tmp_path):
        path = tmp_path / "partial.json"
        path.write_text(json.dumps({"engine": {"hold_duration_ms": 2000}}))

        config = load_config(path)

        assert config.engine.hold_duration_ms == 2000.0
        assert config.engine.smile_threshold == 0.35
        assert config.engine.tasks == EngineConfig().tasks

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        with pytest.raises(ValueError):
            load_config(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("engine: [unclosed")

        with pytest.raises(ValueError):
            load_config(path)

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2, 3]")

        with pytest.raises(ValueError):
            load_config(path)

    def test_invalid_values_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("engine:\n  smoothing_alpha: 1.5\n")

        with pytest.raises(ValueError):
            load_config(path)

    def test_empty_yaml_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert load_config(path) == GameConfig()


class TestSaveConfig:

    def test_yaml_round_trip(self, tmp_path):
        config = GameConfig(camera_id=2, engine=EngineConfig(settle_delay_ms=800.0, seed=11))
        path = tmp_path / "out" / "config.yaml"

        save_config(config, path)

        assert load_config(path) == config

    def test_json_round_trip(self, tmp_path):
        config = GameConfig(engine=EngineConfig(tasks=["smile", "blink"]))
        path = tmp_path / "config.json"

        save_config(config, path)

        assert json.loads(path.read_text())["engine"]["tasks"] == ["smile", "blink"]
        assert load_config(path) == config

    def test_explicit_format_overrides_extension(self, tmp_path):
        path = tmp_path / "config.txt"
        save_config(GameConfig(), path, format="yaml")

        assert "engine:" in path.read_text()


class TestCreateDefaultConfig:

    @pytest.mark.parametrize("name", ["default.yaml", "default.json"])
    def test_template_loads_as_defaults(self, tmp_path, name):
        path = tmp_path / name
        create_default_config(path)

        assert load_config(path) == GameConfig()


class TestValidation:

    def test_defaults_are_valid(self):
        EngineConfig().validate()

    @pytest.mark.parametrize(
        "overrides",
        [
            {"smoothing_alpha": 0.0},
            {"hold_duration_ms": 0.0},
            {"settle_delay_ms": -1.0},
            {"blink_target": 0},
            {"blink_open_threshold": 0.5, "blink_close_threshold": 0.45},
            {"tasks": []},
            {"tasks": ["smile", "wink"]},
        ],
    )
    def test_invalid_engine_config(self, overrides):
        with pytest.raises(ValueError):
            EngineConfig(**overrides).validate()
