"""Tests for YAML mapping files."""

import pytest
import yaml

from motion_synth.config import EngineConfig, load_config, parse_config, save_config
from motion_synth.engine import Mapping
from motion_synth.errors import ConfigurationError
from motion_synth.gestures import Axis, FlipOver, Shake, Twist
from motion_synth.haptics import Buzz, Tap

SAMPLE_CONFIG = """
debounce:
  default: 0.4
  device_tap: 0.1
  flip_over: 2.0
sample_interval: 0.02
mappings:
  - gesture: {type: shake, threshold: 1.8}
    effect: {type: tap, intensity: 0.8, sharpness: 0.6}
  - gesture: {type: twist, axis: z, rate_threshold: 2.5}
    effect: {type: buzz, intensity: 0.5, sharpness: 0.3, duration: 0.2}
  - gesture: {type: flip_over}
    effect: {type: buzz, duration: 0.3}
"""


class TestLoadConfig:
    def test_load(self, tmp_path):
        path = tmp_path / "mappings.yml"
        path.write_text(SAMPLE_CONFIG)

        config = load_config(path)
        assert config.default_cooldown == 0.4
        assert config.tap_cooldown == 0.1
        assert config.flip_cooldown == 2.0
        assert config.sample_interval == 0.02
        assert config.mappings == [
            Mapping(Shake(1.8), Tap(0.8, 0.6)),
            Mapping(Twist(Axis.Z, 2.5), Buzz(0.5, 0.3, 0.2)),
            Mapping(FlipOver(), Buzz(duration=0.3)),
        ]

    def test_yaml_roundtrip(self, tmp_path):
        path = tmp_path / "out.yml"
        config = EngineConfig.with_defaults()
        save_config(config, path)
        loaded = load_config(path)
        assert loaded.mappings == config.mappings
        assert loaded.default_cooldown == config.default_cooldown

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("")
        config = load_config(path)
        assert config.mappings == []
        assert config.default_cooldown == 0.5

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("mappings: [unclosed")
        with pytest.raises(ConfigurationError):
            load_config(path)


class TestParseConfig:
    def test_error_names_entry(self):
        data = yaml.safe_load(SAMPLE_CONFIG)
        data["mappings"][1]["gesture"]["rate_threshold"] = -2
        with pytest.raises(ConfigurationError, match=r"mappings\[1\]"):
            parse_config(data)

    def test_missing_effect(self):
        with pytest.raises(ConfigurationError):
            parse_config({"mappings": [{"gesture": {"type": "shake"}}]})

    def test_negative_cooldown(self):
        with pytest.raises(ConfigurationError):
            parse_config({"debounce": {"default": -0.5}})

    def test_bad_interval(self):
        with pytest.raises(ConfigurationError):
            parse_config({"sample_interval": 0})

    def test_root_must_be_mapping(self):
        with pytest.raises(ConfigurationError):
            parse_config(["shake"])


class TestEngineConfig:
    def test_defaults_cover_every_gesture_kind(self):
        kinds = {m.gesture.kind for m in EngineConfig.with_defaults().mappings}
        assert kinds == {"shake", "twist", "flip_over", "device_tap"}

    def test_make_debounce(self):
        d = EngineConfig(default_cooldown=0.3, flip_cooldown=0.7).make_debounce()
        assert d.cooldown(Shake()) == 0.3
        assert d.cooldown(FlipOver()) == 0.7
