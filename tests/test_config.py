"""
Tests for TimelineConfig and EnvConfig
"""

import unittest

import pytest

from timeline_dep_graph.config import EnvConfig, TimelineConfig
from timeline_dep_graph.utils import ConfigurationError


class TestTimelineConfig(unittest.TestCase):
    """Tests for TimelineConfig validation."""

    def test_defaults(self):
        config = TimelineConfig()
        self.assertEqual(config.bezier_pull, 1.0)
        self.assertIsNone(config.offscreen_edge)
        self.assertEqual(config.nested_label_padding, 20)
        self.assertEqual(config.hierarchy_padding, 5)
        self.assertEqual(config.ungrouped_lane, "unGrouped")

    def test_log_level_normalized(self):
        self.assertEqual(TimelineConfig(log_level="debug").log_level, "DEBUG")

    def test_invalid_log_level(self):
        with self.assertRaises(ValueError):
            TimelineConfig(log_level="LOUD")

    def test_invalid_zoom_ratio(self):
        with self.assertRaises(ValueError):
            TimelineConfig(zoom_ratio=0)
        with self.assertRaises(ValueError):
            TimelineConfig(zoom_ratio=1.5)

    def test_negative_padding(self):
        with self.assertRaises(ValueError):
            TimelineConfig(hierarchy_padding=-1)

    def test_negative_pull(self):
        with self.assertRaises(ValueError):
            TimelineConfig(bezier_pull=-0.5)

    def test_empty_lane(self):
        with self.assertRaises(ValueError):
            TimelineConfig(ungrouped_lane="")

    def test_from_dict_ignores_unknown_keys(self):
        config = TimelineConfig.from_dict({"bezier_pull": 2.5, "colour": "red"})
        self.assertEqual(config.bezier_pull, 2.5)

    def test_to_dict(self):
        data = TimelineConfig(focus_margin_seconds=30).to_dict()
        self.assertEqual(data["focus_margin_seconds"], 30)
        self.assertIn("offscreen_edge", data)


class TestFromEnv:
    """Tests for TimelineConfig.from_env() and EnvConfig."""

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("TDG_BEZIER_PULL", "2")
        monkeypatch.setenv("TDG_OFFSCREEN_EDGE", "800")
        monkeypatch.setenv("TDG_FOCUS_MARGIN_SECONDS", "30")
        monkeypatch.setenv("TDG_LOG_LEVEL", "warning")

        config = TimelineConfig.from_env()

        assert config.bezier_pull == 2.0
        assert config.offscreen_edge == 800.0
        assert config.focus_margin_seconds == 30.0
        assert config.log_level == "WARNING"

    def test_custom_prefix(self, monkeypatch):
        monkeypatch.setenv("APP_ZOOM_RATIO", "0.5")
        assert TimelineConfig.from_env(prefix="APP_").zoom_ratio == 0.5

    def test_unparsable_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("TDG_HIERARCHY_PADDING", "wide")
        monkeypatch.setenv("TDG_OFFSCREEN_EDGE", "far")
        config = TimelineConfig.from_env()
        assert config.hierarchy_padding == 5
        assert config.offscreen_edge is None

    def test_invalid_env_value_raises_configuration_error(self, monkeypatch):
        monkeypatch.setenv("TDG_ZOOM_RATIO", "3")
        with pytest.raises(ConfigurationError) as exc_info:
            TimelineConfig.from_env()
        assert exc_info.value.to_dict()["error_code"] == "CONFIG_ERROR"
        assert "zoom_ratio" in exc_info.value.message

    def test_get_bool(self, monkeypatch):
        monkeypatch.setenv("TDG_FLAG", "yes")
        assert EnvConfig.get_bool("TDG_FLAG") is True
        monkeypatch.setenv("TDG_FLAG", "off")
        assert EnvConfig.get_bool("TDG_FLAG") is False

    def test_get_json(self, monkeypatch):
        monkeypatch.setenv("TDG_JSON", '{"a": 1}')
        assert EnvConfig.get_json("TDG_JSON") == {"a": 1}
        monkeypatch.setenv("TDG_JSON", "{nope")
        assert EnvConfig.get_json("TDG_JSON", {}) == {}

    def test_load_env_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("TDG_FROM_FILE", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("TDG_FROM_FILE=loaded\n", encoding="utf-8")

        assert EnvConfig.load_env_file(str(env_file)) is True
        assert EnvConfig.get("TDG_FROM_FILE") == "loaded"
        monkeypatch.delenv("TDG_FROM_FILE")

    def test_missing_env_file(self, tmp_path):
        assert EnvConfig.load_env_file(str(tmp_path / "absent.env")) is False

    def test_template_lists_settings(self):
        template = EnvConfig.show_config_template()
        assert "TDG_BEZIER_PULL" in template
        assert "TDG_LOG_LEVEL" in template


if __name__ == "__main__":
    unittest.main()
