"""Tests for configuration defaults, overrides and YAML loading."""

from __future__ import annotations

import pytest

from sqlschema.config import DEFAULT_CONFIG, build_config, load_config
from sqlschema.core.exceptions import ConfigurationError


class TestBuildConfig:
    def test_defaults(self):
        config = build_config()
        assert config == DEFAULT_CONFIG
        assert config is not DEFAULT_CONFIG
        assert config["parser"] is not DEFAULT_CONFIG["parser"]

    def test_overrides_are_merged_per_section(self):
        config = build_config({"converter": {"dialect": "pgsql"}, "depth": {"reverse": True}})
        assert config["converter"]["dialect"] == "pgsql"
        assert config["converter"]["drop_table_comments"] is True
        assert config["depth"] == {"reverse": True, "matcher": "suffix"}

    def test_defaults_are_not_mutated(self):
        config = build_config()
        config["parser"]["delimiter"] = "$$"
        assert DEFAULT_CONFIG["parser"]["delimiter"] == ";"

    def test_unknown_dialect(self):
        with pytest.raises(ConfigurationError) as exc:
            build_config({"converter": {"dialect": "oracle"}})
        assert exc.value.details["config_key"] == "converter.dialect"

    @pytest.mark.parametrize("delimiter", ["", "   ", None])
    def test_empty_delimiter(self, delimiter):
        with pytest.raises(ConfigurationError):
            build_config({"parser": {"delimiter": delimiter}})

    def test_section_must_be_mapping(self):
        with pytest.raises(ConfigurationError):
            build_config({"parser": "fast"})


class TestLoadConfig:
    def test_no_path(self):
        assert load_config() == DEFAULT_CONFIG

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(
            "parser:\n  delimiter: GO\nconverter:\n  dialect: sqlite\nlogging:\n  level: DEBUG\n",
            encoding="utf-8",
        )
        config = load_config(path)
        assert config["parser"]["delimiter"] == "GO"
        assert config["parser"]["zip_positional_rows"] is True
        assert config["converter"]["dialect"] == "sqlite"
        assert config["logging"]["level"] == "DEBUG"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == DEFAULT_CONFIG

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("parser: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_root_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc:
            load_config(tmp_path / "nope.yaml")
        assert exc.value.code == "CONFIGURATION_ERROR"
