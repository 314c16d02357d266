"""
Tests for configuration parsing (dev_inventory/config.py).
"""

import json

import pytest

from dev_inventory.config import (
    Config,
    CustomTool,
    Preferences,
    load_config,
    load_config_file,
    read_config_mapping,
    validate_config,
)
from dev_inventory.tools import TOOLS


VALID_YAML = """
version: 1
platform: linux
preferences:
  timeout_seconds: 5
  concurrency: 4
  cache_ttl_seconds: 60
  max_cache_entries: 100
custom_tools:
  - name: zig
    display_name: Zig
    version_flag: version
    category: runtime
  - poetry
disabled_tools:
  - svn
  - SDKMAN
"""


class TestPreferences:
    """Tests for Preferences."""

    def test_defaults(self):
        prefs = Preferences()
        assert prefs.timeout_seconds == 10
        assert prefs.concurrency == 3
        assert prefs.cache_ttl_seconds == 300
        assert prefs.max_cache_entries == 0

    @pytest.mark.parametrize("kwargs", [
        {"timeout_seconds": 0},
        {"timeout_seconds": 121},
        {"concurrency": 0},
        {"concurrency": 17},
        {"cache_ttl_seconds": 0},
        {"cache_ttl_seconds": 86401},
        {"max_cache_entries": -1},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            Preferences(**kwargs)

    def test_from_dict(self):
        prefs = Preferences.from_dict({"concurrency": "8", "timeout_seconds": 30})
        assert prefs.concurrency == 8
        assert prefs.timeout_seconds == 30
        assert prefs.cache_ttl_seconds == 300


class TestCustomTool:
    """Tests for CustomTool."""

    def test_from_string(self):
        tool = CustomTool.from_dict("poetry")
        assert tool.name == "poetry"
        assert tool.version_flag == "--version"

    def test_from_dict(self):
        tool = CustomTool.from_dict({"name": "zig", "version_flag": "version", "category": "runtime"})
        spec = tool.to_spec()
        assert spec.name == "zig"
        assert spec.display_name == "zig"
        assert spec.version_flag == "version"
        assert spec.category == "runtime"

    def test_requires_name(self):
        with pytest.raises(ValueError):
            CustomTool(name=" ")

    def test_invalid_category(self):
        with pytest.raises(ValueError):
            CustomTool(name="x", category="compiler")


class TestConfig:
    """Tests for Config."""

    def test_defaults(self):
        config = Config()
        assert config.version == 1
        assert config.platform == "auto"
        assert config.custom_tools == ()

    def test_invalid_version(self):
        with pytest.raises(ValueError):
            Config(version=2)

    def test_invalid_platform(self):
        with pytest.raises(ValueError):
            Config(platform="amiga")

    def test_from_dict_lowercases_disabled(self):
        config = Config.from_dict({"disabled_tools": ["SVN"]})
        assert config.disabled_tools == ("svn",)

    def test_build_registry_default(self):
        assert [s.name for s in Config().build_registry()] == [t.name for t in TOOLS]

    def test_build_registry_disabled_and_custom(self):
        config = Config(
            disabled_tools=("svn", "sdkman"),
            custom_tools=(CustomTool(name="zig"), CustomTool(name="git")),
        )
        names = [s.name for s in config.build_registry()]
        assert "svn" not in names
        assert "sdk" not in names
        assert names[-1] == "zig"
        assert names.count("git") == 1

    def test_merge_prefers_self(self):
        high = Config(preferences=Preferences(concurrency=5), custom_tools=(CustomTool("zig", display_name="Zig!"),))
        low = Config(
            platform="darwin",
            preferences=Preferences(concurrency=2, timeout_seconds=20),
            custom_tools=(CustomTool("zig"), CustomTool("nim")),
            disabled_tools=("svn",),
        )
        merged = high.merge_with(low)
        assert merged.preferences.concurrency == 5
        assert merged.preferences.timeout_seconds == 20
        assert merged.platform == "darwin"
        assert {t.name for t in merged.custom_tools} == {"zig", "nim"}
        assert [t for t in merged.custom_tools if t.name == "zig"][0].display_name == "Zig!"
        assert merged.disabled_tools == ("svn",)


class TestLoaders:
    """Tests for file loading."""

    def test_read_yaml(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text(VALID_YAML)
        data = read_config_mapping(path)
        assert data["preferences"]["concurrency"] == 4

    def test_read_yaml_invalid(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("preferences: [unclosed")
        assert read_config_mapping(path) is None

    def test_read_yaml_empty(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("")
        assert read_config_mapping(path) == {}

    def test_read_yaml_not_a_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        assert read_config_mapping(path) is None

    def test_read_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"platform": "win32"}))
        assert read_config_mapping(path) == {"platform": "win32"}

    def test_read_json_invalid(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        assert read_config_mapping(path) is None

    def test_load_config_file(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text(VALID_YAML)
        config = load_config_file(str(path))
        assert config.platform == "linux"
        assert config.preferences.max_cache_entries == 100
        assert [t.name for t in config.custom_tools] == ["zig", "poetry"]
        assert config.disabled_tools == ("svn", "sdkman")
        assert config.source == str(path)

    def test_load_config_file_missing(self, tmp_path):
        assert load_config_file(str(tmp_path / "nope.yml")) is None

    def test_load_config_file_invalid_values(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("preferences:\n  concurrency: 99\n")
        assert load_config_file(str(path)) is None


class TestLoadConfig:
    """Tests for layered loading."""

    def test_defaults_when_nothing_found(self, tmp_path):
        config = load_config(locations=[str(tmp_path / "missing.yml")])
        assert config == Config()

    def test_custom_path_missing_raises(self, tmp_path):
        with pytest.raises(ValueError):
            load_config(str(tmp_path / "missing.yml"), locations=[])

    def test_custom_path_wins(self, tmp_path):
        custom = tmp_path / "custom.yml"
        custom.write_text("preferences:\n  concurrency: 6\n")
        project = tmp_path / "project.yml"
        project.write_text("platform: darwin\npreferences:\n  concurrency: 2\n  timeout_seconds: 30\n")

        config = load_config(str(custom), locations=[str(project)])
        assert config.preferences.concurrency == 6
        assert config.preferences.timeout_seconds == 30
        assert config.platform == "darwin"
        assert config.source == str(custom)


class TestValidateConfig:
    """Tests for validate_config warnings."""

    def test_clean(self):
        assert validate_config(Config()) == []

    def test_unknown_disabled(self):
        warnings = validate_config(Config(disabled_tools=("frobnicate",)))
        assert any("frobnicate" in w for w in warnings)

    def test_shadowing_custom(self):
        warnings = validate_config(Config(custom_tools=(CustomTool("nodejs"),)))
        assert any("shadows" in w for w in warnings)

    def test_duplicate_custom(self):
        warnings = validate_config(Config(custom_tools=(CustomTool("zig"), CustomTool("ZIG"))))
        assert any("more than once" in w for w in warnings)

    def test_high_concurrency(self):
        warnings = validate_config(Config(preferences=Preferences(concurrency=12)))
        assert any("concurrency" in w for w in warnings)


class TestMalformedDocuments:
    """Wrongly shaped sections are configuration errors, not crashes."""

    @pytest.mark.parametrize("value", ["oops", [1, 2], 5])
    def test_preferences_not_a_mapping(self, value):
        with pytest.raises(ValueError, match="preferences"):
            Config.from_dict({"preferences": value})

    @pytest.mark.parametrize("entry", [5, ["zig"], 1.5])
    def test_custom_tool_entry_wrong_type(self, entry):
        with pytest.raises(ValueError, match="custom_tools"):
            Config.from_dict({"custom_tools": [entry]})

    @pytest.mark.parametrize("key", ["custom_tools", "disabled_tools"])
    def test_list_sections_not_a_list(self, key):
        with pytest.raises(ValueError, match=key):
            Config.from_dict({key: "svn"})

    def test_load_config_file_skips_malformed(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("preferences: [1, 2]\n")
        assert load_config_file(str(path)) is None

    def test_custom_path_malformed_raises(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("custom_tools: [5]\n")
        with pytest.raises(ValueError):
            load_config(str(path), locations=[])

    def test_discovered_file_malformed_raises(self, tmp_path):
        path = tmp_path / ".dev-inventory.yml"
        path.write_text("preferences: oops\n")
        with pytest.raises(ValueError, match="dev-inventory.yml"):
            load_config(locations=[str(path)])

    def test_missing_discovered_file_ignored(self, tmp_path):
        assert load_config(locations=[str(tmp_path / ".dev-inventory.yml")]) == Config()
