"""
Tests for Configuration System.

This test suite covers:
1. PluginSpec validation and immutability
2. LoaderConfig construction from dictionaries
3. TOML loading and writing
4. Error cases
"""

import tempfile
from pathlib import Path

import pytest

import plugkit.config
from plugkit.config.schema import (
    ConfigError,
    LoaderConfig,
    PluginSpec,
    ValidationError,
    parse_spec,
)


class TestPluginSpec:
    """Test plugin spec records."""

    def test_spec_with_options(self):
        """Options should be copied and exposed read-only."""
        options = {"level": "info"}
        spec = PluginSpec("plugkit.plugins.logger", options)

        options["level"] = "debug"

        assert spec.options["level"] == "info"
        with pytest.raises(TypeError):
            spec.options["level"] = "error"

    def test_spec_without_options(self):
        """A spec without options registers with None."""
        spec = PluginSpec("some.plugin")
        assert spec.options is None
        assert spec.registration_options() is None

    def test_registration_options_are_fresh_copies(self):
        """Each call returns a new mutable dict."""
        spec = PluginSpec("p", {"a": 1})

        first = spec.registration_options()
        first["a"] = 2

        assert spec.registration_options() == {"a": 1}

    def test_empty_identifier(self):
        """Empty identifiers are rejected."""
        with pytest.raises(ValidationError, match="non-empty string"):
            PluginSpec("")

    def test_options_must_be_mapping(self):
        """Non-mapping options are rejected."""
        with pytest.raises(ValidationError, match="must be a mapping"):
            PluginSpec("p", ["not", "a", "mapping"])

    def test_spec_is_frozen(self):
        """Specs cannot be reassigned."""
        spec = PluginSpec("p")
        with pytest.raises(AttributeError):
            spec.identifier = "q"


class TestParseSpec:
    """Test raw entry parsing."""

    def test_parse_string(self):
        assert parse_spec("p") == PluginSpec("p")

    def test_parse_mapping(self):
        spec = parse_spec({"identifier": "p", "options": {"x": 1}})
        assert spec.identifier == "p"
        assert dict(spec.options) == {"x": 1}

    def test_parse_package_alias(self):
        """'package' is accepted as an alias of 'identifier'."""
        assert parse_spec({"package": "@dexlens/logger"}).identifier == "@dexlens/logger"

    def test_parse_both_keys(self):
        with pytest.raises(ValidationError, match="either 'identifier' or 'package'"):
            parse_spec({"identifier": "a", "package": "b"})

    def test_parse_missing_identifier(self):
        with pytest.raises(ValidationError, match=r"plugins\[2\]: missing required field"):
            parse_spec({"options": {}}, index=2)

    def test_parse_unknown_field(self):
        with pytest.raises(ValidationError, match="unknown field"):
            parse_spec({"identifier": "a", "enabled": True})

    def test_parse_wrong_type(self):
        with pytest.raises(ValidationError, match="expected a table"):
            parse_spec(42)


class TestLoaderConfig:
    """Test loader configuration."""

    def test_from_dict_preserves_order(self):
        config = LoaderConfig.from_dict(
            {"plugins": [{"identifier": "c"}, {"identifier": "a"}, {"identifier": "b"}]}
        )
        assert [spec.identifier for spec in config.plugins] == ["c", "a", "b"]

    def test_from_dict_empty(self):
        assert LoaderConfig.from_dict({}).plugins == ()

    def test_from_dict_plugins_not_list(self):
        with pytest.raises(ValidationError, match="array of tables"):
            LoaderConfig.from_dict({"plugins": "logger"})

    def test_to_dict_round_trip(self):
        data = {"plugins": [{"identifier": "a", "options": {"k": "v"}}, {"identifier": "b"}]}
        assert LoaderConfig.from_dict(data).to_dict() == data

    def test_validation_error_is_config_error(self):
        with pytest.raises(ConfigError):
            LoaderConfig.from_dict({"plugins": [{}]})


class TestTOMLFiles:
    """Test TOML loading and writing."""

    def test_load_config(self):
        """load_config() reads [[plugins]] tables in file order."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "plugins.toml"
            path.write_text(
                """
[[plugins]]
identifier = "plugkit.plugins.logger"

[plugins.options]
level = "info"

[[plugins]]
identifier = "other.plugin"
""",
                encoding="utf-8",
            )

            config = plugkit.config.load_config(path)

            assert [s.identifier for s in config.plugins] == [
                "plugkit.plugins.logger",
                "other.plugin",
            ]
            assert dict(config.plugins[0].options) == {"level": "info"}
            assert config.plugins[1].options is None

    def test_dump_config_writes_header_and_tables(self):
        """dump_config() output can be loaded back."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "nested" / "plugins.toml"
            config = LoaderConfig.from_dict(
                {"plugins": [{"identifier": "a", "options": {"retries": 3}}, {"identifier": "b"}]}
            )

            plugkit.config.dump_config(config, path)

            content = path.read_text(encoding="utf-8")
            assert content.startswith("# Plugins are loaded in the order listed below.")
            assert "[[plugins]]" in content
            assert plugkit.config.load_config(path) == config

    def test_load_missing_file(self):
        with pytest.raises(ConfigError, match="TOML file not found"):
            plugkit.config.load_config(Path("/nonexistent/plugins.toml"))

    def test_load_invalid_toml(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "plugins.toml"
            path.write_text("[[plugins]\nidentifier = ", encoding="utf-8")

            with pytest.raises(ConfigError, match="Failed to parse TOML file"):
                plugkit.config.load_config(path)

    def test_load_malformed_entry_names_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "plugins.toml"
            path.write_text('[[plugins]]\noptions = { level = "info" }\n', encoding="utf-8")

            with pytest.raises(ValidationError, match="plugins.toml: plugins\\[0\\]"):
                plugkit.config.load_config(path)
