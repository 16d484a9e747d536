"""Tests for run configuration and logging setup."""

import io
import json
import logging

import pytest

from declguard.config import (
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    ConfigValidationError,
    RunConfig,
    load_config_file,
    load_env_config,
    load_run_config,
    to_snake_case,
)
from declguard.logging import configure_logging, get_logger, reset_logging


class TestKeyNormalisation:
    """Tests for configuration key styles."""

    @pytest.mark.parametrize(
        "key,expected",
        [
            ("flatOut", "flat_out"),
            ("mapSourceDir", "map_source_dir"),
            ("excludeRootNode", "exclude_root_node"),
            ("flat-out", "flat_out"),
            ("flat_out", "flat_out"),
            ("previous", "previous"),
        ],
    )
    def test_to_snake_case(self, key, expected):
        assert to_snake_case(key) == expected


class TestConfigFiles:
    """Tests for reading configuration files."""

    def test_yaml(self, tmp_path):
        path = tmp_path / "declguard.yaml"
        path.write_text(
            "previous: api/1.0.json\n"
            "next: api/next.json\n"
            "flatOut: issues.json\n"
            "excludeRootNode: true\n",
            encoding="utf-8",
        )
        config = load_run_config(path, environ={})

        assert config.previous == "api/1.0.json"
        assert config.next == "api/next.json"
        assert config.flat_out == "issues.json"
        assert config.exclude_root_node is True
        assert config.verbose is False

    def test_json(self, write_json):
        path = write_json("declguard.json", {"previous": "a.json", "mapSourceDir": "lib"})
        config = load_run_config(path, environ={})

        assert config.map_source_dir == "lib"

    def test_toml(self, tmp_path):
        path = tmp_path / "declguard.toml"
        path.write_text('previous = "a.json"\nverbose = true\n', encoding="utf-8")
        config = load_run_config(path, environ={})

        assert config.previous == "a.json"
        assert config.verbose is True

    def test_empty_yaml_is_empty_config(self, tmp_path):
        path = tmp_path / "declguard.yml"
        path.write_text("", encoding="utf-8")

        assert load_config_file(path) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigNotFoundError, match="not found"):
            load_config_file(tmp_path / "missing.yaml")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "declguard.ini"
        path.write_text("[x]", encoding="utf-8")

        with pytest.raises(ConfigError, match="Unsupported"):
            load_config_file(path)

    def test_parse_error(self, tmp_path):
        path = tmp_path / "declguard.json"
        path.write_text("{", encoding="utf-8")

        with pytest.raises(ConfigParseError, match="Failed to parse"):
            load_config_file(path)

    def test_not_a_mapping(self, write_json):
        with pytest.raises(ConfigError, match="mapping"):
            load_config_file(write_json("declguard.json", ["a"]))


class TestRunConfig:
    """Tests for merging and validation."""

    def test_defaults(self):
        config = load_run_config(environ={})

        assert config == RunConfig()
        assert config.log_level == "WARNING"

    def test_overrides_win_over_file(self, write_json):
        path = write_json("declguard.json", {"previous": "a.json", "next": "b.json", "verbose": True})
        config = load_run_config(path, overrides={"next": "c.json", "verbose": None}, environ={})

        assert config.previous == "a.json"
        assert config.next == "c.json"
        assert config.verbose is True

    def test_environment_between_file_and_overrides(self, write_json):
        path = write_json("declguard.json", {"previous": "a.json", "next": "b.json"})
        environ = {"DECLGUARD_NEXT": "env.json", "DECLGUARD_PREVIOUS": "env-prev.json", "DECLGUARD_VERBOSE": "yes"}
        config = load_run_config(path, overrides={"previous": "cli.json"}, environ=environ)

        assert config.previous == "cli.json"
        assert config.next == "env.json"
        assert config.verbose is True

    def test_env_ignores_unrelated_variables(self):
        assert load_env_config({"DECLGUARD_COLOR": "1", "HOME": "/root"}) == {}

    def test_env_invalid_boolean(self):
        with pytest.raises(ConfigValidationError):
            load_env_config({"DECLGUARD_VERBOSE": "sometimes"})

    def test_unknown_key(self, write_json):
        path = write_json("declguard.json", {"previous": "a.json", "colour": "red"})

        with pytest.raises(ConfigValidationError) as exc_info:
            load_run_config(path, environ={})
        assert exc_info.value.errors == ["unknown option 'colour'"]

    def test_invalid_values(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            RunConfig.from_dict({"verbose": "yes", "logFormat": "xml", "logLevel": "loud"})
        assert len(exc_info.value.errors) == 3


class TestLogging:
    """Tests for the logging setup."""

    def test_console_format(self):
        stream = io.StringIO()
        configure_logging(level="DEBUG", format="console", stream=stream)
        logging.getLogger("declguard.tests").debug("Loaded rules", extra={"count": 2})

        line = stream.getvalue().strip()
        assert "[DEBUG" in line
        assert "declguard.tests: Loaded rules" in line
        assert "count=2" in line

    def test_json_format(self):
        stream = io.StringIO()
        configure_logging(level="INFO", format="json", stream=stream)
        logger = logging.getLogger("declguard.tests")
        logger.debug("hidden")
        logger.info("Compared", extra={"issues": 3})

        lines = stream.getvalue().strip().splitlines()
        assert len(lines) == 1
        record = json.loads(lines[0])
        assert record["message"] == "Compared"
        assert record["level"] == "info"
        assert record["logger"] == "declguard.tests"
        assert record["issues"] == 3

    def test_reconfigure_replaces_handler(self):
        first, second = io.StringIO(), io.StringIO()
        configure_logging(level="INFO", stream=first)
        configure_logging(level="INFO", stream=second)
        logging.getLogger("declguard").info("once")

        assert first.getvalue() == ""
        assert "once" in second.getvalue()

    def test_reset(self):
        logger = configure_logging(level="DEBUG", stream=io.StringIO())
        reset_logging()

        assert not [h for h in logger.handlers if getattr(h, "_declguard_handler", False)]
        assert logger.propagate

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="Unknown log format"):
            configure_logging(format="xml")

    def test_get_logger_namespace(self):
        assert get_logger("declguard.api").name == "declguard.api"
        assert get_logger("plugins").name == "declguard.plugins"
