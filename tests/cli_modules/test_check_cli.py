"""Tests for the declguard CLI."""

import json

import pytest
from typer.testing import CliRunner

from declguard import __version__
from declguard.cli import app
from declguard.cli_modules.common.errors import ErrorCode, translate_error
from declguard.compat import IgnoreRuleError
from declguard.config import ConfigNotFoundError, ConfigParseError, ConfigValidationError
from declguard.declarations import DeclarationLoadError
from declguard.reporters import WriteError


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def runner():
    """Create CLI runner."""
    return CliRunner()


@pytest.fixture
def previous_file(td, write_json):
    """Declarations of the previous release."""
    return write_json("previous.json", td.project(td.widget(
        td.prop("size", td.intrinsic("number"), isOptional=True),
        td.method("render", td.signature("render", td.intrinsic("void"))),
    )))


@pytest.fixture
def compatible_file(td, write_json):
    """Declarations that only add a member."""
    return write_json("compatible.json", td.project(td.widget(
        td.prop("size", td.intrinsic("number"), isOptional=True),
        td.method("render", td.signature("render", td.intrinsic("void"))),
        td.prop("color", td.intrinsic("string")),
    )))


@pytest.fixture
def breaking_file(td, write_json):
    """Declarations with a required property and a removed method."""
    return write_json("breaking.json", td.project(td.widget(
        td.prop("size", td.intrinsic("number")),
    )))


# =============================================================================
# check
# =============================================================================


class TestCheckCommand:
    """Tests for `declguard check`."""

    def test_compatible(self, runner, previous_file, compatible_file):
        result = runner.invoke(app, ["check", "-p", str(previous_file), "-n", str(compatible_file)])

        assert result.exit_code == 0
        assert "COMPATIBLE" in result.output
        assert "lib.Widget.color" in result.output

    def test_breaking(self, runner, previous_file, breaking_file):
        result = runner.invoke(app, ["check", "-p", str(previous_file), "-n", str(breaking_file)])

        assert result.exit_code == ErrorCode.INCOMPATIBLE_CHANGES.value
        assert "BREAKING CHANGES FOUND" in result.output
        assert "Found 2 incompatible changes" in result.output

    def test_exclude_root_node(self, runner, previous_file, breaking_file, tmp_path):
        flat_out = tmp_path / "issues.json"
        result = runner.invoke(app, [
            "check",
            "-p", str(previous_file),
            "-n", str(breaking_file),
            "-f", str(flat_out),
            "--exclude-root-node",
        ])

        assert result.exit_code == ErrorCode.INCOMPATIBLE_CHANGES.value
        records = json.loads(flat_out.read_text(encoding="utf-8"))
        assert [(record["path"], record["category"]) for record in records] == [
            ("Widget.size", "RequiredAdded"),
            ("Widget.render", "Removed"),
        ]

    def test_flat_output_works_as_ignore_file(self, runner, previous_file, breaking_file, tmp_path):
        flat_out = tmp_path / "issues.json"
        args = ["check", "-p", str(previous_file), "-n", str(breaking_file)]
        first = runner.invoke(app, [*args, "-f", str(flat_out)])
        second = runner.invoke(app, [*args, "-i", str(flat_out)])

        assert first.exit_code == ErrorCode.INCOMPATIBLE_CHANGES.value
        assert second.exit_code == 0

    def test_ignore_file(self, runner, previous_file, breaking_file, write_json):
        ignore = write_json("ignore.json", [
            {"path": "lib.Widget.size", "category": "RequiredAdded"},
            {"path": "lib.Widget.*", "category": "Removed"},
        ])
        result = runner.invoke(app, [
            "check", "-p", str(previous_file), "-n", str(breaking_file), "-i", str(ignore),
        ])

        assert result.exit_code == 0

    def test_out_writes_plain_report(self, runner, previous_file, breaking_file, tmp_path):
        out = tmp_path / "report.txt"
        out.write_text("stale", encoding="utf-8")
        result = runner.invoke(app, [
            "check", "-p", str(previous_file), "-n", str(breaking_file), "-o", str(out),
        ])

        report = out.read_text(encoding="utf-8")
        assert result.exit_code == ErrorCode.INCOMPATIBLE_CHANGES.value
        assert "stale" not in report
        assert "BREAKING CHANGES FOUND" in report
        assert "\x1b[" not in report

    def test_verbose_shows_traces(self, runner, previous_file, compatible_file):
        result = runner.invoke(app, [
            "check", "-p", str(previous_file), "-n", str(compatible_file), "--verbose",
        ])

        assert result.exit_code == 0
        assert "Found 5 declarations in previous version" in result.output

    def test_config_file(self, runner, previous_file, breaking_file, tmp_path):
        config = tmp_path / "declguard.yaml"
        config.write_text(
            f"previous: {previous_file}\n"
            f"next: {breaking_file}\n"
            "excludeRootNode: true\n",
            encoding="utf-8",
        )
        result = runner.invoke(app, ["check", "-c", str(config)])

        assert result.exit_code == ErrorCode.INCOMPATIBLE_CHANGES.value
        assert "Widget.size" in result.output
        assert "lib.Widget.size" not in result.output

    def test_options_override_config(self, runner, previous_file, compatible_file, breaking_file, tmp_path):
        config = tmp_path / "declguard.json"
        config.write_text(json.dumps({"previous": str(previous_file), "next": str(breaking_file)}), encoding="utf-8")
        result = runner.invoke(app, ["check", "-c", str(config), "-n", str(compatible_file)])

        assert result.exit_code == 0

    def test_missing_inputs(self, runner):
        result = runner.invoke(app, ["check"])

        assert result.exit_code == ErrorCode.USAGE_ERROR.value
        assert "required" in result.output

    def test_missing_file(self, runner, previous_file, tmp_path):
        result = runner.invoke(app, [
            "check", "-p", str(previous_file), "-n", str(tmp_path / "missing.json"),
        ])

        assert result.exit_code == ErrorCode.FILE_NOT_FOUND.value
        assert "Next declaration file not found" in result.output

    def test_invalid_declarations(self, runner, previous_file, write_json):
        bad = write_json("bad.json", [])
        result = runner.invoke(app, ["check", "-p", str(previous_file), "-n", str(bad)])

        assert result.exit_code == ErrorCode.DECLARATIONS_INVALID.value

    def test_invalid_ignore_file(self, runner, previous_file, compatible_file, write_json):
        ignore = write_json("ignore.json", {"path": "Widget"})
        result = runner.invoke(app, [
            "check", "-p", str(previous_file), "-n", str(compatible_file), "-i", str(ignore),
        ])

        assert result.exit_code == ErrorCode.IGNORE_RULES_INVALID.value

    def test_invalid_config(self, runner, write_json):
        config = write_json("declguard.json", {"colour": "red"})
        result = runner.invoke(app, ["check", "-c", str(config)])

        assert result.exit_code == ErrorCode.CONFIG_INVALID.value

    def test_missing_config(self, runner, tmp_path):
        result = runner.invoke(app, ["check", "-c", str(tmp_path / "declguard.yaml")])

        assert result.exit_code == ErrorCode.CONFIG_NOT_FOUND.value
        assert "Configuration file not found" in result.output

    def test_unparseable_config(self, runner, tmp_path):
        config = tmp_path / "declguard.yaml"
        config.write_text("previous: [unclosed\n", encoding="utf-8")
        result = runner.invoke(app, ["check", "-c", str(config)])

        assert result.exit_code == ErrorCode.CONFIG_PARSE_ERROR.value

    def test_declarations_not_json(self, runner, previous_file, tmp_path):
        broken = tmp_path / "broken.json"
        broken.write_text("{", encoding="utf-8")
        result = runner.invoke(app, ["check", "-p", str(previous_file), "-n", str(broken)])

        assert result.exit_code == ErrorCode.INVALID_FILE_FORMAT.value


# =============================================================================
# flatten and --version
# =============================================================================


class TestFlattenCommand:
    """Tests for `declguard flatten`."""

    def test_paths(self, runner, previous_file):
        result = runner.invoke(app, ["flatten", str(previous_file)])

        assert result.exit_code == 0
        assert result.output.splitlines() == [
            "lib",
            "lib.Widget",
            "lib.Widget.size",
            "lib.Widget.render",
            "lib.Widget.render.render",
        ]

    def test_exclude_root_with_kinds(self, runner, previous_file):
        result = runner.invoke(app, ["flatten", str(previous_file), "--exclude-root-node", "--kinds"])

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "Widget\tClass"
        assert "Widget.render.render\tCall signature" in lines

    def test_addresses(self, runner, td, write_json):
        path = write_json("overloads.json", td.project(td.function(
            "on",
            td.signature("on", td.intrinsic("void")),
            td.signature("on", td.intrinsic("string")),
        )))
        result = runner.invoke(app, ["flatten", str(path), "--addresses", "--exclude-root-node"])

        assert result.output.splitlines() == ["on", "on.on", "on.on#1"]

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(app, ["flatten", str(tmp_path / "missing.json")])

        assert result.exit_code == ErrorCode.FILE_NOT_FOUND.value


class TestVersion:
    """Tests for --version."""

    def test_version(self, runner):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"declguard {__version__}" in result.output

    def test_short_version_flag(self, runner):
        result = runner.invoke(app, ["-v"])

        assert result.exit_code == 0
        assert result.output.strip() == f"declguard {__version__}"

    def test_short_verbose_flag_on_check(self, runner, previous_file, compatible_file):
        result = runner.invoke(app, ["check", "-p", str(previous_file), "-n", str(compatible_file), "-v"])

        assert result.exit_code == 0
        assert "Found 5 declarations in previous version" in result.output


class TestErrorTranslation:
    """Tests for mapping library errors to exit codes."""

    def test_unreadable_file(self):
        try:
            raise DeclarationLoadError("Cannot read declaration file api.json") from PermissionError("denied")
        except DeclarationLoadError as e:
            error = translate_error(e)

        assert error.code is ErrorCode.FILE_NOT_READABLE

    def test_write_failure(self):
        try:
            raise WriteError("Failed to write report") from PermissionError("denied")
        except WriteError as e:
            error = translate_error(e)

        assert error.code is ErrorCode.FILE_NOT_WRITABLE

    @pytest.mark.parametrize(
        "error,code",
        [
            (ConfigNotFoundError("missing"), ErrorCode.CONFIG_NOT_FOUND),
            (ConfigParseError("bad yaml"), ErrorCode.CONFIG_PARSE_ERROR),
            (ConfigValidationError(["unknown option 'colour'"]), ErrorCode.CONFIG_INVALID),
            (IgnoreRuleError("not an array"), ErrorCode.IGNORE_RULES_INVALID),
            (RuntimeError("boom"), ErrorCode.GENERAL_ERROR),
        ],
    )
    def test_codes(self, error, code):
        assert translate_error(error).code is code
