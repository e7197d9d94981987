"""
Tests for paramvalidation.metadata

Covers:
  - ParameterLoader            — loading definition files and directories
  - preprocess_timestamps()    — PyYAML datetime → ISO text
  - validate_yaml_file()       — schema and semantic checks
  - validate_definitions_dir() — directory walk, strict mode
"""
from __future__ import annotations

import datetime
import decimal
from pathlib import Path

import pytest

from paramvalidation.core.types import ParameterDataType
from paramvalidation.errors import ConstraintParserError
from paramvalidation.metadata.loader import (
    ParameterLoader,
    load_yaml,
    preprocess_timestamps,
    to_display_name,
    value_text,
)
from paramvalidation.metadata.validator import (
    ValidationIssue,
    escalate,
    validate_definitions_dir,
    validate_yaml_file,
)
from paramvalidation.validation.catalog import ConstraintCatalog
from paramvalidation.validation.parser import ConstraintParser


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

VALID_DEFINITIONS = """\
parameters:
  - name: retryCount
    type: Int32
    constraints: "[MinValue(1)][MaxValue(10)]"
    value: 3
  - name: proxyHost
    type: String
    displayName: Proxy host
    constraints: "[Null][Host]"
"""


def _write_raw(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


def _single(name: str, type_name: str, constraints: str | None = None, value: str | None = None) -> str:
    lines = ["parameters:", f"  - name: {name}", f"    type: {type_name}"]
    if constraints is not None:
        lines.append(f'    constraints: "{constraints}"')
    if value is not None:
        lines.append(f"    value: {value}")
    return "\n".join(lines) + "\n"


@pytest.fixture
def parser():
    return ConstraintParser(ConstraintCatalog())


# ---------------------------------------------------------------------------
# Loader helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    def test_value_text(self):
        assert value_text(None) is None
        assert value_text(True) == "true"
        assert value_text(False) == "false"
        assert value_text(3) == "3"
        assert value_text(1.5) == "1.5"
        assert value_text(0.00001) == "0.00001"
        assert value_text(datetime.date(2024, 5, 1)) == "2024-05-01"

    def test_load_yaml_keeps_float_text(self):
        assert load_yaml("a: 1.10\nb: 0.00001\nc: 3\n") == {"a": "1.10", "b": "0.00001", "c": 3}

    def test_preprocess_timestamps(self):
        stamp = datetime.datetime(2024, 5, 1, 10, 0, tzinfo=datetime.timezone.utc)
        raw = {"parameters": [{"name": "x", "value": stamp}, {"value": 3}]}
        assert preprocess_timestamps(raw) == {
            "parameters": [
                {"name": "x", "value": "2024-05-01T10:00:00+00:00"},
                {"value": 3},
            ]
        }

    @pytest.mark.parametrize(
        "name, expected",
        [("retryCount", "Retry Count"), ("host", "Host"), ("maxHTTP", "Max H T T P")],
    )
    def test_to_display_name(self, name, expected):
        assert to_display_name(name) == expected


# ---------------------------------------------------------------------------
# ParameterLoader
# ---------------------------------------------------------------------------


class TestParameterLoader:
    def test_load_file(self, tmp_path, parser):
        path = _write_raw(tmp_path / "params.yaml", VALID_DEFINITIONS)
        loader = ParameterLoader(parser)

        loaded = loader.load_file(path)

        assert [d.name for d in loaded] == ["retryCount", "proxyHost"]
        assert loader.list_parameters() == ["retryCount", "proxyHost"]
        retry = loader.get_parameter("retryCount")
        assert retry.data_type == ParameterDataType.INT32
        assert retry.display_name == "Retry Count"
        assert retry.value == "3"
        assert [c.name for c in retry.constraints] == ["MinValue", "MaxValue"]
        assert retry.source == path
        assert loader.get_parameter("proxyHost").display_name == "Proxy host"

    def test_resolve_value(self, tmp_path, parser):
        loader = ParameterLoader(parser)
        loader.load_file(_write_raw(tmp_path / "params.yaml", VALID_DEFINITIONS))
        assert loader.resolve_value(loader.get_parameter("retryCount")) == 3
        assert loader.resolve_value(loader.get_parameter("proxyHost")) is None

    def test_timestamp_value_stays_text(self, tmp_path, parser):
        path = _write_raw(
            tmp_path / "params.yaml",
            _single("startAt", "DateTimeOffset", value="2024-05-01T10:00:00+02:00"),
        )
        loader = ParameterLoader(parser)
        loader.load_file(path)
        definition = loader.get_parameter("startAt")
        assert definition.value == "2024-05-01T10:00:00+02:00"
        assert loader.resolve_value(definition).utcoffset() == datetime.timedelta(hours=2)

    def test_decimal_value_keeps_digits(self, tmp_path, parser):
        path = _write_raw(tmp_path / "params.yaml", _single("rate", "Decimal", value="1.10"))
        loader = ParameterLoader(parser)
        loader.load_file(path)
        definition = loader.get_parameter("rate")
        assert definition.value == "1.10"
        value = loader.resolve_value(definition)
        assert value == decimal.Decimal("1.10")
        assert str(value) == "1.10"

    def test_load_dir_is_sorted(self, tmp_path, parser):
        _write_raw(tmp_path / "b.yaml", _single("second", "String"))
        _write_raw(tmp_path / "a.yaml", _single("first", "String"))
        _write_raw(tmp_path / "ignored.txt", _single("ignored", "String"))
        loader = ParameterLoader(parser)
        loader.load_dir(tmp_path)
        assert loader.list_parameters() == ["first", "second"]

    def test_load_dir_missing_is_noop(self, tmp_path, parser):
        loader = ParameterLoader(parser)
        loader.load_dir(tmp_path / "missing")
        assert loader.list_parameters() == []

    def test_duplicate_across_files(self, tmp_path, parser):
        _write_raw(tmp_path / "a.yaml", _single("host", "String"))
        _write_raw(tmp_path / "b.yaml", _single("host", "String"))
        loader = ParameterLoader(parser)
        with pytest.raises(ValueError, match="Duplicate parameter 'host'"):
            loader.load_dir(tmp_path)

    def test_missing_name(self, tmp_path, parser):
        path = _write_raw(tmp_path / "p.yaml", "parameters:\n  - type: String\n")
        with pytest.raises(ValueError, match="without a name"):
            ParameterLoader(parser).load_file(path)

    @pytest.mark.parametrize("type_name", ["Float", "None"])
    def test_bad_type(self, tmp_path, parser, type_name):
        path = _write_raw(tmp_path / "p.yaml", _single("x", type_name))
        with pytest.raises(ValueError, match="Parameter 'x'"):
            ParameterLoader(parser).load_file(path)

    def test_bad_constraints(self, tmp_path, parser):
        path = _write_raw(tmp_path / "p.yaml", _single("x", "Int32", "[MinValue(abc)]"))
        with pytest.raises(ValueError) as exc_info:
            ParameterLoader(parser).load_file(path)
        assert isinstance(exc_info.value.__cause__, ConstraintParserError)

    def test_empty_file(self, tmp_path, parser):
        path = _write_raw(tmp_path / "p.yaml", "")
        assert ParameterLoader(parser).load_file(path) == []

    def test_default_parser(self):
        assert ParameterLoader().parser is ConstraintParser.default()


# ---------------------------------------------------------------------------
# validate_yaml_file
# ---------------------------------------------------------------------------


class TestValidateYamlFile:
    def test_valid_file(self, tmp_path, parser):
        path = _write_raw(tmp_path / "p.yaml", VALID_DEFINITIONS)
        assert validate_yaml_file(path, parser=parser) == []

    def test_empty_file(self, tmp_path):
        issues = validate_yaml_file(_write_raw(tmp_path / "p.yaml", "   \n"))
        assert len(issues) == 1
        assert "empty" in issues[0].message

    def test_yaml_parse_error(self, tmp_path):
        issues = validate_yaml_file(_write_raw(tmp_path / "p.yaml", "parameters: [unclosed\n"))
        assert len(issues) == 1
        assert issues[0].message.startswith("YAML parse error")

    def test_missing_parameters_key(self, tmp_path):
        issues = validate_yaml_file(_write_raw(tmp_path / "p.yaml", "other: 1\n"))
        assert issues
        assert all(i.severity == "error" for i in issues)

    def test_missing_type(self, tmp_path):
        path = _write_raw(tmp_path / "p.yaml", "parameters:\n  - name: x\n")
        issues = validate_yaml_file(path)
        assert len(issues) == 1
        assert issues[0].path == "parameters[0]"
        assert "'type'" in issues[0].message

    def test_unknown_type(self, tmp_path):
        issues = validate_yaml_file(_write_raw(tmp_path / "p.yaml", _single("x", "Float")))
        assert [i.path for i in issues] == ["parameters[0]/type"]

    def test_unknown_property(self, tmp_path):
        content = _single("x", "String") + "    colour: red\n"
        issues = validate_yaml_file(_write_raw(tmp_path / "p.yaml", content))
        assert [i.path for i in issues] == ["parameters[0]"]

    def test_bad_parameter_name(self, tmp_path):
        issues = validate_yaml_file(_write_raw(tmp_path / "p.yaml", _single("'1abc'", "String")))
        assert [i.path for i in issues] == ["parameters[0]/name"]

    def test_constraints_must_be_bracketed(self, tmp_path):
        path = _write_raw(tmp_path / "p.yaml", _single("x", "Int32", "MinValue(1)"))
        issues = validate_yaml_file(path)
        assert [i.path for i in issues] == ["parameters[0]/constraints"]

    def test_constraint_parse_error(self, tmp_path, parser):
        path = _write_raw(tmp_path / "p.yaml", _single("x", "Int32", "[MinValue(abc)]", "1"))
        issues = validate_yaml_file(path, parser=parser)
        assert len(issues) == 1
        assert issues[0].path == "parameters[0]/constraints"
        assert issues[0].message.startswith("Parameter 'x':")

    def test_constraint_not_supported(self, tmp_path, parser):
        path = _write_raw(tmp_path / "p.yaml", _single("x", "String", "[MinValue(1)]", "a"))
        issues = validate_yaml_file(path, parser=parser)
        assert [i.path for i in issues] == ["parameters[0]/constraints"]

    def test_value_not_convertible(self, tmp_path, parser):
        path = _write_raw(tmp_path / "p.yaml", _single("x", "Int32", "[MaxValue(10)]", "abc"))
        issues = validate_yaml_file(path, parser=parser)
        assert [i.path for i in issues] == ["parameters[0]/value"]
        assert issues[0].severity == "error"

    def test_value_violates_constraint(self, tmp_path, parser):
        path = _write_raw(tmp_path / "p.yaml", _single("x", "Int32", "[MaxValue(10)]", "11"))
        issues = validate_yaml_file(path, parser=parser)
        assert len(issues) == 1
        assert issues[0].path == "parameters[0]/value"
        assert issues[0].severity == "error"

    def test_missing_value_is_warning(self, tmp_path, parser):
        path = _write_raw(tmp_path / "p.yaml", _single("x", "Int32", "[MaxValue(10)]"))
        issues = validate_yaml_file(path, parser=parser)
        assert len(issues) == 1
        assert issues[0].severity == "warning"
        assert "null is not allowed" in issues[0].message

    def test_timestamp_value(self, tmp_path, parser):
        path = _write_raw(
            tmp_path / "p.yaml",
            _single(
                "startAt",
                "DateTimeOffset",
                "[MaxValue(2030-01-01T00:00:00+00:00)]",
                "2024-05-01T10:00:00+02:00",
            ),
        )
        assert validate_yaml_file(path, parser=parser) == []

    @pytest.mark.parametrize("value", ["0.00001", "1.10", "-2.50"])
    def test_decimal_value(self, tmp_path, parser, value):
        path = _write_raw(
            tmp_path / "p.yaml", _single("rate", "Decimal", "[MaxValue(10)]", value)
        )
        assert validate_yaml_file(path, parser=parser) == []

    def test_small_decimal_checked_against_constraint(self, tmp_path, parser):
        path = _write_raw(
            tmp_path / "p.yaml", _single("rate", "Decimal", "[MinValue(0.0001)]", "0.00001")
        )
        issues = validate_yaml_file(path, parser=parser)
        assert [i.path for i in issues] == ["parameters[0]/value"]
        assert issues[0].severity == "error"

    def test_boolean_value(self, tmp_path, parser):
        path = _write_raw(tmp_path / "p.yaml", _single("enabled", "Bool", value="true"))
        assert validate_yaml_file(path, parser=parser) == []

    def test_duplicate_name(self, tmp_path, parser):
        content = _single("x", "String", value="a") + "  - name: x\n    type: String\n    value: b\n"
        issues = validate_yaml_file(_write_raw(tmp_path / "p.yaml", content), parser=parser)
        assert len(issues) == 1
        assert issues[0].path == "parameters[1]/name"
        assert "parameters[0]" in issues[0].message


# ---------------------------------------------------------------------------
# validate_definitions_dir
# ---------------------------------------------------------------------------


class TestValidateDefinitionsDir:
    def test_valid_dir(self, tmp_path, parser):
        _write_raw(tmp_path / "a.yaml", VALID_DEFINITIONS)
        _write_raw(tmp_path / "b.yaml", _single("other", "String", "[Null]"))
        assert validate_definitions_dir(tmp_path, parser=parser) == []

    def test_missing_dir(self, tmp_path):
        issues = validate_definitions_dir(tmp_path / "missing")
        assert len(issues) == 1
        assert "does not exist" in issues[0].message

    def test_issues_from_all_files(self, tmp_path, parser):
        _write_raw(tmp_path / "a.yaml", _single("x", "Float"))
        _write_raw(tmp_path / "b.yaml", _single("y", "Int32", "[MaxValue(1)]", "2"))
        issues = validate_definitions_dir(tmp_path, parser=parser)
        assert [i.file.name for i in issues] == ["a.yaml", "b.yaml"]

    def test_strict_escalates_warnings(self, tmp_path, parser):
        _write_raw(tmp_path / "a.yaml", _single("x", "Int32"))
        relaxed = validate_definitions_dir(tmp_path, parser=parser)
        strict = validate_definitions_dir(tmp_path, strict=True, parser=parser)
        assert [i.severity for i in relaxed] == ["warning"]
        assert [i.severity for i in strict] == ["error"]


class TestValidationIssue:
    def test_str_with_path(self):
        issue = ValidationIssue(file=Path("p.yaml"), message="bad", path="parameters[0]/value")
        assert str(issue) == "[ERROR] p.yaml at parameters[0]/value: bad"

    def test_str_without_path(self):
        issue = ValidationIssue(file=Path("p.yaml"), message="odd", severity="warning")
        assert str(issue) == "[WARNING] p.yaml: odd"

    def test_escalate(self):
        issues = [
            ValidationIssue(file=Path("p.yaml"), message="a", severity="warning"),
            ValidationIssue(file=Path("p.yaml"), message="b"),
        ]
        escalate(issues)
        assert [i.severity for i in issues] == ["error", "error"]
