"""
metadata/validator.py — validation of parameter definition files.

Runs two passes over each YAML file:
1. JSON Schema (Draft 2020-12) validation against ``parameters.schema.json``
2. Semantic validation: constraint strings parse for the declared type,
   values convert to the type, and values satisfy their constraints

Usage:
    from paramvalidation.metadata.validator import validate_definitions_dir, validate_yaml_file

    issues = validate_definitions_dir(Path("parameters"))
    for issue in issues:
        print(issue)

A parameter without a value that does not allow null is reported as a
warning; ``strict=True`` escalates warnings to errors.

PyYAML quirk: unquoted ISO-8601 timestamps are parsed into ``datetime``
objects. They are turned back into text before schema validation.
Floats are loaded as their source text so Decimal values keep every digit.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError
from referencing import Registry, Resource
from referencing.jsonschema import DRAFT202012

from paramvalidation.core.convert import to_data_type
from paramvalidation.core.types import ParameterDataType
from paramvalidation.errors import ConstraintParserError, ParameterConversionError
from paramvalidation.metadata.loader import load_yaml, preprocess_timestamps, value_text
from paramvalidation.validation.parser import ConstraintParser
from paramvalidation.validation.types import ErrorCode
from paramvalidation.validation.validator import ParameterValidator

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Public data types
# ---------------------------------------------------------------------------

_SCHEMAS_DIR = Path(__file__).parent / "schemas"

PARAMETERS_SCHEMA = "parameters.schema.json"


@dataclass
class ValidationIssue:
    """A single validation finding for a definition file."""

    file: Path
    message: str
    path: str = ""          # location within the document, e.g. "parameters[0]/value"
    severity: str = "error" # "error" | "warning"

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        return f"[{self.severity.upper()}] {self.file}{loc}: {self.message}"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_schema(name: str) -> dict[str, Any]:
    schema_path = _SCHEMAS_DIR / name
    with schema_path.open() as fh:
        return json.load(fh)


def _load_registry() -> Registry:
    """Build a jsonschema Registry containing all definition schemas."""
    resources = []
    for name in ("_defs.schema.json", PARAMETERS_SCHEMA):
        schema = _load_schema(name)
        resources.append(
            (schema["$id"], Resource(contents=schema, specification=DRAFT202012))
        )
    return Registry().with_resources(resources)


def _json_path(error: ValidationError) -> str:
    """Convert a jsonschema ValidationError path to a readable string."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


def _check_parameter(
    yaml_path: Path,
    index: int,
    item: dict[str, Any],
    parser: ConstraintParser,
    validator: ParameterValidator,
) -> list[ValidationIssue]:
    """Semantic checks for one schema-valid parameter entry."""
    location = f"parameters[{index}]"
    name = item["name"]
    data_type = ParameterDataType.from_name(item["type"])

    try:
        constraints = parser.parse(item.get("constraints"), data_type)
    except ConstraintParserError as exc:
        return [
            ValidationIssue(
                file=yaml_path,
                message=f"Parameter '{name}': {exc}",
                path=f"{location}/constraints",
            )
        ]

    text = value_text(item.get("value"))
    value = None
    if text is not None:
        try:
            value = to_data_type(text, data_type, constraints)
        except ParameterConversionError as exc:
            return [ValidationIssue(file=yaml_path, message=str(exc), path=f"{location}/value")]

    results = validator.get_validation_result(
        value, data_type, constraints, name, item.get("displayName")
    )
    issues = []
    for result in results:
        missing = value is None and result.code == ErrorCode.NULL_NOT_ALLOWED
        issues.append(
            ValidationIssue(
                file=yaml_path,
                message="No value is set and null is not allowed" if missing else result.message,
                path=f"{location}/value",
                severity="warning" if missing else "error",
            )
        )
    return issues


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_yaml_file(
    yaml_path: Path,
    *,
    registry: Registry | None = None,
    parser: ConstraintParser | None = None,
    validator: ParameterValidator | None = None,
) -> list[ValidationIssue]:
    """
    Validate a single definition file.

    Args:
        yaml_path:  Path to the YAML file to validate.
        registry:   Pre-built schema registry.  Built automatically if omitted.
        parser:     Parser for constraint strings (default: shared parser).
        validator:  Validator for values (default: shared validator).

    Returns:
        A list of :class:`ValidationIssue` objects (empty on success).
        Semantic checks only run when the file passes schema validation.
    """
    # 1. Parse YAML
    try:
        with yaml_path.open() as fh:
            raw = load_yaml(fh)
    except yaml.YAMLError as exc:
        return [ValidationIssue(file=yaml_path, message=f"YAML parse error: {exc}")]

    if raw is None:
        return [
            ValidationIssue(file=yaml_path, message="File is empty or contains only whitespace")
        ]

    # 2. Pre-process PyYAML quirks
    doc = preprocess_timestamps(raw)

    # 3. Schema validation
    if registry is None:
        registry = _load_registry()
    schema_validator = Draft202012Validator(_load_schema(PARAMETERS_SCHEMA), registry=registry)

    issues = [
        ValidationIssue(file=yaml_path, message=error.message, path=_json_path(error))
        for error in sorted(schema_validator.iter_errors(doc), key=_json_path)
    ]
    if issues:
        return issues

    # 4. Semantic validation
    parser = parser if parser is not None else ConstraintParser.default()
    validator = validator if validator is not None else ParameterValidator.default()
    seen: dict[str, int] = {}
    for index, item in enumerate(doc["parameters"]):
        name = item["name"]
        if name in seen:
            issues.append(
                ValidationIssue(
                    file=yaml_path,
                    message=f"Duplicate parameter '{name}' (first defined at parameters[{seen[name]}])",
                    path=f"parameters[{index}]/name",
                )
            )
            continue
        seen[name] = index
        issues.extend(_check_parameter(yaml_path, index, item, parser, validator))

    logger.debug("Validated %s: %d issue(s)", yaml_path, len(issues))
    return issues


def validate_definitions_dir(
    definitions_dir: Path,
    *,
    strict: bool = False,
    parser: ConstraintParser | None = None,
) -> list[ValidationIssue]:
    """
    Validate all ``*.yaml`` files in *definitions_dir*.

    Args:
        definitions_dir: Directory containing definition files.
        strict:          If ``True``, warnings are escalated to errors.
        parser:          Parser for constraint strings (default: shared parser).

    Returns:
        A flat list of :class:`ValidationIssue` objects across all files.
        Empty list means all files are valid.
    """
    if not definitions_dir.is_dir():
        return [
            ValidationIssue(
                file=definitions_dir,
                message=f"Definitions directory does not exist: {definitions_dir}",
            )
        ]

    # Registry is built once and shared across files
    try:
        registry = _load_registry()
    except (FileNotFoundError, json.JSONDecodeError) as exc:
        return [
            ValidationIssue(
                file=_SCHEMAS_DIR,
                message=f"Failed to load JSON Schema files: {exc}",
            )
        ]

    all_issues: list[ValidationIssue] = []
    for yaml_file in sorted(definitions_dir.glob("*.yaml")):
        all_issues.extend(validate_yaml_file(yaml_file, registry=registry, parser=parser))

    if strict:
        escalate(all_issues)
    return all_issues


def escalate(issues: list[ValidationIssue]) -> None:
    """Turn warnings into errors, in place."""
    for issue in issues:
        if issue.severity == "warning":
            issue.severity = "error"
