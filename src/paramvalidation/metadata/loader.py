"""Load parameter definitions from YAML files.

A definition file lists typed parameters with their constraint strings and,
optionally, a value:

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

from __future__ import annotations

import datetime
import decimal
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from paramvalidation.core.convert import to_data_type
from paramvalidation.core.types import ParameterDataType
from paramvalidation.errors import ConstraintParserError
from paramvalidation.validation.constraints.base import Constraint
from paramvalidation.validation.parser import ConstraintParser


@dataclass
class ParameterDefinition:
    """A parameter as declared in a definition file.

    ``value`` keeps the text form; use ``ParameterLoader.resolve_value`` for
    the native value.
    """

    name: str
    data_type: ParameterDataType
    display_name: str
    constraint_text: str = ""
    value: str | None = None
    constraints: list[Constraint] = field(default_factory=list)
    source: Path | None = None


class DefinitionLoader(yaml.SafeLoader):
    """SafeLoader that keeps floats as their source text.

    A Python float would turn ``0.00001`` into ``1e-05`` and ``1.10`` into
    ``1.1``; Decimal values must reach the codec as written.
    """


def _float_as_text(loader: yaml.SafeLoader, node: yaml.ScalarNode) -> str:
    return loader.construct_scalar(node)


DefinitionLoader.add_constructor("tag:yaml.org,2002:float", _float_as_text)


def load_yaml(stream: Any) -> Any:
    """Load a definition document with :class:`DefinitionLoader`."""
    return yaml.load(stream, Loader=DefinitionLoader)


def value_text(value: Any) -> str | None:
    """Text form of a scalar read from YAML."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, float):
        return format(decimal.Decimal(repr(value)), "f")
    return str(value)


def preprocess_timestamps(obj: Any) -> Any:
    """Recursively turn YAML timestamps back into ISO-8601 text.

    PyYAML parses unquoted ``2024-05-01T10:00:00+02:00`` as a datetime;
    definition files carry values as text.
    """
    if isinstance(obj, dict):
        return {k: preprocess_timestamps(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [preprocess_timestamps(item) for item in obj]
    if isinstance(obj, (datetime.date, datetime.datetime)):
        return obj.isoformat()
    return obj


def to_display_name(name: str) -> str:
    """Convert camelCase to Title Case."""
    result = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0:
            result.append(" ")
        result.append(char)
    return "".join(result).title()


class ParameterLoader:
    """Loads parameter definitions from YAML files."""

    def __init__(self, parser: ConstraintParser | None = None):
        self.parser = parser if parser is not None else ConstraintParser.default()
        self.parameters: dict[str, ParameterDefinition] = {}

    def load_file(self, yaml_path: Path) -> list[ParameterDefinition]:
        """Load one definition file.

        Raises:
            ValueError: If a definition is malformed, its constraint string
                does not parse, or a parameter name is already loaded
        """
        with open(yaml_path) as f:
            data = preprocess_timestamps(load_yaml(f))

        loaded = []
        if data and "parameters" in data:
            for item in data["parameters"] or []:
                definition = self._resolve_parameter(item, yaml_path)
                if definition.name in self.parameters:
                    raise ValueError(
                        f"Duplicate parameter '{definition.name}' in {yaml_path} "
                        f"(already defined in {self.parameters[definition.name].source})"
                    )
                self.parameters[definition.name] = definition
                loaded.append(definition)
        return loaded

    def load_dir(self, definitions_path: Path) -> None:
        """Load every ``*.yaml`` file in a directory."""
        if not definitions_path.exists():
            return
        for yaml_file in sorted(definitions_path.glob("*.yaml")):
            self.load_file(yaml_file)

    def _resolve_parameter(self, data: dict, source: Path) -> ParameterDefinition:
        """Convert a parameter dict to a ParameterDefinition."""
        if not isinstance(data, dict) or not data.get("name"):
            raise ValueError(f"Parameter without a name in {source}")
        name = data["name"]

        try:
            data_type = ParameterDataType.from_name(str(data.get("type", "")))
        except ValueError as e:
            raise ValueError(f"Parameter '{name}': {e}") from e
        if data_type == ParameterDataType.NONE:
            raise ValueError(f"Parameter '{name}' must declare a data type")

        constraint_text = data.get("constraints") or ""
        try:
            constraints = self.parser.parse(constraint_text, data_type)
        except ConstraintParserError as e:
            raise ValueError(f"Parameter '{name}' has invalid constraints: {e}") from e

        return ParameterDefinition(
            name=name,
            data_type=data_type,
            display_name=data.get("displayName") or to_display_name(name),
            constraint_text=constraint_text,
            value=value_text(data.get("value")),
            constraints=constraints,
            source=source,
        )

    def resolve_value(self, definition: ParameterDefinition) -> Any:
        """Convert a definition's value text to its native value.

        Raises:
            ParameterConversionError: If the text is not a valid value of the type
        """
        if definition.value is None:
            return None
        return to_data_type(definition.value, definition.data_type, definition.constraints)

    def get_parameter(self, name: str) -> ParameterDefinition | None:
        """Get a loaded parameter by name."""
        return self.parameters.get(name)

    def list_parameters(self) -> list[str]:
        """List all parameter names."""
        return list(self.parameters.keys())
