"""Base class and shared helpers for all constraints.

A constraint is a named, parameterized rule. It renders itself back to the
constraint string grammar (``[Name]`` or ``[Name(p1,p2)]``) and validates one
value of a given data type at a time; values are never stored.

Concrete constraints override:
- get_parameters(): parameters in the order set_parameters() expects them
- set_parameters(): configure from raw string parameters
- _on_validation(): the actual check, only called for non-None values

Example:
    constraint = MinimumValueConstraint(ParameterDataType.INT32, 40)
    constraint.validate(39, ParameterDataType.INT32, "age")
    # -> [ValidationResult(code=ErrorCode.VALUE_TOO_SMALL, ...)]
"""

from __future__ import annotations

from abc import ABC
from collections.abc import Sequence
from typing import Any

from paramvalidation.core.types import ParameterDataType
from paramvalidation.errors import (
    ConstraintConfigurationError,
    InvalidArgumentError,
    InvalidDataTypeError,
)
from paramvalidation.validation.types import ErrorCode, ValidationResult


class ConstraintNames:
    """Well-known constraint names as they appear in constraint strings."""

    ALLOWED_SCHEME = "AllowedScheme"
    CHARACTER_SET = "CharSet"
    DATABASE = "Database"
    DECIMAL_PLACES = "DecimalPlaces"
    DISPLAY_HINT = "DisplayHint"
    ENCRYPTED = "Encrypted"
    ENDPOINT = "Endpoint"
    ENUM_VALUES = "Values"
    FILE_NAME = "FileName"
    HOST_NAME = "Host"
    LENGTH = "Length"
    LOWERCASE = "Lowercase"
    MAXIMUM_LENGTH = "MaxLength"
    MAXIMUM_VALUE = "MaxValue"
    MINIMUM_LENGTH = "MinLength"
    MINIMUM_VALUE = "MinValue"
    NULL = "Null"
    PASSWORD = "Password"
    PATH = "Path"
    READ_ONLY = "ReadOnly"
    REGEX = "Regex"
    STEP = "Step"
    TYPE = "Type"
    UPPERCASE = "Uppercase"


# Parameters containing any of these are written quoted
RESERVED_CHARACTERS = frozenset("[](),' ")


def quote_parameter(parameter: str) -> str:
    """Render one parameter for a constraint string, quoting it if needed."""
    if parameter == "" or any(c in RESERVED_CHARACTERS for c in parameter):
        return "'" + parameter.replace("'", "''") + "'"
    return parameter


class Constraint(ABC):
    """A named rule that validates values of one or more data types.

    Instances are safe to share between threads for validation once
    configured. Calling set_parameters() concurrently on one instance is
    not supported.
    """

    def __init__(self, name: str):
        if not name or not name.strip():
            raise InvalidArgumentError("Constraint name must not be empty")
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def __str__(self) -> str:
        parameters = self.get_parameters()
        if not parameters:
            return f"[{self._name}]"
        return f"[{self._name}({','.join(quote_parameter(p) for p in parameters)})]"

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self}>"

    # -------------------------------------------------------------------------
    # Parameters
    # -------------------------------------------------------------------------

    def get_parameters(self) -> list[str]:
        """Parameters in the order set_parameters() must receive them."""
        return []

    def set_parameters(self, parameters: Sequence[str], data_type: ParameterDataType) -> None:
        """Configure the constraint from raw string parameters.

        The base implementation accepts no parameters.

        Raises:
            InvalidArgumentError: If ``data_type`` is NONE
            ConstraintConfigurationError: If the parameters are invalid
        """
        self._check_configuration(parameters, data_type)
        self._require_count(parameters, 0)

    def _check_configuration(
        self, parameters: Sequence[str] | None, data_type: ParameterDataType
    ) -> None:
        if parameters is None:
            raise InvalidArgumentError("parameters must not be None")
        if data_type == ParameterDataType.NONE:
            raise InvalidArgumentError("data_type must not be ParameterDataType.NONE")

    def _require_count(self, parameters: Sequence[str], count: int) -> None:
        if len(parameters) != count:
            raise ConstraintConfigurationError(
                f"Constraint '{self._name}' requires exactly {count} parameter(s), "
                f"got {len(parameters)}",
                self,
            )

    def _require_min_count(self, parameters: Sequence[str], minimum: int) -> None:
        if len(parameters) < minimum:
            raise ConstraintConfigurationError(
                f"Constraint '{self._name}' requires at least {minimum} parameter(s), "
                f"got {len(parameters)}",
                self,
            )

    def _invalid_parameter(self, detail: str) -> ConstraintConfigurationError:
        return ConstraintConfigurationError(
            f"Invalid parameter for constraint '{self._name}': {detail}", self
        )

    def _parse_count(self, text: str, what: str = "length") -> int:
        value = text.strip()
        if not (value.isascii() and value.isdigit()):
            raise self._invalid_parameter(f"{what} '{text}' is not a non-negative integer")
        return int(value)

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(
        self,
        value: Any,
        data_type: ParameterDataType,
        member_name: str,
        display_name: str | None = None,
    ) -> list[ValidationResult]:
        """Validate a value.

        Args:
            value: The value to check; must not be None
            data_type: The declared data type of the value
            member_name: Name of the parameter or property being validated
            display_name: Name used in messages; defaults to ``member_name``

        Returns:
            Validation results; empty if the value is valid

        Raises:
            InvalidArgumentError: On None value, NONE data type or blank member name
            InvalidDataTypeError: If the constraint does not support ``data_type``
        """
        if value is None:
            raise InvalidArgumentError("value must not be None")
        if data_type == ParameterDataType.NONE:
            raise InvalidArgumentError("data_type must not be ParameterDataType.NONE")
        if not member_name or not member_name.strip():
            raise InvalidArgumentError("member_name must not be empty")
        if not display_name or not display_name.strip():
            display_name = member_name

        results: list[ValidationResult] = []
        self._on_validation(results, value, data_type, member_name, display_name)
        return results

    def _on_validation(
        self,
        results: list[ValidationResult],
        value: Any,
        data_type: ParameterDataType,
        member_name: str,
        display_name: str,
    ) -> None:
        """Check ``value`` and append results. Markers leave this empty."""

    def _assert_data_type(
        self, data_type: ParameterDataType, *expected: ParameterDataType
    ) -> None:
        if data_type not in expected:
            raise InvalidDataTypeError(self, data_type)

    def _result(self, code: ErrorCode, message: str, member_name: str) -> ValidationResult:
        return ValidationResult(code, message, (member_name,), self)
