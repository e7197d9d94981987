"""Exceptions raised by parsing, configuring and validating constraints.

- InvalidArgumentError: a caller passed a value the API never accepts
- ConstraintParserError: a constraint string could not be turned into constraints
- ConstraintConfigurationError: a constraint's parameters are wrong for its kind
- ParameterValidationError: ``ParameterValidator.validate`` found problems
- ParameterConversionError: text could not be converted to a data type (or back)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from paramvalidation.core.types import ParameterDataType
    from paramvalidation.validation.constraints.base import Constraint
    from paramvalidation.validation.types import ValidationResult


class InvalidArgumentError(ValueError):
    """An argument is missing, empty or out of range. Always a caller bug."""


class ValueNotConvertibleError(InvalidArgumentError):
    """A value cannot be compared with or normalized to a constraint's type."""

    def __init__(self, value: Any, expected: str):
        self.value = value
        self.expected = expected
        super().__init__(
            f"A value of type '{type(value).__name__}' cannot be converted to {expected}"
        )


class InvalidDataTypeError(InvalidArgumentError):
    """A constraint was asked to validate a data type it does not support."""

    def __init__(self, constraint: Constraint, data_type: ParameterDataType):
        self.constraint = constraint
        self.data_type = data_type
        super().__init__(
            f"Constraint '{constraint.name}' does not support data type '{data_type}'"
        )


class ConstraintParserError(Exception):
    """Error while turning a constraint string into constraints.

    Attributes:
        position: 0-based offset in the constraint string, if the error is
            tied to one
    """

    def __init__(self, message: str, position: int | None = None):
        self.position = position
        super().__init__(message)


class ConstraintSyntaxError(ConstraintParserError):
    """The constraint string is malformed at ``position``."""

    def __init__(self, message: str, position: int):
        super().__init__(f"{message} at position {position}", position)


class UnknownConstraintError(ConstraintParserError):
    """No constraint with this name is known, and no resolver supplied one."""

    def __init__(self, name: str, data_type: ParameterDataType):
        self.constraint_name = name
        self.data_type = data_type
        super().__init__(f"Constraint '{name}' is unknown")


class ConstraintDefinitionError(ConstraintParserError):
    """A known constraint cannot be configured as written.

    The underlying configuration or conversion error is chained as
    ``__cause__``.
    """

    def __init__(self, message: str, constraint_name: str, position: int | None = None):
        self.constraint_name = constraint_name
        super().__init__(message, position)


class ConstraintNotSupportedError(ConstraintDefinitionError):
    """A known constraint is not defined for the requested data type."""

    def __init__(self, name: str, data_type: ParameterDataType):
        self.data_type = data_type
        super().__init__(
            f"Constraint '{name}' is not defined for data type '{data_type}'", name
        )


class ConstraintConfigurationError(Exception):
    """A constraint's parameters are invalid (count, content or data type)."""

    def __init__(self, message: str, constraint: Constraint | None = None):
        self.constraint = constraint
        super().__init__(message)


class ParameterValidationError(Exception):
    """A value failed validation.

    Attributes:
        results: Every validation result that was produced
    """

    def __init__(self, results: list[ValidationResult]):
        self.results = list(results)
        lines = [r.message for r in self.results]
        super().__init__("Parameter validation failed: " + "; ".join(lines))


class ParameterConversionError(ValueError):
    """Text could not be converted to a data type, or a value to text."""

    def __init__(
        self,
        message: str,
        data_type: ParameterDataType | None = None,
        value: Any = None,
    ):
        self.data_type = data_type
        self.value = value
        super().__init__(message)
