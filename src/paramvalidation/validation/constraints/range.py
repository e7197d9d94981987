"""Value range constraints: MinValue, MaxValue and the Step editor hint.

A bound is stored in the native representation of the constraint's data
type. Integer bounds also keep an alternate wider range (Int64 for signed
kinds, UInt64 for unsigned ones) so a value that does not fit the declared
type but fits the wider one still compares correctly.

Comparison order for a value:
1. Exact native match within the declared range
2. Integer within the alternate range
3. General conversion to the declared type, then to the alternate type

DateTimeOffset, TimeSpan and Version never convert; anything but an exact
match raises ValueNotConvertibleError.
"""

from __future__ import annotations

import decimal
import operator
from collections.abc import Callable, Sequence
from typing import Any

from paramvalidation.core.convert import coerce, matches_native_type, to_data_type, to_string
from paramvalidation.core.types import DATA_TYPES, INTEGER_TYPES, ParameterDataType
from paramvalidation.errors import (
    InvalidArgumentError,
    ParameterConversionError,
    ValueNotConvertibleError,
)
from paramvalidation.validation.constraints.base import Constraint, ConstraintNames
from paramvalidation.validation.types import ErrorCode, ValidationResult

RANGE_TYPES = frozenset(INTEGER_TYPES) | {
    ParameterDataType.DATE_TIME_OFFSET,
    ParameterDataType.DECIMAL,
    ParameterDataType.TIME_SPAN,
    ParameterDataType.VERSION,
}

STEP_TYPES = frozenset(INTEGER_TYPES) | {ParameterDataType.DECIMAL}


def _normalize(value: Any, data_type: ParameterDataType) -> Any:
    """Bring ``value`` into the native representation of ``data_type``.

    Raises:
        ValueNotConvertibleError: If no lossless representation exists
    """
    if matches_native_type(value, data_type):
        return value
    try:
        return coerce(value, data_type)
    except ParameterConversionError as exc:
        raise ValueNotConvertibleError(value, f"'{data_type}'") from exc


class _TypedValueConstraint(Constraint):
    """A constraint holding one value of a fixed numeric-like data type."""

    supported_types: frozenset[ParameterDataType] = RANGE_TYPES

    def __init__(self, name: str, data_type: ParameterDataType, value: Any = None):
        super().__init__(name)
        if data_type == ParameterDataType.NONE:
            raise InvalidArgumentError("data_type must not be ParameterDataType.NONE")
        if data_type not in self.supported_types:
            raise InvalidArgumentError(
                f"Constraint '{name}' does not support data type '{data_type}'"
            )
        self._data_type = data_type
        self._info = DATA_TYPES[data_type]
        self._value: Any = None
        self._alt_value: Any = None
        if value is not None:
            self._set_value(value)

    @property
    def data_type(self) -> ParameterDataType:
        return self._data_type

    def _set_value(self, value: Any) -> None:
        self._value = _normalize(value, self._data_type)
        if self._info.alternate is not None:
            self._alt_value = _normalize(self._value, self._info.alternate)

    def get_parameters(self) -> list[str]:
        if self._value is None:
            return []
        return [to_string(self._value, self._data_type)]

    def set_parameters(self, parameters: Sequence[str], data_type: ParameterDataType) -> None:
        self._check_configuration(parameters, data_type)
        self._assert_data_type(data_type, self._data_type)
        self._require_count(parameters, 1)
        try:
            value = to_data_type(parameters[0], data_type)
        except ParameterConversionError as exc:
            raise self._invalid_parameter(
                f"'{parameters[0]}' is not a valid {data_type} value"
            ) from exc
        self._set_value(value)


class _ValueBoundConstraint(_TypedValueConstraint):
    """Shared comparison logic of MinValue and MaxValue."""

    # Returns True if the value is out of bound
    _violates: Callable[[Any, Any], bool]
    _code: ErrorCode
    _template: str

    def _comparable(self, value: Any) -> tuple[Any, Any]:
        """Pair ``value`` with the bound it must be compared against."""
        data_type = self._data_type
        if matches_native_type(value, data_type):
            if isinstance(value, decimal.Decimal) and not value.is_finite():
                raise ValueNotConvertibleError(value, f"'{data_type}'")
            return value, self._value
        if not self._info.convertible or isinstance(value, bool):
            raise ValueNotConvertibleError(value, f"'{data_type}'")

        alternate = self._info.alternate
        if matches_native_type(value, alternate):
            return value, self._alt_value
        try:
            return coerce(value, data_type), self._value
        except ParameterConversionError:
            pass
        try:
            return coerce(value, alternate), self._alt_value
        except ParameterConversionError as exc:
            raise ValueNotConvertibleError(value, f"'{data_type}' or '{alternate}'") from exc

    def _on_validation(
        self,
        results: list[ValidationResult],
        value: Any,
        data_type: ParameterDataType,
        member_name: str,
        display_name: str,
    ) -> None:
        self._assert_data_type(data_type, self._data_type)
        if self._value is None:
            raise self._invalid_parameter("no bound configured")
        actual, bound = self._comparable(value)
        if self._violates(actual, bound):
            results.append(
                self._result(
                    self._code,
                    self._template.format(
                        name=display_name,
                        bound=to_string(self._value, self._data_type),
                        value=actual,
                    ),
                    member_name,
                )
            )


class MinimumValueConstraint(_ValueBoundConstraint):
    """``[MinValue(bound)]``: the value must not be less than the bound."""

    _violates = staticmethod(operator.lt)
    _code = ErrorCode.VALUE_TOO_SMALL
    _template = "The value of '{name}' must be at least {bound}, but is {value}."

    def __init__(self, data_type: ParameterDataType, minimum_value: Any = None):
        super().__init__(ConstraintNames.MINIMUM_VALUE, data_type, minimum_value)

    @property
    def minimum_value(self) -> Any:
        return self._value


class MaximumValueConstraint(_ValueBoundConstraint):
    """``[MaxValue(bound)]``: the value must not be greater than the bound."""

    _violates = staticmethod(operator.gt)
    _code = ErrorCode.VALUE_TOO_LARGE
    _template = "The value of '{name}' must be at most {bound}, but is {value}."

    def __init__(self, data_type: ParameterDataType, maximum_value: Any = None):
        super().__init__(ConstraintNames.MAXIMUM_VALUE, data_type, maximum_value)

    @property
    def maximum_value(self) -> Any:
        return self._value


class StepConstraint(_TypedValueConstraint):
    """``[Step(size)]``: increment used by editors. Never produces results."""

    supported_types = STEP_TYPES

    def __init__(self, data_type: ParameterDataType, step_size: Any = None):
        super().__init__(ConstraintNames.STEP, data_type, step_size)

    @property
    def step_size(self) -> Any:
        return self._value

    def _on_validation(self, results, value, data_type, member_name, display_name) -> None:
        self._assert_data_type(data_type, self._data_type)
