"""Length constraints for strings, byte sequences and URIs."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any
from urllib.parse import SplitResult

from paramvalidation.core.types import ParameterDataType
from paramvalidation.errors import InvalidArgumentError, ValueNotConvertibleError
from paramvalidation.validation.constraints.base import Constraint, ConstraintNames
from paramvalidation.validation.types import ErrorCode, ValidationResult


def measure(value: Any) -> tuple[int, bool]:
    """Return ``(length, is_text)`` of a string, bytes or URI value.

    URIs are measured in their rendered form.
    """
    if isinstance(value, str):
        return len(value), True
    if isinstance(value, (bytes, bytearray)):
        return len(value), False
    if isinstance(value, SplitResult):
        return len(value.geturl()), True
    raise ValueNotConvertibleError(value, "a string, bytes or URI")


class _LengthConstraint(Constraint):
    data_types: tuple[ParameterDataType, ...] = (
        ParameterDataType.BYTES,
        ParameterDataType.STRING,
        ParameterDataType.URI,
    )

    def __init__(self, name: str, length: int | None = None):
        super().__init__(name)
        if length is not None and length < 0:
            raise InvalidArgumentError(f"{name} must not be negative")
        self._length = length

    def get_parameters(self) -> list[str]:
        return [] if self._length is None else [str(self._length)]

    def set_parameters(self, parameters: Sequence[str], data_type: ParameterDataType) -> None:
        self._check_configuration(parameters, data_type)
        self._assert_data_type(data_type, *self.data_types)
        self._require_count(parameters, 1)
        self._length = self._parse_count(parameters[0])

    def _on_validation(
        self,
        results: list[ValidationResult],
        value: Any,
        data_type: ParameterDataType,
        member_name: str,
        display_name: str,
    ) -> None:
        self._assert_data_type(data_type, *self.data_types)
        if self._length is None:
            raise self._invalid_parameter("no length configured")
        current, is_text = measure(value)
        unit = "characters" if is_text else "bytes"
        message = self._check(current, display_name, unit)
        if message:
            results.append(self._result(self._code, message, member_name))

    _code: ErrorCode

    def _check(self, current: int, display_name: str, unit: str) -> str | None:
        raise NotImplementedError


class LengthConstraint(_LengthConstraint):
    """``[Length(n)]``: exactly ``n`` characters or bytes."""

    data_types = (ParameterDataType.BYTES, ParameterDataType.STRING)
    _code = ErrorCode.LENGTH_MISMATCH

    def __init__(self, length: int | None = None):
        super().__init__(ConstraintNames.LENGTH, length)

    @property
    def length(self) -> int | None:
        return self._length

    def _check(self, current, display_name, unit):
        if current != self._length:
            return f"'{display_name}' must be exactly {self._length} {unit} long, but is {current}."
        return None


class MinimumLengthConstraint(_LengthConstraint):
    """``[MinLength(n)]``: at least ``n`` characters or bytes."""

    _code = ErrorCode.TOO_SHORT

    def __init__(self, minimum_length: int | None = None):
        super().__init__(ConstraintNames.MINIMUM_LENGTH, minimum_length)

    @property
    def minimum_length(self) -> int | None:
        return self._length

    def _check(self, current, display_name, unit):
        if current < self._length:
            return f"'{display_name}' must be at least {self._length} {unit} long, but is {current}."
        return None


class MaximumLengthConstraint(_LengthConstraint):
    """``[MaxLength(n)]``: at most ``n`` characters or bytes."""

    _code = ErrorCode.TOO_LONG

    def __init__(self, maximum_length: int | None = None):
        super().__init__(ConstraintNames.MAXIMUM_LENGTH, maximum_length)

    @property
    def maximum_length(self) -> int | None:
        return self._length

    def _check(self, current, display_name, unit):
        if current > self._length:
            return f"'{display_name}' must be at most {self._length} {unit} long, but is {current}."
        return None
