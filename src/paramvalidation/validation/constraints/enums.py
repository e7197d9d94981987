"""Enumeration constraints: explicit value lists and named enum types.

``[Values(Int32,Red=1,Green=2)]`` lists the allowed names and values inline.
``[Values(Int32,Flags,Read=1,Write=2)]`` accepts any combination of the
listed bits.

``[Type(package.module.Color)]`` names an ``enum.Enum`` subclass for Enum
parameters (or an arbitrary type tag for Xml parameters). The name is
resolved with importlib on first use, once, even under concurrent access.
"""

from __future__ import annotations

import enum
import importlib
import logging
import string
import threading
from collections.abc import Mapping, Sequence
from typing import Any

from paramvalidation.core.convert import to_integer
from paramvalidation.core.types import DATA_TYPES, ParameterDataType, is_integer_type
from paramvalidation.errors import (
    InvalidArgumentError,
    ParameterConversionError,
    ValueNotConvertibleError,
)
from paramvalidation.validation.constraints.base import Constraint, ConstraintNames
from paramvalidation.validation.types import ErrorCode, ValidationResult

logger = logging.getLogger(__name__)

FLAGS_PARAMETER = "Flags"


# =============================================================================
# Helpers
# =============================================================================


def examine_enumeration(
    enum_type: type[enum.Enum],
) -> tuple[dict[str, int], ParameterDataType, bool]:
    """Describe an integer-valued enum.

    Returns:
        Tuple of (name -> value mapping, smallest fitting integer data type,
        whether the enum is a flag enum)

    Raises:
        InvalidArgumentError: If ``enum_type`` is not an enum with int values
    """
    if not (isinstance(enum_type, type) and issubclass(enum_type, enum.Enum)):
        raise InvalidArgumentError(f"'{enum_type!r}' is not an enumeration")

    values: dict[str, int] = {}
    for name, member in enum_type.__members__.items():
        if not isinstance(member.value, int) or isinstance(member.value, bool):
            raise InvalidArgumentError(
                f"Enumeration '{enum_type.__qualname__}' has non-integer value for '{name}'"
            )
        values[name] = int(member.value)

    underlying = ParameterDataType.INT32
    for candidate in (ParameterDataType.INT32, ParameterDataType.INT64, ParameterDataType.UINT64):
        if all(DATA_TYPES[candidate].in_range(v) for v in values.values()):
            underlying = candidate
            break
    else:
        raise InvalidArgumentError(
            f"Enumeration '{enum_type.__qualname__}' has values outside the 64-bit range"
        )
    return values, underlying, issubclass(enum_type, enum.Flag)


def resolve_type_name(type_name: str) -> type | None:
    """Import a type from ``package.module.Name`` or ``package.module:Name``.

    Returns None (and logs a warning) if the type cannot be found.
    """
    module_name, sep, qualname = type_name.strip().partition(":")
    if not sep:
        module_name, _, qualname = type_name.strip().rpartition(".")
    if not module_name or not qualname or module_name.startswith("."):
        logger.warning("Type name '%s' is not a qualified name", type_name)
        return None

    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as exc:
        logger.warning("Cannot resolve type '%s': %s", type_name, exc)
        return None
    for part in qualname.split("."):
        target = getattr(target, part, None)
        if target is None:
            logger.warning("Cannot resolve type '%s': '%s' not found", type_name, part)
            return None
    if not isinstance(target, type):
        logger.warning("'%s' does not name a type", type_name)
        return None
    logger.debug("Resolved type '%s' to %r", type_name, target)
    return target


def _enum_value(value: Any) -> int | None:
    """Integer value of an enum member or int, None for anything else."""
    if isinstance(value, enum.Enum):
        value = value.value
    if isinstance(value, int) and not isinstance(value, bool):
        return int(value)
    return None


def _has_invalid_flags(value: int, mask: int) -> bool:
    return ((value ^ mask) & value) != 0


# =============================================================================
# Values
# =============================================================================


class EnumValuesConstraint(Constraint):
    """Restricts Enum parameters to an explicit list of named integer values."""

    def __init__(
        self,
        underlying_type: ParameterDataType | None = None,
        has_flags: bool = False,
        values: Mapping[str, int] | None = None,
    ):
        super().__init__(ConstraintNames.ENUM_VALUES)
        self._underlying_type: ParameterDataType | None = None
        self._has_flags = False
        self._values: dict[str, int] | None = None
        self._flag_mask = 0
        if underlying_type is None and values is None:
            return

        if underlying_type is None or not is_integer_type(underlying_type):
            raise InvalidArgumentError(f"'{underlying_type}' is not an integer data type")
        if not values:
            raise InvalidArgumentError("values must not be empty")
        info = DATA_TYPES[underlying_type]
        checked: dict[str, int] = {}
        for name, value in values.items():
            number = _enum_value(value)
            if number is None or not info.in_range(number):
                raise InvalidArgumentError(
                    f"Value {value!r} of '{name}' does not fit data type '{underlying_type}'"
                )
            checked[name] = number
        self._configure(underlying_type, has_flags, checked)

    @classmethod
    def from_type(cls, enum_type: type[enum.Enum]) -> "EnumValuesConstraint":
        """Build the constraint from an enum class; ``enum.Flag`` classes enable flags mode."""
        values, underlying, has_flags = examine_enumeration(enum_type)
        return cls(underlying, has_flags, values)

    def _configure(
        self, underlying_type: ParameterDataType, has_flags: bool, values: dict[str, int]
    ) -> None:
        mask = 0
        if has_flags:
            for value in values.values():
                mask |= value
        self._underlying_type = underlying_type
        self._has_flags = has_flags
        self._values = values
        self._flag_mask = mask

    @property
    def underlying_type(self) -> ParameterDataType | None:
        return self._underlying_type

    @property
    def has_flags(self) -> bool:
        return self._has_flags

    @property
    def values(self) -> dict[str, int]:
        return dict(self._values or {})

    def get_parameters(self) -> list[str]:
        if self._values is None:
            return []
        parameters = [str(self._underlying_type)]
        if self._has_flags:
            parameters.append(FLAGS_PARAMETER)
        parameters.extend(f"{name}={value}" for name, value in self._values.items())
        return parameters

    def set_parameters(self, parameters: Sequence[str], data_type: ParameterDataType) -> None:
        self._check_configuration(parameters, data_type)
        self._assert_data_type(data_type, ParameterDataType.ENUM)
        self._require_min_count(parameters, 2)

        try:
            underlying = ParameterDataType.from_name(parameters[0])
        except ValueError as exc:
            raise self._invalid_parameter(str(exc)) from exc
        if not is_integer_type(underlying):
            raise self._invalid_parameter(f"'{parameters[0]}' is not an integer data type")

        start = 1
        has_flags = parameters[1].strip() == FLAGS_PARAMETER
        if has_flags:
            start = 2
        if len(parameters) <= start:
            raise self._invalid_parameter("at least one Name=Value pair is required")

        values: dict[str, int] = {}
        for pair in parameters[start:]:
            name, value = self._parse_pair(pair, underlying)
            if name in values:
                raise self._invalid_parameter(f"'{name}' is defined more than once")
            values[name] = value
        self._configure(underlying, has_flags, values)

    def _parse_pair(self, pair: str, underlying: ParameterDataType) -> tuple[str, int]:
        tokens = [t.strip() for t in pair.split("=") if t.strip()]
        if len(tokens) != 2:
            raise self._invalid_parameter(f"'{pair}' is not a Name=Value pair")
        name, text = tokens
        if text[:2].lower() == "0x":
            digits = text[2:]
            if not digits or any(c not in string.hexdigits for c in digits):
                raise self._invalid_parameter(f"'{text}' is not a hexadecimal number")
            value = int(digits, 16)
            if not DATA_TYPES[underlying].in_range(value):
                raise self._invalid_parameter(f"'{text}' does not fit data type '{underlying}'")
            return name, value
        try:
            return name, to_integer(text, underlying)
        except ParameterConversionError as exc:
            raise self._invalid_parameter(
                f"'{text}' is not a valid {underlying} value"
            ) from exc

    def _on_validation(
        self,
        results: list[ValidationResult],
        value: Any,
        data_type: ParameterDataType,
        member_name: str,
        display_name: str,
    ) -> None:
        self._assert_data_type(data_type, ParameterDataType.ENUM)
        if self._values is None:
            raise self._invalid_parameter("no values configured")

        number = _enum_value(value)
        if number is None:
            results.append(
                self._result(
                    ErrorCode.TYPE_NOT_SUPPORTED,
                    f"'{display_name}' has a value of type '{type(value).__name__}', "
                    "which is not an enumeration value.",
                    member_name,
                )
            )
            return

        if self._has_flags:
            if _has_invalid_flags(number, self._flag_mask):
                results.append(
                    self._result(
                        ErrorCode.INVALID_FLAGS,
                        f"'{display_name}' contains flags that are not defined.",
                        member_name,
                    )
                )
            return

        if not DATA_TYPES[self._underlying_type].in_range(number):
            raise ValueNotConvertibleError(value, f"'{self._underlying_type}'")
        if number not in self._values.values():
            results.append(
                self._result(
                    ErrorCode.VALUE_NOT_DEFINED,
                    f"The value {number} of '{display_name}' is not defined.",
                    member_name,
                )
            )


# =============================================================================
# Type
# =============================================================================


class TypeConstraint(Constraint):
    """``[Type(name)]`` for Xml parameters: tags the expected document type.

    Resolution is lazy and happens exactly once per configured name.
    """

    data_types: tuple[ParameterDataType, ...] = (ParameterDataType.XML,)

    def __init__(self, type_name: str | None = None):
        super().__init__(ConstraintNames.TYPE)
        if type_name is not None and not type_name.strip():
            raise InvalidArgumentError("type_name must not be empty")
        self._lock = threading.Lock()
        self._type_name = type_name
        self._reset()

    def _reset(self) -> None:
        self._resolved_type: type | None = None
        self._is_resolved = False

    @property
    def type_name(self) -> str | None:
        return self._type_name

    @property
    def resolved_type(self) -> type | None:
        self._ensure_resolved()
        return self._resolved_type

    def _ensure_resolved(self) -> None:
        if self._is_resolved:
            return
        with self._lock:
            if self._is_resolved:
                return
            resolved = resolve_type_name(self._type_name) if self._type_name else None
            self._on_resolved(resolved)
            self._is_resolved = True

    def _on_resolved(self, resolved: type | None) -> None:
        self._resolved_type = resolved

    def get_parameters(self) -> list[str]:
        return [self._type_name] if self._type_name else []

    def set_parameters(self, parameters: Sequence[str], data_type: ParameterDataType) -> None:
        self._check_configuration(parameters, data_type)
        self._assert_data_type(data_type, *self.data_types)
        self._require_count(parameters, 1)
        if not parameters[0].strip():
            raise self._invalid_parameter("type name must not be empty")
        with self._lock:
            self._type_name = parameters[0]
            self._reset()

    def _on_validation(self, results, value, data_type, member_name, display_name) -> None:
        self._assert_data_type(data_type, *self.data_types)


class EnumTypeConstraint(TypeConstraint):
    """``[Type(name)]`` for Enum parameters: the value must belong to the named enum.

    If the name does not resolve to an ``enum.Enum`` subclass, validation
    passes.
    """

    data_types = (ParameterDataType.ENUM,)

    def _reset(self) -> None:
        super()._reset()
        self._values: dict[str, int] | None = None
        self._has_flags = False
        self._flag_mask = 0

    def _on_resolved(self, resolved: type | None) -> None:
        super()._on_resolved(resolved)
        if resolved is None:
            return
        try:
            values, _, has_flags = examine_enumeration(resolved)
        except InvalidArgumentError as exc:
            logger.warning("Type '%s' cannot be used as enumeration: %s", self._type_name, exc)
            return
        mask = 0
        if has_flags:
            for value in values.values():
                mask |= value
        self._values = values
        self._has_flags = has_flags
        self._flag_mask = mask

    @property
    def has_flags(self) -> bool:
        self._ensure_resolved()
        return self._has_flags

    @property
    def enum_values(self) -> dict[str, int] | None:
        self._ensure_resolved()
        return None if self._values is None else dict(self._values)

    def _on_validation(
        self,
        results: list[ValidationResult],
        value: Any,
        data_type: ParameterDataType,
        member_name: str,
        display_name: str,
    ) -> None:
        self._assert_data_type(data_type, ParameterDataType.ENUM)
        self._ensure_resolved()
        if self._values is None:
            return

        if isinstance(value, enum.Enum) and type(value) is not self._resolved_type:
            results.append(
                self._result(
                    ErrorCode.WRONG_ENUM_TYPE,
                    f"'{display_name}' is a '{type(value).__qualname__}' value, "
                    f"expected '{self._resolved_type.__qualname__}'.",
                    member_name,
                )
            )
            return

        number = _enum_value(value)
        if number is None:
            results.append(
                self._result(
                    ErrorCode.TYPE_NOT_SUPPORTED,
                    f"'{display_name}' has a value of type '{type(value).__name__}', "
                    "which is not an enumeration value.",
                    member_name,
                )
            )
            return

        if self._has_flags:
            if _has_invalid_flags(number, self._flag_mask):
                results.append(
                    self._result(
                        ErrorCode.INVALID_FLAGS,
                        f"'{display_name}' contains flags that are not defined.",
                        member_name,
                    )
                )
        elif number not in self._values.values():
            results.append(
                self._result(
                    ErrorCode.VALUE_NOT_DEFINED,
                    f"The value {number} of '{display_name}' is not defined.",
                    member_name,
                )
            )
