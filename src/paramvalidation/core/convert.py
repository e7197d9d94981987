"""Conversion between parameter values and their text form.

Text forms follow XML Schema conventions so stored parameters stay
culture-independent:

- Bool: ``true``/``false`` (``1``/``0`` accepted on input)
- Integer kinds: plain decimal integers, range-checked per type
- Decimal: plain notation, no exponent
- DateTimeOffset: ISO 8601 with offset (naive input is taken as UTC)
- TimeSpan: ISO 8601 duration, e.g. ``P1DT2H3M4.5S`` or ``-PT30S``
- Bytes: Base64
- Guid: canonical UUID text
- Uri: absolute URI
- Version: ``major.minor[.build[.revision]]``
- Enum: member name or integer, resolved via a ``[Type(...)]`` constraint
- Xml: XML document text

Usage:
    from paramvalidation.core.convert import to_data_type, to_string

    port = to_data_type("8080", ParameterDataType.INT32)
    text = to_string(port, ParameterDataType.INT32)
"""

from __future__ import annotations

import base64
import binascii
import datetime
import decimal
import enum
import math
import re
import uuid
import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING, Any
from urllib.parse import SplitResult, urlsplit

from paramvalidation.core.types import (
    DATA_TYPES,
    ParameterDataType,
    is_integer_type,
)
from paramvalidation.core.version import Version
from paramvalidation.errors import InvalidArgumentError, ParameterConversionError

if TYPE_CHECKING:
    from paramvalidation.validation.constraints.base import Constraint


_INTEGER_PATTERN = re.compile(r"^[+-]?[0-9]+$")
_DECIMAL_PATTERN = re.compile(r"^[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)$")
_DURATION_PATTERN = re.compile(
    r"^(?P<sign>-)?P"
    r"(?:(?P<days>[0-9]+)D)?"
    r"(?:T"
    r"(?:(?P<hours>[0-9]+)H)?"
    r"(?:(?P<minutes>[0-9]+)M)?"
    r"(?:(?P<seconds>[0-9]+(?:\.[0-9]+)?)S)?"
    r")?$"
)


def _failed(text: str, data_type: ParameterDataType) -> ParameterConversionError:
    return ParameterConversionError(
        f"'{text}' cannot be converted to data type '{data_type}'", data_type, text
    )


# =============================================================================
# Text -> value
# =============================================================================


def to_boolean(text: str) -> bool:
    value = text.strip()
    if value in ("true", "1"):
        return True
    if value in ("false", "0"):
        return False
    raise _failed(text, ParameterDataType.BOOL)


def to_integer(text: str, data_type: ParameterDataType = ParameterDataType.INT32) -> int:
    """Parse an integer and check it fits ``data_type``."""
    if not is_integer_type(data_type):
        raise InvalidArgumentError(f"'{data_type}' is not an integer data type")
    value = text.strip()
    if not _INTEGER_PATTERN.match(value):
        raise _failed(text, data_type)
    result = int(value)
    if not DATA_TYPES[data_type].in_range(result):
        raise _failed(text, data_type)
    return result


def to_decimal(text: str) -> decimal.Decimal:
    value = text.strip()
    if not _DECIMAL_PATTERN.match(value):
        raise _failed(text, ParameterDataType.DECIMAL)
    return decimal.Decimal(value)


def to_bytes(text: str) -> bytes:
    if text == "":
        return b""
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise _failed(text, ParameterDataType.BYTES) from exc


def to_datetime_offset(text: str) -> datetime.datetime:
    try:
        value = datetime.datetime.fromisoformat(text.strip())
    except ValueError as exc:
        raise _failed(text, ParameterDataType.DATE_TIME_OFFSET) from exc
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    return value


def to_timedelta(text: str) -> datetime.timedelta:
    """Parse an ISO 8601 duration limited to days and time components.

    Years and months have no fixed length and are rejected.
    """
    value = text.strip()
    match = _DURATION_PATTERN.match(value)
    if not match or value.endswith(("P", "T")):
        raise _failed(text, ParameterDataType.TIME_SPAN)
    parts = match.groupdict()
    result = datetime.timedelta(
        days=int(parts["days"] or 0),
        hours=int(parts["hours"] or 0),
        minutes=int(parts["minutes"] or 0),
        seconds=float(decimal.Decimal(parts["seconds"] or 0)),
    )
    return -result if parts["sign"] else result


def to_guid(text: str) -> uuid.UUID:
    try:
        return uuid.UUID(text.strip())
    except ValueError as exc:
        raise _failed(text, ParameterDataType.GUID) from exc


def to_uri(text: str) -> SplitResult:
    value = text.strip()
    try:
        result = urlsplit(value)
    except ValueError as exc:
        raise _failed(text, ParameterDataType.URI) from exc
    if not result.scheme or not (result.netloc or result.path):
        raise _failed(text, ParameterDataType.URI)
    return result


def to_version(text: str) -> Version:
    try:
        return Version.parse(text)
    except ValueError as exc:
        raise _failed(text, ParameterDataType.VERSION) from exc


def to_enumeration(text: str, enum_type: type[enum.Enum]) -> enum.Enum:
    """Resolve an enum member by name, or by integer value."""
    if not (isinstance(enum_type, type) and issubclass(enum_type, enum.Enum)):
        raise InvalidArgumentError(f"'{enum_type!r}' is not an enumeration")
    value = text.strip()
    if value in enum_type.__members__:
        return enum_type.__members__[value]
    if _INTEGER_PATTERN.match(value):
        try:
            return enum_type(int(value))
        except ValueError as exc:
            raise _failed(text, ParameterDataType.ENUM) from exc
    raise _failed(text, ParameterDataType.ENUM)


def to_xml(text: str) -> ET.Element:
    try:
        return ET.fromstring(text)
    except ET.ParseError as exc:
        raise _failed(text, ParameterDataType.XML) from exc


def _find_type_constraint(constraints: list[Constraint] | None):
    # Imported lazily: constraints depend on this module
    from paramvalidation.validation.constraints.enums import TypeConstraint

    for constraint in constraints or []:
        if isinstance(constraint, TypeConstraint):
            return constraint
    return None


def to_data_type(
    text: str,
    data_type: ParameterDataType,
    constraints: list[Constraint] | None = None,
) -> Any:
    """Convert text to the native value of ``data_type``.

    Args:
        text: The text form of the value
        data_type: Target data type
        constraints: Constraints of the parameter; Enum values need the
            ``[Type(...)]`` constraint naming the enumeration

    Returns:
        The converted value

    Raises:
        InvalidArgumentError: If ``text`` is None or ``data_type`` is NONE
        ParameterConversionError: If the text is not a valid value
    """
    if text is None:
        raise InvalidArgumentError("text must not be None")
    if data_type == ParameterDataType.NONE:
        raise InvalidArgumentError("data_type must not be ParameterDataType.NONE")

    if is_integer_type(data_type):
        return to_integer(text, data_type)
    if data_type == ParameterDataType.BOOL:
        return to_boolean(text)
    if data_type == ParameterDataType.BYTES:
        return to_bytes(text)
    if data_type == ParameterDataType.DATE_TIME_OFFSET:
        return to_datetime_offset(text)
    if data_type == ParameterDataType.DECIMAL:
        return to_decimal(text)
    if data_type == ParameterDataType.GUID:
        return to_guid(text)
    if data_type == ParameterDataType.STRING:
        return text
    if data_type == ParameterDataType.TIME_SPAN:
        return to_timedelta(text)
    if data_type == ParameterDataType.URI:
        return to_uri(text)
    if data_type == ParameterDataType.VERSION:
        return to_version(text)
    if data_type == ParameterDataType.XML:
        return to_xml(text)

    # Enum
    type_constraint = _find_type_constraint(constraints)
    if type_constraint is None:
        raise ParameterConversionError(
            "Enum values need a [Type] constraint naming the enumeration",
            data_type,
            text,
        )
    resolved = type_constraint.resolved_type
    if resolved is None:
        raise ParameterConversionError(
            f"Type '{type_constraint.type_name}' could not be resolved", data_type, text
        )
    return to_enumeration(text, resolved)


# =============================================================================
# Value -> text
# =============================================================================


def timedelta_to_string(value: datetime.timedelta) -> str:
    sign = "-" if value < datetime.timedelta(0) else ""
    value = abs(value)
    days = value.days
    hours, remainder = divmod(value.seconds, 3600)
    minutes, seconds = divmod(remainder, 60)

    result = f"{sign}P"
    if days:
        result += f"{days}D"
    time_part = ""
    if hours:
        time_part += f"{hours}H"
    if minutes:
        time_part += f"{minutes}M"
    if seconds or value.microseconds:
        if value.microseconds:
            fraction = f"{value.microseconds:06d}".rstrip("0")
            time_part += f"{seconds}.{fraction}S"
        else:
            time_part += f"{seconds}S"
    if time_part:
        result += "T" + time_part
    elif not days:
        result += "T0S"
    return result


def matches_native_type(value: Any, data_type: ParameterDataType) -> bool:
    """Check whether ``value`` already has the native representation of ``data_type``.

    Integer kinds also require the value to be in range. ``bool`` never
    counts as a number.
    """
    info = DATA_TYPES.get(data_type)
    if info is None:
        return False
    if info.is_integer:
        return (
            isinstance(value, int)
            and not isinstance(value, bool)
            and info.in_range(int(value))
        )
    if data_type == ParameterDataType.BYTES:
        return isinstance(value, (bytes, bytearray))
    if data_type == ParameterDataType.DATE_TIME_OFFSET:
        return isinstance(value, datetime.datetime) and value.tzinfo is not None
    if data_type == ParameterDataType.ENUM:
        return isinstance(value, enum.Enum) or (
            isinstance(value, int) and not isinstance(value, bool)
        )
    return isinstance(value, info.native_type)


def to_string(
    value: Any,
    data_type: ParameterDataType,
    constraints: list[Constraint] | None = None,
) -> str | None:
    """Convert a native value to its text form.

    ``constraints`` is accepted for symmetry with :func:`to_data_type`.

    Returns:
        The text form, or None if ``value`` is None

    Raises:
        ParameterConversionError: If ``value`` is not of ``data_type``
    """
    if value is None:
        return None
    if data_type == ParameterDataType.NONE:
        raise InvalidArgumentError("data_type must not be ParameterDataType.NONE")
    if data_type == ParameterDataType.XML and hasattr(value, "to_xml"):
        return value.to_xml()
    if not matches_native_type(value, data_type):
        raise ParameterConversionError(
            f"A value of type '{type(value).__name__}' is not of data type '{data_type}'",
            data_type,
            value,
        )

    if data_type == ParameterDataType.BOOL:
        return "true" if value else "false"
    if is_integer_type(data_type):
        return str(int(value))
    if data_type == ParameterDataType.BYTES:
        return base64.b64encode(bytes(value)).decode("ascii")
    if data_type == ParameterDataType.DATE_TIME_OFFSET:
        return value.isoformat()
    if data_type == ParameterDataType.DECIMAL:
        return format(value, "f")
    if data_type == ParameterDataType.ENUM:
        raw = value.value if isinstance(value, enum.Enum) else value
        return str(int(raw))
    if data_type == ParameterDataType.TIME_SPAN:
        return timedelta_to_string(value)
    if data_type == ParameterDataType.URI:
        return value.geturl()
    if data_type == ParameterDataType.XML:
        return ET.tostring(value, encoding="unicode")
    # Guid, String, Version
    return str(value)


# =============================================================================
# General conversion
# =============================================================================


def coerce(value: Any, data_type: ParameterDataType) -> Any:
    """Convert a value of another Python type to the native type of ``data_type``.

    Only integer kinds and Decimal are convertible. Floats and Decimals
    are rounded half-to-even when converted to integers.

    Raises:
        ParameterConversionError: If the value cannot be represented
    """
    if matches_native_type(value, data_type):
        return value
    info = DATA_TYPES.get(data_type)
    if info is None or not info.convertible or isinstance(value, bool):
        raise ParameterConversionError(
            f"A value of type '{type(value).__name__}' cannot be converted to '{data_type}'",
            data_type,
            value,
        )

    try:
        if data_type == ParameterDataType.DECIMAL:
            if isinstance(value, str):
                return to_decimal(value)
            if isinstance(value, float):
                if not math.isfinite(value):
                    raise ValueError("not a finite number")
                return decimal.Decimal(repr(value))
            if isinstance(value, int):
                return decimal.Decimal(value)
            raise TypeError(type(value).__name__)

        if isinstance(value, str):
            return to_integer(value, data_type)
        if isinstance(value, int):
            result = int(value)
        elif isinstance(value, float):
            if not math.isfinite(value):
                raise ValueError("not a finite number")
            result = round(value)
        elif isinstance(value, decimal.Decimal):
            if not value.is_finite():
                raise ValueError("not a finite number")
            result = int(value.to_integral_value(rounding=decimal.ROUND_HALF_EVEN))
        else:
            raise TypeError(type(value).__name__)
    except (TypeError, ValueError, ArithmeticError) as exc:
        if isinstance(exc, ParameterConversionError):
            raise
        raise ParameterConversionError(
            f"A value of type '{type(value).__name__}' cannot be converted to '{data_type}'",
            data_type,
            value,
        ) from exc

    if not info.in_range(result):
        raise ParameterConversionError(
            f"{value!r} is outside the range of data type '{data_type}'", data_type, value
        )
    return result
