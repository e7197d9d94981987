"""Parameter data type registry with native representations and numeric ranges."""

import datetime
import decimal
import enum
import uuid
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from urllib.parse import SplitResult

from paramvalidation.core.version import Version


class ParameterDataType(enum.Enum):
    """Semantic data types understood by constraints and the value codec.

    Member values are the names used in constraint strings and parameter
    definition files (e.g. ``[Values(Int32,A=1)]``). ``NONE`` marks an
    uninitialized type and is rejected wherever a real type is required.
    """

    NONE = "None"
    BOOL = "Bool"
    BYTE = "Byte"
    BYTES = "Bytes"
    DATE_TIME_OFFSET = "DateTimeOffset"
    DECIMAL = "Decimal"
    ENUM = "Enum"
    GUID = "Guid"
    INT16 = "Int16"
    INT32 = "Int32"
    INT64 = "Int64"
    SIGNED_BYTE = "SignedByte"
    STRING = "String"
    TIME_SPAN = "TimeSpan"
    UINT16 = "UInt16"
    UINT32 = "UInt32"
    UINT64 = "UInt64"
    URI = "Uri"
    VERSION = "Version"
    XML = "Xml"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: str) -> "ParameterDataType":
        """Look up a data type by its text name (case-insensitive).

        Raises:
            ValueError: If no data type has that name
        """
        wanted = name.strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        raise ValueError(f"'{name}' is not a parameter data type")


@dataclass(frozen=True)
class DataTypeInfo:
    """Native representation of a parameter data type.

    Attributes:
        data_type: The described data type
        native_type: Python type values of this data type arrive as
        min_value/max_value: Inclusive range for integer kinds
        alternate: Wider type used when a value does not fit this one
        convertible: Whether values of other Python types may be converted
    """

    data_type: ParameterDataType
    native_type: type | None
    min_value: int | None = None
    max_value: int | None = None
    alternate: ParameterDataType | None = None
    convertible: bool = False

    @property
    def is_integer(self) -> bool:
        return self.min_value is not None

    def in_range(self, value: int) -> bool:
        if not self.is_integer:
            return True
        return self.min_value <= value <= self.max_value


def _integer(data_type, low, high, alternate) -> DataTypeInfo:
    return DataTypeInfo(
        data_type=data_type,
        native_type=int,
        min_value=low,
        max_value=high,
        alternate=alternate,
        convertible=True,
    )


_INT64 = ParameterDataType.INT64
_UINT64 = ParameterDataType.UINT64

DATA_TYPES: dict[ParameterDataType, DataTypeInfo] = {
    ParameterDataType.BOOL: DataTypeInfo(ParameterDataType.BOOL, bool),
    ParameterDataType.BYTE: _integer(ParameterDataType.BYTE, 0, 0xFF, _UINT64),
    ParameterDataType.BYTES: DataTypeInfo(ParameterDataType.BYTES, bytes),
    ParameterDataType.DATE_TIME_OFFSET: DataTypeInfo(
        ParameterDataType.DATE_TIME_OFFSET, datetime.datetime
    ),
    ParameterDataType.DECIMAL: DataTypeInfo(
        ParameterDataType.DECIMAL,
        decimal.Decimal,
        alternate=ParameterDataType.DECIMAL,
        convertible=True,
    ),
    # Enum values are either enum members or their integer values
    ParameterDataType.ENUM: DataTypeInfo(ParameterDataType.ENUM, enum.Enum),
    ParameterDataType.GUID: DataTypeInfo(ParameterDataType.GUID, uuid.UUID),
    ParameterDataType.INT16: _integer(ParameterDataType.INT16, -(2**15), 2**15 - 1, _INT64),
    ParameterDataType.INT32: _integer(ParameterDataType.INT32, -(2**31), 2**31 - 1, _INT64),
    ParameterDataType.INT64: _integer(ParameterDataType.INT64, -(2**63), 2**63 - 1, _INT64),
    ParameterDataType.SIGNED_BYTE: _integer(ParameterDataType.SIGNED_BYTE, -128, 127, _INT64),
    ParameterDataType.STRING: DataTypeInfo(ParameterDataType.STRING, str),
    ParameterDataType.TIME_SPAN: DataTypeInfo(ParameterDataType.TIME_SPAN, datetime.timedelta),
    ParameterDataType.UINT16: _integer(ParameterDataType.UINT16, 0, 2**16 - 1, _UINT64),
    ParameterDataType.UINT32: _integer(ParameterDataType.UINT32, 0, 2**32 - 1, _UINT64),
    ParameterDataType.UINT64: _integer(ParameterDataType.UINT64, 0, 2**64 - 1, _UINT64),
    ParameterDataType.URI: DataTypeInfo(ParameterDataType.URI, SplitResult),
    ParameterDataType.VERSION: DataTypeInfo(ParameterDataType.VERSION, Version),
    ParameterDataType.XML: DataTypeInfo(ParameterDataType.XML, ET.Element),
}

INTEGER_TYPES = frozenset(t for t, info in DATA_TYPES.items() if info.is_integer)


def is_integer_type(data_type: ParameterDataType) -> bool:
    return data_type in INTEGER_TYPES
