"""Result types produced by constraint validation.

A validation run returns a list of ``ValidationResult``; an empty list means
the value passed every constraint. ``ValidationResult.SUCCESS`` exists as an
explicit no-error sentinel for callers that need a single value.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from paramvalidation.validation.constraints.base import Constraint


class ErrorCode(IntEnum):
    """Machine-readable code of a validation result."""

    SUCCESS = 0
    NULL_NOT_ALLOWED = 1
    VALUE_TOO_SMALL = 2
    VALUE_TOO_LARGE = 3
    LENGTH_MISMATCH = 4
    TOO_SHORT = 5
    TOO_LONG = 6
    INVALID_CHARACTER = 7
    NOT_LOWERCASE = 8
    NOT_UPPERCASE = 9
    PATTERN_MISMATCH = 10
    INVALID_ENDPOINT = 11
    INVALID_HOST = 12
    INVALID_FILE_NAME = 13
    INVALID_PATH = 14
    SCHEME_NOT_ALLOWED = 15
    VALUE_NOT_DEFINED = 16
    INVALID_FLAGS = 17
    WRONG_ENUM_TYPE = 18
    TYPE_NOT_SUPPORTED = 19


@dataclass(frozen=True)
class ValidationResult:
    """A single validation failure.

    Attributes:
        code: Machine-readable error code
        message: Human-readable message, already formatted with the display name
        member_names: Names of the members the failure relates to
        constraint: The constraint that produced the result, or None for SUCCESS
    """

    code: ErrorCode
    message: str
    member_names: tuple[str, ...] = ()
    constraint: Constraint | None = None

    SUCCESS: ClassVar[ValidationResult]

    @property
    def is_success(self) -> bool:
        return self.code == ErrorCode.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": int(self.code),
            "error": self.code.name,
            "message": self.message,
            "memberNames": list(self.member_names),
            "constraint": str(self.constraint) if self.constraint is not None else None,
        }


ValidationResult.SUCCESS = ValidationResult(ErrorCode.SUCCESS, "Validation succeeded")
