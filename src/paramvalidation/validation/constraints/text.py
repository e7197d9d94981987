"""String constraints: character sets, letter case, patterns and file names."""

from __future__ import annotations

import enum
import re
from collections.abc import Sequence
from typing import Any

from paramvalidation.core.types import ParameterDataType
from paramvalidation.errors import InvalidArgumentError, ValueNotConvertibleError
from paramvalidation.validation.constraints.base import Constraint, ConstraintNames
from paramvalidation.validation.types import ErrorCode, ValidationResult


def _require_text(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueNotConvertibleError(value, "a string")
    return value


# =============================================================================
# Character sets
# =============================================================================

# cp1252 code points in 0x80-0x9F that differ from ISO-8859-1
WINDOWS_1252_EXTRAS = frozenset({
    0x20AC, 0x201A, 0x0192, 0x201E, 0x2026, 0x2020, 0x2021, 0x02C6, 0x2030,
    0x0160, 0x2039, 0x0152, 0x017D, 0x2018, 0x2019, 0x201C, 0x201D, 0x2022,
    0x2013, 0x2014, 0x02DC, 0x2122, 0x0161, 0x203A, 0x0153, 0x017E, 0x0178,
})

_CONTROL_WHITESPACE = (0x09, 0x0A, 0x0D)


def _is_ascii(c: int) -> bool:
    return 0x1F < c < 0x7F or c in _CONTROL_WHITESPACE


def _is_iso8859(c: int) -> bool:
    return _is_ascii(c) or 0x9F < c < 0x100


def _is_windows1252(c: int) -> bool:
    return _is_iso8859(c) or c in WINDOWS_1252_EXTRAS


def _is_iso646_odette(c: int) -> bool:
    # A-Z, "-./0-9", space and "&()_"
    return 0x40 < c < 0x5B or 0x2C < c < 0x3A or c in (0x20, 0x26, 0x28, 0x29, 0x5F)


class CharacterSet(enum.Enum):
    """Character sets a string can be restricted to."""

    ASCII = "Ascii"
    ISO8859 = "Iso8859"
    WINDOWS1252 = "Windows1252"
    ISO646_ODETTE = "Iso646Odette"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: str) -> "CharacterSet":
        wanted = name.strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        raise ValueError(f"'{name}' is not a character set")

    def contains(self, character: str) -> bool:
        return _MEMBERSHIP[self](ord(character))


_MEMBERSHIP = {
    CharacterSet.ASCII: _is_ascii,
    CharacterSet.ISO8859: _is_iso8859,
    CharacterSet.WINDOWS1252: _is_windows1252,
    CharacterSet.ISO646_ODETTE: _is_iso646_odette,
}


class CharacterSetConstraint(Constraint):
    """``[CharSet(Ascii)]``: every character must belong to the set."""

    def __init__(self, character_set: CharacterSet = CharacterSet.ASCII):
        super().__init__(ConstraintNames.CHARACTER_SET)
        self.character_set = character_set

    def get_parameters(self) -> list[str]:
        return [str(self.character_set)]

    def set_parameters(self, parameters: Sequence[str], data_type: ParameterDataType) -> None:
        self._check_configuration(parameters, data_type)
        self._assert_data_type(data_type, ParameterDataType.STRING)
        self._require_count(parameters, 1)
        try:
            self.character_set = CharacterSet.from_name(parameters[0])
        except ValueError as exc:
            raise self._invalid_parameter(str(exc)) from exc

    def _on_validation(self, results, value, data_type, member_name, display_name) -> None:
        self._assert_data_type(data_type, ParameterDataType.STRING)
        for position, character in enumerate(_require_text(value)):
            if not self.character_set.contains(character):
                results.append(
                    self._result(
                        ErrorCode.INVALID_CHARACTER,
                        f"'{display_name}' contains the character {character!r} at position "
                        f"{position}, which is not part of character set {self.character_set}.",
                        member_name,
                    )
                )
                return


# =============================================================================
# Letter case
# =============================================================================


class LowercaseConstraint(Constraint):
    """``[Lowercase]``: the string must not contain upper-case letters."""

    def __init__(self):
        super().__init__(ConstraintNames.LOWERCASE)

    def _on_validation(self, results, value, data_type, member_name, display_name) -> None:
        self._assert_data_type(data_type, ParameterDataType.STRING)
        text = _require_text(value)
        if text != text.lower():
            results.append(
                self._result(
                    ErrorCode.NOT_LOWERCASE,
                    f"'{display_name}' must be lower-case.",
                    member_name,
                )
            )


class UppercaseConstraint(Constraint):
    """``[Uppercase]``: the string must not contain lower-case letters."""

    def __init__(self):
        super().__init__(ConstraintNames.UPPERCASE)

    def _on_validation(self, results, value, data_type, member_name, display_name) -> None:
        self._assert_data_type(data_type, ParameterDataType.STRING)
        text = _require_text(value)
        if text != text.upper():
            results.append(
                self._result(
                    ErrorCode.NOT_UPPERCASE,
                    f"'{display_name}' must be upper-case.",
                    member_name,
                )
            )


# =============================================================================
# Regular expressions
# =============================================================================

# Flags that make sense for str patterns
REGEX_FLAGS: dict[str, re.RegexFlag] = {
    "ASCII": re.ASCII,
    "DOTALL": re.DOTALL,
    "IGNORECASE": re.IGNORECASE,
    "MULTILINE": re.MULTILINE,
    "VERBOSE": re.VERBOSE,
}
_ALL_FLAGS = re.ASCII | re.DOTALL | re.IGNORECASE | re.MULTILINE | re.VERBOSE


class RegexConstraint(Constraint):
    """``[Regex(pattern[,FLAG...])]``: the pattern must match somewhere in the string.

    Flags are given by name, e.g. ``[Regex('^[a-z]+$',IGNORECASE)]``.
    """

    def __init__(self, pattern: str = ".*", flags: re.RegexFlag | int = 0):
        super().__init__(ConstraintNames.REGEX)
        if not pattern or not pattern.strip():
            raise InvalidArgumentError("pattern must not be empty")
        flags = re.RegexFlag(flags)
        unknown = flags & ~_ALL_FLAGS
        if unknown:
            raise InvalidArgumentError(f"Unsupported regex flags: {unknown!r}")
        try:
            self._regex = re.compile(pattern, flags)
        except re.error as exc:
            raise InvalidArgumentError(f"Invalid regular expression '{pattern}': {exc}") from exc

    @property
    def pattern(self) -> str:
        return self._regex.pattern

    @property
    def flags(self) -> re.RegexFlag:
        # re adds UNICODE implicitly for str patterns
        return re.RegexFlag(self._regex.flags) & _ALL_FLAGS

    def get_parameters(self) -> list[str]:
        parameters = [self.pattern]
        flags = self.flags
        parameters.extend(name for name, flag in REGEX_FLAGS.items() if flags & flag)
        return parameters

    def set_parameters(self, parameters: Sequence[str], data_type: ParameterDataType) -> None:
        self._check_configuration(parameters, data_type)
        self._assert_data_type(data_type, ParameterDataType.STRING)
        self._require_min_count(parameters, 1)
        flags = re.RegexFlag(0)
        for name in parameters[1:]:
            flag = REGEX_FLAGS.get(name.strip().upper())
            if flag is None:
                raise self._invalid_parameter(f"'{name}' is not a regular expression flag")
            flags |= flag
        try:
            self._regex = re.compile(parameters[0], flags)
        except re.error as exc:
            raise self._invalid_parameter(f"invalid regular expression: {exc}") from exc

    def _on_validation(self, results, value, data_type, member_name, display_name) -> None:
        self._assert_data_type(data_type, ParameterDataType.STRING)
        if self._regex.search(_require_text(value)) is None:
            results.append(
                self._result(
                    ErrorCode.PATTERN_MISMATCH,
                    f"'{display_name}' does not match the pattern '{self.pattern}'.",
                    member_name,
                )
            )


# =============================================================================
# File system names
# =============================================================================

_CONTROL_CHARACTERS = frozenset(chr(c) for c in range(0x20))
INVALID_PATH_CHARACTERS = frozenset('"<>|') | _CONTROL_CHARACTERS
INVALID_FILE_NAME_CHARACTERS = INVALID_PATH_CHARACTERS | frozenset(":*?\\/")


class _ReservedCharactersConstraint(Constraint):
    _invalid: frozenset[str]
    _code: ErrorCode
    _noun: str

    def _on_validation(
        self,
        results: list[ValidationResult],
        value: Any,
        data_type: ParameterDataType,
        member_name: str,
        display_name: str,
    ) -> None:
        self._assert_data_type(data_type, ParameterDataType.STRING)
        text = _require_text(value)
        if not text.strip():
            results.append(
                self._result(self._code, f"'{display_name}' must not be empty.", member_name)
            )
            return
        bad = sorted({c for c in text if c in self._invalid})
        if bad:
            results.append(
                self._result(
                    self._code,
                    f"'{display_name}' is not a valid {self._noun}; it contains "
                    f"{', '.join(repr(c) for c in bad)}.",
                    member_name,
                )
            )


class FileNameConstraint(_ReservedCharactersConstraint):
    """``[FileName]``: a non-blank file name without path separators or reserved characters."""

    _invalid = INVALID_FILE_NAME_CHARACTERS
    _code = ErrorCode.INVALID_FILE_NAME
    _noun = "file name"

    def __init__(self):
        super().__init__(ConstraintNames.FILE_NAME)


class PathConstraint(_ReservedCharactersConstraint):
    """``[Path]``: a non-blank relative or absolute path without reserved characters."""

    _invalid = INVALID_PATH_CHARACTERS
    _code = ErrorCode.INVALID_PATH
    _noun = "path"

    def __init__(self):
        super().__init__(ConstraintNames.PATH)
