"""Marker and hint constraints.

These never produce validation results; they carry information for the
code around validation (editors, storage, the validator's null handling).
"""

from __future__ import annotations

from collections.abc import Sequence

from paramvalidation.core.types import ParameterDataType
from paramvalidation.errors import InvalidArgumentError
from paramvalidation.validation.constraints.base import Constraint, ConstraintNames


class NullConstraint(Constraint):
    """``[Null]``: the parameter may be None."""

    def __init__(self):
        super().__init__(ConstraintNames.NULL)


class EncryptedConstraint(Constraint):
    """``[Encrypted]``: the value is stored encrypted by the host application."""

    def __init__(self):
        super().__init__(ConstraintNames.ENCRYPTED)


class ReadOnlyConstraint(Constraint):
    """``[ReadOnly]``: the value is shown but not editable."""

    def __init__(self):
        super().__init__(ConstraintNames.READ_ONLY)


class PasswordConstraint(Constraint):
    """``[Password]``: the string is a secret and should be masked on input."""

    def __init__(self):
        super().__init__(ConstraintNames.PASSWORD)

    def _on_validation(self, results, value, data_type, member_name, display_name) -> None:
        self._assert_data_type(data_type, ParameterDataType.STRING)


class DisplayHintConstraint(Constraint):
    """``[DisplayHint(hint,...)]``: free-form hints for editors."""

    def __init__(self, hints: Sequence[str] | None = None):
        super().__init__(ConstraintNames.DISPLAY_HINT)
        self._hints: list[str] = []
        if hints is not None:
            if not hints or any(not h or not h.strip() for h in hints):
                raise InvalidArgumentError("hints must be a non-empty list of non-empty strings")
            self._hints = list(hints)

    @property
    def hints(self) -> list[str]:
        return list(self._hints)

    def get_parameters(self) -> list[str]:
        return self.hints

    def set_parameters(self, parameters: Sequence[str], data_type: ParameterDataType) -> None:
        self._check_configuration(parameters, data_type)
        self._require_min_count(parameters, 1)
        if any(not p.strip() for p in parameters):
            raise self._invalid_parameter("hints must not be empty")
        self._hints = list(parameters)


class DatabaseConstraint(Constraint):
    """``[Database(entity[,key[,display]])]``: the value references a database entity.

    ``key`` is the referenced key property and ``display`` the property
    shown to users instead of the key.
    """

    def __init__(
        self,
        entity: str | None = None,
        key_property: str | None = None,
        display_property: str | None = None,
    ):
        super().__init__(ConstraintNames.DATABASE)
        if entity is not None and not entity.strip():
            raise InvalidArgumentError("entity must not be empty")
        self.entity = entity
        self.key_property = key_property
        self.display_property = display_property

    def get_parameters(self) -> list[str]:
        if self.entity is None:
            return []
        parameters = [self.entity, self.key_property or "", self.display_property or ""]
        while parameters and not parameters[-1]:
            parameters.pop()
        return parameters

    def set_parameters(self, parameters: Sequence[str], data_type: ParameterDataType) -> None:
        self._check_configuration(parameters, data_type)
        if not 1 <= len(parameters) <= 3:
            raise self._invalid_parameter(
                f"between 1 and 3 parameters are required, got {len(parameters)}"
            )
        if not parameters[0].strip():
            raise self._invalid_parameter("entity must not be empty")
        self.entity = parameters[0]
        self.key_property = parameters[1] if len(parameters) > 1 else None
        self.display_property = parameters[2] if len(parameters) > 2 else None


class DecimalPlacesConstraint(Constraint):
    """``[DecimalPlaces(n)]``: number of decimal places editors should show."""

    def __init__(self, decimal_places: int | None = None):
        super().__init__(ConstraintNames.DECIMAL_PLACES)
        if decimal_places is not None and decimal_places < 0:
            raise InvalidArgumentError("decimal_places must not be negative")
        self.decimal_places = decimal_places

    def get_parameters(self) -> list[str]:
        return [] if self.decimal_places is None else [str(self.decimal_places)]

    def set_parameters(self, parameters: Sequence[str], data_type: ParameterDataType) -> None:
        self._check_configuration(parameters, data_type)
        self._assert_data_type(data_type, ParameterDataType.DECIMAL)
        self._require_count(parameters, 1)
        self.decimal_places = self._parse_count(parameters[0], "decimal places")

    def _on_validation(self, results, value, data_type, member_name, display_name) -> None:
        self._assert_data_type(data_type, ParameterDataType.DECIMAL)
