"""Validation engine: runs a value against a list of constraints.

None values are handled here, not by the constraints:
- without a ``[Null]`` constraint, None yields a single NULL_NOT_ALLOWED result
- with a ``[Null]`` constraint, None is valid and no other constraint runs

Usage:
    validator = ParameterValidator()
    constraints = ConstraintParser().parse("[MinValue(1)][MaxValue(10)]", ParameterDataType.INT32)

    results = validator.get_validation_result(12, ParameterDataType.INT32, constraints, "retries")
    validator.validate(12, ParameterDataType.INT32, constraints, "retries")  # raises
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, ClassVar

from paramvalidation.core.types import ParameterDataType
from paramvalidation.errors import InvalidArgumentError, ParameterValidationError
from paramvalidation.validation.constraints.base import Constraint, ConstraintNames
from paramvalidation.validation.constraints.markers import NullConstraint
from paramvalidation.validation.types import ErrorCode, ValidationResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationEvent:
    """Passed to listeners before validation and when validation fails.

    Attributes:
        value: The value being validated
        data_type: Declared data type of the value
        constraints: Constraints the value is checked against
        member_name: Name of the validated member
        display_name: Name used in messages
        results: Validation results; empty for the before-validation event
    """

    value: Any
    data_type: ParameterDataType
    constraints: tuple[Constraint, ...]
    member_name: str
    display_name: str
    results: tuple[ValidationResult, ...] = ()


ValidationListener = Callable[[ValidationEvent], None]


class ParameterValidator:
    """Validates values against constraint lists.

    Listeners are called in registration order. A listener that raises
    aborts the validation call.
    """

    _default: ClassVar[ParameterValidator | None] = None
    _default_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self):
        self._validating_listeners: tuple[ValidationListener, ...] = ()
        self._error_listeners: tuple[ValidationListener, ...] = ()
        self._lock = threading.Lock()

    @classmethod
    def default(cls) -> ParameterValidator:
        if cls._default is None:
            with cls._default_lock:
                if cls._default is None:
                    cls._default = cls()
        return cls._default

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def add_validating_listener(self, listener: ValidationListener) -> None:
        """Call ``listener`` before every validation."""
        with self._lock:
            self._validating_listeners = (*self._validating_listeners, listener)

    def remove_validating_listener(self, listener: ValidationListener) -> None:
        with self._lock:
            self._validating_listeners = tuple(
                l for l in self._validating_listeners if l is not listener
            )

    def add_error_listener(self, listener: ValidationListener) -> None:
        """Call ``listener`` whenever validation produces results."""
        with self._lock:
            self._error_listeners = (*self._error_listeners, listener)

    def remove_error_listener(self, listener: ValidationListener) -> None:
        with self._lock:
            self._error_listeners = tuple(l for l in self._error_listeners if l is not listener)

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def get_validation_result(
        self,
        value: Any,
        data_type: ParameterDataType,
        constraints: Sequence[Constraint] | None,
        member_name: str,
        display_name: str | None = None,
    ) -> list[ValidationResult]:
        """Validate a value against constraints.

        Args:
            value: The value; None is allowed
            data_type: Declared data type of the value
            constraints: Constraints to apply, in order; None means none
            member_name: Name of the validated member
            display_name: Name used in messages; defaults to ``member_name``

        Returns:
            All validation results; empty if the value is valid

        Raises:
            InvalidArgumentError: If ``data_type`` is NONE or ``member_name`` is blank
            InvalidDataTypeError: If a constraint does not support ``data_type``
        """
        if data_type == ParameterDataType.NONE:
            raise InvalidArgumentError("data_type must not be ParameterDataType.NONE")
        if not member_name or not member_name.strip():
            raise InvalidArgumentError("member_name must not be empty")
        if not display_name or not display_name.strip():
            display_name = member_name
        constraints = tuple(constraints or ())

        for listener in self._validating_listeners:
            listener(ValidationEvent(value, data_type, constraints, member_name, display_name))

        results: list[ValidationResult] = []
        if value is None:
            if not any(c.name == ConstraintNames.NULL for c in constraints):
                results.append(
                    ValidationResult(
                        ErrorCode.NULL_NOT_ALLOWED,
                        f"'{display_name}' must not be null.",
                        (member_name,),
                        NullConstraint(),
                    )
                )
        else:
            for constraint in constraints:
                results.extend(constraint.validate(value, data_type, member_name, display_name))

        if results:
            logger.debug("Validation of '%s' produced %d result(s)", member_name, len(results))
            event = ValidationEvent(
                value, data_type, constraints, member_name, display_name, tuple(results)
            )
            for listener in self._error_listeners:
                listener(event)
        return results

    def is_valid(
        self,
        value: Any,
        data_type: ParameterDataType,
        constraints: Sequence[Constraint] | None,
        member_name: str,
        display_name: str | None = None,
    ) -> bool:
        return not self.get_validation_result(
            value, data_type, constraints, member_name, display_name
        )

    def validate(
        self,
        value: Any,
        data_type: ParameterDataType,
        constraints: Sequence[Constraint] | None,
        member_name: str,
        display_name: str | None = None,
    ) -> None:
        """Validate and raise if there are any results.

        Raises:
            ParameterValidationError: With every result in ``.results``
        """
        results = self.get_validation_result(
            value, data_type, constraints, member_name, display_name
        )
        if results:
            raise ParameterValidationError(results)
