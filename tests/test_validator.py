"""Tests for ParameterValidator.

Covers:
  - null policy with and without [Null]
  - result aggregation across constraints
  - is_valid() / validate()
  - validating and error listeners
"""

import pytest

from paramvalidation.core.types import ParameterDataType
from paramvalidation.errors import (
    InvalidArgumentError,
    InvalidDataTypeError,
    ParameterValidationError,
)
from paramvalidation.validation import ConstraintParser, ParameterValidator, ValidationEvent
from paramvalidation.validation.constraints import NullConstraint
from paramvalidation.validation.types import ErrorCode

INT32 = ParameterDataType.INT32
STRING = ParameterDataType.STRING


@pytest.fixture
def validator():
    return ParameterValidator()


@pytest.fixture
def parse():
    parser = ConstraintParser()
    return parser.parse


class TestNullPolicy:
    def test_null_not_allowed_without_null_constraint(self, validator, parse):
        constraints = parse("[MinValue(1)][MaxValue(10)]", INT32)
        results = validator.get_validation_result(None, INT32, constraints, "retries")
        assert len(results) == 1
        assert results[0].code == ErrorCode.NULL_NOT_ALLOWED
        assert results[0].member_names == ("retries",)
        assert isinstance(results[0].constraint, NullConstraint)

    def test_null_without_any_constraints(self, validator):
        results = validator.get_validation_result(None, STRING, None, "name", "Full name")
        assert [r.code for r in results] == [ErrorCode.NULL_NOT_ALLOWED]
        assert "'Full name'" in results[0].message

    def test_null_allowed_with_null_constraint(self, validator, parse):
        constraints = parse("[Null][MinLength(3)]", STRING)
        assert validator.get_validation_result(None, STRING, constraints, "name") == []

    def test_null_skips_other_constraints(self, validator, parse):
        # [Regex] would raise for a non-string value if it were run
        constraints = parse("[Regex(x)][Null]", STRING)
        assert validator.get_validation_result(None, STRING, constraints, "name") == []


class TestAggregation:
    def test_valid_value(self, validator, parse):
        constraints = parse("[MinValue(40)]", INT32)
        assert validator.get_validation_result(40, INT32, constraints, "age") == []

    def test_single_failure(self, validator, parse):
        constraints = parse("[MinValue(40)]", INT32)
        results = validator.get_validation_result(39, INT32, constraints, "age")
        assert [r.code for r in results] == [ErrorCode.VALUE_TOO_SMALL]

    def test_results_of_all_constraints_in_order(self, validator, parse):
        constraints = parse("[MinLength(5)][Uppercase][Regex('^[0-9]+$')]", STRING)
        results = validator.get_validation_result("abc", STRING, constraints, "code")
        assert [r.code for r in results] == [
            ErrorCode.TOO_SHORT,
            ErrorCode.NOT_UPPERCASE,
            ErrorCode.PATTERN_MISMATCH,
        ]

    def test_flags(self, validator, parse):
        constraints = parse("[Values(Int32,Flags,A=1,B=2)]", ParameterDataType.ENUM)
        assert validator.is_valid(3, ParameterDataType.ENUM, constraints, "f")
        results = validator.get_validation_result(4, ParameterDataType.ENUM, constraints, "f")
        assert [r.code for r in results] == [ErrorCode.INVALID_FLAGS]

    def test_display_name_reaches_constraints(self, validator, parse):
        constraints = parse("[MaxLength(2)]", STRING)
        results = validator.get_validation_result("abc", STRING, constraints, "code", "Country code")
        assert "'Country code'" in results[0].message

    def test_constraint_errors_propagate(self, validator, parse):
        constraints = parse("[MaxLength(2)]", STRING)
        with pytest.raises(InvalidDataTypeError):
            validator.get_validation_result(5, INT32, constraints, "code")


class TestArguments:
    def test_none_data_type(self, validator):
        with pytest.raises(InvalidArgumentError):
            validator.get_validation_result(1, ParameterDataType.NONE, [], "n")

    @pytest.mark.parametrize("member", ["", "  "])
    def test_blank_member_name(self, validator, member):
        with pytest.raises(InvalidArgumentError):
            validator.get_validation_result(1, INT32, [], member)


class TestValidate:
    def test_is_valid(self, validator, parse):
        constraints = parse("[MaxValue(10)]", INT32)
        assert validator.is_valid(10, INT32, constraints, "n")
        assert not validator.is_valid(11, INT32, constraints, "n")

    def test_validate_passes_silently(self, validator, parse):
        validator.validate(5, INT32, parse("[MaxValue(10)]", INT32), "n")

    def test_validate_raises_with_results(self, validator, parse):
        constraints = parse("[MinLength(5)][Uppercase]", STRING)
        with pytest.raises(ParameterValidationError) as exc_info:
            validator.validate("abc", STRING, constraints, "code")
        assert len(exc_info.value.results) == 2
        assert "code" in str(exc_info.value)


class TestListeners:
    def test_validating_listener_sees_every_call(self, validator, parse):
        events: list[ValidationEvent] = []
        validator.add_validating_listener(events.append)
        constraints = parse("[MaxValue(10)]", INT32)

        validator.get_validation_result(5, INT32, constraints, "n", "Number")

        assert len(events) == 1
        event = events[0]
        assert event.value == 5
        assert event.data_type == INT32
        assert event.member_name == "n"
        assert event.display_name == "Number"
        assert event.constraints == tuple(constraints)
        assert event.results == ()

    def test_error_listener_only_on_failure(self, validator, parse):
        events: list[ValidationEvent] = []
        validator.add_error_listener(events.append)
        constraints = parse("[MaxValue(10)]", INT32)

        validator.get_validation_result(5, INT32, constraints, "n")
        assert events == []

        results = validator.get_validation_result(11, INT32, constraints, "n")
        assert len(events) == 1
        assert events[0].results == tuple(results)

    def test_error_listener_sees_null_result(self, validator):
        events: list[ValidationEvent] = []
        validator.add_error_listener(events.append)
        validator.get_validation_result(None, INT32, [], "n")
        assert events[0].results[0].code == ErrorCode.NULL_NOT_ALLOWED

    def test_listeners_called_in_order(self, validator):
        order = []
        validator.add_validating_listener(lambda e: order.append("first"))
        validator.add_validating_listener(lambda e: order.append("second"))
        validator.get_validation_result(1, INT32, [], "n")
        assert order == ["first", "second"]

    def test_remove_listeners(self, validator):
        events = []
        validating = events.append
        error = events.append
        validator.add_validating_listener(validating)
        validator.add_error_listener(error)
        validator.remove_validating_listener(validating)
        validator.remove_error_listener(error)
        validator.get_validation_result(None, INT32, [], "n")
        assert events == []

    def test_listener_exception_propagates(self, validator):
        def failing(event):
            raise RuntimeError("listener failed")

        validator.add_validating_listener(failing)
        with pytest.raises(RuntimeError):
            validator.get_validation_result(1, INT32, [], "n")


class TestDefaultValidator:
    def test_default_is_shared(self):
        assert ParameterValidator.default() is ParameterValidator.default()
