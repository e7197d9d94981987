"""Parameter validation.

This package turns constraint strings into constraint objects and applies
them to values:
- ConstraintParser: ``"[Null][MaxLength(255)]"`` -> list of constraints
- ConstraintCatalog: creates constraints by name and data type
- ParameterValidator: runs a value against a constraint list

Usage:
    from paramvalidation.validation import ConstraintParser, ParameterValidator
    from paramvalidation.core.types import ParameterDataType

    constraints = ConstraintParser().parse("[MinValue(1)][MaxValue(10)]", ParameterDataType.INT32)
    results = ParameterValidator().get_validation_result(
        12, ParameterDataType.INT32, constraints, "retries"
    )
"""

from paramvalidation.validation.types import ErrorCode, ValidationResult
from paramvalidation.validation.constraints import (
    CharacterSet,
    Constraint,
    ConstraintNames,
    quote_parameter,
)
from paramvalidation.validation.catalog import (
    CatalogEntry,
    ConstraintCatalog,
    ConstraintFactory,
    ConstraintResolver,
    register_builtin_constraints,
)
from paramvalidation.validation.parser import ConstraintParser
from paramvalidation.validation.validator import (
    ParameterValidator,
    ValidationEvent,
    ValidationListener,
)

__all__ = [
    # Types
    "ErrorCode",
    "ValidationResult",
    # Constraints
    "CharacterSet",
    "Constraint",
    "ConstraintNames",
    "quote_parameter",
    # Catalog
    "CatalogEntry",
    "ConstraintCatalog",
    "ConstraintFactory",
    "ConstraintResolver",
    "register_builtin_constraints",
    # Parser
    "ConstraintParser",
    # Validator
    "ParameterValidator",
    "ValidationEvent",
    "ValidationListener",
]
