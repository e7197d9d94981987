"""Built-in constraints.

Each class corresponds to one well-known name of the constraint string
grammar (see ``ConstraintNames``).
"""

from paramvalidation.validation.constraints.base import (
    Constraint,
    ConstraintNames,
    quote_parameter,
)
from paramvalidation.validation.constraints.enums import (
    EnumTypeConstraint,
    EnumValuesConstraint,
    TypeConstraint,
)
from paramvalidation.validation.constraints.length import (
    LengthConstraint,
    MaximumLengthConstraint,
    MinimumLengthConstraint,
)
from paramvalidation.validation.constraints.markers import (
    DatabaseConstraint,
    DecimalPlacesConstraint,
    DisplayHintConstraint,
    EncryptedConstraint,
    NullConstraint,
    PasswordConstraint,
    ReadOnlyConstraint,
)
from paramvalidation.validation.constraints.network import (
    AllowedSchemeConstraint,
    EndpointConstraint,
    HostNameConstraint,
)
from paramvalidation.validation.constraints.range import (
    MaximumValueConstraint,
    MinimumValueConstraint,
    StepConstraint,
)
from paramvalidation.validation.constraints.text import (
    CharacterSet,
    CharacterSetConstraint,
    FileNameConstraint,
    LowercaseConstraint,
    PathConstraint,
    RegexConstraint,
    UppercaseConstraint,
)

__all__ = [
    "AllowedSchemeConstraint",
    "CharacterSet",
    "CharacterSetConstraint",
    "Constraint",
    "ConstraintNames",
    "DatabaseConstraint",
    "DecimalPlacesConstraint",
    "DisplayHintConstraint",
    "EncryptedConstraint",
    "EndpointConstraint",
    "EnumTypeConstraint",
    "EnumValuesConstraint",
    "FileNameConstraint",
    "HostNameConstraint",
    "LengthConstraint",
    "LowercaseConstraint",
    "MaximumLengthConstraint",
    "MaximumValueConstraint",
    "MinimumLengthConstraint",
    "MinimumValueConstraint",
    "NullConstraint",
    "PasswordConstraint",
    "PathConstraint",
    "ReadOnlyConstraint",
    "RegexConstraint",
    "StepConstraint",
    "TypeConstraint",
    "UppercaseConstraint",
    "quote_parameter",
]
