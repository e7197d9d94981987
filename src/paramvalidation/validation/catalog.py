"""Constraint catalog: creates constraint instances by name and data type.

The catalog knows the well-known constraint names and which data types
each applies to. Names it cannot serve are offered to resolvers, which
are callables registered by the application:

    def resolve_custom(name: str, data_type: ParameterDataType) -> Constraint | None:
        if name == "Iban":
            return IbanConstraint()
        return None

    catalog = ConstraintCatalog()
    catalog.add_resolver(resolve_custom)

Resolvers run in registration order; the first non-None result wins.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import ClassVar

from paramvalidation.core.types import ParameterDataType
from paramvalidation.errors import (
    ConstraintNotSupportedError,
    InvalidArgumentError,
    UnknownConstraintError,
)
from paramvalidation.validation.constraints import (
    AllowedSchemeConstraint,
    CharacterSetConstraint,
    Constraint,
    ConstraintNames,
    DatabaseConstraint,
    DecimalPlacesConstraint,
    DisplayHintConstraint,
    EncryptedConstraint,
    EndpointConstraint,
    EnumTypeConstraint,
    EnumValuesConstraint,
    FileNameConstraint,
    HostNameConstraint,
    LengthConstraint,
    LowercaseConstraint,
    MaximumLengthConstraint,
    MaximumValueConstraint,
    MinimumLengthConstraint,
    MinimumValueConstraint,
    NullConstraint,
    PasswordConstraint,
    PathConstraint,
    ReadOnlyConstraint,
    RegexConstraint,
    StepConstraint,
    TypeConstraint,
    UppercaseConstraint,
)
from paramvalidation.validation.constraints.range import RANGE_TYPES, STEP_TYPES

logger = logging.getLogger(__name__)

ConstraintFactory = Callable[[ParameterDataType], Constraint]
ConstraintResolver = Callable[[str, ParameterDataType], "Constraint | None"]


@dataclass(frozen=True)
class CatalogEntry:
    """A well-known constraint name.

    Attributes:
        name: Name used in constraint strings
        factory: Creates an unconfigured instance for a data type
        data_types: Data types the constraint applies to; None for all
    """

    name: str
    factory: ConstraintFactory
    data_types: frozenset[ParameterDataType] | None = None

    def applies_to(self, data_type: ParameterDataType) -> bool:
        return self.data_types is None or data_type in self.data_types


class ConstraintCatalog:
    """Name + data type keyed factory for constraints.

    Instances are independent; ``ConstraintCatalog.default()`` returns a
    shared instance for callers that do not need their own.
    """

    _default: ClassVar[ConstraintCatalog | None] = None
    _default_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, register_builtins: bool = True):
        self._entries: dict[str, CatalogEntry] = {}
        self._resolvers: tuple[ConstraintResolver, ...] = ()
        self._lock = threading.Lock()
        if register_builtins:
            register_builtin_constraints(self)

    @classmethod
    def default(cls) -> ConstraintCatalog:
        """Get the shared catalog, creating it on first use."""
        if cls._default is None:
            with cls._default_lock:
                if cls._default is None:
                    cls._default = cls()
        return cls._default

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register(
        self,
        name: str,
        factory: ConstraintFactory,
        data_types: Iterable[ParameterDataType] | None = None,
    ) -> None:
        """Add a well-known constraint, replacing any entry with the same name.

        Args:
            name: Name used in constraint strings
            factory: Called with the data type; returns a new, unconfigured constraint
            data_types: Data types the constraint applies to (default: all)
        """
        if not name or not name.strip():
            raise InvalidArgumentError("Constraint name must not be empty")
        types = None if data_types is None else frozenset(data_types)
        if types is not None and ParameterDataType.NONE in types:
            raise InvalidArgumentError("data_types must not contain ParameterDataType.NONE")
        with self._lock:
            self._entries[name] = CatalogEntry(name, factory, types)

    def add_resolver(self, resolver: ConstraintResolver) -> None:
        """Append a resolver for names the catalog cannot serve."""
        if not callable(resolver):
            raise InvalidArgumentError("resolver must be callable")
        with self._lock:
            self._resolvers = (*self._resolvers, resolver)

    def remove_resolver(self, resolver: ConstraintResolver) -> bool:
        """Remove a resolver. Returns False if it was not registered."""
        with self._lock:
            if resolver not in self._resolvers:
                return False
            remaining = list(self._resolvers)
            remaining.remove(resolver)
            self._resolvers = tuple(remaining)
            return True

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def is_known(self, name: str) -> bool:
        return name in self._entries

    def names(self) -> list[str]:
        return sorted(self._entries)

    def entry(self, name: str) -> CatalogEntry | None:
        return self._entries.get(name)

    def create(self, name: str, data_type: ParameterDataType) -> Constraint:
        """Create an unconfigured constraint.

        Raises:
            InvalidArgumentError: If ``data_type`` is NONE
            UnknownConstraintError: If neither catalog nor resolvers know the name
            ConstraintNotSupportedError: If the name is known but not for ``data_type``
        """
        if data_type == ParameterDataType.NONE:
            raise InvalidArgumentError("data_type must not be ParameterDataType.NONE")

        entry = self._entries.get(name)
        if entry is not None and entry.applies_to(data_type):
            return entry.factory(data_type)

        for resolver in self._resolvers:
            constraint = resolver(name, data_type)
            if constraint is not None:
                logger.debug("Constraint '%s' for %s supplied by resolver %r", name, data_type, resolver)
                return constraint

        if entry is None:
            raise UnknownConstraintError(name, data_type)
        raise ConstraintNotSupportedError(name, data_type)


# =============================================================================
# Built-in constraints
# =============================================================================

_STRING = frozenset({ParameterDataType.STRING})
_LENGTH_TYPES = frozenset({ParameterDataType.BYTES, ParameterDataType.STRING, ParameterDataType.URI})


def _create_type_constraint(data_type: ParameterDataType) -> Constraint:
    if data_type == ParameterDataType.ENUM:
        return EnumTypeConstraint()
    return TypeConstraint()


def register_builtin_constraints(catalog: ConstraintCatalog) -> None:
    """Register all well-known constraint names on ``catalog``."""
    register = catalog.register

    # Any data type
    register(ConstraintNames.DATABASE, lambda _: DatabaseConstraint())
    register(ConstraintNames.DISPLAY_HINT, lambda _: DisplayHintConstraint())
    register(ConstraintNames.ENCRYPTED, lambda _: EncryptedConstraint())
    register(ConstraintNames.NULL, lambda _: NullConstraint())
    register(ConstraintNames.READ_ONLY, lambda _: ReadOnlyConstraint())

    # Strings
    register(ConstraintNames.CHARACTER_SET, lambda _: CharacterSetConstraint(), _STRING)
    register(ConstraintNames.ENDPOINT, lambda _: EndpointConstraint(), _STRING)
    register(ConstraintNames.FILE_NAME, lambda _: FileNameConstraint(), _STRING)
    register(ConstraintNames.HOST_NAME, lambda _: HostNameConstraint(), _STRING)
    register(ConstraintNames.LOWERCASE, lambda _: LowercaseConstraint(), _STRING)
    register(ConstraintNames.PASSWORD, lambda _: PasswordConstraint(), _STRING)
    register(ConstraintNames.PATH, lambda _: PathConstraint(), _STRING)
    register(ConstraintNames.REGEX, lambda _: RegexConstraint(), _STRING)
    register(ConstraintNames.UPPERCASE, lambda _: UppercaseConstraint(), _STRING)

    # Lengths
    register(
        ConstraintNames.LENGTH,
        lambda _: LengthConstraint(),
        {ParameterDataType.BYTES, ParameterDataType.STRING},
    )
    register(ConstraintNames.MAXIMUM_LENGTH, lambda _: MaximumLengthConstraint(), _LENGTH_TYPES)
    register(ConstraintNames.MINIMUM_LENGTH, lambda _: MinimumLengthConstraint(), _LENGTH_TYPES)

    # Ranges
    register(ConstraintNames.MAXIMUM_VALUE, MaximumValueConstraint, RANGE_TYPES)
    register(ConstraintNames.MINIMUM_VALUE, MinimumValueConstraint, RANGE_TYPES)
    register(ConstraintNames.STEP, StepConstraint, STEP_TYPES)
    register(
        ConstraintNames.DECIMAL_PLACES,
        lambda _: DecimalPlacesConstraint(),
        {ParameterDataType.DECIMAL},
    )

    # Enumerations, URIs, XML
    register(ConstraintNames.ENUM_VALUES, lambda _: EnumValuesConstraint(), {ParameterDataType.ENUM})
    register(
        ConstraintNames.TYPE,
        _create_type_constraint,
        {ParameterDataType.ENUM, ParameterDataType.XML},
    )
    register(ConstraintNames.ALLOWED_SCHEME, lambda _: AllowedSchemeConstraint(), {ParameterDataType.URI})
