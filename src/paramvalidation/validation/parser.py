"""Parser for constraint strings.

Turns ``[MinValue(10)][MaxValue(20)]`` into a list of configured constraint
instances, and renders constraint lists back to text.

Grammar:
    constraints := (' '* constraint)* ' '*
    constraint  := '[' name ('(' ' '* param (',' ' '* param)* ' '* ')')? ']'
    param       := quoted | unquoted
    quoted      := "'" (any character | "''")* "'"
    unquoted    := characters except [ ] ( ) ' , and space

The scanner is a single pass over the characters driven by six regions
(see ``_Region``). Every syntax error carries the 0-based offset of the
offending character; an unterminated constraint reports the offset of its
opening bracket.

Usage:
    parser = ConstraintParser()
    constraints = parser.parse("[Null][MaxLength(255)]", ParameterDataType.STRING)
    text = ConstraintParser.concat_constraints(constraints)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import ClassVar

from paramvalidation.core.types import ParameterDataType
from paramvalidation.errors import (
    ConstraintConfigurationError,
    ConstraintDefinitionError,
    ConstraintParserError,
    ConstraintSyntaxError,
    InvalidArgumentError,
    ParameterConversionError,
)
from paramvalidation.validation.catalog import ConstraintCatalog
from paramvalidation.validation.constraints.base import Constraint, ConstraintNames

logger = logging.getLogger(__name__)


class _Region(Enum):
    """Where the scanner currently is within the constraint string."""

    OUTSIDE_CONSTRAINT = auto()  # between constraints
    IN_CONSTRAINT = auto()       # scanning the name after '['
    IN_PARAMETERS = auto()       # after '(' or ',', expecting a parameter
    IN_PARAMETER = auto()        # scanning one parameter
    AFTER_PARAMETER = auto()     # parameter done, expecting ',' or ')'
    AFTER_PARAMETERS = auto()    # after ')', expecting ']'


@dataclass
class _ParserContext:
    """Scanner state for one parse() call."""

    text: str
    data_type: ParameterDataType
    region: _Region = _Region.OUTSIDE_CONSTRAINT
    position: int = -1
    constraint_start: int = -1
    name: str = ""
    parameters: list[str] = field(default_factory=list)
    current: list[str] = field(default_factory=list)
    masked: bool = False
    constraints: list[Constraint] = field(default_factory=list)

    @property
    def char(self) -> str:
        return self.text[self.position]

    def advance(self) -> bool:
        self.position += 1
        return self.position < len(self.text)

    def next_is_quote(self) -> bool:
        following = self.position + 1
        return following < len(self.text) and self.text[following] == "'"

    def append_char(self) -> None:
        self.current.append(self.char)

    def end_parameter(self, keep_empty: bool = False) -> None:
        if self.current or keep_empty:
            self.parameters.append("".join(self.current))
        self.current.clear()
        self.masked = False

    def reset_constraint(self) -> None:
        self.region = _Region.OUTSIDE_CONSTRAINT
        self.constraint_start = -1
        self.name = ""
        self.parameters = []
        self.current.clear()
        self.masked = False


class ConstraintParser:
    """Converts constraint strings to constraint lists and back.

    Constraint names are looked up in a ``ConstraintCatalog``; pass one to
    use custom registrations or resolvers.
    """

    _default: ClassVar[ConstraintParser | None] = None
    _default_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, catalog: ConstraintCatalog | None = None):
        self.catalog = catalog if catalog is not None else ConstraintCatalog.default()
        self._handlers: dict[_Region, Callable[[_ParserContext], None]] = {
            _Region.OUTSIDE_CONSTRAINT: self._handle_outside_constraint,
            _Region.IN_CONSTRAINT: self._handle_in_constraint,
            _Region.IN_PARAMETERS: self._handle_in_parameters,
            _Region.IN_PARAMETER: self._handle_in_parameter,
            _Region.AFTER_PARAMETER: self._handle_after_parameter,
            _Region.AFTER_PARAMETERS: self._handle_after_parameters,
        }

    @classmethod
    def default(cls) -> ConstraintParser:
        """Get a shared parser over the default catalog."""
        if cls._default is None:
            with cls._default_lock:
                if cls._default is None:
                    cls._default = cls()
        return cls._default

    # =========================================================================
    # Parsing
    # =========================================================================

    def parse(self, text: str | None, data_type: ParameterDataType) -> list[Constraint]:
        """Parse a constraint string.

        Args:
            text: The constraint string; None or blank yields an empty list
            data_type: Data type of the parameter the constraints apply to

        Returns:
            The configured constraints, in source order

        Raises:
            InvalidArgumentError: If ``data_type`` is NONE
            ConstraintSyntaxError: If the text is malformed
            UnknownConstraintError: If a constraint name is unknown
            ConstraintDefinitionError: If a constraint cannot be configured as written
        """
        if data_type == ParameterDataType.NONE:
            raise InvalidArgumentError("data_type must not be ParameterDataType.NONE")
        if text is None or not text.strip():
            return []

        context = _ParserContext(text, data_type)
        while context.advance():
            self._handlers[context.region](context)

        if context.region != _Region.OUTSIDE_CONSTRAINT:
            # Reported at the opening bracket, wherever scanning stopped
            raise ConstraintSyntaxError("Constraint is not terminated", context.constraint_start)

        logger.debug("Parsed %d constraint(s) for %s from %r", len(context.constraints), data_type, text)
        return context.constraints

    def _handle_outside_constraint(self, context: _ParserContext) -> None:
        char = context.char
        if char == " ":
            return
        if char == "[":
            context.region = _Region.IN_CONSTRAINT
            context.constraint_start = context.position
            return
        raise ConstraintSyntaxError(
            f"Unexpected character {char!r} outside of a constraint", context.position
        )

    def _handle_in_constraint(self, context: _ParserContext) -> None:
        char = context.char
        if char in " '[)":
            raise ConstraintSyntaxError(
                f"Invalid character {char!r} in constraint name", context.position
            )
        if char not in "](":
            return

        name_start = context.constraint_start + 1
        if context.position == name_start:
            raise ConstraintSyntaxError("Constraint name is missing", context.position)
        context.name = context.text[name_start:context.position]
        if char == "]":
            self._add_constraint(context)
        else:
            context.region = _Region.IN_PARAMETERS

    def _handle_in_parameters(self, context: _ParserContext) -> None:
        char = context.char
        if char == " ":
            return
        if char in ",[](":
            raise ConstraintSyntaxError(
                f"Unexpected character {char!r} in parameter list", context.position
            )
        if char == ")":
            context.region = _Region.AFTER_PARAMETERS
        elif char == "'":
            context.masked = True
            context.region = _Region.IN_PARAMETER
        else:
            context.region = _Region.IN_PARAMETER
            context.append_char()

    def _handle_in_parameter(self, context: _ParserContext) -> None:
        char = context.char
        if context.masked:
            if char != "'":
                context.append_char()
            elif context.next_is_quote():
                # '' inside quotes is a literal quote
                context.append_char()
                context.position += 1
            else:
                context.end_parameter(keep_empty=True)
                context.region = _Region.AFTER_PARAMETER
            return

        if char == " ":
            context.end_parameter()
            context.region = _Region.AFTER_PARAMETER
        elif char == ",":
            context.end_parameter()
            context.region = _Region.IN_PARAMETERS
        elif char == ")":
            context.end_parameter()
            context.region = _Region.AFTER_PARAMETERS
        elif char in "[]('":
            raise ConstraintSyntaxError(
                f"Character {char!r} must be quoted inside a parameter", context.position
            )
        else:
            context.append_char()

    def _handle_after_parameter(self, context: _ParserContext) -> None:
        char = context.char
        if char == " ":
            return
        if char == ",":
            context.region = _Region.IN_PARAMETERS
        elif char == ")":
            context.region = _Region.AFTER_PARAMETERS
        else:
            raise ConstraintSyntaxError(
                f"Unexpected character {char!r} after parameter", context.position
            )

    def _handle_after_parameters(self, context: _ParserContext) -> None:
        if context.char != "]":
            raise ConstraintSyntaxError(
                f"Expected ']' but found {context.char!r}", context.position
            )
        self._add_constraint(context)

    def _add_constraint(self, context: _ParserContext) -> None:
        context.constraints.append(
            self._create_constraint(
                context.name, context.parameters, context.data_type, context.constraint_start
            )
        )
        context.reset_constraint()

    def _create_constraint(
        self,
        name: str,
        parameters: Sequence[str],
        data_type: ParameterDataType,
        position: int,
    ) -> Constraint:
        try:
            constraint = self.catalog.create(name, data_type)
        except ConstraintParserError as exc:
            exc.position = position
            raise
        try:
            constraint.set_parameters(list(parameters), data_type)
        except (ConstraintConfigurationError, ParameterConversionError, InvalidArgumentError) as exc:
            raise ConstraintDefinitionError(
                f"Parameters of constraint '{name}' are invalid: {exc}", name, position
            ) from exc
        return constraint

    # =========================================================================
    # Rendering
    # =========================================================================

    @staticmethod
    def concat_constraints(constraints: Sequence[Constraint] | None) -> str | None:
        """Render constraints as a constraint string.

        ``[Null]`` constraints come first, then ``[Encrypted]``, then the rest
        in their original order.

        Returns:
            The constraint string, or None if ``constraints`` is None
        """
        if constraints is None:
            return None
        nulls: list[str] = []
        encrypted: list[str] = []
        others: list[str] = []
        for constraint in constraints:
            if constraint.name == ConstraintNames.NULL:
                nulls.append(str(constraint))
            elif constraint.name == ConstraintNames.ENCRYPTED:
                encrypted.append(str(constraint))
            else:
                others.append(str(constraint))
        return "".join(nulls + encrypted + others)
