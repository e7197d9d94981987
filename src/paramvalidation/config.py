"""Runtime configuration and catalog factory."""

from __future__ import annotations

import importlib
import logging
import os
from dataclasses import dataclass, field

from paramvalidation.errors import InvalidArgumentError
from paramvalidation.validation.catalog import ConstraintCatalog, ConstraintResolver

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass
class ValidationConfig:
    """Validation configuration.

    ``resolvers`` holds ``module:function`` references to constraint
    resolvers, registered in order by ``create_catalog``.
    """

    log_level: str = "WARNING"
    resolvers: list[str] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> ValidationConfig:
        """Create config from environment variables.

        - PARAMVALIDATION_LOG_LEVEL: logging level name (default WARNING)
        - PARAMVALIDATION_RESOLVERS: comma-separated ``module:function`` list
        """
        log_level = os.environ.get("PARAMVALIDATION_LOG_LEVEL", "WARNING").strip().upper()
        if log_level not in _LOG_LEVELS:
            raise InvalidArgumentError(
                f"PARAMVALIDATION_LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}, got '{log_level}'"
            )

        raw = os.environ.get("PARAMVALIDATION_RESOLVERS", "")
        resolvers = [ref.strip() for ref in raw.split(",") if ref.strip()]
        return cls(log_level=log_level, resolvers=resolvers)

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level)


def load_resolver(reference: str) -> ConstraintResolver:
    """Import a resolver from a ``module:function`` reference.

    Raises:
        InvalidArgumentError: If the reference is malformed, cannot be
            imported, or does not name a callable
    """
    module_name, sep, attribute = reference.partition(":")
    if not sep or not module_name or not attribute:
        raise InvalidArgumentError(f"Resolver reference '{reference}' must be 'module:function'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise InvalidArgumentError(f"Cannot import resolver module '{module_name}': {exc}") from exc

    resolver = getattr(module, attribute, None)
    if resolver is None or not callable(resolver):
        raise InvalidArgumentError(f"'{reference}' is not a callable resolver")
    return resolver


def create_catalog(config: ValidationConfig) -> ConstraintCatalog:
    """Create a catalog with the configured resolvers registered.

    Args:
        config: Validation configuration.

    Returns:
        A new ConstraintCatalog with built-in constraints and resolvers.
    """
    catalog = ConstraintCatalog()
    for reference in config.resolvers:
        catalog.add_resolver(load_resolver(reference))
        logger.debug("Registered constraint resolver %s", reference)
    return catalog
