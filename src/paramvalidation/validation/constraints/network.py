"""Host names, endpoints and URI schemes."""

from __future__ import annotations

import ipaddress
import re
from collections.abc import Sequence
from urllib.parse import SplitResult, urlsplit

from paramvalidation.core.types import ParameterDataType
from paramvalidation.errors import InvalidArgumentError, ValueNotConvertibleError
from paramvalidation.validation.constraints.base import Constraint, ConstraintNames
from paramvalidation.validation.types import ErrorCode

_LABEL = re.compile(r"^[A-Za-z0-9]([A-Za-z0-9-]{0,61}[A-Za-z0-9])?$")

MAX_PORT = 65535


def is_host_name(text: str) -> bool:
    """Check for a DNS name or an IPv4/IPv6 literal (IPv6 optionally in brackets)."""
    if not text or text != text.strip():
        return False
    bracketed = text.startswith("[") and text.endswith("]")
    try:
        ipaddress.ip_address(text[1:-1] if bracketed else text)
        return True
    except ValueError:
        if bracketed:
            return False
    name = text[:-1] if text.endswith(".") else text
    if not name or len(name) > 253:
        return False
    return all(_LABEL.match(label) for label in name.split("."))


def split_endpoint(text: str) -> tuple[str, str | None]:
    """Split ``host[:port]`` into host and port text.

    Bracketed IPv6 hosts may carry a port (``[::1]:8080``); a bare IPv6
    literal is taken as a host without port.
    """
    if text.startswith("["):
        end = text.find("]")
        if end != -1 and text[end + 1:].startswith(":"):
            return text[: end + 1], text[end + 2:]
        return text, None
    if text.count(":") == 1:
        host, port = text.split(":")
        return host, port
    return text, None


def _require_text(value) -> str:
    if not isinstance(value, str):
        raise ValueNotConvertibleError(value, "a string")
    return value


class HostNameConstraint(Constraint):
    """``[Host]``: a DNS host name or IP address, without port."""

    def __init__(self):
        super().__init__(ConstraintNames.HOST_NAME)

    def _on_validation(self, results, value, data_type, member_name, display_name) -> None:
        self._assert_data_type(data_type, ParameterDataType.STRING)
        text = _require_text(value)
        if not is_host_name(text):
            results.append(
                self._result(
                    ErrorCode.INVALID_HOST,
                    f"'{display_name}' is not a valid host name or IP address: '{text}'.",
                    member_name,
                )
            )


class EndpointConstraint(Constraint):
    """``[Endpoint]``: ``host[:port]`` with a port between 0 and 65535."""

    def __init__(self):
        super().__init__(ConstraintNames.ENDPOINT)

    def _on_validation(self, results, value, data_type, member_name, display_name) -> None:
        self._assert_data_type(data_type, ParameterDataType.STRING)
        text = _require_text(value)
        if not text.strip():
            results.append(
                self._result(
                    ErrorCode.INVALID_ENDPOINT, f"'{display_name}' must not be empty.", member_name
                )
            )
            return

        host, port = split_endpoint(text)
        if port is not None and not (
            port.isascii() and port.isdigit() and int(port) <= MAX_PORT
        ):
            results.append(
                self._result(
                    ErrorCode.INVALID_ENDPOINT,
                    f"'{display_name}' has an invalid port '{port}' for host '{host}'.",
                    member_name,
                )
            )
        if not is_host_name(host):
            results.append(
                self._result(
                    ErrorCode.INVALID_ENDPOINT,
                    f"'{display_name}' is not a valid host name or IP address: '{host}'.",
                    member_name,
                )
            )


class AllowedSchemeConstraint(Constraint):
    """``[AllowedScheme(http,https)]``: the URI scheme must be one of the list.

    Schemes compare case-insensitively.
    """

    def __init__(self, schemes: Sequence[str] | None = None):
        super().__init__(ConstraintNames.ALLOWED_SCHEME)
        self._schemes: list[str] | None = None
        if schemes is not None:
            problem = self._check_schemes(schemes)
            if problem:
                raise InvalidArgumentError(problem)
            self._schemes = list(schemes)

    @property
    def allowed_schemes(self) -> list[str]:
        return list(self._schemes or [])

    @staticmethod
    def _check_schemes(schemes: Sequence[str]) -> str | None:
        if not schemes:
            return "at least one scheme is required"
        if any(not scheme or not scheme.strip() for scheme in schemes):
            return "schemes must not be empty"
        return None

    def get_parameters(self) -> list[str]:
        return self.allowed_schemes

    def set_parameters(self, parameters: Sequence[str], data_type: ParameterDataType) -> None:
        self._check_configuration(parameters, data_type)
        self._assert_data_type(data_type, ParameterDataType.URI)
        problem = self._check_schemes(parameters)
        if problem:
            raise self._invalid_parameter(problem)
        self._schemes = list(parameters)

    def _on_validation(self, results, value, data_type, member_name, display_name) -> None:
        self._assert_data_type(data_type, ParameterDataType.URI)
        if self._schemes is None:
            raise self._invalid_parameter("no schemes configured")
        if isinstance(value, SplitResult):
            scheme = value.scheme
        elif isinstance(value, str):
            scheme = urlsplit(value).scheme
        else:
            raise ValueNotConvertibleError(value, "a URI")

        wanted = scheme.casefold()
        if not any(s.casefold() == wanted for s in self._schemes):
            results.append(
                self._result(
                    ErrorCode.SCHEME_NOT_ALLOWED,
                    f"The scheme '{scheme}' of '{display_name}' is not allowed; "
                    f"expected one of {','.join(self._schemes)}.",
                    member_name,
                )
            )
