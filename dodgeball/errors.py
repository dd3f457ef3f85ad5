"""Exception types raised for programmer errors.

Network and remote failures are never raised; they come back as
unsuccessful responses.
"""

from typing import Any, Iterable, Optional


class DodgeballError(Exception):
    """Base class for all SDK exceptions."""


class DodgeballMissingConfigError(DodgeballError):
    """Raised when a required configuration value is absent."""

    def __init__(self, config_name: str, value: Any = None):
        self.config_name = config_name
        self.value = value
        super().__init__(f"Dodgeball SDK Error\nMissing configuration: {config_name}\nProvided value: {value!r}")


class DodgeballInvalidConfigError(DodgeballError):
    """Raised when a configuration value is not one of the allowed values."""

    def __init__(
        self,
        config_name: str,
        value: Any,
        allowed_values: Optional[Iterable[str]] = None,
    ):
        self.config_name = config_name
        self.value = value
        self.allowed_values = list(allowed_values or [])
        super().__init__(
            f"Dodgeball SDK Error\nInvalid configuration: {config_name}\n"
            f"Provided value: {value!r}\nAllowed values: {', '.join(self.allowed_values)}"
        )


class DodgeballMissingParameterError(DodgeballError):
    """Raised when a required call parameter is absent or malformed."""

    def __init__(self, parameter: str, value: Any = None):
        self.parameter = parameter
        self.value = value
        super().__init__(f"Dodgeball SDK Error\nMissing parameter: {parameter}\nProvided value: {value!r}")
