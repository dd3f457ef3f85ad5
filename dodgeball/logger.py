"""
Client Logger

Per-client severity filtering on top of the standard ``logging`` module.
Each ``Dodgeball`` instance owns its own ``ClientLogger`` so that two
clients configured with different levels never affect each other.
"""

import logging
from enum import Enum
from typing import Any, MutableMapping, Optional


class LogLevel(str, Enum):
    """Recognized client log levels."""
    TRACE = "TRACE"
    INFO = "INFO"
    ERROR = "ERROR"

    @property
    def severity(self) -> int:
        """Equivalent standard library logging level."""
        return _SEVERITY[self]


_SEVERITY: dict[LogLevel, int] = {
    LogLevel.TRACE: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.ERROR: logging.ERROR,
}


class ClientLogger(logging.LoggerAdapter):
    """
    Logger adapter with an instance-level severity threshold.

    Records below ``threshold`` are dropped before they reach the
    underlying logger; handlers and propagation stay under the
    application's control.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        threshold: LogLevel = LogLevel.INFO,
        extra: Optional[dict[str, Any]] = None,
    ):
        super().__init__(logger or logging.getLogger("dodgeball"), extra or {})
        self.threshold = threshold

    def isEnabledFor(self, level: int) -> bool:
        if level < self.threshold.severity:
            return False
        return self.logger.isEnabledFor(level)

    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log at TRACE (``logging.DEBUG``) severity."""
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def child(self, suffix: str) -> "ClientLogger":
        """Adapter for a child logger sharing this threshold."""
        return ClientLogger(self.logger.getChild(suffix), self.threshold, dict(self.extra or {}))

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        if self.extra:
            kwargs.setdefault("extra", {}).update(self.extra)
        return msg, kwargs
