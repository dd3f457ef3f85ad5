"""Dodgeball trust SDK: checkpoint verification client."""

from dodgeball.client import Dodgeball
from dodgeball.config import DodgeballSettings, ResolutionConfig
from dodgeball.errors import (
    DodgeballError,
    DodgeballInvalidConfigError,
    DodgeballMissingConfigError,
    DodgeballMissingParameterError,
)
from dodgeball.logger import LogLevel
from dodgeball.models import (
    ApiVersion,
    CheckpointOutcome,
    CheckpointResponse,
    VerificationOutcome,
    VerificationStatus,
)

__all__ = [
    "ApiVersion",
    "CheckpointOutcome",
    "CheckpointResponse",
    "Dodgeball",
    "DodgeballError",
    "DodgeballInvalidConfigError",
    "DodgeballMissingConfigError",
    "DodgeballMissingParameterError",
    "DodgeballSettings",
    "LogLevel",
    "ResolutionConfig",
    "VerificationOutcome",
    "VerificationStatus",
]
