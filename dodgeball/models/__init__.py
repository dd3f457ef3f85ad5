"""
Data models for the Dodgeball SDK.

Enums and pydantic wire models shared by the transport, the resolution
engine and the public client.
"""

from dodgeball.models.enums import (
    ApiVersion,
    VerificationStatus,
    VerificationOutcome,
    CheckpointOutcome,
)
from dodgeball.models.checkpoint import (
    ApiError,
    CheckpointEvent,
    CheckpointOptions,
    CheckpointResponse,
    CheckpointResponseOptions,
    TrackEvent,
    TrackResponse,
    Verification,
    Webhook,
)

__all__ = [
    # Enums
    "ApiVersion",
    "VerificationStatus",
    "VerificationOutcome",
    "CheckpointOutcome",
    # Checkpoint
    "ApiError",
    "CheckpointEvent",
    "CheckpointOptions",
    "CheckpointResponse",
    "CheckpointResponseOptions",
    "Verification",
    "Webhook",
    # Track
    "TrackEvent",
    "TrackResponse",
]
