"""Checkpoint request and response models.

Wire payloads use camelCase keys; Python attributes are snake_case.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from dodgeball.models.enums import ApiVersion, VerificationOutcome, VerificationStatus


class WireModel(BaseModel):
    """Base for models exchanged with the API."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Serialize with API key names.

        Declared fields that are None are dropped; extra keys supplied by
        the caller are sent as given, None included.
        """
        wire = self.model_dump(mode="json", by_alias=True)
        for name, field in type(self).model_fields.items():
            if getattr(self, name) is None:
                wire.pop(field.alias or name, None)
        return wire


class CheckpointEvent(WireModel):
    """Event submitted at a checkpoint. Extra keys are forwarded as-is."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    ip: str = Field(..., description="Client IP address of the end user")
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("data", mode="before")
    @classmethod
    def default_missing_data(cls, v: Any) -> Any:
        """Treat an explicit null payload as empty."""
        return {} if v is None else v


class Webhook(WireModel):
    """Callback target notified when a verification resolves."""
    url: str


class CheckpointOptions(WireModel):
    """Caller-supplied checkpoint options."""
    sync: Optional[bool] = None
    timeout: Optional[int] = Field(
        default=None,
        description="Requested resolution timeout in milliseconds",
    )
    webhook: Optional[Webhook] = None


class CheckpointResponseOptions(WireModel):
    """Options envelope sent with a checkpoint submission."""
    sync: bool = True
    timeout: int
    webhook: Optional[Webhook] = None


class ApiError(WireModel):
    """Error reported by the API or synthesized by the client."""
    code: int
    message: str


class Verification(WireModel):
    """Snapshot of a server-side verification."""
    id: str
    status: Optional[VerificationStatus] = None
    outcome: Optional[VerificationOutcome] = None


class CheckpointResponse(WireModel):
    """
    Result of a checkpoint call.

    When ``success`` is true a verification is present. When it is false,
    ``errors`` or ``is_timeout`` explains why.
    """

    success: bool = False
    errors: list[ApiError] = Field(default_factory=list)
    version: ApiVersion = ApiVersion.v1
    verification: Optional[Verification] = None
    is_timeout: bool = False

    @property
    def status(self) -> Optional[VerificationStatus]:
        return self.verification.status if self.verification else None

    @property
    def outcome(self) -> Optional[VerificationOutcome]:
        return self.verification.outcome if self.verification else None


class TrackEvent(WireModel):
    """Event recorded without requesting a decision."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    type: str
    ip: Optional[str] = None
    data: dict[str, Any] = Field(default_factory=dict)
    event_time: Optional[int] = Field(
        default=None,
        description="Event time as epoch milliseconds",
    )

    @field_validator("data", mode="before")
    @classmethod
    def default_missing_data(cls, v: Any) -> Any:
        return {} if v is None else v


class TrackResponse(WireModel):
    """Result of recording a tracked event."""
    success: bool = False
    errors: list[ApiError] = Field(default_factory=list)
    version: ApiVersion = ApiVersion.v1
