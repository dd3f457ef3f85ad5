"""
Dodgeball Client

Public entry point of the SDK:
- Configuration validation at construction
- ``checkpoint`` for decisions, resolved synchronously by polling
- ``event`` for fire-and-record tracking
- Outcome predicates over checkpoint responses
"""

import logging
from typing import Any, Optional, Union

import httpx
from pydantic import ValidationError
from pydantic.alias_generators import to_snake

from dodgeball.config import (
    DodgeballSettings,
    ResolutionConfig,
    get_settings,
)
from dodgeball.errors import (
    DodgeballInvalidConfigError,
    DodgeballMissingConfigError,
    DodgeballMissingParameterError,
)
from dodgeball.logger import ClientLogger, LogLevel
from dodgeball.models.checkpoint import (
    ApiError,
    CheckpointEvent,
    CheckpointOptions,
    CheckpointResponse,
    TrackEvent,
    TrackResponse,
)
from dodgeball.models.enums import ApiVersion, CheckpointOutcome
from dodgeball.transport.builder import construct_api_headers, construct_api_url
from dodgeball.transport.client import HttpTransport, TransportError
from dodgeball.verification import classifier
from dodgeball.verification.engine import ResolutionEngine, validate_parameter


class Dodgeball:
    """
    Dodgeball API client.

    Usage::

        async with Dodgeball("secret-key") as dodgeball:
            response = await dodgeball.checkpoint(
                checkpoint_name="PAYMENT",
                event={"ip": "127.0.0.1", "data": {"amount": 100}},
                session_id="session-id",
            )
            if dodgeball.is_allowed(response):
                ...
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        config: Union[DodgeballSettings, dict[str, Any], None] = None,
        resolution_config: Optional[ResolutionConfig] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        defaults = get_settings()
        self.secret_key = secret_key or defaults.secret_key
        if not self.secret_key:
            raise DodgeballMissingConfigError("secretApiKey", secret_key)

        self.config = self._merge_config(defaults, config)
        self._validate_config(self.config)

        self.logger = ClientLogger(
            logging.getLogger("dodgeball"),
            threshold=LogLevel(self.config.log_level),
        )
        self.transport = HttpTransport(
            timeout=self.config.http_timeout_seconds,
            logger=self.logger.child("transport"),
            transport=http_transport,
        )
        self.engine = ResolutionEngine(
            self.secret_key,
            self.config,
            self.transport,
            config=resolution_config,
            logger=self.logger.child("verification"),
        )

    @staticmethod
    def _merge_config(
        defaults: DodgeballSettings,
        config: Union[DodgeballSettings, dict[str, Any], None],
    ) -> DodgeballSettings:
        if config is None:
            return defaults.model_copy()
        if isinstance(config, DodgeballSettings):
            return config.model_copy()
        overrides = {to_snake(key): value for key, value in config.items()}
        try:
            return DodgeballSettings.model_validate({**defaults.model_dump(), **overrides})
        except ValidationError as e:
            error = e.errors()[0]
            field = ".".join(str(p) for p in error["loc"])
            raise DodgeballInvalidConfigError(f"config.{field}", error.get("input")) from e

    @staticmethod
    def _validate_config(config: DodgeballSettings) -> None:
        versions = [v.value for v in ApiVersion]
        if config.api_version not in versions:
            raise DodgeballInvalidConfigError("config.apiVersion", config.api_version, versions)

        levels = [level.value for level in LogLevel]
        if config.log_level not in levels:
            raise DodgeballInvalidConfigError("config.logLevel", config.log_level, levels)

    async def close(self) -> None:
        """Release the underlying HTTP client."""
        await self.transport.close()

    async def __aenter__(self) -> "Dodgeball":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ----- Checkpoints -----

    async def checkpoint(
        self,
        *,
        checkpoint_name: Optional[str] = None,
        event: Union[CheckpointEvent, dict[str, Any], None] = None,
        session_id: Optional[str] = None,
        source_token: Optional[str] = "",
        user_id: Optional[str] = "",
        use_verification_id: Optional[str] = "",
        options: Union[CheckpointOptions, dict[str, Any], None] = None,
    ) -> CheckpointResponse:
        """
        Submit a checkpoint and wait for its verification to resolve.

        Args:
            checkpoint_name: Name of the checkpoint to run
            event: Event payload; must include ``ip``
            session_id: Session identifier of the end user
            source_token: Client-side source token
            user_id: Customer identifier of the end user
            use_verification_id: Earlier verification to reuse
            options: ``sync``, ``timeout`` (ms) and ``webhook``

        Returns:
            CheckpointResponse; network failures are reported in the
            response rather than raised.

        Raises:
            DodgeballMissingParameterError: a required argument is missing
        """
        return await self.engine.checkpoint(
            checkpoint_name=checkpoint_name,
            event=event,
            session_id=session_id,
            source_token=source_token,
            user_id=user_id,
            use_verification_id=use_verification_id,
            options=options,
        )

    # ----- Tracking -----

    async def event(
        self,
        *,
        event: Union[TrackEvent, dict[str, Any], None] = None,
        session_id: Optional[str] = None,
        source_token: Optional[str] = "",
        user_id: Optional[str] = "",
    ) -> TrackResponse:
        """
        Record an event without requesting a decision.

        A single attempt is made; failures are logged and returned as an
        unsuccessful TrackResponse.
        """
        if event is None:
            raise DodgeballMissingParameterError("event", event)
        if isinstance(event, dict):
            if event.get("type") is None:
                raise DodgeballMissingParameterError("event.type", event.get("type"))
            event = validate_parameter(TrackEvent, event, "event")
        if session_id is None:
            raise DodgeballMissingParameterError("sessionId", session_id)

        if not self.config.is_enabled:
            return TrackResponse(success=True, errors=[], version=ApiVersion.v1)

        result = await self.transport.request(
            "POST",
            f"{construct_api_url(self.config.api_url, self.config.api_version)}track",
            construct_api_headers(self.secret_key, "", source_token, user_id, session_id),
            json=event.to_wire(),
        )

        if isinstance(result, TransportError):
            return TrackResponse(
                success=False,
                errors=[ApiError(code=result.status_code or 500, message=result.message)],
            )
        try:
            return TrackResponse.model_validate(result)
        except ValidationError as e:
            self.logger.error("Unrecognized track response: %s", e)
            return TrackResponse(
                success=False,
                errors=[ApiError(code=500, message="Unknown tracking error")],
            )

    # ----- Outcome predicates -----

    def classify(self, checkpoint_response: CheckpointResponse) -> CheckpointOutcome:
        return classifier.classify(checkpoint_response)

    def is_running(self, checkpoint_response: CheckpointResponse) -> bool:
        return classifier.is_running(checkpoint_response)

    def is_allowed(self, checkpoint_response: CheckpointResponse) -> bool:
        return classifier.is_allowed(checkpoint_response)

    def is_denied(self, checkpoint_response: CheckpointResponse) -> bool:
        return classifier.is_denied(checkpoint_response)

    def is_undecided(self, checkpoint_response: CheckpointResponse) -> bool:
        return classifier.is_undecided(checkpoint_response)

    def has_error(self, checkpoint_response: CheckpointResponse) -> bool:
        return classifier.has_error(checkpoint_response)

    def is_timeout(self, checkpoint_response: CheckpointResponse) -> bool:
        return classifier.is_timeout(checkpoint_response)
