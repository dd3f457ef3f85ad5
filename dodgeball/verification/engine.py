"""
Resolution Engine

Turns an asynchronous remote verification into a single checkpoint call:
    submit (bounded retry) → poll with exponential backoff → final response

Key mechanisms:
    - ``ResolutionSession`` holds all per-call mutable state, so concurrent
      checkpoints share nothing but read-only configuration.
    - Submission is retried with ``tenacity`` only while the transport
      produced no response at all.
    - Polling stops on resolution, on the caller's time bound, or after
      ``max_retry_count`` failed polls (which yields a synthesized 503).
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional, TypeVar, Union

from pydantic import BaseModel, ValidationError
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_result,
    stop_after_attempt,
)

from dodgeball.config import DodgeballSettings, ResolutionConfig, get_resolution_config
from dodgeball.errors import DodgeballMissingParameterError
from dodgeball.logger import ClientLogger
from dodgeball.models.checkpoint import (
    ApiError,
    CheckpointEvent,
    CheckpointOptions,
    CheckpointResponse,
    CheckpointResponseOptions,
    Verification,
)
from dodgeball.models.enums import ApiVersion, VerificationOutcome, VerificationStatus
from dodgeball.transport.builder import construct_api_headers, construct_api_url
from dodgeball.transport.client import HttpTransport, TransportError, TransportResult


DISABLED_VERIFICATION_ID = "DODGEBALL_IS_DISABLED"


M = TypeVar("M", bound=BaseModel)


async def _sleep(ms: int) -> None:
    await asyncio.sleep(ms / 1000)


def validate_parameter(model: type[M], value: Any, parameter: str) -> M:
    """Validate a call argument, reporting the first bad field as a missing parameter."""
    try:
        return model.model_validate(value)
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(p) for p in error["loc"])
        name = f"{parameter}.{field}" if field else parameter
        raise DodgeballMissingParameterError(name, error.get("input")) from e


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  Per-call state
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


@dataclass
class ResolutionSession:
    """Mutable state for a single checkpoint call."""

    requested_timeout: Optional[int]
    active_timeout: int
    max_timeout: int

    repeats: int = 0
    failures: int = 0
    resolved: bool = False

    trivial_timeout: bool = False
    large_timeout: bool = False

    @classmethod
    def start(
        cls,
        requested_timeout: Optional[int],
        config: ResolutionConfig,
    ) -> ResolutionSession:
        """Classify the caller's timeout and pick the initial poll interval."""
        base = config.base_timeout_ms
        trivial = requested_timeout is None or requested_timeout <= 0
        large = not trivial and requested_timeout > 5 * base
        must_poll = trivial or large
        return cls(
            requested_timeout=requested_timeout,
            active_timeout=base if must_poll else requested_timeout,
            max_timeout=config.max_timeout_ms,
            trivial_timeout=trivial,
            large_timeout=large,
        )

    @property
    def must_poll(self) -> bool:
        return self.trivial_timeout or self.large_timeout

    def within_time_bound(self) -> bool:
        if self.trivial_timeout:
            return True
        return self.requested_timeout > self.repeats * self.active_timeout

    def next_delay(self) -> int:
        """Return the current poll interval and double it, up to ``max_timeout``."""
        delay = self.active_timeout
        self.active_timeout = min(2 * delay, self.max_timeout)
        return delay


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  Synthesized responses
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def create_error_response(code: int, message: str) -> CheckpointResponse:
    """Failed response for a checkpoint that never reached the API."""
    return CheckpointResponse(
        success=False,
        errors=[ApiError(code=code, message=message)],
        version=ApiVersion.v1,
        verification=Verification(
            id="",
            status=VerificationStatus.FAILED,
            outcome=VerificationOutcome.ERROR,
        ),
    )


def create_timeout_response() -> CheckpointResponse:
    """Failed response returned once polling has used up its retries."""
    return CheckpointResponse(
        success=False,
        errors=[ApiError(code=503, message="Service Unavailable: Maximum retry count exceeded")],
        version=ApiVersion.v1,
        is_timeout=True,
    )


def create_disabled_response() -> CheckpointResponse:
    """Approved response used when the client is disabled."""
    return CheckpointResponse(
        success=True,
        errors=[],
        version=ApiVersion.v1,
        verification=Verification(
            id=DISABLED_VERIFICATION_ID,
            status=VerificationStatus.COMPLETE,
            outcome=VerificationOutcome.APPROVED,
        ),
    )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  Engine
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class ResolutionEngine:
    """Submits checkpoints and polls pending verifications to resolution.

    Parameters
    ----------
    secret_key:
        Value of the ``Dodgeball-Secret-Key`` header.
    settings:
        Validated client settings (API URL, version, enabled flag).
    transport:
        Shared ``HttpTransport``.
    config:
        ``ResolutionConfig`` with the poll quantum, ceiling and retry cap.
    logger:
        The owning client's ``ClientLogger``.
    """

    def __init__(
        self,
        secret_key: str,
        settings: DodgeballSettings,
        transport: HttpTransport,
        config: Optional[ResolutionConfig] = None,
        logger: Optional[ClientLogger] = None,
    ) -> None:
        self.secret_key = secret_key
        self.settings = settings
        self.transport = transport
        self.config = config or get_resolution_config()
        self.logger = logger or ClientLogger()

    @property
    def api_url(self) -> str:
        return construct_api_url(self.settings.api_url, self.settings.api_version)

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

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
        """Run a checkpoint to completion.

        Steps:
            1. Validate parameters (raises on programmer error)
            2. Submit, retrying while no response was produced
            3. If the verification is still pending, poll with backoff

        Returns
        -------
        CheckpointResponse
            The API's final response, a still-pending response when the
            caller's timeout ran out, or a synthesized error/timeout.
        """
        checkpoint_event = self._validate(checkpoint_name, event, session_id)
        checkpoint_options = validate_parameter(CheckpointOptions, options or {}, "options")

        if not self.settings.is_enabled:
            self.logger.info("Dodgeball is disabled; approving checkpoint %s", checkpoint_name)
            return create_disabled_response()

        session = ResolutionSession.start(checkpoint_options.timeout, self.config)
        self.logger.debug(
            "Checkpoint %s: timeout=%s must_poll=%s active_timeout=%d",
            checkpoint_name, session.requested_timeout, session.must_poll, session.active_timeout,
        )
        headers = construct_api_headers(
            self.secret_key,
            use_verification_id,
            source_token,
            user_id,
            session_id,
        )
        body = {
            "event": {"type": checkpoint_name, **checkpoint_event.to_wire()},
            "options": CheckpointResponseOptions(
                sync=True if checkpoint_options.sync is None else checkpoint_options.sync,
                timeout=session.active_timeout,
                webhook=checkpoint_options.webhook,
            ).to_wire(),
        }

        response = await self._submit_with_retry(session, headers, body)

        if response is None:
            return create_error_response(500, "Unknown evaluation error")
        if not response.success:
            return response

        if response.verification is None or response.status != VerificationStatus.PENDING:
            self.logger.trace("Returning response: %s", response)
            return response

        response = await self._poll(session, response, headers)
        self.logger.trace("Returning response: %s", response)
        return response

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    @staticmethod
    def _validate(
        checkpoint_name: Optional[str],
        event: Union[CheckpointEvent, dict[str, Any], None],
        session_id: Optional[str],
    ) -> CheckpointEvent:
        if checkpoint_name is None:
            raise DodgeballMissingParameterError("checkpointName", checkpoint_name)

        if event is None:
            raise DodgeballMissingParameterError("event", event)
        if isinstance(event, dict):
            if event.get("ip") is None:
                raise DodgeballMissingParameterError("event.ip", event.get("ip"))
            event = validate_parameter(CheckpointEvent, event, "event")

        if session_id is None:
            raise DodgeballMissingParameterError("sessionId", session_id)

        return event

    def _parse(self, result: TransportResult) -> Optional[CheckpointResponse]:
        """Decode a transport result; None when no response was produced."""
        if isinstance(result, TransportError):
            return None
        try:
            return CheckpointResponse.model_validate(result)
        except ValidationError as e:
            self.logger.error("Unrecognized checkpoint response: %s", e)
            return None

    async def _submit_once(
        self,
        session: ResolutionSession,
        headers: dict[str, str],
        body: dict[str, Any],
    ) -> Optional[CheckpointResponse]:
        session.repeats += 1
        result = await self.transport.request(
            "POST",
            f"{self.api_url}checkpoint",
            headers,
            json=body,
        )
        return self._parse(result)

    async def _submit_with_retry(
        self,
        session: ResolutionSession,
        headers: dict[str, str],
        body: dict[str, Any],
    ) -> Optional[CheckpointResponse]:
        retryer = AsyncRetrying(
            stop=stop_after_attempt(self.config.max_retry_count),
            retry=retry_if_result(lambda r: r is None),
            before_sleep=before_sleep_log(self.logger, logging.WARNING),
            retry_error_callback=lambda state: None,
        )
        return await retryer(self._submit_once, session, headers, body)

    async def _poll(
        self,
        session: ResolutionSession,
        response: CheckpointResponse,
        headers: dict[str, str],
    ) -> CheckpointResponse:
        """Poll until resolved, out of time, or out of retries."""
        poll_url = f"{self.api_url}verification/{response.verification.id}"
        max_failures = self.config.max_retry_count

        while (
            session.within_time_bound()
            and not session.resolved
            and session.failures < max_failures
        ):
            await _sleep(session.next_delay())

            polled = self._parse(await self.transport.request("GET", poll_url, headers))

            if polled is not None and polled.success and polled.status is not None:
                response = polled
                session.repeats += 1
                session.resolved = polled.status != VerificationStatus.PENDING
            else:
                session.failures += 1
                self.logger.debug(
                    "Poll of %s failed (%d/%d)",
                    poll_url, session.failures, max_failures,
                )

        if session.resolved:
            return response

        if session.failures >= max_failures:
            self.logger.error(
                "Verification %s unresolved after %d failed polls",
                response.verification.id, session.failures,
            )
            return create_timeout_response()

        return response
