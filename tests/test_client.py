"""
Tests for the Dodgeball client

Tests cover:
- Constructor configuration validation
- Per-client logging thresholds
- End-to-end checkpoint over httpx.MockTransport
- Event tracking
"""

import json
import logging
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from dodgeball import (
    CheckpointOutcome,
    Dodgeball,
    DodgeballInvalidConfigError,
    DodgeballMissingConfigError,
    DodgeballMissingParameterError,
    DodgeballSettings,
    LogLevel,
)
from dodgeball.config import get_settings


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Isolate tests from DODGEBALL_* environment variables."""
    for name in ("SECRET_KEY", "API_VERSION", "API_URL", "LOG_LEVEL", "IS_ENABLED"):
        monkeypatch.delenv(f"DODGEBALL_{name}", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestConstructor:
    """Test configuration validation."""

    def test_requires_secret_key(self):
        with pytest.raises(DodgeballMissingConfigError):
            Dodgeball("")

    def test_secret_key_from_environment(self, monkeypatch):
        monkeypatch.setenv("DODGEBALL_SECRET_KEY", "env-secret-key")
        get_settings.cache_clear()
        assert Dodgeball().secret_key == "env-secret-key"

    def test_only_requires_secret_key(self):
        dodgeball = Dodgeball("test-secret-key")
        assert isinstance(dodgeball, Dodgeball)
        assert dodgeball.config.api_version == "v1"
        assert dodgeball.config.is_enabled is True

    def test_accepts_valid_config(self):
        dodgeball = Dodgeball("test-secret-key", {
            "apiVersion": "v1",
            "apiUrl": "https://api.example.com/",
            "logLevel": "TRACE",
        })
        assert dodgeball.config.api_url == "https://api.example.com/"
        assert dodgeball.logger.threshold == LogLevel.TRACE

    def test_accepts_settings_object(self):
        settings = DodgeballSettings(api_url="https://self-hosted.example.com", is_enabled=False)
        dodgeball = Dodgeball("test-secret-key", settings)
        assert dodgeball.config.api_url == "https://self-hosted.example.com"
        assert dodgeball.config.is_enabled is False

    def test_invalid_api_version(self):
        with pytest.raises(DodgeballInvalidConfigError) as exc_info:
            Dodgeball("test-secret-key", {"apiVersion": "invalid"})
        assert exc_info.value.config_name == "config.apiVersion"
        assert exc_info.value.allowed_values == ["v1"]

    def test_invalid_log_level(self):
        with pytest.raises(DodgeballInvalidConfigError) as exc_info:
            Dodgeball("test-secret-key", {"apiVersion": "v1", "logLevel": "invalid"})
        assert exc_info.value.config_name == "config.logLevel"

    def test_invalid_is_enabled(self):
        with pytest.raises(DodgeballInvalidConfigError):
            Dodgeball("test-secret-key", {"isEnabled": "sometimes"})


class TestLogging:
    """Each client filters by its own threshold."""

    def test_threshold_is_per_client(self, caplog):
        quiet = Dodgeball("test-secret-key", {"logLevel": "ERROR"})
        chatty = Dodgeball("test-secret-key", {"logLevel": "TRACE"})

        with caplog.at_level(logging.DEBUG, logger="dodgeball"):
            quiet.logger.info("quiet info")
            quiet.logger.error("quiet error")
            chatty.logger.trace("chatty trace")

        messages = [r.getMessage() for r in caplog.records]
        assert "quiet info" not in messages
        assert "quiet error" in messages
        assert "chatty trace" in messages

    def test_children_share_threshold(self):
        dodgeball = Dodgeball("test-secret-key", {"logLevel": "ERROR"})
        assert dodgeball.transport.logger.threshold == LogLevel.ERROR
        assert dodgeball.engine.logger.threshold == LogLevel.ERROR
        assert dodgeball.engine.logger.logger.name == "dodgeball.verification"


class TestCheckpoint:
    """End-to-end checkpoint through the real transport."""

    @pytest.mark.asyncio
    async def test_pending_then_approved(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if request.method == "POST":
                return httpx.Response(200, json={
                    "success": True,
                    "errors": [],
                    "version": "v1",
                    "verification": {"id": "v-1", "status": "PENDING", "outcome": "PENDING"},
                })
            return httpx.Response(200, json={
                "success": True,
                "errors": [],
                "version": "v1",
                "verification": {"id": "v-1", "status": "COMPLETE", "outcome": "APPROVED"},
            })

        with patch("dodgeball.verification.engine._sleep", new_callable=AsyncMock):
            async with Dodgeball(
                "test-secret-key",
                {"apiUrl": "https://api.example.com"},
                http_transport=httpx.MockTransport(handler),
            ) as dodgeball:
                response = await dodgeball.checkpoint(
                    checkpoint_name="PAYMENT",
                    event={"ip": "127.0.0.1", "data": {}},
                    session_id="test-session-id",
                )

        assert dodgeball.is_allowed(response)
        assert dodgeball.classify(response) == CheckpointOutcome.ALLOWED
        assert not dodgeball.is_running(response)
        assert [str(r.url) for r in requests] == [
            "https://api.example.com/v1/checkpoint",
            "https://api.example.com/v1/verification/v-1",
        ]
        assert requests[0].headers["Dodgeball-Secret-Key"] == "test-secret-key"

    @pytest.mark.asyncio
    async def test_unreachable_api_is_reported_not_raised(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        async with Dodgeball(
            "test-secret-key",
            http_transport=httpx.MockTransport(handler),
        ) as dodgeball:
            response = await dodgeball.checkpoint(
                checkpoint_name="PAYMENT",
                event={"ip": "127.0.0.1"},
                session_id="test-session-id",
            )

        assert dodgeball.has_error(response)
        assert response.errors[0].code == 500

    @pytest.mark.asyncio
    async def test_missing_session_id_raises(self):
        dodgeball = Dodgeball("test-secret-key")
        with pytest.raises(DodgeballMissingParameterError):
            await dodgeball.checkpoint(checkpoint_name="PAYMENT", event={"ip": "127.0.0.1"})


class TestEvent:
    """Test event tracking."""

    @pytest.mark.asyncio
    async def test_posts_to_track(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            seen["session"] = request.headers.get("Dodgeball-Session-Id")
            return httpx.Response(200, json={"success": True, "errors": [], "version": "v1"})

        async with Dodgeball(
            "test-secret-key",
            {"apiUrl": "https://api.example.com/"},
            http_transport=httpx.MockTransport(handler),
        ) as dodgeball:
            response = await dodgeball.event(
                event={"type": "LOGIN", "ip": "127.0.0.1", "data": {"method": "password"}},
                session_id="test-session-id",
            )

        assert response.success is True
        assert seen == {
            "url": "https://api.example.com/v1/track",
            "body": {"type": "LOGIN", "ip": "127.0.0.1", "data": {"method": "password"}},
            "session": "test-session-id",
        }

    @pytest.mark.asyncio
    async def test_transport_failure_returned(self):
        async with Dodgeball(
            "test-secret-key",
            http_transport=httpx.MockTransport(lambda request: httpx.Response(502, text="Bad Gateway")),
        ) as dodgeball:
            response = await dodgeball.event(event={"type": "LOGIN"}, session_id="s")

        assert response.success is False
        assert response.errors[0].code == 502

    @pytest.mark.asyncio
    async def test_disabled_skips_request(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        async with Dodgeball(
            "test-secret-key",
            {"isEnabled": False},
            http_transport=httpx.MockTransport(handler),
        ) as dodgeball:
            response = await dodgeball.event(event={"type": "LOGIN"}, session_id="s")

        assert response.success is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs,parameter",
        [
            ({"session_id": "s"}, "event"),
            ({"event": {"ip": "127.0.0.1"}, "session_id": "s"}, "event.type"),
            ({"event": {"type": "LOGIN"}}, "sessionId"),
        ],
    )
    async def test_missing_parameter(self, kwargs, parameter):
        dodgeball = Dodgeball("test-secret-key")
        with pytest.raises(DodgeballMissingParameterError) as exc_info:
            await dodgeball.event(**kwargs)
        assert exc_info.value.parameter == parameter

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "event,parameter",
        [
            ({"type": "LOGIN", "eventTime": "yesterday"}, "event.eventTime"),
            ({"type": "LOGIN", "ip": 123}, "event.ip"),
        ],
    )
    async def test_invalid_event_field(self, event, parameter):
        """A malformed field is reported as a parameter error, not a raw validation error."""
        dodgeball = Dodgeball("test-secret-key")
        with pytest.raises(DodgeballMissingParameterError) as exc_info:
            await dodgeball.event(event=event, session_id="s")
        assert exc_info.value.parameter == parameter
