"""Unit tests for the Anthropic generation backend."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import pytest

from scopegen.config import settings
from scopegen.generation.backend import SCOPE_MODEL_MAP, AnthropicBackend, CompletionReason
from scopegen.generation.errors import BackendError, ConfigurationError

_REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def _response(text: str, stop_reason: str = "end_turn"):
    return SimpleNamespace(
        content=[SimpleNamespace(type="text", text=text)],
        stop_reason=stop_reason,
    )


def _status_error(cls, status_code: int):
    return cls(
        "request failed",
        response=httpx.Response(status_code, request=_REQUEST),
        body=None,
    )


@pytest.fixture
def mock_client():
    with patch("scopegen.generation.backend.anthropic.AsyncAnthropic") as mock_cls:
        instance = MagicMock()
        instance.messages.create = AsyncMock()
        mock_cls.return_value = instance
        yield instance


class TestAvailability:
    """Tests for AnthropicBackend.is_available."""

    def test_available_with_explicit_key(self):
        assert AnthropicBackend(api_key="sk-test").is_available()

    def test_available_with_env_key(self, monkeypatch):
        monkeypatch.setattr(settings, "anthropic_api_key", None)
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-env")
        assert AnthropicBackend().is_available()

    def test_unavailable_without_key(self, monkeypatch):
        monkeypatch.setattr(settings, "anthropic_api_key", None)
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        assert not AnthropicBackend().is_available()


class TestComplete:
    """Tests for AnthropicBackend.complete."""

    @pytest.mark.asyncio
    async def test_request_shape(self, mock_client):
        mock_client.messages.create.return_value = _response('{"a": 1}')
        backend = AnthropicBackend(model="sonnet", api_key="sk-test")

        completion = await backend.complete("system text", "user text", 4500)

        mock_client.messages.create.assert_awaited_once_with(
            model=SCOPE_MODEL_MAP["sonnet"],
            max_tokens=4500,
            system="system text",
            messages=[{"role": "user", "content": "user text"}],
        )
        assert completion.text == '{"a": 1}'
        assert completion.reason == CompletionReason.COMPLETE

    @pytest.mark.asyncio
    async def test_unknown_model_passed_through(self, mock_client):
        mock_client.messages.create.return_value = _response("{}")
        backend = AnthropicBackend(model="claude-custom", api_key="sk-test")

        await backend.complete("s", "u", 10)

        assert mock_client.messages.create.call_args.kwargs["model"] == "claude-custom"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "stop_reason,expected",
        [
            ("end_turn", CompletionReason.COMPLETE),
            ("stop_sequence", CompletionReason.COMPLETE),
            ("max_tokens", CompletionReason.LENGTH_TRUNCATED),
            ("refusal", CompletionReason.OTHER),
        ],
    )
    async def test_stop_reason_mapping(self, mock_client, stop_reason, expected):
        mock_client.messages.create.return_value = _response("{}", stop_reason)

        completion = await AnthropicBackend(api_key="sk-test").complete("s", "u", 10)

        assert completion.reason == expected
        assert completion.raw_reason == stop_reason

    @pytest.mark.asyncio
    async def test_text_blocks_joined(self, mock_client):
        mock_client.messages.create.return_value = SimpleNamespace(
            content=[
                SimpleNamespace(type="text", text='{"a": '),
                SimpleNamespace(type="tool_use", input={}),
                {"type": "text", "text": "1}"},
            ],
            stop_reason="end_turn",
        )

        completion = await AnthropicBackend(api_key="sk-test").complete("s", "u", 10)

        assert completion.text == '{"a": 1}'

    @pytest.mark.asyncio
    async def test_empty_content(self, mock_client):
        mock_client.messages.create.return_value = SimpleNamespace(content=[], stop_reason="max_tokens")

        completion = await AnthropicBackend(api_key="sk-test").complete("s", "u", 10)

        assert completion.text == ""
        assert completion.reason == CompletionReason.LENGTH_TRUNCATED

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            _status_error(anthropic.AuthenticationError, 401),
            _status_error(anthropic.PermissionDeniedError, 403),
            anthropic.APIConnectionError(request=_REQUEST),
        ],
    )
    async def test_configuration_errors(self, mock_client, error):
        mock_client.messages.create.side_effect = error

        with pytest.raises(ConfigurationError):
            await AnthropicBackend(api_key="sk-test").complete("s", "u", 10)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            _status_error(anthropic.RateLimitError, 429),
            _status_error(anthropic.InternalServerError, 500),
        ],
    )
    async def test_other_api_errors(self, mock_client, error):
        mock_client.messages.create.side_effect = error

        with pytest.raises(BackendError):
            await AnthropicBackend(api_key="sk-test").complete("s", "u", 10)

    @pytest.mark.asyncio
    async def test_client_created_once(self, mock_client):
        mock_client.messages.create.return_value = _response("{}")
        backend = AnthropicBackend(api_key="sk-test")

        with patch("scopegen.generation.backend.anthropic.AsyncAnthropic") as mock_cls:
            mock_cls.return_value = mock_client
            await backend.complete("s", "u", 10)
            await backend.complete("s", "u", 10)

        mock_cls.assert_called_once_with(api_key="sk-test")
