"""
Тесты AI провайдеров и фабрики
"""
import base64
import pytest
import httpx
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock, patch

from app.core.config import Settings
from app.core.exceptions import AIProviderError, ProviderConfigurationError, UnsupportedProviderError
from app.schemas.chat import ChatMessage
from app.services.ai.base import EMPTY_RESPONSE_TEXT, GenerationOptions
from app.services.ai.factory import ProviderKind, create_providers
from app.services.ai.gemini_provider import NO_USER_MESSAGE_TEXT, GeminiProvider, map_messages
from app.services.ai.openai_provider import OpenAIProvider

MESSAGES = [
    ChatMessage(role="system", content="Be concise"),
    ChatMessage(role="user", content="Hi"),
    ChatMessage(role="assistant", content="Hello!"),
    ChatMessage(role="user", content="How are you?"),
]


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def openai_provider():
    provider = OpenAIProvider(api_key="sk-test", model="gpt-test")
    provider.client = Mock()
    provider.client.chat.completions.create = AsyncMock(return_value=_completion("Fine, thanks"))
    provider.client.audio.transcriptions.create = AsyncMock(return_value=SimpleNamespace(text=" hello "))
    return provider


class TestOpenAIProvider:
    def test_requires_api_key(self):
        with pytest.raises(ProviderConfigurationError):
            OpenAIProvider(api_key=None)

    @pytest.mark.asyncio
    async def test_generate_text_response(self, openai_provider):
        result = await openai_provider.generate_text_response(MESSAGES)

        assert result == "Fine, thanks"
        kwargs = openai_provider.client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["temperature"] == 0.7
        assert kwargs["messages"][0] == {"role": "system", "content": "Be concise"}
        assert len(kwargs["messages"]) == 4

    @pytest.mark.asyncio
    async def test_generation_options_override(self, openai_provider):
        await openai_provider.generate_text_response(MESSAGES, GenerationOptions(model="gpt-other", temperature=0.0))
        kwargs = openai_provider.client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "gpt-other"
        assert kwargs["temperature"] == 0.0

    @pytest.mark.asyncio
    async def test_empty_completion(self, openai_provider):
        openai_provider.client.chat.completions.create.return_value = _completion(None)
        assert await openai_provider.generate_text_response(MESSAGES) == EMPTY_RESPONSE_TEXT

    @pytest.mark.asyncio
    async def test_api_error_wrapped(self, openai_provider):
        openai_provider.client.chat.completions.create.side_effect = RuntimeError("rate limit")
        with pytest.raises(AIProviderError):
            await openai_provider.generate_text_response(MESSAGES)

    @pytest.mark.asyncio
    async def test_transcribe_audio(self, openai_provider):
        result = await openai_provider.transcribe_audio(b"OggS", language="en")

        assert result == "hello"
        kwargs = openai_provider.client.audio.transcriptions.create.await_args.kwargs
        assert kwargs["model"] == "whisper-1"
        assert kwargs["language"] == "en"
        assert kwargs["file"].name == "audio.ogg"

    @pytest.mark.asyncio
    async def test_transcribe_error_wrapped(self, openai_provider):
        openai_provider.client.audio.transcriptions.create.side_effect = RuntimeError("bad audio")
        with pytest.raises(AIProviderError):
            await openai_provider.transcribe_audio(b"OggS")


def test_map_messages_for_gemini():
    body = map_messages(MESSAGES)

    assert body["systemInstruction"] == {"parts": [{"text": "Be concise"}]}
    assert [c["role"] for c in body["contents"]] == ["user", "model", "user"]
    assert body["contents"][-1]["parts"] == [{"text": "How are you?"}]


class TestGeminiProvider:
    @pytest.fixture
    def http_client(self):
        with patch("httpx.AsyncClient") as mock_client_class:
            response = Mock()
            response.raise_for_status = Mock()
            response.json.return_value = {"candidates": [{"content": {"parts": [{"text": "Gemini says hi"}]}}]}
            mock_client = AsyncMock()
            mock_client.post = AsyncMock(return_value=response)
            mock_client_class.return_value.__aenter__.return_value = mock_client
            yield mock_client

    def test_requires_api_key(self):
        with pytest.raises(ProviderConfigurationError):
            GeminiProvider(api_key="")

    @pytest.mark.asyncio
    async def test_generate_text_response(self, http_client):
        provider = GeminiProvider(api_key="g-key", model="gemini-test")

        assert await provider.generate_text_response(MESSAGES) == "Gemini says hi"

        call = http_client.post.call_args
        assert call.args[0].endswith("/models/gemini-test:generateContent")
        assert call.kwargs["params"] == {"key": "g-key"}
        assert call.kwargs["json"]["generationConfig"] == {"temperature": 0.7}

    @pytest.mark.asyncio
    async def test_last_message_must_be_from_user(self, http_client):
        provider = GeminiProvider(api_key="g-key")
        result = await provider.generate_text_response(MESSAGES[:3])
        assert result == NO_USER_MESSAGE_TEXT
        http_client.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_http_error_wrapped(self, http_client):
        http_client.post.side_effect = httpx.ConnectError("down")
        with pytest.raises(AIProviderError):
            await GeminiProvider(api_key="g-key").generate_text_response(MESSAGES)

    @pytest.mark.asyncio
    async def test_transcribe_requires_speech_key(self):
        with pytest.raises(ProviderConfigurationError):
            await GeminiProvider(api_key="g-key").transcribe_audio(b"OggS")

    @pytest.mark.asyncio
    async def test_transcribe_audio(self, http_client):
        http_client.post.return_value.json.return_value = {
            "results": [{"alternatives": [{"transcript": "hello"}]}, {"alternatives": [{"transcript": "world"}]}]
        }
        provider = GeminiProvider(api_key="g-key", speech_api_key="s-key")

        assert await provider.transcribe_audio(b"OggS") == "hello world"

        body = http_client.post.call_args.kwargs["json"]
        assert body["config"]["encoding"] == "OGG_OPUS"
        assert body["config"]["languageCode"] == "en-US"
        assert base64.b64decode(body["audio"]["content"]) == b"OggS"

    @pytest.mark.asyncio
    async def test_transcribe_no_results(self, http_client):
        http_client.post.return_value.json.return_value = {}
        provider = GeminiProvider(api_key="g-key", speech_api_key="s-key")
        assert await provider.transcribe_audio(b"OggS") == ""


class TestProviderFactory:
    def test_parse(self):
        assert ProviderKind.parse("OpenAI") == ProviderKind.OPENAI
        assert ProviderKind.parse("google") == ProviderKind.GEMINI
        with pytest.raises(UnsupportedProviderError):
            ProviderKind.parse("llama")

    def test_same_kind_shares_instance(self):
        settings = Settings(_env_file=None, ai_provider="openai", asr_provider="openai", openai_api_key="sk-test")
        ai, asr = create_providers(settings)
        assert isinstance(ai, OpenAIProvider)
        assert ai is asr

    def test_mixed_providers(self):
        settings = Settings(
            _env_file=None,
            ai_provider="gemini",
            asr_provider="openai",
            gemini_api_key="g-key",
            openai_api_key="sk-test",
        )
        ai, asr = create_providers(settings)
        assert isinstance(ai, GeminiProvider)
        assert isinstance(asr, OpenAIProvider)

    def test_missing_key_fails_fast(self):
        settings = Settings(_env_file=None, ai_provider="gemini", gemini_api_key=None)
        with pytest.raises(ProviderConfigurationError):
            create_providers(settings)
