import io
import logging
from typing import Optional, Sequence

from openai import AsyncOpenAI

from app.core.exceptions import AIProviderError, ProviderConfigurationError
from app.schemas.chat import ChatMessage
from .base import AIProvider, GenerationOptions, EMPTY_RESPONSE_TEXT

logger = logging.getLogger(__name__)


class OpenAIProvider(AIProvider):
    """Chat Completions для текста и Whisper для распознавания речи"""

    name = "openai"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-3.5-turbo",
        transcription_model: str = "whisper-1",
        base_url: Optional[str] = None,
        default_temperature: float = 0.7,
    ):
        if not api_key:
            raise ProviderConfigurationError("OPENAI_API_KEY is required for OpenAI provider")

        client_kwargs = {"api_key": api_key}
        if base_url:
            client_kwargs["base_url"] = base_url

        self.client = AsyncOpenAI(**client_kwargs)
        self.model = model
        self.transcription_model = transcription_model
        self.default_temperature = default_temperature
        logger.info(f"OpenAIProvider инициализирован (model={model})")

    async def generate_text_response(
        self,
        messages: Sequence[ChatMessage],
        options: Optional[GenerationOptions] = None,
    ) -> str:
        options = options or GenerationOptions()
        model = options.model or self.model
        temperature = options.temperature if options.temperature is not None else self.default_temperature
        logger.info(f"OpenAI: запрос chat completion (model={model}, сообщений={len(messages)})")

        try:
            completion = await self.client.chat.completions.create(
                model=model,
                messages=[m.model_dump() for m in messages],
                temperature=temperature,
            )
        except Exception as e:
            logger.exception("OpenAI API error in generate_text_response")
            raise AIProviderError(f"OpenAI API error: {str(e)}") from e

        response_text = completion.choices[0].message.content if completion.choices else None
        if not response_text:
            logger.warning("OpenAI: получен пустой ответ")
            return EMPTY_RESPONSE_TEXT

        logger.info("OpenAI: ответ получен")
        return response_text

    async def transcribe_audio(self, audio: bytes, language: Optional[str] = None) -> str:
        logger.info(f"OpenAI: распознавание аудио ({len(audio)} байт, язык={language or 'auto'})")

        audio_file = io.BytesIO(audio)
        audio_file.name = "audio.ogg"

        params = {"model": self.transcription_model, "file": audio_file}
        if language:
            params["language"] = language

        try:
            transcription = await self.client.audio.transcriptions.create(**params)
        except Exception as e:
            logger.exception("OpenAI API error in transcribe_audio")
            raise AIProviderError(f"OpenAI Whisper API error: {str(e)}") from e

        text = (transcription.text or "").strip()
        if not text:
            logger.warning("OpenAI: пустой результат распознавания")
        return text
