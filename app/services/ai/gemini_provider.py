"""
Google Gemini (generateContent) для текста и Google Cloud Speech-to-Text для речи.
Оба API вызываются через REST.
"""
import base64
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from app.core.exceptions import AIProviderError, ProviderConfigurationError
from app.schemas.chat import ChatMessage
from .base import AIProvider, GenerationOptions, EMPTY_RESPONSE_TEXT

logger = logging.getLogger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
SPEECH_API_URL = "https://speech.googleapis.com/v1/speech:recognize"
NO_USER_MESSAGE_TEXT = "It seems there was no message to process. Please try again."


def map_messages(messages: Sequence[ChatMessage]) -> Dict[str, Any]:
    """
    Переводит сообщения в формат Gemini.
    Системный промпт (последний из system сообщений) уходит в systemInstruction,
    роль assistant становится model.
    """
    system_instruction = None
    for message in reversed(messages):
        if message.role == "system":
            system_instruction = message.content
            break

    contents: List[Dict[str, Any]] = [
        {
            "role": "model" if m.role == "assistant" else "user",
            "parts": [{"text": m.content}],
        }
        for m in messages
        if m.role != "system"
    ]

    body: Dict[str, Any] = {"contents": contents}
    if system_instruction:
        body["systemInstruction"] = {"parts": [{"text": system_instruction}]}
    return body


class GeminiProvider(AIProvider):
    name = "gemini"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-1.5-flash-latest",
        speech_api_key: Optional[str] = None,
        default_temperature: float = 0.7,
        timeout: float = 60.0,
    ):
        if not api_key:
            raise ProviderConfigurationError("GEMINI_API_KEY is required for Gemini provider")
        self.api_key = api_key
        self.model = model
        self.speech_api_key = speech_api_key
        self.default_temperature = default_temperature
        self.timeout = timeout
        if not speech_api_key:
            logger.info("GeminiProvider: GOOGLE_SPEECH_API_KEY не задан, распознавание речи недоступно")
        logger.info(f"GeminiProvider инициализирован (model={model})")

    async def _post(self, url: str, params: Dict[str, str], body: Dict[str, Any]) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(url, params=params, json=body)
            response.raise_for_status()
            return response.json()

    async def generate_text_response(
        self,
        messages: Sequence[ChatMessage],
        options: Optional[GenerationOptions] = None,
    ) -> str:
        options = options or GenerationOptions()
        model = options.model or self.model
        temperature = options.temperature if options.temperature is not None else self.default_temperature
        logger.info(f"Gemini: запрос generateContent (model={model}, сообщений={len(messages)})")

        body = map_messages(messages)
        if not body["contents"] or body["contents"][-1]["role"] != "user":
            logger.warning("Gemini: нет сообщения пользователя для отправки")
            return NO_USER_MESSAGE_TEXT

        body["generationConfig"] = {"temperature": temperature}
        body["safetySettings"] = [
            {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
        ]

        try:
            data = await self._post(f"{GEMINI_API_BASE}/models/{model}:generateContent", {"key": self.api_key}, body)
        except (httpx.HTTPError, ValueError) as e:
            logger.exception("Gemini API error in generate_text_response")
            raise AIProviderError(f"Gemini API error: {str(e)}") from e

        candidates = data.get("candidates") or []
        parts = candidates[0].get("content", {}).get("parts", []) if candidates else []
        response_text = "".join(part.get("text", "") for part in parts)
        if not response_text:
            logger.warning(f"Gemini: получен пустой ответ: {data}")
            return EMPTY_RESPONSE_TEXT

        logger.info("Gemini: ответ получен")
        return response_text

    async def transcribe_audio(self, audio: bytes, language: Optional[str] = None) -> str:
        if not self.speech_api_key:
            raise ProviderConfigurationError("Google Cloud Speech is not configured (GOOGLE_SPEECH_API_KEY)")

        logger.info(f"Google Speech: распознавание аудио ({len(audio)} байт, язык={language or 'en-US'})")
        body = {
            "config": {
                "encoding": "OGG_OPUS",
                "sampleRateHertz": 16000,
                "languageCode": language or "en-US",
                "audioChannelCount": 1,
            },
            "audio": {"content": base64.b64encode(audio).decode("ascii")},
        }

        try:
            data = await self._post(SPEECH_API_URL, {"key": self.speech_api_key}, body)
        except (httpx.HTTPError, ValueError) as e:
            logger.exception("Google Speech API error in transcribe_audio")
            raise AIProviderError(f"Google Speech API error: {str(e)}") from e

        transcripts = [
            result["alternatives"][0].get("transcript", "")
            for result in data.get("results", [])
            if result.get("alternatives")
        ]
        text = " ".join(t for t in transcripts if t).strip()
        if not text:
            logger.warning("Google Speech: пустой результат распознавания")
        return text
