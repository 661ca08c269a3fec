"""
Выбор и создание AI провайдера по конфигурации.
"""
import logging
from enum import Enum

from app.core.config import Settings
from app.core.exceptions import UnsupportedProviderError
from .base import AIProvider
from .gemini_provider import GeminiProvider
from .openai_provider import OpenAIProvider

logger = logging.getLogger(__name__)


class ProviderKind(str, Enum):
    OPENAI = "openai"
    GEMINI = "gemini"

    @classmethod
    def parse(cls, value: str) -> "ProviderKind":
        """Разбирает имя провайдера из настроек; "google" - синоним gemini"""
        normalized = (value or "").strip().lower()
        if normalized == "google":
            return cls.GEMINI
        try:
            return cls(normalized)
        except ValueError:
            raise UnsupportedProviderError(f"Unsupported AI provider: {value}") from None


def create_provider(kind: ProviderKind, settings: Settings) -> AIProvider:
    """Создаёт провайдер указанного вида"""
    logger.info(f"Инициализация AI провайдера: {kind.value}")

    if kind == ProviderKind.OPENAI:
        return OpenAIProvider(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            transcription_model=settings.openai_transcription_model,
            base_url=settings.openai_base_url,
        )
    if kind == ProviderKind.GEMINI:
        return GeminiProvider(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            speech_api_key=settings.google_speech_api_key,
        )
    raise UnsupportedProviderError(f"Unsupported AI provider: {kind}")


def create_providers(settings: Settings) -> tuple[AIProvider, AIProvider]:
    """
    Создаёт провайдеры генерации текста и распознавания речи.
    Если вид совпадает, используется один экземпляр.
    """
    ai_kind = ProviderKind.parse(settings.ai_provider)
    asr_kind = ProviderKind.parse(settings.asr_provider)

    ai_provider = create_provider(ai_kind, settings)
    asr_provider = ai_provider if asr_kind == ai_kind else create_provider(asr_kind, settings)
    return ai_provider, asr_provider
