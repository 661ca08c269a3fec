"""
Базовый интерфейс AI провайдера: генерация текста и распознавание речи.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

from app.schemas.chat import ChatMessage

EMPTY_RESPONSE_TEXT = "I received an empty response. Could you please rephrase?"


@dataclass
class GenerationOptions:
    model: Optional[str] = None
    temperature: Optional[float] = None


class AIProvider(ABC):
    """
    Контракт AI провайдера.
    Ошибки обращения к API пробрасываются как AIProviderError.
    """

    name: str = "base"

    @abstractmethod
    async def generate_text_response(
        self,
        messages: Sequence[ChatMessage],
        options: Optional[GenerationOptions] = None,
    ) -> str:
        """
        Генерирует ответ по истории переписки.

        Args:
            messages: Системный промпт, история и последнее сообщение пользователя
            options: Модель и температура (по умолчанию - настройки провайдера)

        Returns:
            Текст ответа
        """

    @abstractmethod
    async def transcribe_audio(self, audio: bytes, language: Optional[str] = None) -> str:
        """
        Распознаёт речь в аудио (OGG/Opus из Telegram).

        Args:
            audio: Содержимое аудиофайла
            language: Код языка; None - автоопределение, если провайдер умеет

        Returns:
            Распознанный текст; пустая строка, если речь не распознана
        """
