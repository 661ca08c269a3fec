"""
Модели переписки и состояния чата.
"""
from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional
import uuid

from pydantic import BaseModel, Field


class SessionState(str, Enum):
    """Состояние конечного автомата чата"""
    IDLE = "idle"
    AWAITING_PROMPT = "awaiting_prompt"


class ChatMessage(BaseModel):
    """Одно сообщение переписки в формате, независимом от провайдера"""
    role: Literal["system", "user", "assistant"]
    content: str


class ChatSessionData(BaseModel):
    """Снимок сессии чата, собранный из БД при каждом обращении"""
    chat_id: int
    user_id: Optional[uuid.UUID] = None
    bot_id: Optional[uuid.UUID] = None
    state: SessionState = SessionState.IDLE
    state_expires_at: Optional[datetime] = None
    history: List[ChatMessage] = Field(default_factory=list)
    # True, если сохранённая история не распарсилась и была заменена пустой
    history_corrupted: bool = False
    updated_at: Optional[datetime] = None
