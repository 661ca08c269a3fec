"""
Telegram API модели.
Содержит Pydantic модели для входящих обновлений Telegram Bot API.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class TelegramUser(BaseModel):
    """Модель пользователя Telegram"""
    id: int
    is_bot: bool = False
    first_name: str
    last_name: Optional[str] = None
    username: Optional[str] = None
    language_code: Optional[str] = None


class TelegramChat(BaseModel):
    """Модель чата Telegram"""
    id: int
    type: str = "private"
    title: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class TelegramVoice(BaseModel):
    """Голосовое сообщение"""
    file_id: str
    file_unique_id: str
    duration: int = 0
    mime_type: Optional[str] = None
    file_size: Optional[int] = None


class TelegramMessage(BaseModel):
    """Модель сообщения Telegram"""
    model_config = ConfigDict(populate_by_name=True)

    message_id: int
    from_: Optional[TelegramUser] = Field(None, alias="from")
    chat: TelegramChat
    date: int
    text: Optional[str] = None
    voice: Optional[TelegramVoice] = None
    entities: Optional[list] = None


class TelegramUpdate(BaseModel):
    """Модель обновления от Telegram"""
    update_id: int
    message: Optional[TelegramMessage] = None
    edited_message: Optional[TelegramMessage] = None
