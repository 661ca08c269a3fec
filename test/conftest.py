import pytest
import pytest_asyncio
import os
import sys
from unittest.mock import AsyncMock
from tortoise import Tortoise

# Добавляем корневую директорию проекта в путь Python
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from app.core.config import Settings
from app.core.db import MODEL_MODULES
from app.core.logging_config import setup_test_logging
from app.models.bot import Bot
from app.models.user import User
from app.schemas.telegram import TelegramMessage
from app.services.ai.base import AIProvider
from app.services.container import build_services
from app.services.telegram_client import TelegramClient

BOT_TOKEN = "123456:TEST-TOKEN-abcdef"


# Пометки для группировки тестов
def pytest_configure(config):
    """Регистрируем кастомные маркеры"""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (may be slow)"
    )
    config.addinivalue_line(
        "markers", "database: marks tests that use database"
    )
    setup_test_logging()


@pytest_asyncio.fixture
async def db():
    """Tortoise ORM на SQLite в памяти, схема создаётся заново для каждого теста"""
    await Tortoise.init(
        db_url="sqlite://:memory:",
        modules={"models": MODEL_MODULES},
        use_tz=True,
        timezone="UTC",
    )
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()


@pytest.fixture
def settings():
    return Settings(_env_file=None, ai_provider="openai", asr_provider="openai")


@pytest.fixture
def telegram():
    """Мок Telegram клиента: все вызовы успешны"""
    client = AsyncMock(spec=TelegramClient)
    client.send_message.return_value = True
    client.set_my_commands.return_value = True
    return client


@pytest.fixture
def ai_provider():
    provider = AsyncMock(spec=AIProvider)
    provider.generate_text_response.return_value = "AI reply"
    provider.transcribe_audio.return_value = "hello from voice"
    return provider


@pytest.fixture
def services(db, settings, telegram, ai_provider):
    return build_services(settings, ai_provider, ai_provider, telegram=telegram)


@pytest_asyncio.fixture
async def bot(db):
    return await Bot.create(token=BOT_TOKEN, name="Helper", username="helper_bot")


@pytest_asyncio.fixture
async def user(db):
    return await User.create(telegram_id=42, first_name="Alice", username="alice")


@pytest.fixture
def make_message():
    """Фабрика входящих сообщений Telegram"""
    def _make(text=None, chat_id=1001, user_id=42, voice=None, first_name="Alice"):
        data = {
            "message_id": 1,
            "chat": {"id": chat_id, "type": "private"},
            "date": 1700000000,
        }
        if user_id is not None:
            data["from"] = {"id": user_id, "is_bot": False, "first_name": first_name}
        if text is not None:
            data["text"] = text
        if voice is not None:
            data["voice"] = voice
        return TelegramMessage.model_validate(data)
    return _make


@pytest.fixture
def sent_texts(telegram):
    """Тексты всех отправленных сообщений в порядке отправки"""
    def _texts():
        return [c.args[2] for c in telegram.send_message.await_args_list]
    return _texts
