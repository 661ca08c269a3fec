"""
Маршрутизация входящих сообщений по командам.
"""
import logging
from typing import Awaitable, Callable, Tuple

from app.core.logging_config import mask_token
from app.schemas.telegram import TelegramMessage, TelegramUpdate
from app.services.commands.bots import handle_bots_command
from app.services.commands.cancel import handle_cancel_command
from app.services.commands.set_prompt import handle_set_prompt_command
from app.services.commands.start import handle_start_command
from app.services.container import BotServices
from app.services.message_handler import handle_text_message
from app.services.voice_handler import handle_voice_message

logger = logging.getLogger(__name__)

Handler = Callable[[BotServices, str, TelegramMessage], Awaitable[None]]

# Порядок важен: срабатывает первый совпавший префикс
COMMAND_HANDLERS: Tuple[Tuple[str, Handler], ...] = (
    ("/start", handle_start_command),
    ("/setprompt", handle_set_prompt_command),
    ("/bots", handle_bots_command),
    ("/cancel", handle_cancel_command),
)


class CommandRouter:
    def __init__(self, services: BotServices):
        self.services = services

    async def process_update(self, bot_token: str, update: TelegramUpdate) -> str:
        """Обрабатывает update; возвращает имя выбранного маршрута"""
        if update.message is None:
            logger.warning(f"Update {update.update_id} без сообщения пропущен (бот {mask_token(bot_token)})")
            return "ignored"
        return await self.dispatch(bot_token, update.message)

    async def dispatch(self, bot_token: str, message: TelegramMessage) -> str:
        chat_id = message.chat.id
        logger.info(f"Сообщение {message.message_id} в чате {chat_id} (бот {mask_token(bot_token)})")

        if message.text:
            for prefix, handler in COMMAND_HANDLERS:
                if message.text.startswith(prefix):
                    await handler(self.services, bot_token, message)
                    return prefix.lstrip("/")
            await handle_text_message(self.services, bot_token, message)
            return "text"

        if message.voice:
            await handle_voice_message(self.services, bot_token, message)
            return "voice"

        logger.info(f"Чат {chat_id}: сообщение без текста и голоса, обработчика нет")
        return "ignored"
