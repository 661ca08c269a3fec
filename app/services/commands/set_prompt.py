import asyncio
import logging

from app.core.logging_config import mask_token
from app.schemas.telegram import TelegramMessage
from app.services.constants import BOT_NOT_REGISTERED_TEXT, SET_PROMPT_ERROR_TEXT, USER_NOT_FOUND_TEXT
from app.services.container import BotServices

logger = logging.getLogger(__name__)


async def handle_set_prompt_command(services: BotServices, bot_token: str, message: TelegramMessage) -> None:
    """/setprompt: переводит чат в ожидание нового системного промпта"""
    chat_id = message.chat.id
    telegram_user_id = message.from_.id if message.from_ else None

    if telegram_user_id is None:
        logger.warning(f"/setprompt в чате {chat_id}: нет ID пользователя")
        return

    try:
        user, bot = await asyncio.gather(
            services.users.get_by_telegram(telegram_user_id),
            services.bots.get_by_token(bot_token),
        )

        if user is None:
            await services.telegram.send_message(bot_token, chat_id, USER_NOT_FOUND_TEXT)
            return
        if bot is None:
            logger.error(f"/setprompt: бот {mask_token(bot_token)} не зарегистрирован в БД")
            await services.telegram.send_message(bot_token, chat_id, BOT_NOT_REGISTERED_TEXT)
            return

        await services.state_machine.begin_prompt_input(bot_token, chat_id, user.id, bot.id)
    except Exception:
        logger.exception(f"Ошибка обработки /setprompt в чате {chat_id}")
        await services.telegram.send_message(bot_token, chat_id, SET_PROMPT_ERROR_TEXT)
