import logging

from app.schemas.telegram import TelegramMessage
from app.services.constants import START_ERROR_TEXT, STANDARD_COMMANDS, WELCOME_TEMPLATE
from app.services.container import BotServices

logger = logging.getLogger(__name__)


async def handle_start_command(services: BotServices, bot_token: str, message: TelegramMessage) -> None:
    """/start: регистрирует пользователя, приветствует и ставит основное меню"""
    chat_id = message.chat.id
    telegram_user = message.from_

    if telegram_user is None:
        logger.warning(f"/start в чате {chat_id}: нет данных пользователя")
        return

    try:
        logger.info(f"/start от пользователя {telegram_user.id} в чате {chat_id}")
        await services.users.find_or_create(telegram_user)

        first_name = telegram_user.first_name or "User"
        await services.telegram.send_message(bot_token, chat_id, WELCOME_TEMPLATE.format(first_name=first_name))
        await services.telegram.set_my_commands(bot_token, STANDARD_COMMANDS, chat_id=chat_id)
        logger.info(f"/start обработан для чата {chat_id}")
    except Exception:
        logger.exception(f"Ошибка обработки /start в чате {chat_id}")
        await services.telegram.send_message(bot_token, chat_id, START_ERROR_TEXT)
