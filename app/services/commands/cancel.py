import logging

from app.schemas.telegram import TelegramMessage
from app.services.constants import CANCEL_ERROR_TEXT
from app.services.container import BotServices

logger = logging.getLogger(__name__)


async def handle_cancel_command(services: BotServices, bot_token: str, message: TelegramMessage) -> None:
    chat_id = message.chat.id
    try:
        await services.state_machine.cancel(bot_token, chat_id)
    except Exception:
        logger.exception(f"Ошибка обработки /cancel в чате {chat_id}")
        await services.telegram.send_message(bot_token, chat_id, CANCEL_ERROR_TEXT)
