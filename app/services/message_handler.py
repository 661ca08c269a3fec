"""
Обработка обычных (не командных) текстовых сообщений.
"""
import asyncio
import logging

from app.core.logging_config import mask_token
from app.schemas.chat import ChatMessage, SessionState
from app.schemas.telegram import TelegramMessage
from app.services.constants import MESSAGE_ERROR_TEXT, START_FIRST_TEXT
from app.services.container import BotServices
from app.services.state_machine import PendingTextOutcome

logger = logging.getLogger(__name__)


async def handle_text_message(services: BotServices, bot_token: str, message: TelegramMessage) -> None:
    """
    Текст в awaiting_prompt становится промптом (если срок не истёк),
    иначе - запрос к AI с системным промптом и историей чата.
    """
    chat_id = message.chat.id
    telegram_user_id = message.from_.id if message.from_ else None
    text = message.text

    if telegram_user_id is None or not text:
        logger.warning(f"Чат {chat_id}: сообщение без ID пользователя или текста пропущено")
        return

    try:
        user, bot = await asyncio.gather(
            services.users.get_by_telegram(telegram_user_id),
            services.bots.get_by_token(bot_token),
        )

        # Пользователь создаётся командой /start
        if user is None or bot is None:
            logger.error(
                f"Чат {chat_id}: пользователь или бот не найдены в БД "
                f"(user={user is not None}, bot={bot is not None}, бот {mask_token(bot_token)})"
            )
            await services.telegram.send_message(bot_token, chat_id, START_FIRST_TEXT)
            return

        session = await services.sessions.get(chat_id)

        if session is not None and session.state == SessionState.AWAITING_PROMPT:
            outcome = await services.state_machine.handle_pending_text(bot_token, chat_id, user.id, bot.id, text)
            if outcome == PendingTextOutcome.PROMPT_SAVED:
                return

        system_prompt = await services.user_bots.get_prompt(user.id, bot.id)
        if system_prompt:
            logger.info(f"Чат {chat_id}: используется кастомный промпт (user={user.id}, bot={bot.id})")
        else:
            system_prompt = services.settings.default_system_prompt

        history = session.history if session is not None else []
        user_message = ChatMessage(role="user", content=text)
        messages = [ChatMessage(role="system", content=system_prompt), *history, user_message]

        response_text = await services.ai_provider.generate_text_response(messages)

        await services.telegram.send_message(bot_token, chat_id, response_text)
        logger.info(f"Чат {chat_id}: ответ AI отправлен")

        await services.sessions.append_history(
            chat_id,
            user.id,
            bot.id,
            user_message,
            ChatMessage(role="assistant", content=response_text),
        )
        logger.info(f"Чат {chat_id}: история переписки обновлена")
    except Exception:
        logger.exception(f"Чат {chat_id}: ошибка обработки текстового сообщения")
        await services.telegram.send_message(bot_token, chat_id, MESSAGE_ERROR_TEXT)
