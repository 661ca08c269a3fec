"""
Конечный автомат чата: idle <-> awaiting_prompt.

Автомат не хранит изменяемого состояния: всё состояние чата лежит в
ChatSessionRepository, а переходы из awaiting_prompt выполняются атомарными
условными обновлениями. Кто первым выполнил переход (обработчик сообщения,
/cancel или sweeper), тот и выполняет побочные эффекты, поэтому пользователь
не получает уведомление об истечении дважды.
"""
import logging
import uuid
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from app.core.logging_config import mask_token
from app.repositories.session_repository import ChatSessionRepository, utcnow
from app.repositories.user_bot_repository import UserBotRepository
from app.schemas.chat import SessionState
from app.services.constants import (
    CANCELLED_TEXT,
    CONTEXTUAL_COMMANDS,
    PROMPT_EXPIRED_FALLTHROUGH_TEXT,
    PROMPT_EXPIRED_TEXT,
    PROMPT_REQUEST_TEXT,
    PROMPT_SAVED_TEXT,
    STANDARD_COMMANDS,
)
from app.services.telegram_client import TelegramClient

logger = logging.getLogger(__name__)

DEFAULT_PROMPT_INPUT_TTL_MINUTES = 5


class PendingTextOutcome(str, Enum):
    """Чем оказался текст, пришедший в чат"""
    NOT_PENDING = "not_pending"      # чат не ждал промпт: обычное сообщение
    PROMPT_SAVED = "prompt_saved"    # текст сохранён как кастомный промпт
    EXPIRED = "expired"              # срок ввода истёк: обработать как обычное сообщение


def classify_pending(expires_at: Optional[datetime], now: datetime) -> PendingTextOutcome:
    """Ответ на запрос промпта принимается, пока срок не истёк на момент обработки"""
    if expires_at is not None and now > expires_at:
        return PendingTextOutcome.EXPIRED
    return PendingTextOutcome.PROMPT_SAVED


class ChatStateMachine:
    def __init__(
        self,
        sessions: ChatSessionRepository,
        telegram: TelegramClient,
        user_bots: UserBotRepository,
        prompt_ttl_minutes: float = DEFAULT_PROMPT_INPUT_TTL_MINUTES,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.sessions = sessions
        self.telegram = telegram
        self.user_bots = user_bots
        self.prompt_ttl_minutes = prompt_ttl_minutes
        self._now = clock

    async def begin_prompt_input(self, bot_token: str, chat_id: int, user_id: uuid.UUID, bot_id: uuid.UUID) -> None:
        """idle -> awaiting_prompt: срок ввода, контекстное меню, приглашение"""
        await self.sessions.set_state(
            chat_id,
            SessionState.AWAITING_PROMPT,
            expires_in_minutes=self.prompt_ttl_minutes,
            user_id=user_id,
            bot_id=bot_id,
        )
        await self.telegram.set_my_commands(bot_token, CONTEXTUAL_COMMANDS, chat_id=chat_id)
        await self.telegram.send_message(bot_token, chat_id, PROMPT_REQUEST_TEXT)
        logger.info(f"Чат {chat_id}: ожидание промпта на {self.prompt_ttl_minutes} мин (user={user_id}, bot={bot_id})")

    async def handle_pending_text(
        self,
        bot_token: str,
        chat_id: int,
        user_id: uuid.UUID,
        bot_id: uuid.UUID,
        text: str,
    ) -> PendingTextOutcome:
        """
        awaiting_prompt -> idle по входящему тексту.

        Returns:
            PROMPT_SAVED - текст стал промптом, дальше обрабатывать не нужно;
            EXPIRED / NOT_PENDING - текст нужно обработать как обычное сообщение
        """
        claim = await self.sessions.release_pending_state(chat_id)
        if claim is None:
            # Состояние уже сброшено (sweeper или /cancel)
            logger.info(f"Чат {chat_id}: ожидание промпта уже завершено, сообщение обрабатывается как обычное")
            return PendingTextOutcome.NOT_PENDING

        outcome = classify_pending(claim.expires_at, self._now())
        if outcome == PendingTextOutcome.EXPIRED:
            await self._restore_menu(bot_token, chat_id)
            await self.telegram.send_message(bot_token, chat_id, PROMPT_EXPIRED_FALLTHROUGH_TEXT)
            logger.info(f"Чат {chat_id}: срок ввода промпта истёк ({claim.expires_at}), сообщение обрабатывается как обычное")
            return outcome

        await self.user_bots.set_prompt(user_id, bot_id, text)
        await self._restore_menu(bot_token, chat_id)
        await self.telegram.send_message(bot_token, chat_id, PROMPT_SAVED_TEXT)
        logger.info(f"Чат {chat_id}: кастомный промпт обновлён (user={user_id}, bot={bot_id})")
        return outcome

    async def cancel(self, bot_token: str, chat_id: int) -> None:
        """Любое состояние -> idle (идемпотентно)"""
        await self.sessions.set_state(chat_id, SessionState.IDLE)
        await self._restore_menu(bot_token, chat_id)
        await self.telegram.send_message(bot_token, chat_id, CANCELLED_TEXT)
        logger.info(f"Чат {chat_id}: состояние сброшено в idle, меню восстановлено")

    async def expire_if_due(self, chat_id: int, bot_token: Optional[str], now: Optional[datetime] = None) -> bool:
        """
        awaiting_prompt -> idle по истечении срока (фоновая проверка).

        Returns:
            True, если переход выполнен этим вызовом
        """
        if not await self.sessions.reset_if_expired(chat_id, now or self._now()):
            return False

        if not bot_token:
            logger.warning(f"Чат {chat_id}: состояние сброшено, но бот неизвестен - уведомление не отправлено")
            return True

        await self._restore_menu(bot_token, chat_id)
        await self.telegram.send_message(bot_token, chat_id, PROMPT_EXPIRED_TEXT)
        logger.info(f"Чат {chat_id}: срок ввода промпта истёк (бот {mask_token(bot_token)})")
        return True

    async def _restore_menu(self, bot_token: str, chat_id: int) -> None:
        await self.telegram.set_my_commands(bot_token, STANDARD_COMMANDS, chat_id=chat_id)
