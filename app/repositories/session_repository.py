"""
Хранилище сессий чатов: состояние, срок его действия и история переписки.

Каждая операция чтение-изменение-запись выполняется под per-chat блокировкой
и внутри транзакции с SELECT ... FOR UPDATE по строке чата.
"""
import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Tuple

from pydantic import ValidationError
from tortoise.transactions import in_transaction

from app.models.bot import Bot
from app.models.chat_session import ChatSession
from app.schemas.chat import ChatMessage, ChatSessionData, SessionState
from app.utils.chat_locks import ChatLockRegistry
from app.utils.history import MAX_HISTORY_MESSAGES, append_turn

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PendingStateClaim:
    """Результат атомарного выхода из awaiting_prompt"""
    chat_id: int
    expires_at: Optional[datetime]


@dataclass(frozen=True)
class ExpiredSession:
    chat_id: int
    bot_token: Optional[str]
    state_expires_at: datetime


class ChatSessionRepository:
    def __init__(
        self,
        max_history_messages: int = MAX_HISTORY_MESSAGES,
        locks: Optional[ChatLockRegistry] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.max_history_messages = max_history_messages
        self.locks = locks or ChatLockRegistry()
        self._now = clock

    async def get(self, chat_id: int) -> Optional[ChatSessionData]:
        """Возвращает сессию чата или None, если записи нет"""
        session = await ChatSession.get_or_none(chat_id=chat_id)
        if session is None:
            return None

        history, corrupted = self._parse_history(chat_id, session.history)
        return ChatSessionData(
            chat_id=session.chat_id,
            user_id=session.user_id,
            bot_id=session.bot_id,
            state=session.state,
            state_expires_at=session.state_expires_at,
            history=history,
            history_corrupted=corrupted,
            updated_at=session.updated_at,
        )

    async def set_state(
        self,
        chat_id: int,
        state: SessionState,
        expires_in_minutes: Optional[float] = None,
        user_id: Optional[uuid.UUID] = None,
        bot_id: Optional[uuid.UUID] = None,
    ) -> None:
        """
        Устанавливает состояние чата (upsert).

        Args:
            chat_id: ID чата Telegram
            state: Новое состояние
            expires_in_minutes: Через сколько минут состояние истекает; для idle игнорируется
            user_id: Привязка к пользователю (не меняется, если не передана)
            bot_id: Привязка к боту (не меняется, если не передана)
        """
        state = SessionState(state)
        expires_at = None
        if state == SessionState.AWAITING_PROMPT and expires_in_minutes and expires_in_minutes > 0:
            expires_at = self._now() + timedelta(minutes=expires_in_minutes)

        async with self.locks.hold(chat_id):
            async with in_transaction() as conn:
                session = await ChatSession.select_for_update().using_db(conn).get_or_none(chat_id=chat_id)
                if session is None:
                    await ChatSession.create(
                        chat_id=chat_id,
                        user_id=user_id,
                        bot_id=bot_id,
                        state=state,
                        state_expires_at=expires_at,
                        using_db=conn,
                    )
                else:
                    session.state = state
                    session.state_expires_at = expires_at
                    if user_id is not None:
                        session.user_id = user_id
                    if bot_id is not None:
                        session.bot_id = bot_id
                    await session.save(using_db=conn)

        logger.debug(f"Чат {chat_id}: состояние {state.value}, истекает {expires_at}")

    async def append_history(
        self,
        chat_id: int,
        user_id: uuid.UUID,
        bot_id: uuid.UUID,
        user_message: ChatMessage,
        assistant_message: ChatMessage,
    ) -> None:
        """Добавляет ход (user, assistant) в историю чата с обрезкой до лимита"""
        async with self.locks.hold(chat_id):
            async with in_transaction() as conn:
                session = await ChatSession.select_for_update().using_db(conn).get_or_none(chat_id=chat_id)
                current = []
                if session is not None:
                    current, _ = self._parse_history(chat_id, session.history)

                new_history = append_turn(current, user_message, assistant_message, self.max_history_messages)
                history_json = self._serialize_history(new_history)

                if session is None:
                    await ChatSession.create(
                        chat_id=chat_id,
                        user_id=user_id,
                        bot_id=bot_id,
                        history=history_json,
                        using_db=conn,
                    )
                else:
                    session.history = history_json
                    session.user_id = user_id
                    session.bot_id = bot_id
                    await session.save(using_db=conn)

        logger.debug(f"Чат {chat_id}: история обновлена, сообщений {len(new_history)}")

    async def release_pending_state(self, chat_id: int) -> Optional[PendingStateClaim]:
        """
        Атомарно переводит чат из awaiting_prompt в idle.

        Returns:
            PendingStateClaim со сроком, который действовал до сброса,
            или None, если чат уже не находился в awaiting_prompt
        """
        async with self.locks.hold(chat_id):
            async with in_transaction() as conn:
                session = await ChatSession.select_for_update().using_db(conn).get_or_none(chat_id=chat_id)
                if session is None or session.state != SessionState.AWAITING_PROMPT:
                    return None

                claim = PendingStateClaim(chat_id=chat_id, expires_at=session.state_expires_at)
                session.state = SessionState.IDLE
                session.state_expires_at = None
                await session.save(using_db=conn)
                return claim

    async def find_expired(self, now: Optional[datetime] = None) -> List[ExpiredSession]:
        """Находит чаты в awaiting_prompt с истекшим сроком"""
        now = now or self._now()
        sessions = await ChatSession.filter(
            state=SessionState.AWAITING_PROMPT,
            state_expires_at__isnull=False,
            state_expires_at__lt=now,
        ).order_by("state_expires_at")
        if not sessions:
            return []

        bot_ids = {s.bot_id for s in sessions if s.bot_id is not None}
        tokens = {}
        if bot_ids:
            tokens = {bot.id: bot.token for bot in await Bot.filter(id__in=list(bot_ids))}

        return [
            ExpiredSession(
                chat_id=s.chat_id,
                bot_token=tokens.get(s.bot_id),
                state_expires_at=s.state_expires_at,
            )
            for s in sessions
        ]

    async def reset_if_expired(self, chat_id: int, now: Optional[datetime] = None) -> bool:
        """
        Сбрасывает чат в idle, только если он всё ещё в awaiting_prompt и срок истёк.

        Returns:
            True, если сброс выполнен этим вызовом
        """
        now = now or self._now()
        async with self.locks.hold(chat_id):
            async with in_transaction() as conn:
                updated = await ChatSession.filter(
                    chat_id=chat_id,
                    state=SessionState.AWAITING_PROMPT,
                    state_expires_at__isnull=False,
                    state_expires_at__lt=now,
                ).using_db(conn).update(
                    state=SessionState.IDLE,
                    state_expires_at=None,
                    updated_at=now,
                )
        return updated > 0

    def _parse_history(self, chat_id: int, raw: Optional[str]) -> Tuple[List[ChatMessage], bool]:
        if not raw:
            return [], False
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"ожидался JSON список, получен {type(data).__name__}")
            return [ChatMessage.model_validate(item) for item in data], False
        except (ValueError, ValidationError) as e:
            logger.warning(f"Чат {chat_id}: не удалось разобрать историю, используется пустая: {e}")
            return [], True

    @staticmethod
    def _serialize_history(history: List[ChatMessage]) -> str:
        return json.dumps([m.model_dump() for m in history], ensure_ascii=False)
