"""
Политика хранения истории переписки.

История ограничена MAX_HISTORY_MESSAGES сообщениями: при добавлении новой пары
(user, assistant) самые старые сообщения отбрасываются, сохраняется суффикс.
Функции чистые - входной список не изменяется.
"""
from typing import List, Sequence

from app.schemas.chat import ChatMessage

MAX_HISTORY_MESSAGES = 1000


def trim_history(history: Sequence[ChatMessage], max_messages: int = MAX_HISTORY_MESSAGES) -> List[ChatMessage]:
    """Оставляет последние max_messages сообщений"""
    if max_messages <= 0:
        return []
    return list(history)[-max_messages:]


def append_turn(
    history: Sequence[ChatMessage],
    user_message: ChatMessage,
    assistant_message: ChatMessage,
    max_messages: int = MAX_HISTORY_MESSAGES,
) -> List[ChatMessage]:
    """Добавляет ход (сообщение пользователя, затем ответ) и обрезает историю"""
    return trim_history([*history, user_message, assistant_message], max_messages)
