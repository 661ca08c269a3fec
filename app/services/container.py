"""
Сборка сервисов бота (composition root для обработчиков и sweeper).
"""
from dataclasses import dataclass
from typing import Optional

from app.core.config import Settings
from app.repositories.bot_repository import BotRepository
from app.repositories.session_repository import ChatSessionRepository
from app.repositories.user_bot_repository import UserBotRepository
from app.repositories.user_repository import UserRepository
from app.services.ai.base import AIProvider
from app.services.state_machine import ChatStateMachine
from app.services.telegram_client import TelegramClient


@dataclass
class BotServices:
    settings: Settings
    telegram: TelegramClient
    sessions: ChatSessionRepository
    state_machine: ChatStateMachine
    ai_provider: AIProvider
    asr_provider: AIProvider
    users: UserRepository
    bots: BotRepository
    user_bots: UserBotRepository


def build_services(
    settings: Settings,
    ai_provider: AIProvider,
    asr_provider: AIProvider,
    telegram: Optional[TelegramClient] = None,
    sessions: Optional[ChatSessionRepository] = None,
) -> BotServices:
    telegram = telegram or TelegramClient()
    sessions = sessions or ChatSessionRepository(max_history_messages=settings.max_history_messages)
    user_bots = UserBotRepository()
    state_machine = ChatStateMachine(
        sessions=sessions,
        telegram=telegram,
        user_bots=user_bots,
        prompt_ttl_minutes=settings.prompt_input_ttl_minutes,
    )
    return BotServices(
        settings=settings,
        telegram=telegram,
        sessions=sessions,
        state_machine=state_machine,
        ai_provider=ai_provider,
        asr_provider=asr_provider,
        users=UserRepository(),
        bots=BotRepository(),
        user_bots=user_bots,
    )
