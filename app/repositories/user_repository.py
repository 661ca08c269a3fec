from app.models.user import User
from app.schemas.telegram import TelegramUser
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class UserRepository:
    async def get_by_telegram(self, telegram_id: int) -> Optional[User]:
        return await User.filter(telegram_id=telegram_id).first()

    async def create(self, telegram_user: TelegramUser) -> User:
        return await User.create(
            telegram_id=telegram_user.id,
            first_name=telegram_user.first_name,
            last_name=telegram_user.last_name,
            username=telegram_user.username,
            language_code=telegram_user.language_code,
            is_bot=telegram_user.is_bot,
        )

    async def find_or_create(self, telegram_user: TelegramUser) -> User:
        """Возвращает пользователя по Telegram ID, создавая его при первом обращении"""
        user, created = await User.get_or_create(
            telegram_id=telegram_user.id,
            defaults={
                "first_name": telegram_user.first_name,
                "last_name": telegram_user.last_name,
                "username": telegram_user.username,
                "language_code": telegram_user.language_code,
                "is_bot": telegram_user.is_bot,
            },
        )
        if created:
            logger.info(f"Создан новый пользователь {user.id} (telegram_id={telegram_user.id}, username={telegram_user.username})")
        return user
