from app.models.user_bot import UserBot
from tortoise.transactions import in_transaction
from typing import Dict, Optional
import uuid


class UserBotRepository:
    async def get_prompt(self, user_id: uuid.UUID, bot_id: uuid.UUID) -> Optional[str]:
        """Кастомный промпт пользователя для бота или None"""
        setting = await UserBot.filter(user_id=user_id, bot_id=bot_id).first()
        if setting and setting.prompt:
            return setting.prompt
        return None

    async def set_prompt(self, user_id: uuid.UUID, bot_id: uuid.UUID, prompt: str) -> UserBot:
        """Создаёт или обновляет кастомный промпт для пары (пользователь, бот)"""
        async with in_transaction() as conn:
            setting = await UserBot.select_for_update().using_db(conn).get_or_none(user_id=user_id, bot_id=bot_id)
            if setting is None:
                return await UserBot.create(user_id=user_id, bot_id=bot_id, prompt=prompt, using_db=conn)
            setting.prompt = prompt
            await setting.save(using_db=conn)
            return setting

    async def prompts_by_bot(self, user_id: uuid.UUID) -> Dict[uuid.UUID, Optional[str]]:
        """Настройки пользователя: bot_id -> prompt"""
        settings = await UserBot.filter(user_id=user_id)
        return {s.bot_id: s.prompt for s in settings}
