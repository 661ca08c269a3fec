from app.models.bot import Bot
from typing import List, Optional


class BotRepository:
    async def get_by_token(self, token: str) -> Optional[Bot]:
        return await Bot.filter(token=token).first()

    async def list_active(self) -> List[Bot]:
        return await Bot.filter(is_active=True).order_by("name")
