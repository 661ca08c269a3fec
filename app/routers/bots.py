from fastapi import APIRouter
import logging

from app.repositories.bot_repository import BotRepository
from app.schemas.bot import BotListOut, BotPublicInfo


logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=BotListOut,
    summary="Список ботов",
    description="Активные боты (без токенов), отсортированные по имени.",
)
async def list_bots():
    bots = await BotRepository().list_active()
    return BotListOut(bots=[BotPublicInfo.model_validate(bot) for bot in bots])
