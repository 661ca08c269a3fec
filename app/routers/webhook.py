from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Request
from typing import Optional
import hmac
import logging

from app.core.config import Settings, get_settings
from app.core.logging_config import mask_token
from app.schemas.telegram import TelegramUpdate
from app.services.command_router import CommandRouter


logger = logging.getLogger(__name__)
router = APIRouter()


def get_command_router(request: Request) -> CommandRouter:
    """Роутер команд создаётся в lifespan приложения"""
    command_router = getattr(request.app.state, "command_router", None)
    if command_router is None:
        raise HTTPException(status_code=503, detail="Сервис ещё не инициализирован")
    return command_router


def verify_secret(
    x_telegram_bot_api_secret_token: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Проверка секрета вебхука, если он задан в настройках"""
    expected = settings.telegram_webhook_secret
    if not expected:
        return
    if not x_telegram_bot_api_secret_token or not hmac.compare_digest(x_telegram_bot_api_secret_token, expected):
        logger.warning("Webhook отклонён: неверный secret token")
        raise HTTPException(status_code=403, detail="Неверный secret token")


async def process_update_safely(command_router: CommandRouter, bot_token: str, update: TelegramUpdate) -> None:
    try:
        await command_router.process_update(bot_token, update)
    except Exception:
        logger.exception(f"Ошибка обработки update {update.update_id} (бот {mask_token(bot_token)})")


@router.post("/telegram",
    summary="Telegram Webhook без токена",
    description="Webhook должен быть зарегистрирован с токеном бота в пути.",
)
async def telegram_webhook_without_token():
    raise HTTPException(status_code=400, detail="Не указан токен бота")


@router.post("/telegram/{bot_token}",
    summary="Telegram Webhook",
    description="Обработчик webhook-ов от Telegram Bot API. Update обрабатывается в фоне после ответа Telegram.",
    response_description="Статус приёма обновления",
    dependencies=[Depends(verify_secret)],
)
async def telegram_webhook(
    bot_token: str,
    update: TelegramUpdate,
    background_tasks: BackgroundTasks,
    command_router: CommandRouter = Depends(get_command_router),
):
    """
    Обработчик webhook от Telegram.
    Telegram получает ответ сразу, обработка выполняется в background task.
    """
    if not bot_token.strip():
        raise HTTPException(status_code=400, detail="Не указан токен бота")

    logger.info(f"Получено обновление от Telegram: update_id={update.update_id} (бот {mask_token(bot_token)})")
    background_tasks.add_task(process_update_safely, command_router, bot_token, update)
    return {"status": "ok"}
