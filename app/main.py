from fastapi import FastAPI
from contextlib import asynccontextmanager
import logging

from app.core.config import get_settings
from app.core.db import close_db, init_db
from app.core.logging_config import setup_logging
from app.routers import bots, webhook
from app.services.ai.factory import create_providers
from app.services.bot_sync_service import BotSyncService
from app.services.command_router import CommandRouter
from app.services.container import build_services
from app.workers.expiration_sweeper import ExpirationSweeper, SweepScheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    settings = get_settings()
    setup_logging(settings.log_level)
    await init_db()
    await BotSyncService().sync_from_env()

    ai_provider, asr_provider = create_providers(settings)
    services = build_services(settings, ai_provider, asr_provider)
    app.state.services = services
    app.state.command_router = CommandRouter(services)

    scheduler = SweepScheduler(
        ExpirationSweeper(services.sessions, services.state_machine),
        interval_seconds=settings.sweep_interval_seconds,
    )
    app.state.scheduler = scheduler
    if settings.enable_scheduler:
        scheduler.start()
    else:
        logger.info("Фоновая проверка просроченных состояний отключена")

    yield

    # Shutdown
    await scheduler.stop()
    await close_db()


app = FastAPI(
    title="PromptBot API",
    description="Backend для нескольких Telegram ботов с AI ответами и пользовательскими промптами",
    version="1.0.0",
    lifespan=lifespan
)

app.include_router(webhook.router, prefix="/webhook", tags=["webhook"])
app.include_router(bots.router, prefix="/bots", tags=["bots"])

__all__ = ["app"]
