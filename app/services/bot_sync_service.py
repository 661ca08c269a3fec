"""
Синхронизация реестра ботов с переменными окружения.

Боты описываются парами TELEGRAM_BOT_<N>_TOKEN / TELEGRAM_BOT_<N>_NAME.
"""
import logging
import os
import re
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from tortoise.transactions import in_transaction

from app.core.logging_config import mask_token
from app.models.bot import Bot

logger = logging.getLogger(__name__)

BOT_ENV_PATTERN = re.compile(r"^TELEGRAM_BOT_(\d+)_(TOKEN|NAME)$")


@dataclass(frozen=True)
class BotConfig:
    token: str
    name: Optional[str] = None


def parse_bot_configs(environ: Mapping[str, str]) -> List[BotConfig]:
    """Собирает конфигурации ботов; записи без токена пропускаются"""
    entries: Dict[int, Dict[str, str]] = {}
    for key, value in environ.items():
        match = BOT_ENV_PATTERN.match(key)
        if match is None or not value:
            continue
        index, field = int(match.group(1)), match.group(2).lower()
        entries.setdefault(index, {})[field] = value.strip()

    configs = []
    for index in sorted(entries):
        entry = entries[index]
        if not entry.get("token"):
            logger.warning(f"TELEGRAM_BOT_{index}: задано имя без токена, бот пропущен")
            continue
        configs.append(BotConfig(token=entry["token"], name=entry.get("name")))
    return configs


class BotSyncService:
    async def sync_from_env(self, environ: Optional[Mapping[str, str]] = None) -> List[Bot]:
        """
        Приводит таблицу bots к составу из окружения: перечисленные боты
        активны (создаются при необходимости), остальные деактивируются.
        """
        configs = parse_bot_configs(os.environ if environ is None else environ)

        synced = []
        async with in_transaction() as conn:
            await Bot.all().using_db(conn).update(is_active=False)
            for config in configs:
                bot = await Bot.get_or_none(token=config.token, using_db=conn)
                if bot is None:
                    bot = await Bot.create(token=config.token, name=config.name, is_active=True, using_db=conn)
                    logger.info(f"Зарегистрирован бот {config.name} ({mask_token(config.token)})")
                else:
                    bot.is_active = True
                    if config.name:
                        bot.name = config.name
                    await bot.save(using_db=conn)
                synced.append(bot)

        logger.info(f"Синхронизация ботов завершена: активных {len(synced)}")
        return synced
