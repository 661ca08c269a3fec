import html
import logging
from typing import List

from app.models.bot import Bot
from app.schemas.telegram import TelegramMessage
from app.services.constants import BOTS_ERROR_TEXT, NO_BOTS_TEXT, USER_NOT_FOUND_TEXT
from app.services.container import BotServices

logger = logging.getLogger(__name__)


def _bot_link(bot: Bot) -> str:
    name = html.escape(bot.name or f"Bot ID {bot.id}")
    if bot.username:
        return f'<a href="https://t.me/{html.escape(bot.username)}">{name}</a>'
    return name


def format_bots_list(all_bots: List[Bot], prompts: dict) -> str:
    """Список ботов: сначала настроенные (с промптом), затем доступные"""
    configured = [bot for bot in all_bots if bot.id in prompts]
    available = [bot for bot in all_bots if bot.id not in prompts]

    lines = ["🤖 <b>Your Bots</b>", ""]

    if configured:
        lines.append("<b>✅ Configured Bots:</b>")
        for bot in configured:
            lines.append(f"🤖 {_bot_link(bot)}")
            lines.append(f"   <i>Prompt:</i> <code>{html.escape(prompts[bot.id] or '')}</code>")
            lines.append("")

    if available:
        lines.append("<b>📋 Available Bots:</b>")
        for bot in available:
            lines.append(f"🤖 {_bot_link(bot)}")
            lines.append("   <i>Status:</i> Using default prompt")
            lines.append("")

    lines.append("💡 <i>Tip:</i> Use /setprompt to customize any bot's behavior!")
    return "\n".join(lines)


async def handle_bots_command(services: BotServices, bot_token: str, message: TelegramMessage) -> None:
    """/bots: настроенные и доступные боты пользователя"""
    chat_id = message.chat.id
    telegram_user_id = message.from_.id if message.from_ else None

    if telegram_user_id is None:
        logger.warning(f"/bots в чате {chat_id}: нет ID пользователя")
        return

    try:
        user = await services.users.get_by_telegram(telegram_user_id)
        if user is None:
            await services.telegram.send_message(bot_token, chat_id, USER_NOT_FOUND_TEXT)
            return

        all_bots = await services.bots.list_active()
        if not all_bots:
            await services.telegram.send_message(bot_token, chat_id, NO_BOTS_TEXT)
            return

        prompts = await services.user_bots.prompts_by_bot(user.id)
        await services.telegram.send_message(bot_token, chat_id, format_bots_list(all_bots, prompts), parse_mode="HTML")
        logger.info(f"/bots: список ботов отправлен в чат {chat_id}")
    except Exception:
        logger.exception(f"Ошибка обработки /bots в чате {chat_id}")
        await services.telegram.send_message(bot_token, chat_id, BOTS_ERROR_TEXT)
