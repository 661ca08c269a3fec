"""
Тесты обработчиков команд /start, /setprompt, /cancel, /bots
"""
import pytest
from unittest.mock import AsyncMock

from app.models.bot import Bot
from app.models.user import User
from app.models.user_bot import UserBot
from app.schemas.chat import SessionState
from app.services.commands.bots import format_bots_list, handle_bots_command
from app.services.commands.cancel import handle_cancel_command
from app.services.commands.set_prompt import handle_set_prompt_command
from app.services.commands.start import handle_start_command
from app.services.constants import (
    BOT_NOT_REGISTERED_TEXT,
    CANCEL_ERROR_TEXT,
    CANCELLED_TEXT,
    NO_BOTS_TEXT,
    PROMPT_REQUEST_TEXT,
    SET_PROMPT_ERROR_TEXT,
    STANDARD_COMMANDS,
    USER_NOT_FOUND_TEXT,
)

from conftest import BOT_TOKEN

pytestmark = pytest.mark.database


@pytest.mark.asyncio
async def test_start_creates_user_and_sets_menu(services, telegram, make_message, db):
    await handle_start_command(services, BOT_TOKEN, make_message("/start", user_id=77, first_name="Bob"))

    user = await User.get(telegram_id=77)
    assert user.first_name == "Bob"
    welcome = telegram.send_message.await_args.args[2]
    assert welcome.startswith("Hello, Bob!")
    telegram.set_my_commands.assert_awaited_once_with(BOT_TOKEN, STANDARD_COMMANDS, chat_id=1001)


@pytest.mark.asyncio
async def test_start_twice_keeps_single_user(services, make_message, db):
    await handle_start_command(services, BOT_TOKEN, make_message("/start", user_id=77))
    await handle_start_command(services, BOT_TOKEN, make_message("/start", user_id=77))
    assert await User.filter(telegram_id=77).count() == 1


@pytest.mark.asyncio
async def test_start_without_sender_is_ignored(services, telegram, make_message):
    await handle_start_command(services, BOT_TOKEN, make_message("/start", user_id=None))
    telegram.send_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_setprompt_enters_awaiting_state(services, telegram, make_message, user, bot):
    await handle_set_prompt_command(services, BOT_TOKEN, make_message("/setprompt"))

    session = await services.sessions.get(1001)
    assert session.state == SessionState.AWAITING_PROMPT
    assert session.bot_id == bot.id
    telegram.send_message.assert_awaited_once_with(BOT_TOKEN, 1001, PROMPT_REQUEST_TEXT)


@pytest.mark.asyncio
async def test_setprompt_unknown_user(services, telegram, make_message, bot):
    await handle_set_prompt_command(services, BOT_TOKEN, make_message("/setprompt", user_id=555))

    telegram.send_message.assert_awaited_once_with(BOT_TOKEN, 1001, USER_NOT_FOUND_TEXT)
    assert await services.sessions.get(1001) is None


@pytest.mark.asyncio
async def test_setprompt_unregistered_bot(services, telegram, make_message, user):
    await handle_set_prompt_command(services, BOT_TOKEN, make_message("/setprompt"))
    telegram.send_message.assert_awaited_once_with(BOT_TOKEN, 1001, BOT_NOT_REGISTERED_TEXT)


@pytest.mark.asyncio
async def test_setprompt_error_sends_apology(services, telegram, make_message, user, bot):
    services.state_machine.begin_prompt_input = AsyncMock(side_effect=RuntimeError("db down"))

    await handle_set_prompt_command(services, BOT_TOKEN, make_message("/setprompt"))

    telegram.send_message.assert_awaited_once_with(BOT_TOKEN, 1001, SET_PROMPT_ERROR_TEXT)


@pytest.mark.asyncio
async def test_cancel_from_idle(services, telegram, make_message):
    await handle_cancel_command(services, BOT_TOKEN, make_message("/cancel"))

    assert (await services.sessions.get(1001)).state == SessionState.IDLE
    telegram.send_message.assert_awaited_once_with(BOT_TOKEN, 1001, CANCELLED_TEXT)


@pytest.mark.asyncio
async def test_cancel_error_sends_apology(services, telegram, make_message):
    services.state_machine.cancel = AsyncMock(side_effect=RuntimeError("db down"))

    await handle_cancel_command(services, BOT_TOKEN, make_message("/cancel"))

    telegram.send_message.assert_awaited_once_with(BOT_TOKEN, 1001, CANCEL_ERROR_TEXT)


@pytest.mark.asyncio
async def test_bots_lists_configured_and_available(services, telegram, make_message, user, bot):
    await Bot.create(token="999:OTHER", name="Writer <pro>")
    await Bot.create(token="888:OFF", name="Disabled", is_active=False)
    await UserBot.create(user=user, bot=bot, prompt="Be concise")

    await handle_bots_command(services, BOT_TOKEN, make_message("/bots"))

    call = telegram.send_message.await_args
    text = call.args[2]
    assert call.kwargs["parse_mode"] == "HTML"
    assert '<a href="https://t.me/helper_bot">Helper</a>' in text
    assert "<code>Be concise</code>" in text
    assert "Writer &lt;pro&gt;" in text
    assert "Disabled" not in text
    assert text.index("Configured Bots") < text.index("Available Bots")


@pytest.mark.asyncio
async def test_bots_without_active_bots(services, telegram, make_message, user):
    await handle_bots_command(services, BOT_TOKEN, make_message("/bots"))
    telegram.send_message.assert_awaited_once_with(BOT_TOKEN, 1001, NO_BOTS_TEXT)


@pytest.mark.asyncio
async def test_bots_unknown_user(services, telegram, make_message, bot):
    await handle_bots_command(services, BOT_TOKEN, make_message("/bots", user_id=555))
    telegram.send_message.assert_awaited_once_with(BOT_TOKEN, 1001, USER_NOT_FOUND_TEXT)


def test_format_bots_list_only_available():
    bot = Bot(token="t", name="Solo")
    text = format_bots_list([bot], {})
    assert "Configured Bots" not in text
    assert "Using default prompt" in text
