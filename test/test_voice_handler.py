"""
Тесты обработки голосовых сообщений
"""
import pytest

from app.core.exceptions import AIProviderError, TelegramAPIError
from app.services.constants import UNRECOGNIZED_AUDIO_TEXT, VOICE_ERROR_TEXT
from app.services.voice_handler import handle_voice_message

from conftest import BOT_TOKEN

pytestmark = pytest.mark.database

VOICE = {"file_id": "voice-1", "file_unique_id": "u-1", "duration": 3, "mime_type": "audio/ogg"}


@pytest.fixture
def telegram_with_file(telegram):
    telegram.get_file.return_value = {"file_id": "voice-1", "file_path": "voice/file_0.oga"}
    telegram.download_file.return_value = b"OggS-audio"
    return telegram


@pytest.mark.asyncio
async def test_voice_is_transcribed_and_answered(services, telegram_with_file, ai_provider, make_message, user, bot):
    await handle_voice_message(services, BOT_TOKEN, make_message(voice=VOICE))

    telegram_with_file.get_file.assert_awaited_once_with(BOT_TOKEN, "voice-1")
    telegram_with_file.download_file.assert_awaited_once_with(BOT_TOKEN, "voice/file_0.oga")
    ai_provider.transcribe_audio.assert_awaited_once_with(b"OggS-audio")

    messages = ai_provider.generate_text_response.await_args.args[0]
    assert messages[-1].content == "hello from voice"
    telegram_with_file.send_message.assert_awaited_once_with(BOT_TOKEN, 1001, "AI reply")


@pytest.mark.asyncio
async def test_voice_can_set_prompt(services, telegram_with_file, ai_provider, make_message, user, bot):
    await services.state_machine.begin_prompt_input(BOT_TOKEN, 1001, user.id, bot.id)
    ai_provider.transcribe_audio.return_value = "Answer like a pirate"

    await handle_voice_message(services, BOT_TOKEN, make_message(voice=VOICE))

    assert await services.user_bots.get_prompt(user.id, bot.id) == "Answer like a pirate"
    ai_provider.generate_text_response.assert_not_awaited()


@pytest.mark.asyncio
async def test_empty_transcription(services, telegram_with_file, ai_provider, make_message, user, bot):
    ai_provider.transcribe_audio.return_value = "  "

    await handle_voice_message(services, BOT_TOKEN, make_message(voice=VOICE))

    telegram_with_file.send_message.assert_awaited_once_with(BOT_TOKEN, 1001, UNRECOGNIZED_AUDIO_TEXT)
    ai_provider.generate_text_response.assert_not_awaited()


@pytest.mark.asyncio
async def test_transcription_failure(services, telegram_with_file, ai_provider, make_message):
    ai_provider.transcribe_audio.side_effect = AIProviderError("whisper down")

    await handle_voice_message(services, BOT_TOKEN, make_message(voice=VOICE))

    telegram_with_file.send_message.assert_awaited_once_with(BOT_TOKEN, 1001, VOICE_ERROR_TEXT)


@pytest.mark.asyncio
async def test_download_failure(services, telegram_with_file, ai_provider, make_message):
    telegram_with_file.download_file.side_effect = TelegramAPIError("404")

    await handle_voice_message(services, BOT_TOKEN, make_message(voice=VOICE))

    telegram_with_file.send_message.assert_awaited_once_with(BOT_TOKEN, 1001, VOICE_ERROR_TEXT)
    ai_provider.transcribe_audio.assert_not_awaited()


@pytest.mark.asyncio
async def test_file_info_unavailable(services, telegram, ai_provider, make_message):
    telegram.get_file.return_value = None

    await handle_voice_message(services, BOT_TOKEN, make_message(voice=VOICE))

    telegram.send_message.assert_awaited_once_with(BOT_TOKEN, 1001, VOICE_ERROR_TEXT)
    telegram.download_file.assert_not_awaited()
