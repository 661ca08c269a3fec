"""
Голосовые сообщения: распознавание и передача текста в обработчик текста.
"""
import logging

from app.schemas.telegram import TelegramMessage
from app.services.constants import UNRECOGNIZED_AUDIO_TEXT, VOICE_ERROR_TEXT
from app.services.container import BotServices
from app.services.message_handler import handle_text_message

logger = logging.getLogger(__name__)


async def handle_voice_message(services: BotServices, bot_token: str, message: TelegramMessage) -> None:
    chat_id = message.chat.id
    voice = message.voice
    if voice is None:
        logger.warning(f"Чат {chat_id}: handle_voice_message вызван для сообщения без голоса")
        return

    logger.info(f"Чат {chat_id}: голосовое сообщение {voice.file_id} ({voice.duration} с, {voice.mime_type})")

    try:
        file_info = await services.telegram.get_file(bot_token, voice.file_id)
        if not file_info or not file_info.get("file_path"):
            logger.error(f"Чат {chat_id}: не удалось получить информацию о файле {voice.file_id}")
            await services.telegram.send_message(bot_token, chat_id, VOICE_ERROR_TEXT)
            return

        audio = await services.telegram.download_file(bot_token, file_info["file_path"])
        transcribed_text = await services.asr_provider.transcribe_audio(audio)
    except Exception:
        logger.exception(f"Чат {chat_id}: ошибка распознавания голосового сообщения")
        await services.telegram.send_message(bot_token, chat_id, VOICE_ERROR_TEXT)
        return

    if not transcribed_text.strip():
        await services.telegram.send_message(bot_token, chat_id, UNRECOGNIZED_AUDIO_TEXT)
        return

    logger.info(f"Чат {chat_id}: распознан текст: {transcribed_text[:100]}")
    text_message = message.model_copy(update={"text": transcribed_text, "voice": None})
    await handle_text_message(services, bot_token, text_message)
