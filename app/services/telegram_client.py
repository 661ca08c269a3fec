"""
Telegram Bot API Client для нескольких ботов.
Токен бота передаётся в каждый вызов.
"""
import httpx
import logging
from typing import Optional, Dict, Any, List

from app.core.exceptions import TelegramAPIError
from app.core.logging_config import mask_token

logger = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org/bot"
TELEGRAM_FILE_BASE = "https://api.telegram.org/file/bot"
MAX_MESSAGE_LENGTH = 4096


class TelegramClient:
    """Клиент для работы с Telegram Bot API"""

    def __init__(self, api_base: str = TELEGRAM_API_BASE, file_base: str = TELEGRAM_FILE_BASE, timeout: float = 30.0):
        self.api_base = api_base
        self.file_base = file_base
        self.timeout = timeout

    async def _call(self, bot_token: str, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Вызывает метод Bot API.

        Raises:
            TelegramAPIError: При HTTP ошибке, ответе не в формате JSON или ok=false
        """
        if not bot_token:
            raise TelegramAPIError(f"{method}: не указан токен бота")

        url = f"{self.api_base}{bot_token}/{method}"
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(url, json=payload)
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise TelegramAPIError(f"HTTP ошибка {method}: {e}") from e

        try:
            result = response.json()
        except ValueError as e:
            raise TelegramAPIError(f"Ответ {method} не является JSON: {e}") from e
        if not isinstance(result, dict):
            raise TelegramAPIError(f"Неожиданный формат ответа {method}: {type(result).__name__}")

        if not result.get("ok"):
            error_description = result.get("description", "Unknown error")
            raise TelegramAPIError(f"Telegram API error ({method}): {error_description}")
        return result

    async def send_message(self, bot_token: str, chat_id: int, text: str, parse_mode: Optional[str] = None) -> bool:
        """
        Отправляет сообщение в чат. Ошибки логируются и не пробрасываются.

        Args:
            bot_token: Токен бота-отправителя
            chat_id: ID чата для отправки
            text: Текст сообщения (до 4096 символов)
            parse_mode: Режим парсинга (HTML, Markdown, None)

        Returns:
            True, если Telegram принял сообщение
        """
        if not text or not text.strip():
            logger.warning(f"Пустое сообщение для чата {chat_id} не отправлено")
            return False

        # Обрезаем сообщение если слишком длинное
        if len(text) > MAX_MESSAGE_LENGTH:
            text = text[:MAX_MESSAGE_LENGTH - 3] + "..."
            logger.warning(f"Сообщение обрезано до {MAX_MESSAGE_LENGTH} символов для чата {chat_id}")

        payload: Dict[str, Any] = {"chat_id": chat_id, "text": text}
        if parse_mode:
            payload["parse_mode"] = parse_mode

        try:
            await self._call(bot_token, "sendMessage", payload)
        except TelegramAPIError as e:
            logger.error(f"Ошибка отправки сообщения в чат {chat_id} (бот {mask_token(bot_token)}): {e}")
            return False

        logger.info(f"Сообщение успешно отправлено в чат {chat_id} (бот {mask_token(bot_token)})")
        return True

    async def set_my_commands(self, bot_token: str, commands: List[Dict[str, str]], chat_id: Optional[int] = None) -> bool:
        """
        Устанавливает меню команд бота. Если передан chat_id - только для этого чата.
        Ошибки логируются и не пробрасываются.
        """
        payload: Dict[str, Any] = {"commands": commands}
        if chat_id is not None:
            payload["scope"] = {"type": "chat", "chat_id": chat_id}

        try:
            await self._call(bot_token, "setMyCommands", payload)
        except TelegramAPIError as e:
            logger.error(f"Ошибка установки меню команд (бот {mask_token(bot_token)}, чат {chat_id}): {e}")
            return False

        logger.info(f"Меню команд установлено (бот {mask_token(bot_token)}, чат {chat_id})")
        return True

    async def get_file(self, bot_token: str, file_id: str) -> Optional[Dict[str, Any]]:
        """Информация о файле (включая file_path) или None при ошибке"""
        try:
            result = await self._call(bot_token, "getFile", {"file_id": file_id})
        except TelegramAPIError as e:
            logger.error(f"Ошибка получения информации о файле {file_id}: {e}")
            return None
        return result.get("result")

    async def download_file(self, bot_token: str, file_path: str) -> bytes:
        """
        Скачивает файл с серверов Telegram.

        Raises:
            TelegramAPIError: При ошибке загрузки
        """
        url = f"{self.file_base}{bot_token}/{file_path}"
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(url)
                response.raise_for_status()
            except httpx.HTTPError as e:
                logger.error(f"HTTP ошибка при загрузке файла {file_path}: {e}")
                raise TelegramAPIError(f"Failed to download file: {e}") from e

        logger.info(f"Файл {file_path} загружен, {len(response.content)} байт")
        return response.content
