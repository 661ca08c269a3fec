"""
Исключения приложения.
"""


class TelegramAPIError(Exception):
    """Ошибка вызова Telegram Bot API"""


class AIProviderError(Exception):
    """Ошибка обращения к AI/ASR провайдеру"""


class ProviderConfigurationError(AIProviderError):
    """Провайдер не может быть создан с текущими настройками (например, нет API ключа)"""


class UnsupportedProviderError(ValueError):
    """Неизвестное имя провайдера в конфигурации"""
