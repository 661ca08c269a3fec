from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Параметры базы данных
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=5432)
    db_name: str = Field(default="promptbot")
    db_user: str = Field(default="user")
    db_password: str = Field(default="password")
    db_url: Optional[str] = Field(default=None)

    log_level: str = Field(default="INFO")

    # AI / ASR провайдеры
    ai_provider: str = Field(default="openai")
    asr_provider: str = Field(default="openai")
    openai_api_key: str | None = Field(default=None)
    openai_base_url: str | None = Field(default=None)
    openai_model: str = Field(default="gpt-3.5-turbo")
    openai_transcription_model: str = Field(default="whisper-1")
    gemini_api_key: str | None = Field(default=None)
    gemini_model: str = Field(default="gemini-1.5-flash-latest")
    google_speech_api_key: str | None = Field(default=None)

    # Telegram
    telegram_webhook_secret: str | None = Field(default=None)

    # Сессии чатов
    default_system_prompt: str = Field(default="You are a helpful assistant.")
    prompt_input_ttl_minutes: int = Field(default=5)
    sweep_interval_seconds: float = Field(default=30.0)
    max_history_messages: int = Field(default=1000)
    enable_scheduler: bool = Field(default=True)

    @property
    def postgres_dsn(self) -> str:
        """Конструирует DSN для PostgreSQL из отдельных параметров"""
        return f"postgres://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def database_url(self) -> str:
        """DB_URL имеет приоритет над отдельными параметрами PostgreSQL"""
        return self.db_url or self.postgres_dsn


settings = None

def get_settings() -> Settings:
    """Получить настройки приложения с ленивой инициализацией"""
    global settings
    if settings is None:
        settings = Settings()
    return settings

def reset_settings():
    """Сбросить кэшированные настройки (для тестирования)"""
    global settings
    settings = None
