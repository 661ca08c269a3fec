from tortoise import Tortoise
from app.core.config import get_settings

MODEL_MODULES = [
    "app.models.user",
    "app.models.bot",
    "app.models.user_bot",
    "app.models.chat_session",
]


def get_tortoise_config(db_url: str | None = None) -> dict:
    """Конфигурация Tortoise ORM (используется и приложением, и aerich)"""
    settings = get_settings()
    return {
        "connections": {"default": db_url or settings.database_url},
        "apps": {
            "models": {
                "models": [*MODEL_MODULES, "aerich.models"],
                "default_connection": "default",
            }
        },
        "use_tz": True,
        "timezone": "UTC",
    }


TORTOISE_ORM = get_tortoise_config()


async def init_db(generate_schemas: bool = False) -> None:
    await Tortoise.init(config=get_tortoise_config())
    # Generate schemas only in dev (migrations handle prod)
    if generate_schemas:
        await Tortoise.generate_schemas()


async def close_db() -> None:
    await Tortoise.close_connections()
