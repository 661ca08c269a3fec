from tortoise import fields, models
import uuid

class Bot(models.Model):
    """Зарегистрированный Telegram бот (синхронизируется из переменных окружения)"""
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    token = fields.CharField(max_length=255, unique=True)
    name = fields.CharField(max_length=255, null=True)
    username = fields.CharField(max_length=255, null=True)
    telegram_id = fields.BigIntField(unique=True, null=True)
    is_active = fields.BooleanField(default=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    user_settings: fields.ReverseRelation["UserBot"]
    chat_sessions: fields.ReverseRelation["ChatSession"]

    class Meta:
        table = "bots"

    def __str__(self):
        return f"Bot(id={self.id}, name={self.name})"
