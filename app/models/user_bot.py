from tortoise import fields, models


class UserBot(models.Model):
    """Настройки пользователя для конкретного бота (кастомный системный промпт)"""
    id = fields.IntField(pk=True)
    user = fields.ForeignKeyField("models.User", related_name="bot_settings", on_delete=fields.CASCADE)
    bot = fields.ForeignKeyField("models.Bot", related_name="user_settings", on_delete=fields.CASCADE)
    prompt = fields.TextField(null=True, description="Кастомный системный промпт")
    is_active = fields.BooleanField(default=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "user_bots"
        unique_together = (("user_id", "bot_id"),)
