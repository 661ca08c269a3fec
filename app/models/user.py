from tortoise import fields, models
import uuid

class User(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    telegram_id = fields.BigIntField(unique=True)
    first_name = fields.CharField(max_length=255, null=True)
    last_name = fields.CharField(max_length=255, null=True)
    username = fields.CharField(max_length=100, null=True)
    language_code = fields.CharField(max_length=16, null=True)
    is_bot = fields.BooleanField(default=False)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    bot_settings: fields.ReverseRelation["UserBot"]
    chat_sessions: fields.ReverseRelation["ChatSession"]

    class Meta:
        table = "users"
