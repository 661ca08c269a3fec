from tortoise import fields, models
from tortoise.indexes import Index

from app.schemas.chat import SessionState


class ChatSession(models.Model):
    """Состояние и история переписки одного Telegram чата"""
    chat_id = fields.BigIntField(pk=True, generated=False, description="ID чата Telegram")
    # NULL - заглушка, пока связь с пользователем/ботом неизвестна
    user = fields.ForeignKeyField("models.User", related_name="chat_sessions", null=True, on_delete=fields.CASCADE)
    bot = fields.ForeignKeyField("models.Bot", related_name="chat_sessions", null=True, on_delete=fields.CASCADE)
    state = fields.CharEnumField(SessionState, default=SessionState.IDLE, max_length=32)
    state_expires_at = fields.DatetimeField(null=True)
    history = fields.TextField(null=True)  # JSON список сообщений {role, content}
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "chat_sessions"
        indexes = [
            Index(fields=["state", "state_expires_at"], name="idx_chat_sessions_state_expiry"),
        ]

    def __str__(self):
        return f"ChatSession(chat_id={self.chat_id}, state={self.state})"
