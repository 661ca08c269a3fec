from tortoise import BaseDBAsyncClient

RUN_IN_TRANSACTION = True


async def upgrade(db: BaseDBAsyncClient) -> str:
    return """
        CREATE TABLE IF NOT EXISTS "users" (
    "id" UUID NOT NULL PRIMARY KEY,
    "telegram_id" BIGINT NOT NULL UNIQUE,
    "first_name" VARCHAR(255),
    "last_name" VARCHAR(255),
    "username" VARCHAR(100),
    "language_code" VARCHAR(16),
    "is_bot" BOOL NOT NULL DEFAULT False,
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE IF NOT EXISTS "bots" (
    "id" UUID NOT NULL PRIMARY KEY,
    "token" VARCHAR(255) NOT NULL UNIQUE,
    "name" VARCHAR(255),
    "username" VARCHAR(255),
    "telegram_id" BIGINT UNIQUE,
    "is_active" BOOL NOT NULL DEFAULT True,
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE IF NOT EXISTS "user_bots" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "prompt" TEXT,
    "is_active" BOOL NOT NULL DEFAULT True,
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "bot_id" UUID NOT NULL REFERENCES "bots" ("id") ON DELETE CASCADE,
    "user_id" UUID NOT NULL REFERENCES "users" ("id") ON DELETE CASCADE,
    CONSTRAINT "uid_user_bots_user_id_bot_id" UNIQUE ("user_id", "bot_id")
);
COMMENT ON COLUMN "user_bots"."prompt" IS 'Кастомный системный промпт';
CREATE TABLE IF NOT EXISTS "chat_sessions" (
    "chat_id" BIGINT NOT NULL PRIMARY KEY,
    "state" VARCHAR(32) NOT NULL DEFAULT 'idle',
    "state_expires_at" TIMESTAMPTZ,
    "history" TEXT,
    "updated_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "bot_id" UUID REFERENCES "bots" ("id") ON DELETE CASCADE,
    "user_id" UUID REFERENCES "users" ("id") ON DELETE CASCADE
);
CREATE INDEX IF NOT EXISTS "idx_chat_sessions_state_expiry" ON "chat_sessions" ("state", "state_expires_at");
COMMENT ON COLUMN "chat_sessions"."chat_id" IS 'ID чата Telegram';
COMMENT ON COLUMN "chat_sessions"."state" IS 'IDLE: idle\nAWAITING_PROMPT: awaiting_prompt';
CREATE TABLE IF NOT EXISTS "aerich" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "version" VARCHAR(255) NOT NULL,
    "app" VARCHAR(100) NOT NULL,
    "content" JSONB NOT NULL
);"""


async def downgrade(db: BaseDBAsyncClient) -> str:
    return """
        DROP TABLE IF EXISTS "chat_sessions";
        DROP TABLE IF EXISTS "user_bots";
        DROP TABLE IF EXISTS "bots";
        DROP TABLE IF EXISTS "users";"""
