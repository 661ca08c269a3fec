"""
Меню команд и тексты ответов бота.
"""
from typing import Dict, List

# Команды основного меню
STANDARD_COMMANDS: List[Dict[str, str]] = [
    {"command": "start", "description": "Start the bot and get welcome message"},
    {"command": "bots", "description": "List all available bots and their settings"},
    {"command": "setprompt", "description": "Set a custom prompt for this bot"},
    {"command": "cancel", "description": "Cancel current operation"},
]

# Контекстное меню на время ввода промпта
CONTEXTUAL_COMMANDS: List[Dict[str, str]] = [
    {"command": "cancel", "description": "Cancel current operation"},
]

WELCOME_TEMPLATE = "Hello, {first_name}! Welcome to the bot. You can now use commands like /bots and /setprompt."

PROMPT_REQUEST_TEXT = (
    "🤖 Please enter your new system prompt for this bot.\n\n"
    "This will define how the bot behaves and responds to your messages.\n\n"
    '💡 Example: "You are a helpful coding assistant who explains concepts clearly."\n\n'
    "To cancel, send /cancel"
)
PROMPT_SAVED_TEXT = "✅ Prompt successfully updated! Your bot will now behave according to your instructions."
PROMPT_EXPIRED_FALLTHROUGH_TEXT = "⏰ Prompt input mode has expired. Processing your message normally."
PROMPT_EXPIRED_TEXT = "⏰ Prompt input mode has expired. Operation cancelled."
CANCELLED_TEXT = "❌ Operation cancelled. You can start a new command anytime."

USER_NOT_FOUND_TEXT = "I can't find your user profile. Please type /start first."
BOT_NOT_REGISTERED_TEXT = "Error: This bot is not registered."
START_FIRST_TEXT = "An error occurred. Please try using the /start command first."
NO_BOTS_TEXT = "There are no bots available currently."

START_ERROR_TEXT = "An error occurred. Please try again later."
SET_PROMPT_ERROR_TEXT = "Sorry, an error occurred while processing your request."
BOTS_ERROR_TEXT = "Sorry, an error occurred while fetching the bot list."
CANCEL_ERROR_TEXT = "Sorry, an error occurred while cancelling the operation."
MESSAGE_ERROR_TEXT = "Sorry, I encountered an error while processing your message."
VOICE_ERROR_TEXT = "Sorry, I encountered an error while transcribing your audio. Please try again later."
UNRECOGNIZED_AUDIO_TEXT = "I couldn't understand the audio. Could you please try again?"
