"""
handlers/start_handler.py
--------------------------
Handles /start (also synthesised when the bot is added to a group) and /help.
"""

from bot.context import BotContext
from bot.events import Command
from handlers import messages
from models.reply import Reply
from utils.logger import get_logger

logger = get_logger(__name__)


async def start_command(command: Command, ctx: BotContext) -> list[Reply]:
    """Register the chat (and the sender) and show the welcome message."""
    message = command.message
    chat = await ctx.chats.upsert(message.chat.to_chat())

    sender = message.sender
    lines = []
    if chat.is_group():
        lines.append(messages.WELCOME_GROUP.format(title=chat.title or "everyone"))
    elif sender is not None:
        lines.append(messages.WELCOME_PRIVATE.format(name=sender.first_name or sender.username or "there"))

    if sender is not None and not sender.is_bot:
        person = await ctx.persons.upsert(sender.to_person())
        logger.info(f"Person {person.id} ({person.display_name}) started the bot in chat {chat.id}")
        if not chat.is_group():
            data = await ctx.user_data.get(person.id)
            if data.is_registered():
                latest = data.applications[-1]
                lines.append(messages.ALREADY_REGISTERED.format(application=latest))

    lines.append("")
    lines.append(messages.HELP_TEXT)
    return [Reply(chat_id=chat.id, text="\n".join(lines))]


async def help_command(command: Command, ctx: BotContext) -> list[Reply]:
    """Show all available commands."""
    return [Reply(chat_id=command.message.chat.id, text=messages.HELP_TEXT)]
