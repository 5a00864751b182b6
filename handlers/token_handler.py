"""
handlers/token_handler.py
--------------------------
Handles /token <value>: runs the registration workflow for the sender.
The sender always gets an answer, whether the token was accepted or not.
"""

from bot.context import BotContext
from bot.events import Command
from handlers import messages
from handlers.callback_data import encode
from models.reply import Button, Reply
from utils.errors import ConflictError, NotFoundError, TokenExpiredError
from utils.logger import get_logger

logger = get_logger(__name__)


def _rejection_text(error: Exception) -> str:
    if isinstance(error, TokenExpiredError):
        return messages.TOKEN_EXPIRED
    if isinstance(error, NotFoundError):
        return messages.TOKEN_UNKNOWN
    if isinstance(error, ConflictError):
        return messages.TOKEN_TAKEN
    return messages.TOKEN_UNKNOWN


async def token_command(command: Command, ctx: BotContext) -> list[Reply]:
    message = command.message
    sender = message.sender
    if sender is None or sender.is_bot:
        logger.warning(f"/token without a human sender in chat {message.chat.id}")
        return []

    (value,) = command.args
    redemption = await ctx.user_data.register(sender.to_person(), value)

    if not redemption.ok:
        return [Reply(chat_id=message.chat.id, text=_rejection_text(redemption.error))]

    application = redemption.application
    if redemption.repeated:
        text = messages.TOKEN_REPEATED.format(id=application.id, status=application.status.value)
    else:
        text = messages.TOKEN_ACCEPTED.format(id=application.id)

    buttons = []
    if not application.is_confirmed():
        buttons = [[Button(messages.CONFIRM_BUTTON, encode("confirm", application.id))]]
    return [Reply(chat_id=message.chat.id, text=text, buttons=buttons)]
