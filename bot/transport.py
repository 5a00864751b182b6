"""
bot/transport.py
----------------
The chat-platform client as the router sees it, and its Telegram implementation.
"""

from dataclasses import dataclass
from typing import Optional, Protocol

from telegram import Bot, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.error import TelegramError

from models.reply import Button, CallbackAnswer, Reply
from utils.errors import TransportError
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class BotIdentity:
    id: int
    username: Optional[str] = None


class Transport(Protocol):
    async def get_me(self) -> BotIdentity: ...

    async def send(self, reply: Reply) -> None: ...

    async def answer(self, answer: CallbackAnswer) -> None: ...


def to_markup(rows: list[list[Button]]) -> Optional[InlineKeyboardMarkup]:
    """Convert handler buttons into a Telegram inline keyboard."""
    if not rows:
        return None
    return InlineKeyboardMarkup(
        [[InlineKeyboardButton(b.text, callback_data=b.callback_data) for b in row] for row in rows]
    )


class TelegramTransport:
    """Transport backed by a python-telegram-bot `Bot`. Every TelegramError becomes a TransportError."""

    def __init__(self, bot: Bot):
        self.bot = bot

    async def get_me(self) -> BotIdentity:
        try:
            me = await self.bot.get_me()
        except TelegramError as e:
            raise TransportError(f"getMe failed: {e}") from e
        return BotIdentity(id=me.id, username=me.username)

    async def send(self, reply: Reply) -> None:
        markup = to_markup(reply.buttons)
        try:
            if reply.edit_message_id is not None:
                await self.bot.edit_message_text(
                    chat_id=reply.chat_id,
                    message_id=reply.edit_message_id,
                    text=reply.text,
                    parse_mode=reply.parse_mode,
                    reply_markup=markup,
                )
            else:
                await self.bot.send_message(
                    chat_id=reply.chat_id,
                    text=reply.text,
                    parse_mode=reply.parse_mode,
                    reply_markup=markup,
                )
        except TelegramError as e:
            raise TransportError(f"sending to chat {reply.chat_id} failed: {e}") from e

    async def answer(self, answer: CallbackAnswer) -> None:
        try:
            await self.bot.answer_callback_query(answer.query_id, text=answer.text)
        except TelegramError as e:
            raise TransportError(f"answering callback {answer.query_id} failed: {e}") from e
