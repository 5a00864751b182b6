"""
bot/events.py
-------------
Transport-neutral inputs handed to the router and the handlers.
"""

from dataclasses import dataclass, field
from typing import Optional

from models.chat import Chat
from models.person import Person


@dataclass(frozen=True)
class IncomingUser:
    id: int
    first_name: str = ""
    last_name: Optional[str] = None
    username: Optional[str] = None
    is_bot: bool = False

    def to_person(self) -> Person:
        return Person(
            id=self.id,
            first_name=self.first_name,
            last_name=self.last_name,
            username=self.username,
        )


@dataclass(frozen=True)
class IncomingChat:
    id: int
    type: str = "private"
    title: Optional[str] = None

    def to_chat(self) -> Chat:
        return Chat(id=self.id, type=self.type, title=self.title)


@dataclass
class IncomingMessage:
    """
    A message as seen by the router.

    Attributes:
        chat: Where the message was posted.
        sender: Author; None for anonymous channel posts.
        text: Message text, empty for service messages.
        message_id: Telegram message ID, used for replies.
        new_members: Users that joined, for `new_chat_members` service messages.
    """
    chat: IncomingChat
    sender: Optional[IncomingUser] = None
    text: str = ""
    message_id: Optional[int] = None
    new_members: list[IncomingUser] = field(default_factory=list)


@dataclass
class Command:
    """A recognised command with its parsed parameters."""
    name: str
    message: IncomingMessage
    args: tuple = ()


@dataclass
class IncomingCallback:
    """A button press on an inline keyboard."""
    query_id: str
    sender: IncomingUser
    data: Optional[str]
    chat: Optional[IncomingChat] = None
    message_id: Optional[int] = None
