"""
models/reply.py
---------------
Effects produced by command handlers.
Handlers never talk to Telegram themselves; they return these objects and the
router hands them to the transport.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Button:
    """An inline keyboard button carrying an opaque callback payload."""
    text: str
    callback_data: str


@dataclass
class Reply:
    """
    A message to send.

    Attributes:
        chat_id: Target chat.
        text: Message body.
        buttons: Inline keyboard rows, empty for none.
        parse_mode: Telegram parse mode ("Markdown", "HTML") or None.
        edit_message_id: If set, edit that message instead of sending a new one.
    """
    chat_id: int
    text: str
    buttons: list[list[Button]] = field(default_factory=list)
    parse_mode: Optional[str] = None
    edit_message_id: Optional[int] = None


@dataclass
class CallbackAnswer:
    """Acknowledgement of a button press (the small toast in the client)."""
    query_id: str
    text: Optional[str] = None
