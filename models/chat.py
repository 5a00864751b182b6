"""
models/chat.py
--------------
Domain model for a conversation the bot takes part in.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Chat:
    """
    Attributes:
        id: Telegram chat ID.
        type: 'private' | 'group' | 'supergroup' | 'channel'.
        title: Group title (None for private chats).
        created_at: First time the chat was registered.
        updated_at: Last time the chat was upserted.
    """
    id: int
    type: str = "private"
    title: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_group(self) -> bool:
        return self.type in ("group", "supergroup")
