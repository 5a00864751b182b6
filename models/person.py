"""
models/person.py
----------------
Domain model for a human participant.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Person:
    """
    A Telegram user the bot has seen at least once.

    Attributes:
        id: Telegram user ID (stable identity).
        first_name: First name as reported by Telegram.
        last_name: Optional last name.
        username: Optional @username without the leading "@".
        created_at: When the bot first observed this person.
    """
    id: int
    first_name: str = ""
    last_name: Optional[str] = None
    username: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        full = " ".join(p for p in (self.first_name, self.last_name) if p)
        if full:
            return full
        if self.username:
            return f"@{self.username}"
        return str(self.id)

    def __str__(self) -> str:
        return self.display_name
