"""
models/application.py
---------------------
Domain model for the registration record created when a token is redeemed.
"""

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


class ApplicationStatus(str, enum.Enum):
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"


@dataclass
class Application:
    """
    Links a Person to the Token they redeemed.

    Attributes:
        person_id: Telegram user ID of the owner (lookup only).
        token_id: The redeemed token; at most one Application per token.
        status: Submitted on redemption, confirmed by the owner afterwards.
        id: Database primary key (None for new records).
        created_at: Timestamp when the record was created.
    """
    person_id: int
    token_id: int
    status: ApplicationStatus = ApplicationStatus.SUBMITTED
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def is_confirmed(self) -> bool:
        return self.status == ApplicationStatus.CONFIRMED

    def __str__(self) -> str:
        return f"#{self.id} ({self.status.value})"
