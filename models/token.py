"""
models/token.py
---------------
Domain model for registration tokens and the outcome of redeeming one.
"""

import enum
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from models.application import Application


class TokenState(str, enum.Enum):
    UNREDEEMED = "unredeemed"
    REDEEMED = "redeemed"
    EXPIRED = "expired"


class RedemptionStatus(str, enum.Enum):
    """Stages of a (Person, Token) pair during registration."""
    PRESENTED = "presented"
    VALIDATED = "validated"
    REDEEMED = "redeemed"
    REJECTED = "rejected"


@dataclass
class Token:
    """
    A single-use credential.

    Attributes:
        value: The string a person types after /token.
        expires_at: End of the validity window, None if it never expires.
        redeemed_by: Person ID that redeemed it, None while unredeemed.
        redeemed_at: When the redemption happened.
        id: Database primary key (None for new records).
        created_at: Timestamp when the token was issued.
    """
    value: str
    expires_at: Optional[datetime] = None
    redeemed_by: Optional[int] = None
    redeemed_at: Optional[datetime] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def is_redeemed(self) -> bool:
        return self.redeemed_by is not None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return self.expires_at <= now

    def state(self, now: Optional[datetime] = None) -> TokenState:
        # A redeemed token stays redeemed after its window closes.
        if self.is_redeemed():
            return TokenState.REDEEMED
        if self.is_expired(now):
            return TokenState.EXPIRED
        return TokenState.UNREDEEMED


@dataclass
class Redemption:
    """
    Result of `TokenService.redeem`.

    Attributes:
        status: REDEEMED or REJECTED once the workflow finished.
        token: The token looked up, if it exists.
        application: The linked Application on success.
        error: The domain error explaining a rejection.
        repeated: True when the same person had already redeemed this token.
    """
    status: RedemptionStatus
    token: Optional[Token] = None
    application: Optional[Application] = None
    error: Optional[Exception] = None
    repeated: bool = False

    @property
    def ok(self) -> bool:
        return self.status == RedemptionStatus.REDEEMED
