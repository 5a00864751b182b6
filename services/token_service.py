"""
services/token_service.py
--------------------------
Business logic for registration tokens.

Redemption is a small state machine over a (Person, Token) pair:

    PRESENTED ──lookup──▶ VALIDATED ──claim──▶ REDEEMED
        │                     │
        └──────────────▶ REJECTED ◀────────────┘

A token already redeemed by the same person is an idempotent success; the
existing Application is returned. The claim itself is a conditional write
in the repository, so concurrent redemptions have exactly one winner.
"""

import asyncio
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Iterable, Optional

from models.token import Redemption, RedemptionStatus, Token
from repositories.token_repo import TokenRepository
from services.application_service import ApplicationService
from storages.memory_storage import MemoryStorage
from utils.errors import BotError, ConflictError, NotFoundError, TokenExpiredError
from utils.locks import KeyedLock
from utils.logger import get_logger

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """
    Handles issuing, validating and redeeming tokens.

    Workflow of `redeem`:
        1. Look the token up by value (REJECTED if absent or expired).
        2. Already redeemed: same person → REDEEMED (repeated), else REJECTED.
        3. Claim it with a compare-and-swap; the loser re-reads and goes to 2.
        4. Create or fetch the Application linked to the person.
    """

    def __init__(
        self,
        repo: TokenRepository,
        storage: MemoryStorage,
        application_service: ApplicationService,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.repo = repo
        self.storage = storage
        self.applications = application_service
        self._clock = clock
        self._locks = KeyedLock()

    # ── ISSUE ─────────────────────────────────────────────

    async def issue(self, value: str, expires_at: Optional[datetime] = None) -> Token:
        """Issue a token; issuing an existing value returns the stored token unchanged."""
        token = await asyncio.to_thread(self.repo.add, Token(value=value, expires_at=expires_at))
        self.storage.set(token.value, token)
        return token

    async def seed(self, values: Iterable[str], ttl: Optional[timedelta] = None) -> list[Token]:
        """
        Issue every configured token value at start-up.

        Args:
            values: Token strings, typically from REGISTRATION_TOKENS.
            ttl: Validity window from now; None means no expiry.
        """
        expires_at = self._clock() + ttl if ttl else None
        tokens = [await self.issue(value, expires_at) for value in values]
        if tokens:
            logger.info(f"Seeded {len(tokens)} registration token(s)")
        return tokens

    # ── READ ──────────────────────────────────────────────

    async def find_by_value(self, value: str) -> Optional[Token]:
        cached = self.storage.get(value)
        if cached is not None:
            return cached
        token = await asyncio.to_thread(self.repo.get_by_value, value)
        if token is not None:
            self.storage.set(value, token)
        return token

    # ── REDEEM ────────────────────────────────────────────

    async def validate(self, value: str, person_id: int) -> Redemption:
        """
        Run the read-only half of the workflow.

        Returns:
            VALIDATED if the person may claim the token, REDEEMED (repeated)
            if they already did, REJECTED otherwise. Nothing is written
            unless a previous redemption is missing its Application.
        """
        token = await self.find_by_value(value)
        return await self._check(value, token, person_id)

    async def redeem(
        self,
        value: str,
        person_id: int,
        before_claim: Optional[Callable[[], Awaitable[object]]] = None,
    ) -> Redemption:
        """
        Redeem `value` for `person_id`.

        Args:
            before_claim: Awaited under the token lock once the token is
                validated and just before the claim. Rejected attempts never
                reach it.

        Returns:
            A Redemption whose status is REDEEMED or REJECTED.

        Raises:
            UpstreamServiceError: The database failed; retrying is safe.
        """
        async with self._locks.hold(value):
            result = await self.validate(value, person_id)
            if result.status != RedemptionStatus.VALIDATED:
                return result

            if before_claim is not None:
                await before_claim()

            token = result.token
            claimed = await asyncio.to_thread(self.repo.claim, token.id, person_id)
            self.storage.delete(value)
            if not claimed:
                # Lost the race, or the window closed between read and write.
                fresh = await asyncio.to_thread(self.repo.get_by_value, value)
                result = await self._check(value, fresh, person_id)
                if result.status == RedemptionStatus.VALIDATED:
                    return self._reject(fresh, TokenExpiredError(f"token {value!r} has expired"))
                return result

            token = replace(token, redeemed_by=person_id, redeemed_at=self._clock())
            self.storage.set(value, token)
            application = await self.applications.create_or_get_for_person_and_token(person_id, token.id)
            logger.info(f"Person {person_id} redeemed token #{token.id} → application #{application.id}")
            return Redemption(RedemptionStatus.REDEEMED, token=token, application=application)

    async def _check(self, value: str, token: Optional[Token], person_id: int) -> Redemption:
        if token is None:
            return self._reject(None, NotFoundError(f"token {value!r} does not exist"))

        if token.is_redeemed():
            if token.redeemed_by != person_id:
                return self._reject(token, ConflictError(f"token #{token.id} was redeemed by another person"))
            try:
                application = await self.applications.create_or_get_for_person_and_token(person_id, token.id)
            except ConflictError as e:
                return self._reject(token, e)
            logger.info(f"Repeated redemption of token #{token.id} by person {person_id}")
            return Redemption(RedemptionStatus.REDEEMED, token=token, application=application, repeated=True)

        if token.is_expired(self._clock()):
            return self._reject(token, TokenExpiredError(f"token {value!r} has expired"))

        logger.debug(f"Token #{token.id} validated for person {person_id}")
        return Redemption(RedemptionStatus.VALIDATED, token=token)

    @staticmethod
    def _reject(token: Optional[Token], error: BotError) -> Redemption:
        logger.info(f"Redemption rejected: {error}")
        return Redemption(RedemptionStatus.REJECTED, token=token, error=error)
