"""
bot/guard.py
------------
Membership guard: of all `new_chat_members` events, only the one where the
bot itself was added should trigger /start. Regular users joining are ignored.
"""

from typing import Awaitable, Callable, Iterable, Optional

from bot.transport import BotIdentity
from utils.errors import TransportError
from utils.logger import get_logger

logger = get_logger(__name__)


class MembershipGuard:
    """
    Args:
        get_me: Coroutine function returning the bot identity, usually
            `Transport.get_me`. Called until it succeeds once; the identity
            of a bot never changes, so the result is kept afterwards.
    """

    def __init__(self, get_me: Callable[[], Awaitable[BotIdentity]]):
        self._get_me = get_me
        self._identity: Optional[BotIdentity] = None

    @property
    def identity(self) -> Optional[BotIdentity]:
        """The identity if it has been fetched already."""
        return self._identity

    async def fetch_identity(self) -> Optional[BotIdentity]:
        if self._identity is None:
            try:
                self._identity = await self._get_me()
            except TransportError as e:
                logger.warning(f"Could not fetch bot identity: {e}")
                return None
        return self._identity

    async def bot_joined(self, member_ids: Iterable[int]) -> bool:
        """True if the bot is among the joined members; False if not or if unknown."""
        identity = await self.fetch_identity()
        if identity is None:
            return False
        return identity.id in set(member_ids)
