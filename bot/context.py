"""
bot/context.py
--------------
The explicit bundle of services every handler receives.
"""

from dataclasses import dataclass

from services.application_service import ApplicationService
from services.chat_service import ChatService
from services.person_service import PersonService
from services.token_service import TokenService
from services.user_data_service import UserDataService


@dataclass(frozen=True)
class BotContext:
    """
    Attributes:
        persons: Person lookups and listings.
        chats: Chat registration.
        tokens: Token lookups and redemption.
        applications: Application lookups and confirmation.
        user_data: Registration workflow.
        list_limit: Upper bound for /first, /last and /rand.
    """
    persons: PersonService
    chats: ChatService
    tokens: TokenService
    applications: ApplicationService
    user_data: UserDataService
    list_limit: int = 25
