"""
main.py
-------
Entry point for the registration bot.

Responsibilities:
    - Initialize the database connection pool and schema.
    - Build the services and the handler context.
    - Configure and start the Telegram bot (polling or webhook).
"""

import sys
from datetime import timedelta

import psycopg2

from bot.context import BotContext
from bot.telegram_app import build_application, run
from config import (
    CACHE_MAX_ITEMS,
    CACHE_TTL_SECONDS,
    DELIVERY_MODE,
    LIST_LIMIT,
    REGISTRATION_TOKENS,
    TELEGRAM_BOT_TOKEN,
    TOKEN_TTL_HOURS,
    WEBHOOK_LISTEN,
    WEBHOOK_PORT,
    WEBHOOK_SECRET,
    WEBHOOK_URL,
)
from db.connection import close_pool, init_pool
from db.init_db import create_tables
from repositories.application_repo import ApplicationRepository
from repositories.chat_repo import ChatRepository
from repositories.person_repo import PersonRepository
from repositories.token_repo import TokenRepository
from services.application_service import ApplicationService
from services.chat_service import ChatService
from services.person_service import PersonService
from services.token_service import TokenService
from services.user_data_service import UserDataService
from storages.memory_storage import MemoryStorage
from utils.logger import get_logger

logger = get_logger(__name__)


def build_context() -> BotContext:
    """Create every service once and bundle them for the handlers."""

    def storage(name: str) -> MemoryStorage:
        return MemoryStorage(name, ttl_seconds=CACHE_TTL_SECONDS, maxsize=CACHE_MAX_ITEMS)

    person_service = PersonService(PersonRepository(), storage("persons"))
    chat_service = ChatService(ChatRepository(), storage("chats"))
    application_service = ApplicationService(ApplicationRepository(), storage("applications"), person_service)
    token_service = TokenService(TokenRepository(), storage("tokens"), application_service)
    user_data_service = UserDataService(application_service, person_service, token_service)

    return BotContext(
        persons=person_service,
        chats=chat_service,
        tokens=token_service,
        applications=application_service,
        user_data=user_data_service,
        list_limit=LIST_LIMIT,
    )


async def seed_tokens(ctx: BotContext) -> None:
    """Issue the tokens listed in REGISTRATION_TOKENS (already issued ones are kept)."""
    ttl = timedelta(hours=TOKEN_TTL_HOURS) if TOKEN_TTL_HOURS > 0 else None
    await ctx.tokens.seed(REGISTRATION_TOKENS, ttl)


def main() -> None:
    """Initialize and run the bot."""
    if not TELEGRAM_BOT_TOKEN:
        logger.critical("TELEGRAM_BOT_TOKEN is not set.")
        sys.exit(1)

    # ── 1. Database setup ─────────────────────────────────
    logger.info("Initializing database...")
    try:
        init_pool()
        create_tables()
    except psycopg2.Error as e:
        logger.critical(f"Database unavailable: {e}")
        sys.exit(1)

    # ── 2. Build the Telegram application ─────────────────
    logger.info("Starting Telegram bot...")
    application = build_application(TELEGRAM_BOT_TOKEN, build_context(), on_startup=seed_tokens)

    # ── 3. Start delivery ─────────────────────────────────
    try:
        run(
            application,
            DELIVERY_MODE,
            webhook_url=WEBHOOK_URL,
            listen=WEBHOOK_LISTEN,
            port=WEBHOOK_PORT,
            secret_token=WEBHOOK_SECRET,
        )
    except ValueError as e:
        logger.critical(str(e))
        sys.exit(1)
    finally:
        # ── 4. Cleanup on shutdown ────────────────────────
        close_pool()
        logger.info("Registration bot stopped.")


if __name__ == "__main__":
    main()
