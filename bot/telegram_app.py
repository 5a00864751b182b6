"""
bot/telegram_app.py
-------------------
Wires the router into a python-telegram-bot Application.

Responsibilities:
    - Convert Telegram updates into bot.events objects.
    - Register the message, new-member and callback-query handlers.
    - Start delivery explicitly, by polling or by webhook.
"""

from typing import Awaitable, Callable, Optional

from telegram import BotCommand, Update
from telegram import CallbackQuery, Message, User
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from bot.context import BotContext
from bot.events import IncomingCallback, IncomingChat, IncomingMessage, IncomingUser
from bot.guard import MembershipGuard
from bot.router import Router
from bot.transport import TelegramTransport
from utils.logger import get_logger

logger = get_logger(__name__)

ROUTER_KEY = "router"

BOT_COMMANDS = [
    BotCommand("start", "Register this chat"),
    BotCommand("token", "Redeem a registration token"),
    BotCommand("first", "First N participants"),
    BotCommand("last", "Last N participants"),
    BotCommand("rand", "N random participants"),
    BotCommand("help", "Show help"),
]


# ── Conversion ────────────────────────────────────────────

def to_incoming_user(user: User) -> IncomingUser:
    return IncomingUser(
        id=user.id,
        first_name=user.first_name or "",
        last_name=user.last_name,
        username=user.username,
        is_bot=user.is_bot,
    )


def to_incoming_message(message: Message) -> IncomingMessage:
    chat = message.chat
    return IncomingMessage(
        chat=IncomingChat(id=chat.id, type=str(chat.type), title=chat.title),
        sender=to_incoming_user(message.from_user) if message.from_user else None,
        text=message.text or "",
        message_id=message.message_id,
        new_members=[to_incoming_user(u) for u in message.new_chat_members or ()],
    )


def to_incoming_callback(query: CallbackQuery) -> IncomingCallback:
    message = query.message
    chat = None
    message_id = None
    if message is not None:
        chat = IncomingChat(id=message.chat.id, type=str(message.chat.type), title=message.chat.title)
        message_id = message.message_id
    return IncomingCallback(
        query_id=query.id,
        sender=to_incoming_user(query.from_user),
        data=query.data,
        chat=chat,
        message_id=message_id,
    )


# ── Telegram handlers ─────────────────────────────────────

async def on_new_members(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    router: Router = context.bot_data[ROUTER_KEY]
    await router.dispatch_new_members(to_incoming_message(update.effective_message))


async def on_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    router: Router = context.bot_data[ROUTER_KEY]
    await router.dispatch_message(to_incoming_message(update.effective_message))


async def on_callback_query(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    router: Router = context.bot_data[ROUTER_KEY]
    await router.dispatch_callback(to_incoming_callback(update.callback_query))


async def on_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Last resort for errors raised outside the router (e.g. update conversion)."""
    logger.error(f"Unhandled error while processing {update!r}", exc_info=context.error)


# ── Construction ──────────────────────────────────────────

def build_application(
    token: str,
    ctx: BotContext,
    on_startup: Optional[Callable[[BotContext], Awaitable[None]]] = None,
) -> Application:
    """
    Build the Telegram application. Nothing is fetched or delivered until
    `run()` is called.

    Args:
        token: Bot token from @BotFather.
        ctx: Services handed to every handler.
        on_startup: Extra coroutine run once the bot is initialised
            (e.g. seeding configured tokens).
    """
    async def post_init(application: Application) -> None:
        router: Router = application.bot_data[ROUTER_KEY]
        identity = await router.guard.fetch_identity()
        if identity is not None:
            logger.info(f"Listening on @{identity.username}")
        await application.bot.set_my_commands(BOT_COMMANDS)
        logger.info("Bot commands menu registered successfully.")
        if on_startup is not None:
            await on_startup(ctx)

    application = (
        Application.builder()
        .token(token)
        .concurrent_updates(True)
        .post_init(post_init)
        .build()
    )

    transport = TelegramTransport(application.bot)
    guard = MembershipGuard(transport.get_me)
    application.bot_data[ROUTER_KEY] = Router(ctx, transport, guard)

    application.add_handler(MessageHandler(filters.StatusUpdate.NEW_CHAT_MEMBERS, on_new_members))
    application.add_handler(MessageHandler(filters.TEXT, on_text))
    application.add_handler(CallbackQueryHandler(on_callback_query))
    application.add_error_handler(on_error)
    return application


def run(
    application: Application,
    mode: str = "polling",
    *,
    webhook_url: str = "",
    listen: str = "0.0.0.0",
    port: int = 8443,
    secret_token: str = "",
) -> None:
    """
    Start receiving updates and block until stopped.

    Args:
        mode: "polling" or "webhook".
        webhook_url: Public HTTPS URL Telegram should post updates to.
        listen: Interface for the webhook server.
        port: Port for the webhook server.
        secret_token: Shared secret checked on every webhook request.

    Raises:
        ValueError: Unknown mode, or webhook mode without a URL.
    """
    allowed_updates = [Update.MESSAGE, Update.CALLBACK_QUERY]
    if mode == "polling":
        logger.info("Starting in polling mode")
        application.run_polling(allowed_updates=allowed_updates)
    elif mode == "webhook":
        if not webhook_url:
            raise ValueError("WEBHOOK_URL is required in webhook mode")
        logger.info(f"Starting webhook on {listen}:{port}")
        application.run_webhook(
            listen=listen,
            port=port,
            webhook_url=webhook_url,
            secret_token=secret_token or None,
            allowed_updates=allowed_updates,
        )
    else:
        raise ValueError(f"Unknown delivery mode: {mode!r}")
