"""
bot/router.py
-------------
Classifies incoming events and dispatches them to command handlers.

Commands are matched against COMMAND_TABLE, a list of
(name, pattern, parser, handler) rows evaluated in order by `classify`.
Each handler is `async (Command, BotContext) -> list[effect]`; the router
delivers the effects through the transport.

Every dispatch is isolated: an exception in one handler is logged and the
router keeps serving other events.
"""

import re
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Union

from bot.context import BotContext
from bot.events import Command, IncomingCallback, IncomingMessage
from bot.guard import MembershipGuard
from bot.transport import Transport
from handlers.callback_handler import handle as handle_callback
from handlers.person_handler import first_command, last_command, rand_command
from handlers.start_handler import help_command, start_command
from handlers.token_handler import token_command
from models.reply import CallbackAnswer, Reply
from utils.errors import TransportError
from utils.logger import get_logger

logger = get_logger(__name__)

Effect = Union[Reply, CallbackAnswer]
Handler = Callable[[Command, BotContext], Awaitable[list[Effect]]]
Parser = Callable[[re.Match, BotContext], Optional[tuple]]


# ── Parameter parsers ─────────────────────────────────────
# A parser returns the handler arguments, or None to reject the message.

def no_args(match: re.Match, ctx: BotContext) -> tuple:
    return ()


def parse_token_value(match: re.Match, ctx: BotContext) -> Optional[tuple]:
    value = match.group("arg").strip()
    return (value,) if value else None


def parse_count(match: re.Match, ctx: BotContext) -> Optional[tuple]:
    """A positive integer, clamped to the configured list limit."""
    n = int(match.group("arg"))
    if n <= 0:
        return None
    return (min(n, ctx.list_limit),)


@dataclass(frozen=True)
class Route:
    name: str
    pattern: re.Pattern
    parser: Parser
    handler: Handler


def _command(name: str, arg: Optional[str] = None) -> re.Pattern:
    """`/name`, optionally `/name@botname`, followed by the argument pattern."""
    head = rf"^/{name}(?:@(?P<mention>\w+))?"
    if arg is None:
        return re.compile(head + r"(?=\s|$)")
    return re.compile(head + rf"\s+(?P<arg>{arg})")


COMMAND_TABLE: list[Route] = [
    Route("start", _command("start"), no_args, start_command),
    Route("token", _command("token", r"\S.*"), parse_token_value, token_command),
    Route("first", _command("first", r"\d+(?=\s|$)"), parse_count, first_command),
    Route("last", _command("last", r"\d+(?=\s|$)"), parse_count, last_command),
    Route("rand", _command("rand", r"\d+(?=\s|$)"), parse_count, rand_command),
    Route("help", _command("help"), no_args, help_command),
]


class Router:
    """
    Args:
        ctx: Services passed to every handler.
        transport: Where replies go.
        guard: Membership guard, also the source of the bot username used to
            ignore commands addressed to other bots (`/start@otherbot`).
        routes: Command table, COMMAND_TABLE by default.
    """

    def __init__(
        self,
        ctx: BotContext,
        transport: Transport,
        guard: MembershipGuard,
        routes: Optional[list[Route]] = None,
    ):
        self.ctx = ctx
        self.transport = transport
        self.guard = guard
        self.routes = routes if routes is not None else COMMAND_TABLE

    # ── Classification ────────────────────────────────────

    def classify(self, message: IncomingMessage) -> Optional[tuple[Route, Command]]:
        """Return the first matching route and its parsed command, or None."""
        text = message.text or ""
        for route in self.routes:
            match = route.pattern.match(text)
            if match is None:
                continue
            if not self._addressed_to_me(match.group("mention")):
                return None
            args = route.parser(match, self.ctx)
            if args is None:
                logger.debug(f"Rejected arguments for /{route.name}: {text!r}")
                return None
            return route, Command(name=route.name, message=message, args=args)
        return None

    def _addressed_to_me(self, mention: Optional[str]) -> bool:
        if mention is None:
            return True
        identity = self.guard.identity
        if identity is None or not identity.username:
            return True
        return mention.lower() == identity.username.lower()

    # ── Dispatch ──────────────────────────────────────────

    async def dispatch_message(self, message: IncomingMessage) -> bool:
        """
        Route a text message.

        Returns:
            True if a handler ran (successfully or not).
        """
        classified = self.classify(message)
        if classified is None:
            return False
        route, command = classified
        await self._run(f"message:{route.name}", route.handler, command)
        return True

    async def dispatch_new_members(self, message: IncomingMessage) -> bool:
        """Run /start if, and only if, the bot is one of the joined members."""
        joined = [member.id for member in message.new_members]
        if not await self.guard.bot_joined(joined):
            return False
        command = Command(name="start", message=message)
        await self._run("message:new_chat_members", start_command, command)
        return True

    async def dispatch_callback(self, callback: IncomingCallback) -> bool:
        await self._run("callback_query", handle_callback, callback)
        return True

    async def _run(self, kind: str, handler: Callable, event) -> None:
        logger.debug(f"Dispatching {kind}")
        try:
            effects = await handler(event, self.ctx)
        except Exception:
            logger.exception(f"Handler for {kind} failed")
            return
        await self.deliver(effects or [])

    async def deliver(self, effects: list[Effect]) -> None:
        """Send every effect; failures are logged and not retried."""
        for effect in effects:
            try:
                if isinstance(effect, CallbackAnswer):
                    await self.transport.answer(effect)
                else:
                    await self.transport.send(effect)
            except TransportError as e:
                logger.warning(f"Delivery failed: {e}")
