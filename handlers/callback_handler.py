"""
handlers/callback_handler.py
-----------------------------
Handles inline-button presses.

The payload is decoded into an action (see callback_data.py) and dispatched
through ACTIONS. Unknown or malformed payloads are logged and ignored
without any reply.
"""

from typing import Awaitable, Callable, Union

from bot.context import BotContext
from bot.events import IncomingCallback
from handlers import messages
from handlers.callback_data import CallbackAction, decode
from handlers.person_handler import render_first, render_last, render_rand
from models.reply import CallbackAnswer, Reply
from utils.errors import ConflictError, NotFoundError, ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)

Effect = Union[Reply, CallbackAnswer]


async def _confirm(action: CallbackAction, callback: IncomingCallback, ctx: BotContext) -> list[Effect]:
    application_id = action.int_arg(0)
    try:
        application = await ctx.applications.confirm(application_id, callback.sender.id)
    except ConflictError:
        return [CallbackAnswer(callback.query_id, messages.NOT_YOURS)]
    except NotFoundError:
        return [CallbackAnswer(callback.query_id, messages.NOT_FOUND)]

    owner = await ctx.applications.owner(application)
    name = owner.display_name if owner else callback.sender.first_name
    effects: list[Effect] = [CallbackAnswer(callback.query_id, messages.CONFIRM_ANSWER)]
    if callback.chat is not None and callback.message_id is not None:
        effects.append(Reply(
            chat_id=callback.chat.id,
            text=messages.CONFIRMED.format(id=application.id, name=name),
            edit_message_id=callback.message_id,
        ))
    return effects


async def _page(action: CallbackAction, callback: IncomingCallback, ctx: BotContext) -> list[Effect]:
    if not action.args:
        raise ValidationError("page: missing direction")
    direction = action.args[0]
    offset = action.int_arg(1)
    n = min(action.int_arg(2), ctx.list_limit)
    if n <= 0:
        raise ValidationError("page: size must be positive")
    if callback.chat is None:
        raise ValidationError("page: message is no longer available")

    if direction == "first":
        reply = await render_first(ctx, callback.chat.id, n, offset, edit_message_id=callback.message_id)
    elif direction == "last":
        reply = await render_last(ctx, callback.chat.id, n, offset, edit_message_id=callback.message_id)
    else:
        raise ValidationError(f"page: unknown direction {direction!r}")
    return [CallbackAnswer(callback.query_id), reply]


async def _rand(action: CallbackAction, callback: IncomingCallback, ctx: BotContext) -> list[Effect]:
    n = min(action.int_arg(0), ctx.list_limit)
    if n <= 0:
        raise ValidationError("rand: size must be positive")
    if callback.chat is None:
        raise ValidationError("rand: message is no longer available")
    reply = await render_rand(ctx, callback.chat.id, n, edit_message_id=callback.message_id)
    return [CallbackAnswer(callback.query_id), reply]


ACTIONS: dict[str, Callable[[CallbackAction, IncomingCallback, BotContext], Awaitable[list[Effect]]]] = {
    "confirm": _confirm,
    "page": _page,
    "rand": _rand,
}


async def handle(callback: IncomingCallback, ctx: BotContext) -> list[Effect]:
    """Decode the button payload and run the matching action."""
    try:
        action = decode(callback.data)
        handler = ACTIONS.get(action.name)
        if handler is None:
            raise ValidationError(f"unknown callback action {action.name!r}")
        return await handler(action, callback, ctx)
    except ValidationError as e:
        logger.warning(f"Ignored callback from user {callback.sender.id}: {e}")
        return []
