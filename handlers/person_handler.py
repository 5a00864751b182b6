"""
handlers/person_handler.py
---------------------------
Handles /first N, /last N and /rand N.
The router guarantees N is a positive integer within the list limit.
"""

from typing import Optional

from bot.context import BotContext
from bot.events import Command
from handlers import messages
from handlers.callback_data import encode
from models.person import Person
from models.reply import Button, Reply


def format_persons(title: str, persons: list[Person], start: int = 1) -> str:
    lines = [title]
    for number, person in enumerate(persons, start=start):
        line = f"{number}. {person.display_name}"
        if person.username and person.display_name != f"@{person.username}":
            line += f" (@{person.username})"
        lines.append(line)
    return "\n".join(lines)


async def render_first(ctx: BotContext, chat_id: int, n: int, offset: int = 0,
                       edit_message_id: Optional[int] = None) -> Reply:
    persons = await ctx.persons.list_first(n, offset)
    if not persons:
        return Reply(chat_id=chat_id, text=messages.NO_PERSONS, edit_message_id=edit_message_id)

    total = await ctx.persons.count()
    text = format_persons(messages.FIRST_TITLE.format(count=len(persons)), persons, start=offset + 1)
    buttons = []
    if offset + len(persons) < total:
        buttons = [[Button(messages.MORE_BUTTON, encode("page", "first", offset + n, n))]]
    return Reply(chat_id=chat_id, text=text, buttons=buttons, edit_message_id=edit_message_id)


async def render_last(ctx: BotContext, chat_id: int, n: int, offset: int = 0,
                      edit_message_id: Optional[int] = None) -> Reply:
    persons = await ctx.persons.list_last(n, offset)
    if not persons:
        return Reply(chat_id=chat_id, text=messages.NO_PERSONS, edit_message_id=edit_message_id)

    total = await ctx.persons.count()
    start = max(total - offset - len(persons), 0) + 1
    text = format_persons(messages.LAST_TITLE.format(count=len(persons)), persons, start=start)
    buttons = []
    if offset + len(persons) < total:
        buttons = [[Button(messages.EARLIER_BUTTON, encode("page", "last", offset + n, n))]]
    return Reply(chat_id=chat_id, text=text, buttons=buttons, edit_message_id=edit_message_id)


async def render_rand(ctx: BotContext, chat_id: int, n: int,
                      edit_message_id: Optional[int] = None) -> Reply:
    persons = await ctx.persons.list_random(n)
    if not persons:
        return Reply(chat_id=chat_id, text=messages.NO_PERSONS, edit_message_id=edit_message_id)

    text = format_persons(messages.RAND_TITLE.format(count=len(persons)), persons)
    buttons = [[Button(messages.AGAIN_BUTTON, encode("rand", n))]]
    return Reply(chat_id=chat_id, text=text, buttons=buttons, edit_message_id=edit_message_id)


async def first_command(command: Command, ctx: BotContext) -> list[Reply]:
    (n,) = command.args
    return [await render_first(ctx, command.message.chat.id, n)]


async def last_command(command: Command, ctx: BotContext) -> list[Reply]:
    (n,) = command.args
    return [await render_last(ctx, command.message.chat.id, n)]


async def rand_command(command: Command, ctx: BotContext) -> list[Reply]:
    (n,) = command.args
    return [await render_rand(ctx, command.message.chat.id, n)]
