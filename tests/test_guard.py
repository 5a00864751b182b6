"""
Unit Tests for the membership guard.
"""

from unittest.mock import AsyncMock

import pytest

import bot.router
from bot.guard import MembershipGuard
from utils.errors import TransportError

A, B, C = 1, 2, 999


class TestBotJoined:

    @pytest.mark.asyncio
    async def test_other_users_joining(self, transport):
        guard = MembershipGuard(transport.get_me)

        assert await guard.bot_joined([A, B]) is False

    @pytest.mark.asyncio
    async def test_bot_among_joined(self, transport):
        guard = MembershipGuard(transport.get_me)

        assert await guard.bot_joined([A, C]) is True

    @pytest.mark.asyncio
    async def test_identity_failure_is_not_a_match(self, transport):
        transport.get_me_error = TransportError("timeout")
        guard = MembershipGuard(transport.get_me)

        assert await guard.bot_joined([C]) is False

    @pytest.mark.asyncio
    async def test_identity_is_fetched_once(self, transport):
        guard = MembershipGuard(transport.get_me)

        await guard.bot_joined([A])
        await guard.bot_joined([C])

        assert transport.get_me_calls == 1

    @pytest.mark.asyncio
    async def test_retries_identity_after_failure(self, transport):
        transport.get_me_error = TransportError("timeout")
        guard = MembershipGuard(transport.get_me)
        await guard.bot_joined([C])

        transport.get_me_error = None

        assert await guard.bot_joined([C]) is True


class TestNewMembersDispatch:
    """The router only runs /start when the bot itself joined."""

    @pytest.fixture
    def start_spy(self, monkeypatch):
        spy = AsyncMock(return_value=[])
        monkeypatch.setattr(bot.router, "start_command", spy)
        return spy

    @pytest.mark.asyncio
    async def test_ignores_regular_joins(self, router, make_message, make_user, start_spy):
        event = make_message(chat_type="group", new_members=[make_user(A), make_user(B)])

        handled = await router.dispatch_new_members(event)

        assert handled is False
        start_spy.assert_not_called()

    @pytest.mark.asyncio
    async def test_starts_when_bot_joins(self, router, make_message, make_user, start_spy):
        event = make_message(chat_type="group", new_members=[make_user(A), make_user(C, "Bot", is_bot=True)])

        handled = await router.dispatch_new_members(event)

        assert handled is True
        start_spy.assert_awaited_once()
        command = start_spy.await_args.args[0]
        assert command.name == "start"
        assert command.message is event
