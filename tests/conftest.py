"""
Shared Pytest Fixtures.

Unit tests never touch PostgreSQL or Telegram. The repositories are replaced
by in-memory fakes that honour the same contracts (including the
compare-and-swap in TokenRepository.claim), and the transport is a recorder.
"""

import random
import threading
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Optional

import pytest

from bot.context import BotContext
from bot.events import IncomingChat, IncomingMessage, IncomingUser
from bot.guard import MembershipGuard
from bot.router import Router
from bot.transport import BotIdentity
from models.application import Application, ApplicationStatus
from models.chat import Chat
from models.person import Person
from models.token import Token
from services.application_service import ApplicationService
from services.chat_service import ChatService
from services.person_service import PersonService
from services.token_service import TokenService
from services.user_data_service import UserDataService
from storages.memory_storage import MemoryStorage
from utils.errors import TransportError

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
BOT_ID = 999


# =============================================================================
# Repository Fakes
# =============================================================================


class FakePersonRepository:
    def __init__(self):
        self.rows: dict[int, Person] = {}
        self.writes = 0
        self._seq = 0

    def upsert(self, person: Person) -> Person:
        self.writes += 1
        existing = self.rows.get(person.id)
        if existing is None:
            self._seq += 1
            created_at = NOW + timedelta(seconds=self._seq)
        else:
            created_at = existing.created_at
        self.rows[person.id] = replace(person, created_at=created_at)
        return replace(self.rows[person.id])

    def get_by_id(self, person_id: int) -> Optional[Person]:
        row = self.rows.get(person_id)
        return replace(row) if row else None

    def list_all(self) -> list[Person]:
        return sorted(self.rows.values(), key=lambda p: (p.created_at, p.id))

    def list_first(self, limit: int, offset: int = 0) -> list[Person]:
        return self.list_all()[offset:offset + limit]

    def list_last(self, limit: int, offset: int = 0) -> list[Person]:
        ordered = self.list_all()
        end = len(ordered) - offset
        if end <= 0:
            return []
        return ordered[max(end - limit, 0):end]

    def count(self) -> int:
        return len(self.rows)


class FakeChatRepository:
    def __init__(self):
        self.rows: dict[int, Chat] = {}
        self.writes = 0

    def upsert(self, chat: Chat) -> Chat:
        self.writes += 1
        existing = self.rows.get(chat.id)
        created_at = existing.created_at if existing else NOW
        self.rows[chat.id] = replace(chat, created_at=created_at, updated_at=NOW)
        return replace(self.rows[chat.id])

    def get_by_id(self, chat_id: int) -> Optional[Chat]:
        row = self.rows.get(chat_id)
        return replace(row) if row else None


class FakeTokenRepository:
    def __init__(self, clock=lambda: NOW):
        self.rows: dict[str, Token] = {}
        self.writes = 0
        self.claims = 0
        self._clock = clock
        self._lock = threading.Lock()

    def add(self, token: Token) -> Token:
        with self._lock:
            if token.value not in self.rows:
                self.writes += 1
                self.rows[token.value] = replace(token, id=len(self.rows) + 1, created_at=NOW)
            return replace(self.rows[token.value])

    def get_by_value(self, value: str) -> Optional[Token]:
        row = self.rows.get(value)
        return replace(row) if row else None

    def get_by_id(self, token_id: int) -> Optional[Token]:
        for row in self.rows.values():
            if row.id == token_id:
                return replace(row)
        return None

    def claim(self, token_id: int, person_id: int) -> bool:
        with self._lock:
            self.claims += 1
            for value, row in self.rows.items():
                if row.id != token_id:
                    continue
                if row.redeemed_by is not None or row.is_expired(self._clock()):
                    return False
                self.writes += 1
                self.rows[value] = replace(row, redeemed_by=person_id, redeemed_at=self._clock())
                return True
            return False


class FakeApplicationRepository:
    def __init__(self):
        self.rows: dict[int, Application] = {}
        self.writes = 0
        self._lock = threading.Lock()

    def create_or_get(self, person_id: int, token_id: int) -> Application:
        with self._lock:
            for row in self.rows.values():
                if row.token_id == token_id:
                    return replace(row)
            self.writes += 1
            application = Application(
                id=len(self.rows) + 1,
                person_id=person_id,
                token_id=token_id,
                created_at=NOW,
            )
            self.rows[application.id] = application
            return replace(application)

    def get_by_id(self, application_id: int) -> Optional[Application]:
        row = self.rows.get(application_id)
        return replace(row) if row else None

    def get_by_token(self, token_id: int) -> Optional[Application]:
        for row in self.rows.values():
            if row.token_id == token_id:
                return replace(row)
        return None

    def list_by_person(self, person_id: int) -> list[Application]:
        return [replace(r) for r in self.rows.values() if r.person_id == person_id]

    def set_status(self, application_id: int, status: ApplicationStatus) -> bool:
        if application_id not in self.rows:
            return False
        self.writes += 1
        self.rows[application_id] = replace(self.rows[application_id], status=status)
        return True


# =============================================================================
# Transport Fake
# =============================================================================


class FakeTransport:
    """Records every reply; can be told to fail for specific chats."""

    def __init__(self, identity: Optional[BotIdentity] = None):
        self.identity = identity or BotIdentity(id=BOT_ID, username="registration_bot")
        self.sent = []
        self.answered = []
        self.fail_chats: set[int] = set()
        self.get_me_calls = 0
        self.get_me_error: Optional[Exception] = None

    async def get_me(self) -> BotIdentity:
        self.get_me_calls += 1
        if self.get_me_error is not None:
            raise self.get_me_error
        return self.identity

    async def send(self, reply) -> None:
        if reply.chat_id in self.fail_chats:
            raise TransportError(f"chat {reply.chat_id} unreachable")
        self.sent.append(reply)

    async def answer(self, answer) -> None:
        self.answered.append(answer)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def repos() -> SimpleNamespace:
    return SimpleNamespace(
        persons=FakePersonRepository(),
        chats=FakeChatRepository(),
        tokens=FakeTokenRepository(),
        applications=FakeApplicationRepository(),
    )


def build_services(repos: SimpleNamespace, list_limit: int = 25) -> BotContext:
    persons = PersonService(repos.persons, MemoryStorage("persons"), rng=random.Random(7))
    chats = ChatService(repos.chats, MemoryStorage("chats"))
    applications = ApplicationService(repos.applications, MemoryStorage("applications"), persons)
    tokens = TokenService(repos.tokens, MemoryStorage("tokens"), applications, clock=lambda: NOW)
    user_data = UserDataService(applications, persons, tokens)
    return BotContext(
        persons=persons,
        chats=chats,
        tokens=tokens,
        applications=applications,
        user_data=user_data,
        list_limit=list_limit,
    )


@pytest.fixture
def ctx(repos) -> BotContext:
    return build_services(repos)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def router(ctx, transport) -> Router:
    return Router(ctx, transport, MembershipGuard(transport.get_me))


@pytest.fixture
def add_persons(repos):
    """Insert persons in the given order; returns them as stored."""

    def _add(*names: str) -> list[Person]:
        return [
            repos.persons.upsert(Person(id=index, first_name=name))
            for index, name in enumerate(names, start=1)
        ]

    return _add


def user(user_id: int = 1, first_name: str = "Alice", **kwargs) -> IncomingUser:
    return IncomingUser(id=user_id, first_name=first_name, **kwargs)


def message(text: str = "", chat_id: int = 100, sender: Optional[IncomingUser] = None,
            chat_type: str = "private", title: Optional[str] = None,
            new_members: Optional[list[IncomingUser]] = None) -> IncomingMessage:
    return IncomingMessage(
        chat=IncomingChat(id=chat_id, type=chat_type, title=title),
        sender=sender if sender is not None else user(),
        text=text,
        message_id=1,
        new_members=new_members or [],
    )


@pytest.fixture
def make_user():
    return user


@pytest.fixture
def make_message():
    return message


@pytest.fixture
def make_ctx():
    """Build a fresh BotContext over the given fake repositories."""
    return build_services


@pytest.fixture
def now() -> datetime:
    """The fixed clock used by the token service and the fakes."""
    return NOW
