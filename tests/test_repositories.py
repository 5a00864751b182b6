"""
Unit Tests for the PostgreSQL repositories.

The connection pool is replaced by a MagicMock connection, so these tests
check the SQL contract (parameters, commit/rollback, error mapping) without
a database.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import psycopg2
import pytest

from models.application import ApplicationStatus
from models.person import Person
from models.token import Token
from repositories import application_repo, person_repo, token_repo
from repositories.application_repo import ApplicationRepository
from repositories.person_repo import PersonRepository
from repositories.token_repo import TokenRepository
from utils.errors import UpstreamServiceError

CREATED = datetime(2026, 1, 1, tzinfo=timezone.utc)


class FakeDB:
    """A MagicMock connection plus the cursor it hands out."""

    def __init__(self):
        self.conn = MagicMock()
        self.cursor = MagicMock()
        self.conn.cursor.return_value.__enter__.return_value = self.cursor
        self.released = []

    def get_connection(self):
        return self.conn

    def release_connection(self, conn):
        self.released.append(conn)

    @property
    def statements(self) -> list[str]:
        return [" ".join(c.args[0].split()) for c in self.cursor.execute.call_args_list]


@pytest.fixture
def db(monkeypatch):
    fake = FakeDB()
    for module in (token_repo, application_repo, person_repo):
        monkeypatch.setattr(module, "get_connection", fake.get_connection)
        monkeypatch.setattr(module, "release_connection", fake.release_connection)
    return fake


class TestTokenRepository:

    def test_claim_wins_when_one_row_updated(self, db):
        db.cursor.rowcount = 1

        assert TokenRepository().claim(7, 42) is True

        sql = db.statements[0]
        assert "redeemed_by IS NULL" in sql
        assert "expires_at > NOW()" in sql
        assert db.cursor.execute.call_args.args[1] == (42, 7)
        db.conn.commit.assert_called_once()
        assert db.released == [db.conn]

    def test_claim_loses_when_nothing_updated(self, db):
        db.cursor.rowcount = 0

        assert TokenRepository().claim(7, 42) is False

    def test_claim_error_rolls_back(self, db):
        db.cursor.execute.side_effect = psycopg2.Error("connection reset")

        with pytest.raises(UpstreamServiceError):
            TokenRepository().claim(7, 42)

        db.conn.rollback.assert_called_once()
        assert db.released == [db.conn]

    def test_add_existing_value_reads_it_back(self, db):
        existing = (3, "ABC", None, None, None, CREATED)
        db.cursor.fetchone.side_effect = [None, existing]

        token = TokenRepository().add(Token(value="ABC"))

        assert token.id == 3
        assert token.value == "ABC"
        assert "ON CONFLICT (value) DO NOTHING" in db.statements[0]
        assert db.statements[1].startswith("SELECT")

    def test_get_by_value_missing(self, db):
        db.cursor.fetchone.return_value = None

        assert TokenRepository().get_by_value("nope") is None


class TestApplicationRepository:

    def test_create_or_get_returns_existing_row(self, db):
        row = (5, 1, 9, "confirmed", CREATED)
        db.cursor.fetchone.side_effect = [None, row]

        application = ApplicationRepository().create_or_get(1, 9)

        assert application.id == 5
        assert application.status == ApplicationStatus.CONFIRMED
        assert "ON CONFLICT (token_id) DO NOTHING" in db.statements[0]

    def test_set_status_passes_enum_value(self, db):
        db.cursor.rowcount = 1

        assert ApplicationRepository().set_status(5, ApplicationStatus.CONFIRMED) is True
        assert db.cursor.execute.call_args.args[1] == ("confirmed", 5)

    def test_query_error_is_upstream(self, db):
        db.cursor.execute.side_effect = psycopg2.Error("boom")

        with pytest.raises(UpstreamServiceError):
            ApplicationRepository().get_by_token(9)


class TestPersonRepository:

    def test_upsert_keeps_created_at(self, db):
        db.cursor.fetchone.return_value = (1, "Alice", None, "alice", CREATED)

        person = PersonRepository().upsert(Person(id=1, first_name="Alice", username="alice"))

        assert person.created_at == CREATED
        assert "ON CONFLICT (id) DO UPDATE" in db.statements[0]
        assert "created_at =" not in db.statements[0]

    def test_list_first_orders_by_insertion(self, db):
        db.cursor.fetchall.return_value = [
            (1, "Alice", None, None, CREATED),
            (2, "Bob", None, None, CREATED),
        ]

        persons = PersonRepository().list_first(2, offset=4)

        assert [p.first_name for p in persons] == ["Alice", "Bob"]
        assert "ORDER BY created_at ASC, id ASC" in db.statements[0]
        assert db.cursor.execute.call_args.args[1] == (2, 4)
