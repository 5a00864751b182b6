"""
repositories/person_repo.py
----------------------------
Data access layer for person records.
"""

from typing import Optional

import psycopg2

from db.connection import get_connection, release_connection
from models.person import Person
from utils.errors import UpstreamServiceError
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, first_name, last_name, username, created_at"


class PersonRepository:
    """Repository for CRUD operations on the persons table."""

    def upsert(self, person: Person) -> Person:
        """
        Insert a person or refresh their names, keeping the original created_at.
        Uses PostgreSQL's ON CONFLICT (upsert) for atomicity.

        Returns:
            The stored Person with `created_at` populated.
        """
        sql = f"""
            INSERT INTO persons (id, first_name, last_name, username)
            VALUES (%s, %s, %s, %s)
            ON CONFLICT (id) DO UPDATE SET
                first_name = EXCLUDED.first_name,
                last_name = EXCLUDED.last_name,
                username = EXCLUDED.username
            RETURNING {_COLUMNS};
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (person.id, person.first_name, person.last_name, person.username))
                row = cur.fetchone()
            conn.commit()
            return self._row_to_person(row)
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to upsert person {person.id}: {e}")
            raise UpstreamServiceError(f"upsert person {person.id}") from e
        finally:
            release_connection(conn)

    def get_by_id(self, person_id: int) -> Optional[Person]:
        sql = f"SELECT {_COLUMNS} FROM persons WHERE id = %s;"
        row = self._fetch_one(sql, (person_id,))
        return self._row_to_person(row) if row else None

    def list_first(self, limit: int, offset: int = 0) -> list[Person]:
        """The `limit` earliest persons after skipping `offset`, oldest first."""
        sql = f"SELECT {_COLUMNS} FROM persons ORDER BY created_at ASC, id ASC LIMIT %s OFFSET %s;"
        return [self._row_to_person(r) for r in self._fetch_all(sql, (limit, offset))]

    def list_last(self, limit: int, offset: int = 0) -> list[Person]:
        """The `limit` most recent persons after skipping the `offset` newest, returned oldest first."""
        sql = f"""
            SELECT {_COLUMNS} FROM (
                SELECT {_COLUMNS} FROM persons
                ORDER BY created_at DESC, id DESC
                LIMIT %s OFFSET %s
            ) AS recent
            ORDER BY created_at ASC, id ASC;
        """
        return [self._row_to_person(r) for r in self._fetch_all(sql, (limit, offset))]

    def list_all(self) -> list[Person]:
        sql = f"SELECT {_COLUMNS} FROM persons ORDER BY created_at ASC, id ASC;"
        return [self._row_to_person(r) for r in self._fetch_all(sql, ())]

    def count(self) -> int:
        row = self._fetch_one("SELECT COUNT(*) FROM persons;", ())
        return int(row[0]) if row else 0

    # ── HELPERS ───────────────────────────────────────────

    def _fetch_one(self, sql: str, params: tuple) -> Optional[tuple]:
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                return cur.fetchone()
        except psycopg2.Error as e:
            logger.error(f"Person query failed: {e}")
            raise UpstreamServiceError("query persons") from e
        finally:
            release_connection(conn)

    def _fetch_all(self, sql: str, params: tuple) -> list[tuple]:
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                return cur.fetchall()
        except psycopg2.Error as e:
            logger.error(f"Person query failed: {e}")
            raise UpstreamServiceError("query persons") from e
        finally:
            release_connection(conn)

    @staticmethod
    def _row_to_person(row: tuple) -> Person:
        """Convert a database row tuple to a Person domain object."""
        return Person(
            id=row[0],
            first_name=row[1] or "",
            last_name=row[2],
            username=row[3],
            created_at=row[4],
        )
