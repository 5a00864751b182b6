"""
repositories/application_repo.py
---------------------------------
Data access layer for applications.
"""

from typing import Optional

import psycopg2

from db.connection import get_connection, release_connection
from models.application import Application, ApplicationStatus
from utils.errors import UpstreamServiceError
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, person_id, token_id, status, created_at"


class ApplicationRepository:
    """Repository for CRUD operations on the applications table."""

    # ── CREATE ────────────────────────────────────────────

    def create_or_get(self, person_id: int, token_id: int) -> Application:
        """
        Create the Application for a token, or return the one already there.
        `token_id` is unique, so repeated calls never create a second row.
        The caller must check `person_id` of the returned row.
        """
        insert_sql = f"""
            INSERT INTO applications (person_id, token_id)
            VALUES (%s, %s)
            ON CONFLICT (token_id) DO NOTHING
            RETURNING {_COLUMNS};
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(insert_sql, (person_id, token_id))
                row = cur.fetchone()
                if row is None:
                    cur.execute(f"SELECT {_COLUMNS} FROM applications WHERE token_id = %s;", (token_id,))
                    row = cur.fetchone()
                else:
                    logger.info(f"Created application #{row[0]} for person {person_id}")
            conn.commit()
            return self._row_to_application(row)
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to create application for token #{token_id}: {e}")
            raise UpstreamServiceError(f"create application for token {token_id}") from e
        finally:
            release_connection(conn)

    # ── READ ──────────────────────────────────────────────

    def get_by_id(self, application_id: int) -> Optional[Application]:
        rows = self._fetch(f"SELECT {_COLUMNS} FROM applications WHERE id = %s;", (application_id,))
        return self._row_to_application(rows[0]) if rows else None

    def get_by_token(self, token_id: int) -> Optional[Application]:
        rows = self._fetch(f"SELECT {_COLUMNS} FROM applications WHERE token_id = %s;", (token_id,))
        return self._row_to_application(rows[0]) if rows else None

    def list_by_person(self, person_id: int) -> list[Application]:
        sql = f"SELECT {_COLUMNS} FROM applications WHERE person_id = %s ORDER BY created_at ASC, id ASC;"
        return [self._row_to_application(r) for r in self._fetch(sql, (person_id,))]

    # ── UPDATE ────────────────────────────────────────────

    def set_status(self, application_id: int, status: ApplicationStatus) -> bool:
        sql = "UPDATE applications SET status = %s WHERE id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (status.value, application_id))
                updated = cur.rowcount > 0
            conn.commit()
            return updated
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to update application #{application_id}: {e}")
            raise UpstreamServiceError(f"update application {application_id}") from e
        finally:
            release_connection(conn)

    # ── HELPERS ───────────────────────────────────────────

    def _fetch(self, sql: str, params: tuple) -> list[tuple]:
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                return cur.fetchall()
        except psycopg2.Error as e:
            logger.error(f"Application query failed: {e}")
            raise UpstreamServiceError("query applications") from e
        finally:
            release_connection(conn)

    @staticmethod
    def _row_to_application(row: tuple) -> Application:
        return Application(
            id=row[0],
            person_id=row[1],
            token_id=row[2],
            status=ApplicationStatus(row[3]),
            created_at=row[4],
        )
