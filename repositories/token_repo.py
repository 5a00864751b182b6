"""
repositories/token_repo.py
---------------------------
Data access layer for registration tokens.
All SQL queries related to the `tokens` table live here, including the
conditional write that makes redemption single-winner.
"""

from typing import Optional

import psycopg2

from db.connection import get_connection, release_connection
from models.token import Token
from utils.errors import UpstreamServiceError
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, value, expires_at, redeemed_by, redeemed_at, created_at"


class TokenRepository:
    """Repository for CRUD operations on the tokens table."""

    # ── CREATE ────────────────────────────────────────────

    def add(self, token: Token) -> Token:
        """
        Issue a token. Issuing a value that already exists is a no-op.

        Returns:
            The stored token (the existing row if the value was taken).
        """
        sql = f"""
            INSERT INTO tokens (value, expires_at)
            VALUES (%s, %s)
            ON CONFLICT (value) DO NOTHING
            RETURNING {_COLUMNS};
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (token.value, token.expires_at))
                row = cur.fetchone()
                if row is None:
                    cur.execute(f"SELECT {_COLUMNS} FROM tokens WHERE value = %s;", (token.value,))
                    row = cur.fetchone()
                else:
                    logger.info(f"Issued token #{row[0]}")
            conn.commit()
            return self._row_to_token(row)
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to add token: {e}")
            raise UpstreamServiceError("add token") from e
        finally:
            release_connection(conn)

    # ── READ ──────────────────────────────────────────────

    def get_by_value(self, value: str) -> Optional[Token]:
        return self._get(f"SELECT {_COLUMNS} FROM tokens WHERE value = %s;", (value,))

    def get_by_id(self, token_id: int) -> Optional[Token]:
        return self._get(f"SELECT {_COLUMNS} FROM tokens WHERE id = %s;", (token_id,))

    # ── UPDATE ────────────────────────────────────────────

    def claim(self, token_id: int, person_id: int) -> bool:
        """
        Compare-and-swap the redeemed flag.

        The UPDATE only matches an unredeemed, unexpired row, so among any
        number of concurrent callers exactly one sees rowcount == 1.

        Returns:
            True if this call redeemed the token.
        """
        sql = """
            UPDATE tokens
            SET redeemed_by = %s, redeemed_at = NOW()
            WHERE id = %s
              AND redeemed_by IS NULL
              AND (expires_at IS NULL OR expires_at > NOW());
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (person_id, token_id))
                claimed = cur.rowcount == 1
            conn.commit()
            if claimed:
                logger.info(f"Token #{token_id} redeemed by person {person_id}")
            return claimed
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to claim token #{token_id}: {e}")
            raise UpstreamServiceError(f"claim token {token_id}") from e
        finally:
            release_connection(conn)

    # ── HELPERS ───────────────────────────────────────────

    def _get(self, sql: str, params: tuple) -> Optional[Token]:
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                row = cur.fetchone()
                return self._row_to_token(row) if row else None
        except psycopg2.Error as e:
            logger.error(f"Token query failed: {e}")
            raise UpstreamServiceError("query tokens") from e
        finally:
            release_connection(conn)

    @staticmethod
    def _row_to_token(row: tuple) -> Token:
        """Convert a database row tuple to a Token domain object."""
        return Token(
            id=row[0],
            value=row[1],
            expires_at=row[2],
            redeemed_by=row[3],
            redeemed_at=row[4],
            created_at=row[5],
        )
