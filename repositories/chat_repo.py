"""
repositories/chat_repo.py
--------------------------
Data access layer for chats.
"""

from typing import Optional

import psycopg2

from db.connection import get_connection, release_connection
from models.chat import Chat
from utils.errors import UpstreamServiceError
from utils.logger import get_logger

logger = get_logger(__name__)


class ChatRepository:
    """Repository for CRUD operations on the chats table."""

    def upsert(self, chat: Chat) -> Chat:
        """Insert a chat or update its type/title (last write wins)."""
        sql = """
            INSERT INTO chats (id, type, title)
            VALUES (%s, %s, %s)
            ON CONFLICT (id) DO UPDATE SET
                type = EXCLUDED.type,
                title = EXCLUDED.title,
                updated_at = NOW()
            RETURNING id, type, title, created_at, updated_at;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (chat.id, chat.type, chat.title))
                row = cur.fetchone()
            conn.commit()
            return self._row_to_chat(row)
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to upsert chat {chat.id}: {e}")
            raise UpstreamServiceError(f"upsert chat {chat.id}") from e
        finally:
            release_connection(conn)

    def get_by_id(self, chat_id: int) -> Optional[Chat]:
        sql = "SELECT id, type, title, created_at, updated_at FROM chats WHERE id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (chat_id,))
                row = cur.fetchone()
                return self._row_to_chat(row) if row else None
        except psycopg2.Error as e:
            logger.error(f"Failed to fetch chat {chat_id}: {e}")
            raise UpstreamServiceError(f"get chat {chat_id}") from e
        finally:
            release_connection(conn)

    @staticmethod
    def _row_to_chat(row: tuple) -> Chat:
        return Chat(
            id=row[0],
            type=row[1],
            title=row[2],
            created_at=row[3],
            updated_at=row[4],
        )
