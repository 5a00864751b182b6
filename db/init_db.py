"""
db/init_db.py
-------------
Creates the database schema (tables) if they do not already exist.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

from db.connection import get_connection, release_connection
from utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
-- Persons: every Telegram user the bot has interacted with
CREATE TABLE IF NOT EXISTS persons (
    id              BIGINT PRIMARY KEY,
    first_name      VARCHAR(100) NOT NULL DEFAULT '',
    last_name       VARCHAR(100),
    username        VARCHAR(64),
    created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- Chats: private chats and groups the bot was started in or added to
CREATE TABLE IF NOT EXISTS chats (
    id              BIGINT PRIMARY KEY,
    type            VARCHAR(20) NOT NULL DEFAULT 'private',
    title           VARCHAR(255),
    created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at      TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- Tokens: single-use registration credentials
CREATE TABLE IF NOT EXISTS tokens (
    id              SERIAL PRIMARY KEY,
    value           VARCHAR(128) UNIQUE NOT NULL,
    expires_at      TIMESTAMPTZ,
    redeemed_by     BIGINT REFERENCES persons(id) ON DELETE SET NULL,
    redeemed_at     TIMESTAMPTZ,
    created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- Applications: one per redeemed token
CREATE TABLE IF NOT EXISTS applications (
    id              SERIAL PRIMARY KEY,
    person_id       BIGINT NOT NULL REFERENCES persons(id) ON DELETE CASCADE,
    token_id        INT UNIQUE NOT NULL REFERENCES tokens(id) ON DELETE CASCADE,
    status          VARCHAR(20) NOT NULL DEFAULT 'submitted'
                    CHECK (status IN ('submitted', 'confirmed')),
    created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- Indexes for faster queries
CREATE INDEX IF NOT EXISTS idx_persons_created ON persons(created_at, id);
CREATE INDEX IF NOT EXISTS idx_applications_person ON applications(person_id);
"""


def create_tables() -> None:
    """
    Execute the schema SQL to create all tables.
    Safe to call multiple times (uses IF NOT EXISTS).
    """
    conn = get_connection()
    try:
        with conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)
        conn.commit()
        logger.info("Database schema initialized successfully.")
    except Exception as e:
        conn.rollback()
        logger.error(f"Failed to initialize schema: {e}")
        raise
    finally:
        release_connection(conn)


if __name__ == "__main__":
    from db.connection import init_pool
    init_pool()
    create_tables()
    print("Database schema created successfully.")
