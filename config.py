"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants.
"""

import os
from dotenv import load_dotenv

load_dotenv()


# ── Telegram ──────────────────────────────────────────────
TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")

# "polling" or "webhook"
DELIVERY_MODE: str = os.getenv("DELIVERY_MODE", "polling").strip().lower()
WEBHOOK_URL: str = os.getenv("WEBHOOK_URL", "")
WEBHOOK_LISTEN: str = os.getenv("WEBHOOK_LISTEN", "0.0.0.0")
WEBHOOK_PORT: int = int(os.getenv("WEBHOOK_PORT", "8443"))
WEBHOOK_SECRET: str = os.getenv("WEBHOOK_SECRET", "")

# ── PostgreSQL ────────────────────────────────────────────
DB_HOST: str = os.getenv("DB_HOST", "localhost")
DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
DB_NAME: str = os.getenv("DB_NAME", "registration_bot")
DB_USER: str = os.getenv("DB_USER", "registration_bot")
DB_PASS: str = os.getenv("DB_PASS", "")
DB_POOL_MIN: int = int(os.getenv("DB_POOL_MIN", "1"))
DB_POOL_MAX: int = int(os.getenv("DB_POOL_MAX", "5"))

DATABASE_URL: str = (
    f"postgresql://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
)

# ── Registration tokens ───────────────────────────────────
_raw_tokens = os.getenv("REGISTRATION_TOKENS", "")
REGISTRATION_TOKENS: list[str] = (
    [t.strip() for t in _raw_tokens.split(",") if t.strip()]
    if _raw_tokens
    else []
)
# Lifetime of tokens seeded from REGISTRATION_TOKENS; 0 means they never expire.
TOKEN_TTL_HOURS: int = int(os.getenv("TOKEN_TTL_HOURS", "0"))

# ── Behaviour ─────────────────────────────────────────────
LIST_LIMIT: int = int(os.getenv("LIST_LIMIT", "25"))
CACHE_TTL_SECONDS: int = int(os.getenv("CACHE_TTL_SECONDS", "300"))
CACHE_MAX_ITEMS: int = int(os.getenv("CACHE_MAX_ITEMS", "10000"))

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
