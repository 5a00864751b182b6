"""
services/chat_service.py
-------------------------
Business logic for chats the bot takes part in.
"""

import asyncio
from typing import Optional

from models.chat import Chat
from repositories.chat_repo import ChatRepository
from storages.memory_storage import MemoryStorage
from utils.logger import get_logger

logger = get_logger(__name__)


class ChatService:
    """Registers chats; last write wins, no locking needed."""

    def __init__(self, repo: ChatRepository, storage: MemoryStorage):
        self.repo = repo
        self.storage = storage

    async def upsert(self, chat: Chat) -> Chat:
        saved = await asyncio.to_thread(self.repo.upsert, chat)
        self.storage.set(saved.id, saved)
        logger.info(f"Registered {saved.type} chat {saved.id}")
        return saved

    async def find_by_id(self, chat_id: int) -> Optional[Chat]:
        cached = self.storage.get(chat_id)
        if cached is not None:
            return cached
        chat = await asyncio.to_thread(self.repo.get_by_id, chat_id)
        if chat is not None:
            self.storage.set(chat_id, chat)
        return chat
