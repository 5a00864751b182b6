"""
services/person_service.py
---------------------------
Business logic for persons: upserts and the first/last/random listings.
"""

import asyncio
import random
from typing import Optional

from models.person import Person
from repositories.person_repo import PersonRepository
from storages.memory_storage import MemoryStorage
from utils.logger import get_logger

logger = get_logger(__name__)


class PersonService:
    """
    Handles all business logic related to persons.

    Listings are snapshot reads: concurrent upserts may or may not be visible,
    ordering is insertion order as observed by the database.
    """

    def __init__(
        self,
        repo: PersonRepository,
        storage: MemoryStorage,
        rng: Optional[random.Random] = None,
    ):
        self.repo = repo
        self.storage = storage
        self.rng = rng or random.Random()

    async def find_by_id(self, person_id: int) -> Optional[Person]:
        cached = self.storage.get(person_id)
        if cached is not None:
            return cached
        person = await asyncio.to_thread(self.repo.get_by_id, person_id)
        if person is not None:
            self.storage.set(person_id, person)
        return person

    async def upsert(self, person: Person) -> Person:
        """Create the person on first sight, refresh their names afterwards."""
        saved = await asyncio.to_thread(self.repo.upsert, person)
        self.storage.set(saved.id, saved)
        logger.debug(f"Upserted person {saved.id} ({saved.display_name})")
        return saved

    async def list_first(self, n: int, offset: int = 0) -> list[Person]:
        """The first `n` persons in creation order, skipping `offset`."""
        return await asyncio.to_thread(self.repo.list_first, n, offset)

    async def list_last(self, n: int, offset: int = 0) -> list[Person]:
        """The last `n` persons in creation order, skipping the `offset` newest."""
        return await asyncio.to_thread(self.repo.list_last, n, offset)

    async def count(self) -> int:
        return await asyncio.to_thread(self.repo.count)

    async def list_random(self, n: int) -> list[Person]:
        """
        `n` distinct persons chosen uniformly at random.
        Asking for more than exist returns everyone, in random order.
        """
        population = await asyncio.to_thread(self.repo.list_all)
        return self.rng.sample(population, min(n, len(population)))
