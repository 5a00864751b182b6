"""
services/application_service.py
--------------------------------
Business logic for applications created by token redemption.
"""

import asyncio
from dataclasses import replace
from typing import Optional

from models.application import Application, ApplicationStatus
from models.person import Person
from repositories.application_repo import ApplicationRepository
from services.person_service import PersonService
from storages.memory_storage import MemoryStorage
from utils.errors import ConflictError, NotFoundError
from utils.logger import get_logger

logger = get_logger(__name__)


class ApplicationService:
    """
    Handles all business logic related to applications.

    The storage is keyed both by application id and by ("token", token_id).
    """

    def __init__(
        self,
        repo: ApplicationRepository,
        storage: MemoryStorage,
        person_service: PersonService,
    ):
        self.repo = repo
        self.storage = storage
        self.persons = person_service

    async def create_or_get_for_person_and_token(self, person_id: int, token_id: int) -> Application:
        """
        Return the Application of `token_id`, creating it for `person_id` if needed.
        Safe to call any number of times for the same pair.

        Raises:
            ConflictError: The token's Application belongs to someone else.
        """
        application = await self.find_by_token(token_id)
        if application is None:
            application = await asyncio.to_thread(self.repo.create_or_get, person_id, token_id)
            self._remember(application)
        if application.person_id != person_id:
            raise ConflictError(f"token #{token_id} is linked to another person")
        return application

    async def find_by_id(self, application_id: int) -> Optional[Application]:
        cached = self.storage.get(application_id)
        if cached is not None:
            return cached
        application = await asyncio.to_thread(self.repo.get_by_id, application_id)
        if application is not None:
            self._remember(application)
        return application

    async def find_by_token(self, token_id: int) -> Optional[Application]:
        cached = self.storage.get(("token", token_id))
        if cached is not None:
            return cached
        application = await asyncio.to_thread(self.repo.get_by_token, token_id)
        if application is not None:
            self._remember(application)
        return application

    async def list_for_person(self, person_id: int) -> list[Application]:
        return await asyncio.to_thread(self.repo.list_by_person, person_id)

    async def owner(self, application: Application) -> Optional[Person]:
        return await self.persons.find_by_id(application.person_id)

    async def confirm(self, application_id: int, person_id: int) -> Application:
        """
        Mark an application as confirmed by its owner. Confirming twice is a no-op.

        Raises:
            NotFoundError: No such application.
            ConflictError: `person_id` does not own it.
        """
        application = await self.find_by_id(application_id)
        if application is None:
            raise NotFoundError(f"application #{application_id} does not exist")
        if application.person_id != person_id:
            raise ConflictError(f"application #{application_id} belongs to another person")
        if application.is_confirmed():
            return application

        updated = await asyncio.to_thread(self.repo.set_status, application_id, ApplicationStatus.CONFIRMED)
        if not updated:
            self.storage.delete(application_id)
            raise NotFoundError(f"application #{application_id} does not exist")

        application = replace(application, status=ApplicationStatus.CONFIRMED)
        self._remember(application)
        logger.info(f"Application #{application_id} confirmed by person {person_id}")
        return application

    def _remember(self, application: Application) -> None:
        self.storage.set(application.id, application)
        self.storage.set(("token", application.token_id), application)
