"""
services/user_data_service.py
------------------------------
Coordinates Person, Token and Application services for registration.
"""

from models.person import Person
from models.token import Redemption, RedemptionStatus
from models.user_data import UserData
from services.application_service import ApplicationService
from services.person_service import PersonService
from services.token_service import TokenService
from utils.logger import get_logger

logger = get_logger(__name__)


class UserDataService:
    """
    Registration entry point used by the /token command.

    Guarantees, on top of TokenService:
        - A rejected token never touches the database. The person is only
          upserted under the token lock, after the token has been validated
          there, so in-process losers of a race write nothing.
        - The person exists before the token is claimed, so the token's
          redeemed_by reference is always valid.
    """

    def __init__(
        self,
        application_service: ApplicationService,
        person_service: PersonService,
        token_service: TokenService,
    ):
        self.applications = application_service
        self.persons = person_service
        self.tokens = token_service

    async def register(self, person: Person, token_value: str) -> Redemption:
        """
        Link `person` to an Application by redeeming `token_value`.

        Returns:
            The Redemption (REDEEMED or REJECTED).
        """
        check = await self.tokens.validate(token_value, person.id)
        if check.status != RedemptionStatus.VALIDATED:
            return check

        async def save_person():
            await self.persons.upsert(person)

        return await self.tokens.redeem(token_value, person.id, before_claim=save_person)

    async def get(self, person_id: int) -> UserData:
        person = await self.persons.find_by_id(person_id)
        if person is None:
            return UserData(person=None)
        applications = await self.applications.list_for_person(person_id)
        return UserData(person=person, applications=applications)
