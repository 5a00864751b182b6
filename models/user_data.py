"""
models/user_data.py
-------------------
Read model combining a person with the applications they own.
"""

from dataclasses import dataclass, field
from typing import Optional

from models.application import Application
from models.person import Person


@dataclass
class UserData:
    person: Optional[Person]
    applications: list[Application] = field(default_factory=list)

    def is_registered(self) -> bool:
        return bool(self.applications)
