"""
Business logic for users.

Users are created once and never modified.  Usernames are unique; the
data store enforces uniqueness and the service turns the violation into
the message clients expect.
"""

import logging
from typing import List, Optional

from ..core.db import Database
from ..core.errors import DuplicateError, ValidationError
from ..schemas.user import UserCreated, UserRead

logger = logging.getLogger(__name__)

MIN_USERNAME_LENGTH = 5


class UserService:
    """Create and list users."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def create_user(self, username: Optional[str]) -> UserCreated:
        """Register ``username`` and return it with the assigned id.

        Raises ``ValidationError`` for names shorter than five characters
        and ``DuplicateError`` when the name is taken.
        """
        if not username or len(username) < MIN_USERNAME_LENGTH:
            logger.warning("Rejected username %r: too short", username)
            raise ValidationError("Username needs to be at least 5 characters long...")
        try:
            document = self.db.users.insert({"username": username})
        except DuplicateError as exc:
            logger.warning("Username %r already taken", username)
            raise DuplicateError("Username already taken...") from exc
        logger.info("Created user %s (%s)", document["id"], username)
        return UserCreated(username=document["username"], id=document["id"])

    async def list_users(self) -> List[UserRead]:
        """Return every stored user in id order."""
        return [UserRead(**document) for document in self.db.users.find()]
