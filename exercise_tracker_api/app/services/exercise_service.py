"""
Business logic for exercises.

Adding an exercise checks that the owning user exists, stores the entry
and echoes it back with the owner's username.  Log queries filter a
user's entries by date range.

The log query keeps a legacy coupling between the range filter and the
limit: ``to`` only applies when ``from`` is also given, and the
supplied ``limit`` only applies when both bounds are in the filter.  In
every other case the effective limit is zero and no rows are returned.
Existing clients depend on this, so it must not change without a
product decision.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.dates import format_display, parse_date
from ..core.db import Database, check_int_range
from ..core.errors import NotFoundError, ValidationError
from ..schemas.exercise import ExerciseCreate, ExerciseLog, ExerciseRead, LogEntry

logger = logging.getLogger(__name__)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_user_id(value: Any) -> int:
    """Parse a user id, raising ``ValidationError`` unless it is a storable integer."""
    if isinstance(value, bool):
        raise ValidationError("unknown _id")
    try:
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if not isinstance(value, int):
            value = int(str(value).strip())
        return check_int_range(value)
    except ValueError:
        raise ValidationError("unknown _id") from None


def parse_query_date(value: Any) -> datetime:
    try:
        return parse_date(value)
    except ValueError:
        raise ValidationError("Invalid date") from None


def parse_limit(value: str) -> int:
    try:
        limit = check_int_range(int(value.strip()))
    except ValueError:
        raise ValidationError("Invalid limit") from None
    if limit < 0:
        raise ValidationError("Invalid limit")
    return limit


class ExerciseService:
    """Record exercises and query exercise logs."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def add_exercise(self, data: ExerciseCreate) -> ExerciseRead:
        """Store an exercise for an existing user.

        The id format is checked before the lookup.  A missing ``date``
        defaults to now; an unparseable one is rejected.  Missing or
        mistyped ``description``/``duration`` are reported by the
        collection schema.
        """
        if _is_blank(data.userId):
            raise NotFoundError("User ID does not exist")
        user_id = parse_user_id(data.userId)
        user = self.db.users.find_by_id(user_id)
        if user is None:
            logger.warning("Exercise rejected: user %s does not exist", user_id)
            raise NotFoundError("User ID does not exist")

        document: Dict[str, Any] = {
            "userId": user_id,
            "description": data.description,
            "duration": data.duration,
        }
        if not _is_blank(data.date):
            document["date"] = parse_query_date(data.date)

        stored = self.db.exercises.insert(document)
        logger.info("Logged exercise %s for user %s", stored["id"], user_id)
        return ExerciseRead(
            id=stored["userId"],
            username=user["username"],
            description=stored["description"],
            duration=stored["duration"],
            date=format_display(stored["date"]),
        )

    async def get_log(
        self,
        user_id: Optional[str],
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        limit: Optional[str] = None,
    ) -> ExerciseLog:
        """Return a user's exercises within the requested range.

        Raises ``ValidationError`` for a missing or malformed ``userId``,
        bad dates or a bad ``limit``, and ``NotFoundError`` when the user
        is unknown or nothing matches.
        """
        if _is_blank(user_id):
            raise ValidationError("Invalid userId...")
        owner_id = parse_user_id(user_id)
        user = self.db.users.find_by_id(owner_id)
        if user is None:
            raise NotFoundError("User does not exist...")

        filters: Dict[str, Any] = {"userId": owner_id}
        date_range: Dict[str, datetime] = {}
        if not _is_blank(date_from):
            date_range["$gte"] = parse_query_date(date_from)
            # ``to`` is only honoured together with ``from``.
            if not _is_blank(date_to):
                date_range["$lte"] = parse_query_date(date_to)
        if date_range:
            filters["date"] = date_range

        effective_limit = 0
        if not _is_blank(limit) and "$gte" in date_range and "$lte" in date_range:
            effective_limit = parse_limit(limit)

        rows = []
        if effective_limit > 0:
            rows = self.db.exercises.find(
                filters, limit=effective_limit, exclude=("id", "userId")
            )
        if not rows:
            raise NotFoundError("Not Found...")

        log = [
            LogEntry(
                description=row["description"],
                duration=row["duration"],
                date=format_display(row["date"]),
            )
            for row in rows
        ]
        return ExerciseLog(id=owner_id, username=user["username"], count=len(log), log=log)
