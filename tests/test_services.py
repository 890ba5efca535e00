"""Tests for the user and exercise services."""

import asyncio

import pytest

from exercise_tracker_api.app.core.errors import (
    DuplicateError,
    NotFoundError,
    SchemaValidationError,
    ValidationError,
)
from exercise_tracker_api.app.schemas.exercise import ExerciseCreate
from exercise_tracker_api.app.services.exercise_service import ExerciseService
from exercise_tracker_api.app.services.user_service import UserService


@pytest.fixture
def user_service(database):
    return UserService(database)


@pytest.fixture
def exercise_service(database):
    return ExerciseService(database)


@pytest.fixture
def user_id(user_service):
    return asyncio.run(user_service.create_user("lifter")).id


def _add(service, user_id, description="squats", duration=20, date=None):
    data = ExerciseCreate(userId=user_id, description=description, duration=duration, date=date)
    return asyncio.run(service.add_exercise(data))


class TestUserService:
    """Tests for UserService."""

    def test_create_user(self, user_service):
        created = asyncio.run(user_service.create_user("runner"))
        assert created.username == "runner"
        assert isinstance(created.id, int)

    @pytest.mark.parametrize("username", [None, "", "abcd"])
    def test_short_username_rejected(self, user_service, username):
        with pytest.raises(ValidationError) as excinfo:
            asyncio.run(user_service.create_user(username))
        assert excinfo.value.status_code == 400

    def test_duplicate_username(self, user_service):
        asyncio.run(user_service.create_user("cyclist"))
        with pytest.raises(DuplicateError) as excinfo:
            asyncio.run(user_service.create_user("cyclist"))
        assert excinfo.value.message == "Username already taken..."

    def test_list_users(self, user_service):
        for name in ("first", "second", "third"):
            asyncio.run(user_service.create_user(name))
        users = asyncio.run(user_service.list_users())
        assert [u.username for u in users] == ["first", "second", "third"]


class TestAddExercise:
    """Tests for ExerciseService.add_exercise."""

    def test_add_with_date(self, exercise_service, user_id):
        result = _add(exercise_service, user_id, date="2024-01-01")
        assert result.id == user_id
        assert result.username == "lifter"
        assert result.duration == 20
        assert result.date == "Mon Jan 01 2024"

    def test_user_id_as_string(self, exercise_service, user_id):
        result = _add(exercise_service, str(user_id))
        assert result.id == user_id

    def test_unknown_user(self, exercise_service):
        with pytest.raises(NotFoundError) as excinfo:
            _add(exercise_service, 4242)
        assert excinfo.value.message == "User ID does not exist"

    def test_missing_user(self, exercise_service):
        with pytest.raises(NotFoundError):
            _add(exercise_service, None)

    def test_malformed_user_id_fails_before_lookup(self, exercise_service):
        with pytest.raises(ValidationError) as excinfo:
            _add(exercise_service, "not-a-number")
        assert excinfo.value.message == "unknown _id"

    def test_invalid_date_rejected(self, exercise_service, user_id):
        with pytest.raises(ValidationError) as excinfo:
            _add(exercise_service, user_id, date="someday")
        assert excinfo.value.message == "Invalid date"

    def test_missing_duration(self, exercise_service, user_id):
        with pytest.raises(SchemaValidationError) as excinfo:
            _add(exercise_service, user_id, duration=None)
        assert excinfo.value.message == "Path `duration` is required."


class TestGetLog:
    """Tests for ExerciseService.get_log."""

    @pytest.fixture
    def logged(self, exercise_service, user_id):
        for day, description in ((5, "rowing"), (15, "boxing"), (25, "hiking")):
            _add(exercise_service, user_id, description=description, date=f"2024-03-{day:02d}")
        return user_id

    def _log(self, service, *args):
        return asyncio.run(service.get_log(*args))

    def test_missing_user_id(self, exercise_service):
        with pytest.raises(ValidationError) as excinfo:
            self._log(exercise_service, None)
        assert excinfo.value.message == "Invalid userId..."

    def test_unknown_user(self, exercise_service):
        with pytest.raises(NotFoundError) as excinfo:
            self._log(exercise_service, "77")
        assert excinfo.value.message == "User does not exist..."

    def test_full_range_with_limit(self, exercise_service, logged):
        log = self._log(exercise_service, str(logged), "2024-03-01", "2024-03-31", "10")
        assert log.count == 3
        assert [entry.description for entry in log.log] == ["rowing", "boxing", "hiking"]
        assert log.log[0].date == "Tue Mar 05 2024"

    def test_range_bounds(self, exercise_service, logged):
        log = self._log(exercise_service, str(logged), "2024-03-10", "2024-03-20", "10")
        assert [entry.description for entry in log.log] == ["boxing"]

    def test_limit_one(self, exercise_service, logged):
        log = self._log(exercise_service, str(logged), "2024-03-01", "2024-03-31", "1")
        assert log.count == 1

    @pytest.mark.parametrize(
        "date_from,date_to,limit",
        [
            ("2024-03-01", None, "10"),
            (None, "2024-03-31", "10"),
            ("2024-03-01", "2024-03-31", None),
            (None, None, None),
            ("2024-03-01", "2024-03-31", "0"),
        ],
    )
    def test_incomplete_query_returns_nothing(self, exercise_service, logged, date_from, date_to, limit):
        """Rows come back only when from, to and limit are all given."""
        with pytest.raises(NotFoundError) as excinfo:
            self._log(exercise_service, str(logged), date_from, date_to, limit)
        assert excinfo.value.message == "Not Found..."

    def test_invalid_limit(self, exercise_service, logged):
        with pytest.raises(ValidationError) as excinfo:
            self._log(exercise_service, str(logged), "2024-03-01", "2024-03-31", "many")
        assert excinfo.value.message == "Invalid limit"

    def test_invalid_from(self, exercise_service, logged):
        with pytest.raises(ValidationError):
            self._log(exercise_service, str(logged), "yesterday", None, None)
