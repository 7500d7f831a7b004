"""Tests for the user record store."""

import pytest
from sqlalchemy import delete
from sqlalchemy.exc import OperationalError

from movieswipe.models.user import User
from movieswipe.services.exceptions import DuplicateEmail, DuplicateKey, StorageError, UserNotFoundError
from movieswipe.services.user_store import Created, Found, NewUser, UserStore


@pytest.fixture
def store(db_session):
    return UserStore(db_session)


def new_user(external_id="g-1", email="a@x.com", name="A"):
    return NewUser(external_id=external_id, email=email, name=name)


def database_down(statement):
    return OperationalError(statement, {}, Exception("database is down"))


class TestCreate:

    def test_email_is_lowercased(self, store):
        user = store.create(new_user(email="  Mixed@Case.COM "))
        assert user.email == "mixed@case.com"
        assert user.is_active is True
        assert user.created_at is not None

    def test_duplicate_external_id(self, store):
        store.create(new_user())
        with pytest.raises(DuplicateKey):
            store.create(new_user(email="b@x.com"))

    def test_duplicate_active_email(self, store):
        store.create(new_user())
        with pytest.raises(DuplicateEmail):
            store.create(new_user(external_id="g-2", email="A@X.com"))

    def test_unique_index_enforced_without_prechecks(self, store, mocker):
        """The database rejects a duplicate even if the lookups miss it."""
        store.create(new_user())
        mocker.patch.object(store, "find_by_external_id", return_value=None)
        mocker.patch.object(store, "find_by_email", return_value=None)

        with pytest.raises(DuplicateKey):
            store.create(new_user(email="b@x.com"))

        assert store.db.query(User).count() == 1

    def test_inactive_email_can_be_reused(self, store):
        first = store.create(new_user())
        first.is_active = False
        store.save(first)

        second = store.create(new_user(external_id="g-2"))
        assert second.id != first.id


class TestLookups:

    def test_find_by_email_ignores_inactive(self, store):
        user = store.create(new_user())
        assert store.find_by_email("A@x.com").id == user.id

        user.is_active = False
        store.save(user)

        assert store.find_by_email("a@x.com") is None
        assert store.exists_by_email("a@x.com") is False
        assert store.find_by_external_id("g-1").id == user.id
        assert store.find_active_by_id(user.id) is None
        assert store.find_by_id(user.id) is not None

    def test_count_active(self, store):
        store.create(new_user())
        second = store.create(new_user(external_id="g-2", email="b@x.com"))
        second.is_active = False
        store.save(second)

        assert store.count_active() == 1


class TestSave:

    def test_save_bumps_updated_at(self, store):
        user = store.create(new_user())
        before = user.updated_at

        user = store.save(user)

        assert user.updated_at >= before
        assert user.name == "A"

    def test_save_of_vanished_record(self, store, db_session):
        user = store.create(new_user())
        db_session.execute(
            delete(User).where(User.id == user.id),
            execution_options={"synchronize_session": False},
        )
        user.name = "B"

        with pytest.raises(UserNotFoundError):
            store.save(user)


class TestGetOrCreate:

    def test_created_then_found(self, store):
        first = store.get_or_create(new_user())
        second = store.get_or_create(new_user(name="B"))

        assert isinstance(first, Created)
        assert isinstance(second, Found)
        assert first.user.id == second.user.id

    def test_lost_creation_race_reports_found(self, store, mocker):
        """A concurrent first sign-in that loses the insert re-reads the winner."""
        winner = UserStore(store.db).create(new_user())
        mocker.patch.object(store, "find_by_external_id", side_effect=[None, None, winner])

        outcome = store.get_or_create(new_user())

        assert isinstance(outcome, Found)
        assert outcome.user.id == winner.id

    def test_email_owned_by_other_identity(self, store):
        store.create(new_user())
        with pytest.raises(DuplicateEmail):
            store.get_or_create(new_user(external_id="g-2"))


class TestStorageFailures:
    """Driver errors other than constraint violations become StorageError."""

    def test_create_rolls_back(self, store, db_session, mocker):
        mocker.patch.object(db_session, "commit", side_effect=database_down("INSERT INTO users"))

        with pytest.raises(StorageError) as exc_info:
            store.create(new_user())

        assert exc_info.value.message == "Failed to create user"
        assert exc_info.value.code == "INTERNAL_SERVER_ERROR"
        assert db_session.query(User).count() == 0

    def test_save_rolls_back(self, store, db_session, mocker):
        user = store.create(new_user())
        mocker.patch.object(db_session, "commit", side_effect=database_down("UPDATE users"))
        user.name = "B"

        with pytest.raises(StorageError) as exc_info:
            store.save(user)

        assert exc_info.value.message == "Failed to update user"
        assert db_session.query(User).one().name == "A"
