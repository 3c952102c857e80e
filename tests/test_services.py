from dataclasses import replace
from datetime import date

import pytest
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.pool import QueuePool

from carservice.config import Settings
from carservice.db import Database
from carservice.errors import (
    DuplicateUsername,
    InvalidCredentials,
    NotFound,
    Unauthorized,
    ValidationError,
)
from carservice.models.booking import Booking, BookingStatus
from carservice.models.user import User
from carservice.services.authenticator import Authenticator, Identity
from carservice.services.booking_repository import MAX_BOOKING_ID, BookingRepository
from carservice.services.credential_store import CredentialStore
from carservice.utils.auth import create_access_token, make_password_context

from tests.conf_tests import clear_db, test_db

# Low cost factor keeps hashing fast in tests.
TEST_SETTINGS = Settings(secret_key="test-secret", bcrypt_rounds=4)


@pytest.fixture
def authenticator(test_db):
    store = CredentialStore(test_db, make_password_context(TEST_SETTINGS.bcrypt_rounds))
    return Authenticator(store, TEST_SETTINGS)


@pytest.fixture
def repository(test_db):
    return BookingRepository(test_db)


@pytest.fixture
def owner_id(authenticator):
    return authenticator.signup("bob", "secret", "secret", "5550000")


def make_booking(repository, owner_id, **overrides):
    fields = {
        "service_type": "Brake Check",
        "vehicle_type": "Hatchback",
        "vehicle_model": "Golf",
        "preferred_date": date(2024, 6, 1),
        "preferred_time": "09:30",
    }
    fields.update(overrides)
    return repository.create(owner_id, **fields)


def test_signin_token_verifies_to_same_user(authenticator):
    user_id = authenticator.signup("carol", "pw", "pw", "5551111")
    token = authenticator.signin("carol", "pw")
    assert authenticator.verify(token) == Identity(user_id=user_id, username="carol")


def test_signup_mismatch_writes_nothing(authenticator, test_db):
    with pytest.raises(ValidationError):
        authenticator.signup("dave", "pw", "other", "5552222")
    assert test_db.query(User).count() == 0


@pytest.mark.parametrize(
    "fields",
    [
        ("", "pw", "pw", "5550001"),
        ("erin", "", "", "5550001"),
        ("erin", "pw", "pw", ""),
    ],
)
def test_signup_requires_every_field(authenticator, fields):
    with pytest.raises(ValidationError):
        authenticator.signup(*fields)


def test_signup_duplicate(authenticator, test_db):
    authenticator.signup("frank", "pw", "pw", "5553333")
    with pytest.raises(DuplicateUsername):
        authenticator.signup("frank", "pw2", "pw2", "5554444")
    assert test_db.query(User).filter(User.username == "frank").count() == 1


def test_password_stored_as_bcrypt_hash(authenticator, test_db):
    authenticator.signup("gina", "plain-secret", "plain-secret", "5555555")
    user = authenticator.credential_store.find_by_username("gina")
    assert user.password.startswith("$2")
    assert "plain-secret" not in user.password


def test_signin_unknown_and_wrong_password(authenticator):
    authenticator.signup("hank", "right", "right", "5556666")
    with pytest.raises(InvalidCredentials) as wrong:
        authenticator.signin("hank", "wrong")
    with pytest.raises(InvalidCredentials) as unknown:
        authenticator.signin("nobody", "right")
    assert wrong.value.message == unknown.value.message


def test_verify_rejects_expired_token(test_db):
    store = CredentialStore(test_db, make_password_context(4))
    issuing = Authenticator(store, replace(TEST_SETTINGS, access_token_expire_minutes=-5))
    issuing.signup("ivy", "pw", "pw", "5557777")
    token = issuing.signin("ivy", "pw")
    with pytest.raises(Unauthorized):
        Authenticator(store, TEST_SETTINGS).verify(token)


def test_verify_rejects_empty_token(authenticator):
    with pytest.raises(Unauthorized):
        authenticator.verify("")


def test_create_defaults(repository, owner_id):
    booking = make_booking(repository, owner_id)
    assert booking.id is not None
    assert booking.status == BookingStatus.PENDING.value
    assert booking.description == ""
    assert booking.created_at == booking.updated_at
    assert [b.id for b in repository.list_by_owner(owner_id)] == [booking.id]


def test_create_requires_fields(repository, owner_id):
    with pytest.raises(ValidationError):
        make_booking(repository, owner_id, vehicle_type="  ")
    with pytest.raises(ValidationError):
        make_booking(repository, owner_id, preferred_date=None)


def test_set_status_validates_before_lookup(repository, owner_id):
    with pytest.raises(ValidationError):
        repository.set_status(12345, owner_id, "Archived")
    with pytest.raises(NotFound):
        repository.set_status(12345, owner_id, "Confirmed")


def test_non_owner_cannot_touch_booking(repository, owner_id, authenticator, test_db):
    intruder = authenticator.signup("mallory", "pw", "pw", "5558888")
    booking = make_booking(repository, owner_id)
    with pytest.raises(NotFound):
        repository.set_status(booking.id, intruder, "Completed")
    with pytest.raises(NotFound):
        repository.cancel(booking.id, intruder)
    test_db.refresh(booking)
    assert booking.status == "Pending"


def test_any_status_reachable_from_any_other(repository, owner_id):
    booking = make_booking(repository, owner_id)
    for status in ["Completed", "Pending", "Cancelled", "In Progress", "Confirmed", "Pending"]:
        assert repository.set_status(booking.id, owner_id, status).status == status


def test_cancel_keeps_record(repository, owner_id, test_db):
    booking = make_booking(repository, owner_id)
    cancelled = repository.cancel(booking.id, owner_id)
    assert cancelled.status == "Cancelled"
    assert test_db.query(Booking).count() == 1


def test_stats_buckets_sum_to_total(repository, owner_id):
    statuses = ["Pending", "Confirmed", "Confirmed", "In Progress", "Completed", "Cancelled", "Cancelled"]
    for status in statuses:
        booking = make_booking(repository, owner_id)
        repository.set_status(booking.id, owner_id, status)

    stats = repository.stats(owner_id)
    assert stats == {
        "total": 7,
        "pending": 1,
        "confirmed": 2,
        "in_progress": 1,
        "completed": 1,
        "cancelled": 2,
    }
    assert sum(value for key, value in stats.items() if key != "total") == stats["total"]


def test_stats_for_user_without_bookings(repository, owner_id):
    assert repository.stats(owner_id)["total"] == 0


@pytest.mark.parametrize(
    "value, expected",
    [
        ("In Progress", BookingStatus.IN_PROGRESS),
        ("InProgress", BookingStatus.IN_PROGRESS),
        ("Cancelled", BookingStatus.CANCELLED),
        ("cancelled", None),
        (" Can celled ", None),
        ("Con firmed", None),
        ("In  Progress", None),
        (None, None),
    ],
)
def test_status_parse(value, expected):
    assert BookingStatus.parse(value) == expected


@pytest.mark.parametrize(
    "claims",
    [
        {"username": "judy"},
        {"userId": 7},
        {"userId": "7", "username": "judy"},
    ],
)
def test_verify_rejects_token_without_identity(authenticator, claims):
    token = create_access_token(claims, TEST_SETTINGS.secret_key, TEST_SETTINGS.algorithm, 60)
    with pytest.raises(Unauthorized):
        authenticator.verify(token)


def test_get_out_of_range_id_is_not_found(repository, owner_id):
    make_booking(repository, owner_id)
    with pytest.raises(NotFound):
        repository.get(MAX_BOOKING_ID + 1, owner_id)
    with pytest.raises(NotFound):
        repository.cancel(-(MAX_BOOKING_ID + 1), owner_id)


def test_database_pool_is_bounded(tmp_path):
    database = Database(f"sqlite:///{tmp_path / 'pool.db'}", pool_size=1, max_overflow=0, pool_timeout=1)
    try:
        pool = database.engine.pool
        assert isinstance(pool, QueuePool)
        assert pool.size() == 1
        assert pool._max_overflow == 0  # pylint: disable=protected-access
        assert pool._timeout == 1  # pylint: disable=protected-access

        # With the only connection checked out, the next caller waits and then times out.
        with database.engine.connect():
            with pytest.raises(PoolTimeoutError):
                database.engine.connect()
    finally:
        database.dispose()


def test_database_from_settings_applies_pool_options(tmp_path):
    settings = replace(
        TEST_SETTINGS,
        database_url=f"sqlite:///{tmp_path / 'settings.db'}",
        db_pool_size=3,
        db_max_overflow=0,
        db_pool_timeout=5,
    )
    database = Database.from_settings(settings)
    try:
        assert database.engine.pool.size() == 3
        assert database.engine.pool._timeout == 5  # pylint: disable=protected-access
    finally:
        database.dispose()
