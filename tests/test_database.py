"""
Tests for the database helpers.
"""
import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from hospital_api.auth.models import User
from hospital_api.database import classify_integrity_error, transaction
from hospital_api.patients.models import PatientDetails


class DriverError(Exception):
    """Driver exception carrying an optional SQLSTATE, like psycopg2's errors."""
    def __init__(self, message, pgcode=None):
        super().__init__(message)
        self.pgcode = pgcode


def integrity_error(message, pgcode=None):
    return IntegrityError("INSERT INTO users ...", {}, DriverError(message, pgcode))


@pytest.mark.parametrize("pgcode, expected", [
    ("23503", "foreign_key"),
    ("23505", "unique"),
])
def test_classifies_postgres_sqlstate(pgcode, expected):
    # The SQLSTATE wins over whatever the message says
    assert classify_integrity_error(integrity_error("constraint violated", pgcode)) == expected


@pytest.mark.parametrize("message, expected", [
    ("FOREIGN KEY constraint failed", "foreign_key"),
    ("UNIQUE constraint failed: users.email", "unique"),
    ("UNIQUE constraint failed: patient_details.user_id", "unique"),
    ('duplicate key value violates unique constraint "ix_users_email"', "unique"),
    ("NOT NULL constraint failed: users.password_hash", "other"),
])
def test_classifies_by_message(message, expected):
    assert classify_integrity_error(integrity_error(message)) == expected


def test_other_sqlstate_falls_back_to_other():
    assert classify_integrity_error(integrity_error("check violated", pgcode="23514")) == "other"


def test_real_sqlite_violations_are_classified(db):
    db.add(User(id="u-1", email="a@x.com", password_hash="x"))
    db.commit()

    db.add(User(id="u-2", email="a@x.com", password_hash="x"))
    with pytest.raises(IntegrityError) as exc_info:
        db.commit()
    db.rollback()

    assert classify_integrity_error(exc_info.value) == "unique"


def test_real_sqlite_foreign_key_violation_is_classified(db):
    db.add(PatientDetails(user_id="missing-user", full_name="Nobody"))
    with pytest.raises(IntegrityError) as exc_info:
        db.commit()
    db.rollback()

    assert classify_integrity_error(exc_info.value) == "foreign_key"


def test_transaction_commits_on_success(db):
    with transaction(db):
        db.add(User(id="u-1", email="a@x.com", password_hash="x"))

    db.expire_all()
    assert db.query(User).count() == 1


def test_transaction_rolls_back_on_error(db):
    with pytest.raises(OperationalError):
        with transaction(db):
            db.add(User(id="u-1", email="a@x.com", password_hash="x"))
            db.flush()
            raise OperationalError("INSERT", {}, Exception("connection lost"))

    assert db.query(User).count() == 0
