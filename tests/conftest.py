# tests/conftest.py

from datetime import timedelta

import pytest
from flask_jwt_extended import create_access_token

from app import create_app
from app.extensions import db as _db
from app.models import Event, Registration, User
from app.models.enums import RegistrationStatus, UserRole
from app.utils.codes import generate_registration_code
from app.utils.dates import utcnow
from app.utils.identity import RequestIdentity, build_claims


@pytest.fixture
def app(tmp_path):
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'test.db'}",
            "JWT_SECRET_KEY": "test-secret-key-that-is-long-enough-for-hs256",
            "RATELIMIT_ENABLED": False,
            "UPLOAD_FOLDER": str(tmp_path / "uploads"),
        }
    )
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(role=UserRole.PARTICIPANT, email=None, name=None):
        counter["n"] += 1
        user = User(
            name=name or f"User {counter['n']}",
            email=email or f"user{counter['n']}@eventhub.io",
            role=role,
        )
        user.set_password("password123")
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.ADMIN, email="admin@eventhub.io", name="Event Admin")


@pytest.fixture
def other_admin(make_user):
    return make_user(UserRole.ADMIN, email="other-admin@eventhub.io", name="Other Admin")


@pytest.fixture
def participant(make_user):
    return make_user(UserRole.PARTICIPANT, email="alice@eventhub.io", name="Alice")


@pytest.fixture
def make_event(db):
    def _make_event(owner, capacity=None, is_published=True, name="Spring Conference", **attrs):
        starts = attrs.pop("start_date", utcnow() + timedelta(days=7))
        event = Event(
            user_id=owner.id,
            name=name,
            description=attrs.pop("description", "Annual gathering"),
            start_date=starts,
            end_date=attrs.pop("end_date", starts + timedelta(hours=4)),
            location=attrs.pop("location", "Main Hall"),
            capacity=capacity,
            is_published=is_published,
            **attrs,
        )
        db.session.add(event)
        db.session.commit()
        return event

    return _make_event


@pytest.fixture
def make_registration(db):
    def _make_registration(event, user, status=RegistrationStatus.PENDING, **attrs):
        registration = Registration(
            event_id=event.id,
            user_id=user.id if user else None,
            status=status,
            registration_code=attrs.pop("registration_code", generate_registration_code()),
            **attrs,
        )
        if status == RegistrationStatus.CONFIRMED:
            registration.confirmed_at = utcnow()
        db.session.add(registration)
        db.session.commit()
        return registration

    return _make_registration


@pytest.fixture
def identity_for():
    def _identity_for(user):
        return RequestIdentity(user_id=user.id, role=user.role)

    return _identity_for


@pytest.fixture
def auth_headers(app):
    def _auth_headers(user):
        token = create_access_token(identity=str(user.id), additional_claims=build_claims(user))
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
