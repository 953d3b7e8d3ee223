"""
Pytest configuration and shared fixtures for the location portal tests.
"""

import os
import sys

os.environ.setdefault("FLASK_ENV", "testing")
os.environ["TESTING"] = "True"

import pytest  # noqa: E402
from flask import Flask  # noqa: E402

from main import create_app  # noqa: E402
from portal.config import is_production_database  # noqa: E402
from portal.extensions import db as database  # noqa: E402
from portal.models import (  # noqa: E402
    Account,
    Base,
    Location,
    StaffMembership,
    TradeRequest,
    TradeSchedule,
    UserDevice,
)
from portal.tokens import hash_password, issue_token  # noqa: E402
from portal.utils.timestamps import utcnow  # noqa: E402

DEFAULT_PASSWORD = "password123"


@pytest.fixture(scope="session")
def password_hash():
    """bcrypt is slow on purpose; hash the shared test password once."""
    return hash_password(DEFAULT_PASSWORD)


@pytest.fixture
def app():
    """Create and configure a test app instance."""
    app = create_app()
    app.config.update(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret-key-for-testing-only",
            "REJECTION_IS_TERMINAL": True,
            "GEOCODER_URL": "https://geocoder.test/search",
        }
    )

    db_uri = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    if is_production_database(db_uri):
        print(f" DANGER: Database URL appears to be production: {db_uri}")
        sys.exit(1)

    yield app


@pytest.fixture
def db(app: Flask):
    """Create the schema in a fresh database for each test."""
    with app.app_context():
        Base.metadata.create_all(bind=database.engine)

        yield database

        database.session.remove()
        Base.metadata.drop_all(bind=database.engine)


@pytest.fixture
def db_session(db):
    return db.session


@pytest.fixture
def client(app, db):
    return app.test_client()


@pytest.fixture
def make_account(db_session, password_hash):
    counter = {"n": 0}

    def _make(email=None, is_admin=False, **fields):
        counter["n"] += 1
        account = Account(
            email=email or f"user{counter['n']}@example.com",
            password_hash=password_hash,
            is_admin=is_admin,
            **fields,
        )
        db_session.add(account)
        db_session.commit()
        return account

    return _make


@pytest.fixture
def make_location(db_session):
    def _make(owner, status="approved", tier=0, **fields):
        now = utcnow()
        approved = status == "approved"
        location = Location(
            owner_id=owner.id,
            store_name=fields.pop("store_name", "Card Kingdom"),
            subscription_tier=tier,
            subscription_status="free" if tier == 0 else "active",
            verified=approved,
            application_approved=approved,
            rejected=status == "rejected",
            rejection_reason=fields.pop("rejection_reason", None),
            submitted_at=now,
            application_updated_at=now,
            **fields,
        )
        db_session.add(location)
        db_session.flush()
        db_session.add(
            StaffMembership(
                location_id=location.id,
                user_id=owner.id,
                role="owner",
                can_add_staff=True,
                status="active",
            )
        )
        db_session.commit()
        return location

    return _make


@pytest.fixture
def auth_headers(app):
    """Bearer headers for any account."""

    def _headers(account):
        return {"Authorization": f"Bearer {issue_token(account)}"}

    return _headers


@pytest.fixture
def owner(make_account):
    return make_account(
        email="owner@example.com",
        username="cardshop",
        first_name="Shop",
        last_name="Owner",
    )


@pytest.fixture
def admin(make_account):
    return make_account(email="admin@cardchase.app", is_admin=True)


@pytest.fixture
def approved_location(make_location, owner):
    return make_location(owner, status="approved", tier=1)


@pytest.fixture
def owner_headers(auth_headers, owner):
    return auth_headers(owner)


@pytest.fixture
def admin_headers(auth_headers, admin):
    return auth_headers(admin)


@pytest.fixture
def make_trade(db_session, make_account):
    """A scheduled trade between two fresh collectors at a location."""

    def _make(location, selected_date, selected_time=None, status="confirmed", devices=True):
        requester = make_account()
        card_owner = make_account()
        request = TradeRequest(
            requester_id=requester.id,
            card_owner_id=card_owner.id,
            card_name="Charizard Base Set",
        )
        db_session.add(request)
        db_session.flush()

        if devices:
            db_session.add_all(
                [
                    UserDevice(user_id=requester.id, onesignal_player_id=f"player-{requester.id}"),
                    UserDevice(user_id=card_owner.id, onesignal_player_id=f"player-{card_owner.id}"),
                ]
            )

        schedule = TradeSchedule(
            trade_request_id=request.id,
            location_id=location.id,
            selected_date=selected_date,
            selected_time=selected_time,
            status=status,
        )
        db_session.add(schedule)
        db_session.commit()
        return schedule

    return _make


@pytest.fixture
def test_user_data():
    """Provide a dictionary of user data for signup/login tests."""
    return {
        "email": "newpartner@example.com",
        "password": "password123",
        "confirm_password": "password123",
        "first_name": "New",
        "last_name": "Partner",
        "username": "newpartner",
    }
