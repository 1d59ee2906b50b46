import os
import sys
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from bridge_lfu import models  # noqa: E402,F401
from bridge_lfu.database import Base  # noqa: E402
from bridge_lfu.models.asset import Equipment, License  # noqa: E402
from bridge_lfu.models.client import Client  # noqa: E402
from bridge_lfu.models.user import Profile, Role  # noqa: E402


class FakeEmailSender:
    """Records every delivery attempt and answers with a fixed result."""

    def __init__(self, result=True, error: Exception | None = None):
        self.result = result
        self.error = error
        self.calls = []

    def send(self, notification, recipient_address, display_name):
        self.calls.append((notification.id, recipient_address, display_name))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_client(db):
    def factory(name="Acme"):
        client = Client(name=name)
        db.add(client)
        db.commit()
        return client

    return factory


@pytest.fixture
def make_profile(db):
    counter = {"n": 0}

    def factory(role=Role.ADMIN, client=None, first_name="Ada", last_name="Lovelace", email=None):
        counter["n"] += 1
        profile = Profile(
            email=email or f"user{counter['n']}@example.com",
            first_name=first_name,
            last_name=last_name,
            role=Role(role).value,
            client_id=client.id if client else None,
        )
        db.add(profile)
        db.commit()
        return profile

    return factory


@pytest.fixture
def make_license(db):
    def factory(client, expiry_date: date, name="Office 365", status="active"):
        license_ = License(client_id=client.id, name=name, expiry_date=expiry_date, status=status)
        db.add(license_)
        db.commit()
        return license_

    return factory


@pytest.fixture
def make_equipment(db):
    def factory(client, obsolescence: date | None = None, end_of_sale: date | None = None, name="Core switch"):
        equipment = Equipment(
            client_id=client.id,
            name=name,
            estimated_obsolescence_date=obsolescence,
            end_of_sale=end_of_sale,
        )
        db.add(equipment)
        db.commit()
        return equipment

    return factory
