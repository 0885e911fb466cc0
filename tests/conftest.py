import os
from typing import Generator

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("SWEEPS_ENABLED", "false")

from gymbook.api import deps  # noqa: E402
from gymbook.core.clock import FrozenClock, get_clock  # noqa: E402
from gymbook.core.exceptions import InternalError  # noqa: E402
from gymbook.db.base import Base  # noqa: E402
from gymbook.db.session import SessionLocal, engine  # noqa: E402
from gymbook.integrations.geocoding import Coordinates  # noqa: E402
from gymbook.integrations.pincode import PincodeDetails  # noqa: E402
from gymbook.main import app  # noqa: E402
from gymbook.models.gym import Gym  # noqa: E402
from gymbook.models.user import User, UserRole  # noqa: E402

from factories import MONDAY, make_gym, make_user  # noqa: E402


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------


class FakeEmailSender:
    def __init__(self):
        self.sent = []

    def send_templated(self, recipient, template_name, params):
        self.sent.append((recipient, template_name, params))
        return {"id": f"fake-{len(self.sent)}"}


class FakeImageStorage:
    def __init__(self):
        self.uploaded = []
        self.deleted = []
        self.fail_on = None

    def upload(self, data, filename, content_type, folder):
        if filename == self.fail_on:
            raise InternalError("Image upload failed")
        self.uploaded.append((filename, content_type, folder, len(data)))
        return f"https://images.test/{folder}/{filename}"

    def delete(self, url):
        self.deleted.append(url)
        return True


class FakeGeocoder:
    def resolve(self, map_link):
        return Coordinates(12.9716, 77.5946)


class FakePincodeLookup:
    def lookup(self, pincode):
        if pincode == "560001":
            return PincodeDetails(city="Bengaluru", state="Karnataka")
        return None


# ---------------------------------------------------------------------------
# Database & app
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True, scope="function")
def _create_test_database() -> Generator[None, None, None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session() -> Generator:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock(MONDAY)


@pytest.fixture()
def email_sender() -> FakeEmailSender:
    return FakeEmailSender()


@pytest.fixture()
def image_storage() -> FakeImageStorage:
    return FakeImageStorage()


@pytest.fixture()
def client(clock, email_sender, image_storage) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[deps.get_email_sender] = lambda: email_sender
    app.dependency_overrides[deps.get_image_storage] = lambda: image_storage
    app.dependency_overrides[deps.get_geocoder] = FakeGeocoder
    app.dependency_overrides[deps.get_pincode_lookup] = FakePincodeLookup
    # No context manager: keeps the lifespan (and its sweep loop) out of tests
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def customer(db_session) -> User:
    return make_user(db_session, "customer@example.com")


@pytest.fixture()
def other_customer(db_session) -> User:
    return make_user(db_session, "other@example.com", full_name="Ravi Kumar", phone="9123456780")


@pytest.fixture()
def owner(db_session) -> User:
    return make_user(db_session, "owner@example.com", role=UserRole.OWNER, full_name="Gym Owner")


@pytest.fixture()
def other_owner(db_session) -> User:
    return make_user(db_session, "owner2@example.com", role=UserRole.OWNER, full_name="Other Owner")


@pytest.fixture()
def admin(db_session) -> User:
    return make_user(db_session, "admin@example.com", role=UserRole.ADMIN, full_name="Site Admin")


@pytest.fixture()
def gym(db_session, owner) -> Gym:
    return make_gym(db_session, owner)
