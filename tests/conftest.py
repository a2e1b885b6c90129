"""
Pytest configuration and shared fixtures for testing the rentals API.
"""
import os
import tempfile

# Configure before the app is imported: throwaway paths, no rate limiting.
_TMP_DIR = tempfile.mkdtemp(prefix="rentals-tests-")
os.environ.setdefault("DATA_FILE", os.path.join(_TMP_DIR, "data.json"))
os.environ.setdefault("PHOTOS_DIR", os.path.join(_TMP_DIR, "photos"))
os.environ["RATE_LIMIT_ENABLED"] = "false"

from datetime import date  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from pybreaker import CircuitBreaker  # noqa: E402

from rentals.deps import get_password_hash, get_store  # noqa: E402
from rentals.main import app  # noqa: E402
from rentals.models import Booking, Group, GroupTag, EmailTag, Property, User, UserGroup  # noqa: E402
from rentals.store import DocumentStore  # noqa: E402


def get_auth_header(token: str) -> dict:
    """
    Helper function to create authorization header.
    """
    return {"Authorization": f"Bearer {token}"}


def add_user(store, user_id, email, password, role):
    with store.transaction() as document:
        user = User(id=user_id, email=email, password=password, role=role)
        document.users.append(user)
    return user


def login(client, email, password):
    response = client.post("/users/login", json={"email": email, "password": password})
    return response.json()["access_token"]


@pytest.fixture(scope="function")
def store(tmp_path):
    """
    A fresh document store on a temporary file for each test.
    """
    return DocumentStore(
        str(tmp_path / "data.json"),
        breaker=CircuitBreaker(fail_max=3, reset_timeout=60),
    )


@pytest.fixture(scope="function")
def client(store):
    """
    Create a test client backed by the test store.
    """
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_user(store):
    """
    Admin with a hashed password.
    """
    return add_user(store, "u-admin", "admin@example.com", get_password_hash("adminpass123"), "admin")


@pytest.fixture
def normal_user(store):
    """
    Staff member whose password is stored in plain text, as in older data files.
    """
    return add_user(store, "u-normal", "staff@example.com", "normalpass123", "normal")


@pytest.fixture
def customer_user(store):
    return add_user(store, "u-customer", "customer@example.com", "customerpass123", "customer")


@pytest.fixture
def other_customer(store):
    return add_user(store, "u-other", "other@example.com", "otherpass123", "customer")


@pytest.fixture
def admin_token(client, admin_user):
    return login(client, "admin@example.com", "adminpass123")


@pytest.fixture
def normal_token(client, normal_user):
    return login(client, "staff@example.com", "normalpass123")


@pytest.fixture
def customer_token(client, customer_user):
    return login(client, "customer@example.com", "customerpass123")


@pytest.fixture
def other_customer_token(client, other_customer):
    return login(client, "other@example.com", "otherpass123")


@pytest.fixture
def riviera_group(store, customer_user):
    """
    Group "Riviera" with the customer as a member.
    """
    with store.transaction() as document:
        group = Group(id="g-riviera", name="Riviera")
        document.groups.append(group)
        document.user_groups.append(UserGroup(user_id=customer_user.id, group_id=group.id))
    return group


@pytest.fixture
def sample_properties(store, riviera_group, customer_user):
    """
    Three properties:

    - ``p-sea``: tagged with the Riviera group
    - ``p-loft``: assigned directly to the customer's email
    - ``p-hidden``: no tags, staff only
    """
    apartments = [
        Property(id="p-sea", name="Sea View", address="1 Beach Road", groups=[GroupTag("Riviera")]),
        Property(id="p-loft", name="City Loft", address="5 Main Street", groups=[EmailTag(customer_user.email)]),
        Property(id="p-hidden", name="Hidden Cabin", address="Forest Lane"),
    ]
    with store.transaction() as document:
        document.apartments.extend(apartments)
    return apartments


@pytest.fixture
def sample_property(sample_properties):
    return sample_properties[0]


@pytest.fixture
def sample_booking(store, sample_property, normal_user):
    """
    Booking on ``p-sea`` from 2024-06-01 to 2024-06-05 with guest details.
    """
    booking = Booking(
        id="b-1",
        property_id=sample_property.id,
        user_id=normal_user.id,
        start_date=date(2024, 6, 1),
        end_date=date(2024, 6, 5),
        client_name="Jane Guest",
        extra_info="Late check-in, phone +33 600 000 000",
        created_at="2024-05-01T10:00:00.000Z",
    )
    with store.transaction() as document:
        document.find_property(sample_property.id).bookings.append(booking)
    return booking
