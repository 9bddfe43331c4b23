"""
Shared fixtures.

  • db / backend       : BackendClient over an in-process mongomock database
  • storage            : LocalStorage in a temporary directory
  • make_session(...)  : bearer-token Session for an existing profile id
  • exchange_setup     : donor, requester, book and accepted request
"""

import os
import sys
import uuid
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest
import pytest_asyncio
from mongomock_motor import AsyncMongoMockClient

# Ensure the project root is on the path so all imports resolve.
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from backend_client import BackendClient  # noqa: E402
from local_storage import LocalStorage  # noqa: E402
from models.auth_models import Session  # noqa: E402
from utils import create_access_token  # noqa: E402


@pytest.fixture
def db():
    return AsyncMongoMockClient()[f"bookbridge_test_{uuid.uuid4().hex}"]


@pytest.fixture
def backend(db):
    return BackendClient(db)


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "local_storage.json"))


@pytest.fixture
def make_session():
    def _factory(user_id: str, email: str = "") -> Session:
        token = create_access_token({"user_id": user_id, "email": email})
        return Session(user_id=user_id, email=email or None, access_token=token)
    return _factory


@pytest_asyncio.fixture
async def exchange_setup(backend, make_session):
    donor = await backend.insert("profiles", {
        "email": "alice@example.com",
        "full_name": "Alice Donor",
        "phone": None,
        "address": None,
    })
    requester = await backend.insert("profiles", {
        "email": "bob@example.com",
        "full_name": "Bob Reader",
        "phone": "555-9999",
        "address": "Old Address",
    })
    book = await backend.insert("books", {
        "title": "Dune",
        "author": "Frank Herbert",
        "category": "Science Fiction",
        "condition": "Good",
        "status": "requested",
        "donor_id": donor["id"],
        "is_free_to_read": False,
        "created_at": datetime.utcnow() - timedelta(days=3),
    })
    request = await backend.insert("book_requests", {
        "book_id": book["id"],
        "requester_id": requester["id"],
        "donor_id": donor["id"],
        "status": "accepted",
        "message": "I would love to read this",
    })
    return SimpleNamespace(
        donor=donor,
        requester=requester,
        book=book,
        request=request,
        donor_session=make_session(donor["id"], donor["email"]),
        requester_session=make_session(requester["id"], requester["email"]),
    )
