"""Tests for the donated books list."""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from errors import BackendError, BookNotFoundError, DeletionRefusedError
from services.donations import PENDING_REQUESTS_MESSAGE, DonationsList


async def _book(backend, donor_id, title, age_days, **extra):
    row = {
        "title": title,
        "author": "Anon",
        "category": "Fiction",
        "description": "",
        "condition": "Good",
        "status": "available",
        "donor_id": donor_id,
        "is_free_to_read": False,
        "created_at": datetime.utcnow() - timedelta(days=age_days),
    }
    row.update(extra)
    return await backend.insert("books", row)


@pytest.mark.asyncio
async def test_load_lists_own_books_newest_first(backend, make_session):
    await _book(backend, "u1", "Oldest", 10)
    await _book(backend, "u1", "Newest", 1, status="donated", is_free_to_read=True)
    await _book(backend, "u1", "Middle", 5, status="requested")
    await _book(backend, "u2", "Someone else's", 0)

    donations = DonationsList(backend, make_session("u1"))
    assert donations.loading is True

    books = await donations.load()
    assert [b.title for b in books] == ["Newest", "Middle", "Oldest"]
    assert [b.status_label for b in books] == ["Completed", "Requested", "Available"]
    assert books[0].is_free_to_read is True
    assert donations.loading is False
    assert donations.is_empty is False


@pytest.mark.asyncio
async def test_unknown_status_label_is_passed_through(backend, make_session):
    await _book(backend, "u1", "Odd", 1, status="archived")
    books = await DonationsList(backend, make_session("u1")).load()
    assert books[0].status_label == "archived"


@pytest.mark.asyncio
async def test_load_failure_leaves_empty_list(backend, make_session):
    backend.select = AsyncMock(side_effect=BackendError("timeout"))
    donations = DonationsList(backend, make_session("u1"))

    assert await donations.load() == []
    assert donations.loading is False
    assert donations.is_empty is True


@pytest.mark.asyncio
async def test_delete_refused_while_request_pending(backend, make_session):
    book = await _book(backend, "u1", "Dune", 1)
    await backend.insert("book_requests", {
        "book_id": book["id"], "requester_id": "u2", "donor_id": "u1", "status": "pending",
    })
    donations = DonationsList(backend, make_session("u1"))
    await donations.load()

    with pytest.raises(DeletionRefusedError) as excinfo:
        await donations.delete(book["id"])

    assert str(excinfo.value) == PENDING_REQUESTS_MESSAGE
    assert [b.id for b in donations.books] == [book["id"]]
    assert await backend.select_one("books", {"id": book["id"]}) is not None


@pytest.mark.asyncio
async def test_delete_allowed_when_requests_are_settled(backend, make_session):
    book = await _book(backend, "u1", "Dune", 1)
    keep = await _book(backend, "u1", "Emma", 2)
    await backend.insert("book_requests", {
        "book_id": book["id"], "requester_id": "u2", "donor_id": "u1", "status": "rejected",
    })
    donations = DonationsList(backend, make_session("u1"))
    await donations.load()

    message = await donations.delete(book["id"])

    assert "successfully removed" in message
    assert [b.id for b in donations.books] == [keep["id"]]
    assert await backend.select_one("books", {"id": book["id"]}) is None


@pytest.mark.asyncio
async def test_delete_someone_elses_book(backend, make_session):
    book = await _book(backend, "u2", "Not mine", 1)
    with pytest.raises(BookNotFoundError):
        await DonationsList(backend, make_session("u1")).delete(book["id"])
    assert await backend.select_one("books", {"id": book["id"]}) is not None


@pytest.mark.asyncio
async def test_delete_propagates_backend_errors(backend, make_session):
    book = await _book(backend, "u1", "Dune", 1)
    backend.delete = AsyncMock(side_effect=BackendError("foreign key violation"))
    donations = DonationsList(backend, make_session("u1"))
    await donations.load()

    with pytest.raises(BackendError):
        await donations.delete(book["id"])
    assert len(donations.books) == 1


@pytest.mark.asyncio
async def test_delete_someone_elses_book_with_pending_request_is_not_found(backend, make_session):
    book = await _book(backend, "u2", "Not mine", 1)
    await backend.insert("book_requests", {
        "book_id": book["id"], "requester_id": "u3", "donor_id": "u2", "status": "pending",
    })
    with pytest.raises(BookNotFoundError):
        await DonationsList(backend, make_session("u1")).delete(book["id"])
    assert await backend.select_one("books", {"id": book["id"]}) is not None
