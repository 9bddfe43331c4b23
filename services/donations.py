import logging
from typing import List

from backend_client import BackendClient
from errors import BackendError, BookNotFoundError, DeletionRefusedError
from models.auth_models import Session
from models.book_models import DonatedBook, RequestStatus

logger = logging.getLogger(__name__)

PENDING_REQUESTS_MESSAGE = "This book has pending requests. Please handle them first."
REMOVED_MESSAGE = "The book has been successfully removed from your donations."
EMPTY_MESSAGE = "You haven't donated any books yet. Start sharing knowledge with the community!"


class DonationsList:
    """The books the signed-in user has donated, newest first."""

    def __init__(self, backend: BackendClient, session: Session):
        self.backend = backend
        self.session = session
        self.books: List[DonatedBook] = []
        self.loading = True

    @property
    def is_empty(self) -> bool:
        return not self.loading and not self.books

    async def load(self) -> List[DonatedBook]:
        try:
            rows = await self.backend.select(
                "books",
                {"donor_id": self.session.user_id},
                order=("created_at", "desc"),
            )
            self.books = [DonatedBook(**row) for row in rows]
        except BackendError as e:
            logger.warning("Error fetching donated books for %s: %s", self.session.user_id, e)
        finally:
            self.loading = False
        return self.books

    async def delete(self, book_id: str) -> str:
        """Remove a donated book unless someone is still waiting on it."""
        owned = await self.backend.select_one(
            "books", {"id": book_id, "donor_id": self.session.user_id}, columns=["id"]
        )
        if not owned:
            raise BookNotFoundError("Book not found")

        pending = await self.backend.select(
            "book_requests",
            {"book_id": book_id, "status": RequestStatus.PENDING},
            columns=["id"],
        )
        if pending:
            raise DeletionRefusedError(PENDING_REQUESTS_MESSAGE)

        deleted = await self.backend.delete("books", {"id": book_id, "donor_id": self.session.user_id})
        if not deleted:
            raise BookNotFoundError("Book not found")

        self.books = [book for book in self.books if book.id != book_id]
        logger.info("User %s removed donated book %s", self.session.user_id, book_id)
        return REMOVED_MESSAGE
